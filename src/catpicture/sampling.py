import numpy as np

LINE_PATCH_SIZE = 5
EDGE_THRESHOLD = 10


def cell_scale(source_width: int, source_height: int, output_width: int, output_height: int) -> tuple[int, int]:
    """Source pixels per output cell along each axis, truncated."""
    return source_width // output_width, source_height // output_height


def patch_gradients(luma: np.ndarray) -> tuple[int, int, float]:
    """Return (x_grad, y_grad, illumination) for a luma patch.

    x_grad and y_grad sum the absolute differences between horizontally and
    vertically adjacent pixels. Illumination is the mean luma scaled to 0-1.
    """
    luma = luma.astype(np.int32)
    x_grad = int(np.abs(np.diff(luma, axis=1)).sum())
    y_grad = int(np.abs(np.diff(luma, axis=0)).sum())
    illumination = float(luma.mean()) / 255.0 if luma.size else 0.0
    return x_grad, y_grad, illumination


def line_character(x_grad: int, y_grad: int, illumination: float, threshold: int = EDGE_THRESHOLD) -> str:
    if x_grad < threshold and y_grad < threshold and illumination < 0.5:
        return "."
    if x_grad > y_grad:
        return "|"
    if x_grad < y_grad:
        return "-"
    if x_grad > threshold and y_grad > threshold:
        return "+"
    return "#"
