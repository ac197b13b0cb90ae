import numpy as np

from synthcapture.configs.capture_data import NormalizedRegion, RawRegion


def _clamp01(value: float) -> float:
    return float(np.clip(value, 0.0, 1.0))


def normalize(raw: RawRegion, image_width: int, image_height: int) -> NormalizedRegion:
    """
    Convert a pixel-space rectangle into resolution-normalized coordinates.

    Each axis is divided by its own image dimension. The corner form computes
    the far corner from x + width and y + height before any clamping, so a box
    hanging over an edge keeps its visible part instead of collapsing. A
    negative width or height is read as a rectangle drawn from the far corner.

    Args:
        raw: Rectangle in pixels, origin at the top-left of the image.
        image_width: Width of the captured image in pixels.
        image_height: Height of the captured image in pixels.

    Returns:
        NormalizedRegion with box form (x, y, w, h) and corner form
        (x_min, y_min, x_max, y_max), every value clamped to [0, 1].

    Raises:
        ValueError: If an image dimension is not positive.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(
            f"Image dimensions must be positive, got {image_width}x{image_height}."
        )

    x_min, x_max = sorted((raw.x, raw.x + raw.width))
    y_min, y_max = sorted((raw.y, raw.y + raw.height))

    box = (
        _clamp01(x_min / image_width),
        _clamp01(y_min / image_height),
        _clamp01((x_max - x_min) / image_width),
        _clamp01((y_max - y_min) / image_height),
    )

    corners = (
        _clamp01(x_min / image_width),
        _clamp01(y_min / image_height),
        _clamp01(x_max / image_width),
        _clamp01(y_max / image_height),
    )

    return NormalizedRegion(box=box, corners=corners)


def is_fully_in_frame(region: NormalizedRegion) -> bool:
    """Whether the region sits strictly inside the frame, untouched by clamping."""
    return (
        region.x_min > 0
        and region.y_min > 0
        and region.x_max < 1
        and region.y_max < 1
    )
