import numpy as np

from synthcapture.configs.capture_data import Viewpoint

GOLDEN_RATIO = (1 + np.sqrt(5)) / 2


def generate_points(
    count: int, radius: float, origin: tuple[float, float, float] = (0.0, 0.0, 0.0)
) -> np.ndarray:
    """
    Generate evenly distributed points on a sphere using a golden-ratio spiral.

    For index i the inclination is arccos(1 - 2 i / count) and the azimuth is
    i * 2π * φ, which spreads the points without clustering at the poles. The
    output depends only on the arguments.

    Args:
        count: Number of points. Zero yields an empty array.
        radius: Sphere radius.
        origin: Sphere center.

    Returns:
        (count, 3) array of points, in generation order.

    Raises:
        ValueError: If count is negative or radius is not positive.
    """
    if count < 0:
        raise ValueError(f"Point count must be non-negative, got {count}.")
    if radius <= 0:
        raise ValueError(f"Sphere radius must be positive, got {radius}.")

    i = np.arange(count, dtype=np.float64)
    t = i / count if count else i
    inclination = np.arccos(1 - 2 * t)
    azimuth = i * 2 * np.pi * GOLDEN_RATIO

    points = np.column_stack(
        [
            np.sin(inclination) * np.cos(azimuth),
            np.sin(inclination) * np.sin(azimuth),
            np.cos(inclination),
        ]
    )

    return radius * points.reshape(-1, 3) + np.asarray(origin, dtype=np.float64)


def generate_viewpoints(
    count: int, radius: float, target: tuple[float, float, float] = (0.0, 0.0, 0.0)
) -> list[Viewpoint]:
    """
    Generate sphere viewpoints around a target, each looking at it.

    Args:
        count: Number of viewpoints.
        radius: Distance from the target.
        target: Center of the sphere and look-at point of every viewpoint.

    Returns:
        List of immutable viewpoints in generation order.
    """
    target = tuple(float(v) for v in target)
    points = generate_points(count, radius, origin=target)

    return [
        Viewpoint(position=tuple(float(v) for v in p), look_at_target=target)
        for p in points
    ]
