import cv2
import matplotlib.pyplot as plt
import numpy as np

from synthcapture.configs.capture_data import NormalizedRegion


def plot_viewpoints(
    points: np.ndarray,
    target: tuple[float, float, float] = (0.0, 0.0, 0.0),
    fig_size: tuple[int, int] = (7, 7),
    view_elev: float = 20,
    view_azim: float = 45,
    show: bool = True,
) -> plt.Figure:
    """
    Scatter the sampled camera positions around their target in 3D.

    Points are colored by generation order, which makes the golden-ratio
    spiral visible.

    Args:
        points (np.ndarray): Array of shape (N, 3) of camera positions.
        target (tuple): Look-at point drawn as a black marker.
        fig_size (tuple[int, int], optional): Size of the matplotlib figure.
        view_elev (float, optional): Elevation angle for 3D view.
        view_azim (float, optional): Azimuth angle for 3D view.
        show (bool): Whether to call plt.show().

    Returns:
        plt.Figure: The created figure.
    """
    points = np.asarray(points, dtype=float).reshape(-1, 3)

    fig = plt.figure(figsize=fig_size)
    ax = fig.add_subplot(111, projection="3d")

    ax.scatter(
        points[:, 0],
        points[:, 1],
        points[:, 2],
        c=np.arange(len(points)),
        cmap="viridis",
        s=12,
        label="Viewpoints",
    )
    ax.scatter(*target, color="black", s=50, label="Target")

    # Equal scaling so the sphere does not look like an ellipsoid
    if len(points):
        half_range = np.abs(points - np.asarray(target)).max()
        for set_lim, center in zip((ax.set_xlim, ax.set_ylim, ax.set_zlim), target):
            set_lim(center - half_range, center + half_range)

    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("Z")
    ax.view_init(elev=view_elev, azim=view_azim)
    ax.legend()
    ax.set_title(f"{len(points)} sampled viewpoints")

    plt.tight_layout()
    if show:
        plt.show()

    return fig


def draw_normalized_region(
    image: np.ndarray,
    region: NormalizedRegion,
    color: tuple[int, int, int] = (0, 0, 255),
    thickness: int = 2,
    label: str | None = None,
) -> np.ndarray:
    """
    Draw a normalized corner-form region onto a copy of an image.

    Useful to check that projected boxes line up with the saved frames at the
    capture resolution.

    Args:
        image (np.ndarray): BGR image of shape (H, W, 3).
        region (NormalizedRegion): Region to draw.
        color (tuple[int, int, int]): BGR rectangle color.
        thickness (int): Line thickness in pixels.
        label (str, optional): Text drawn above the rectangle.

    Returns:
        np.ndarray: Annotated copy of the image.
    """
    annotated = image.copy()
    height, width = annotated.shape[:2]

    x_min, y_min, x_max, y_max = region.corners
    top_left = (int(round(x_min * width)), int(round(y_min * height)))
    bottom_right = (int(round(x_max * width)), int(round(y_max * height)))

    cv2.rectangle(annotated, top_left, bottom_right, color, thickness)
    if label:
        cv2.putText(
            annotated,
            label,
            (top_left[0], max(top_left[1] - 5, 10)),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.5,
            color,
            1,
            cv2.LINE_AA,
        )

    return annotated
