"""
Camera Pose and Projection Geometry Module

This module provides the rigid-body and pinhole-camera helpers used to place a
capture camera around a subject and to project the subject back into the image.

Key Functionality:
- Build a world-to-camera rotation that looks at a target point
- Apply incremental Euler offsets in the camera frame
- Generate the 8 corners of an axis-aligned box subject
- Project world points into pixel coordinates and take their bounding rectangle

Conventions:
Camera frames follow OpenCV: x to the right, y down, z along the viewing
direction. Pixel coordinates have their origin at the top-left corner of the
image, which is the same convention the frame writer uses when saving images,
so projected rectangles need no resolution-specific correction.
"""

import cv2
import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation as R

# Type aliases for improved readability
Matrix3x3 = NDArray[np.float64]
Vector3D = NDArray[np.float64]
RotationMatrix = NDArray[np.float64]
TranslationVector = NDArray[np.float64]
Points3D = NDArray[np.float64]
Points2D = NDArray[np.float64]


def look_at_rotation(
    position: Vector3D, target: Vector3D, world_up: Vector3D = (0.0, 1.0, 0.0)
) -> RotationMatrix:
    """
    Compute the world-to-camera rotation of a camera at `position` looking at `target`.

    The rows of the returned matrix are the camera axes expressed in world
    coordinates: right, down and forward. When the viewing direction is parallel
    to `world_up` a different up vector is used so the basis stays well defined.

    Args:
        position: Camera center in world coordinates (3,).
        target: Point the camera looks at (3,).
        world_up: Up direction of the world (3,).

    Returns:
        3x3 rotation matrix mapping world vectors into the camera frame.

    Raises:
        ValueError: If position and target coincide.
    """
    position = np.asarray(position, dtype=np.float64)
    target = np.asarray(target, dtype=np.float64)
    up = np.asarray(world_up, dtype=np.float64)

    forward = target - position
    norm = np.linalg.norm(forward)
    if norm < 1e-12:
        raise ValueError("Camera position and look-at target coincide.")
    forward /= norm

    # Fall back to another up vector when looking straight up or down
    right = np.cross(forward, up)
    if np.linalg.norm(right) < 1e-9:
        up = np.array([0.0, 0.0, 1.0]) if abs(up[2]) < 0.9 else np.array([1.0, 0.0, 0.0])
        right = np.cross(forward, up)
    right /= np.linalg.norm(right)

    down = np.cross(forward, right)

    return np.vstack([right, down, forward])


def apply_euler_offset(
    R_wc: RotationMatrix, euler_offset: Vector3D, degrees: bool = True
) -> RotationMatrix:
    """
    Rotate a camera by Euler angles expressed in its own frame.

    The offset is incremental: it is composed with the current orientation
    rather than replacing it.

    Args:
        R_wc: Current world-to-camera rotation (3x3).
        euler_offset: Rotation about the camera x, y and z axes.
        degrees: Whether the angles are in degrees.

    Returns:
        The new world-to-camera rotation.
    """
    R_offset = R.from_euler("xyz", euler_offset, degrees=degrees).as_matrix()

    # Compose in camera-to-world form, then transpose back
    R_cw = R_wc.T @ R_offset
    return R_cw.T


def box_corners(
    center: Vector3D, size: tuple[float, float, float]
) -> Points3D:
    """
    Generate the 8 corners of an axis-aligned box.

    Args:
        center: Box center in world coordinates (3,).
        size: Extents (width, height, depth) along x, y and z.

    Returns:
        (8, 3) array of corners, bottom face first.
    """
    half = np.asarray(size, dtype=np.float64) / 2.0
    signs = np.array(
        [
            [-1, -1, -1],
            [1, -1, -1],
            [1, -1, 1],
            [-1, -1, 1],
            [-1, 1, -1],
            [1, 1, -1],
            [1, 1, 1],
            [-1, 1, 1],
        ],
        dtype=np.float64,
    )
    return np.asarray(center, dtype=np.float64) + signs * half


def project_points(
    points_3d: Points3D, R_wc: RotationMatrix, t: TranslationVector, K: Matrix3x3
) -> Points2D:
    """
    Project 3D points into image coordinates using a pinhole camera model.

    Args:
        points_3d: Array of shape (N, 3) with points in world coordinates.
        R_wc: Rotation matrix from world to camera (3x3).
        t: Translation vector from world to camera (3,).
        K: Camera intrinsic matrix (3x3).

    Returns:
        Array of shape (N, 2) with the projected pixel coordinates.
    """
    # cv2.projectPoints expects a Rodrigues vector
    r_vec, _ = cv2.Rodrigues(R_wc)

    image_points, _ = cv2.projectPoints(
        np.asarray(points_3d, dtype=np.float64),
        r_vec,
        np.asarray(t, dtype=np.float64),
        K,
        distCoeffs=None,
    )

    return image_points.reshape(-1, 2)


def camera_depths(
    points_3d: Points3D, R_wc: RotationMatrix, t: TranslationVector
) -> NDArray[np.float64]:
    """Depth (camera z) of each world point."""
    return (np.asarray(points_3d) @ R_wc.T + t)[:, 2]


def bounding_rect(points_2d: Points2D) -> tuple[float, float, float, float]:
    """
    Axis-aligned bounding rectangle of a set of pixel coordinates.

    Returns:
        (x, y, width, height) of the tightest rectangle around the points.
    """
    mins = points_2d.min(axis=0)
    maxs = points_2d.max(axis=0)
    return float(mins[0]), float(mins[1]), float(maxs[0] - mins[0]), float(maxs[1] - mins[1])
