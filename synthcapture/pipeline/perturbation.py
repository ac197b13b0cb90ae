import logging
from typing import Callable

import numpy as np

from synthcapture.configs.capture_data import (
    NormalizedRegion,
    PerturbResult,
    RawRegion,
    Viewpoint,
)
from synthcapture.pipeline.normalization import is_fully_in_frame, normalize
from synthcapture.rendering.protocols import Renderer

logger = logging.getLogger(__name__)

BoundsProvider = Callable[[], RawRegion | None]


class ViewPerturber:
    """
    Randomly perturbs a nominal camera pose until the subject fits in the frame.

    Every attempt starts again from the nominal viewpoint: the camera is moved
    along its view axis by a uniform offset, re-aimed at the target and rotated
    by uniform per-axis Euler offsets in its own frame. The number of attempts
    is bounded, so the loop always terminates.
    """

    def __init__(self, renderer: Renderer, rng: np.random.Generator | None = None):
        """
        Args:
            renderer: Collaborator whose camera is moved.
            rng: Random generator for the jitter (fresh default generator if None).
        """
        self.renderer = renderer
        self.rng = rng if rng is not None else np.random.default_rng()

    def _jittered_position(
        self, viewpoint: Viewpoint, distance_jitter_range: float
    ) -> tuple[float, float, float]:
        """Nominal position moved along the view axis by U(-d, d)."""
        position = np.asarray(viewpoint.position, dtype=np.float64)
        target = np.asarray(viewpoint.look_at_target, dtype=np.float64)

        axis = target - position
        norm = np.linalg.norm(axis)
        if norm > 0:
            axis /= norm

        offset = self.rng.uniform(-distance_jitter_range, distance_jitter_range)
        return tuple(float(v) for v in position + offset * axis)

    def _euler_offset(
        self, rotation_jitter_range: tuple[float, float, float]
    ) -> tuple[float, float, float]:
        """Independent U(-r, r) draw per axis."""
        limits = np.abs(np.asarray(rotation_jitter_range, dtype=np.float64))
        return tuple(float(v) for v in self.rng.uniform(-limits, limits))

    def place_and_jitter(
        self,
        nominal_viewpoint: Viewpoint,
        bounds_provider: BoundsProvider,
        distance_jitter_range: float,
        rotation_jitter_range: tuple[float, float, float],
        image_width: int,
        image_height: int,
        max_attempts: int,
    ) -> PerturbResult:
        """
        Jitter the camera around a viewpoint until the subject is fully in frame.

        Args:
            nominal_viewpoint: Unperturbed camera pose.
            bounds_provider: Returns the subject's pixel rectangle for the current
                camera pose, or None when no projection is available.
            distance_jitter_range: Maximum offset along the view axis.
            rotation_jitter_range: Maximum Euler offset per axis, in degrees.
            image_width: Capture width in pixels.
            image_height: Capture height in pixels.
            max_attempts: Maximum number of poses to try.

        Returns:
            PerturbResult with the acceptance flag, the normalized region for
            the final camera pose (None if it could not be projected) and the
            attempts used.
        """
        region: NormalizedRegion | None = None
        attempts = 0

        while attempts < max_attempts:
            attempts += 1

            position = self._jittered_position(nominal_viewpoint, distance_jitter_range)
            euler_offset = self._euler_offset(rotation_jitter_range)
            self.renderer.set_camera_pose(
                position, nominal_viewpoint.look_at_target, euler_offset
            )

            # The region always describes the current camera pose
            raw = bounds_provider()
            if raw is None:
                logger.debug("Projection unavailable on attempt %d", attempts)
                region = None
                continue

            region = normalize(raw, image_width, image_height)
            if is_fully_in_frame(region):
                return PerturbResult(accepted=True, region=region, attempts_used=attempts)

        return PerturbResult(accepted=False, region=region, attempts_used=attempts)
