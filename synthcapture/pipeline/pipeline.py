import numpy as np

from synthcapture.configs.camera_config import CameraConfig
from synthcapture.configs.capture_data import CaptureSummary
from synthcapture.models.settings import CaptureSettings
from synthcapture.pipeline.emitters import build_emitters
from synthcapture.pipeline.orchestrator import CaptureContext, CaptureOrchestrator
from synthcapture.rendering.frame_writer import FrameWriter
from synthcapture.rendering.pinhole import PinholeRenderer


def build_reference_context(
    settings: CaptureSettings, camera_config: CameraConfig | None = None
) -> CaptureContext:
    """
    Assemble a capture context around the reference pinhole renderer.

    Args:
        settings: Capture settings (resolution, field of view, formats, seed).
        camera_config: Camera configuration (derived from the settings if None).

    Returns:
        CaptureContext whose renderer and frame writer share one resolution.
    """
    if camera_config is None:
        camera_config = CameraConfig(
            image_width=settings.image_width,
            image_height=settings.image_height,
            field_of_view=settings.field_of_view,
        )

    renderer = PinholeRenderer(camera_config)

    return CaptureContext(
        renderer=renderer,
        screenshot_service=FrameWriter(renderer),
        emitters=build_emitters(settings.dataset_formats),
        rng=np.random.default_rng(settings.seed),
    )


def run_capture(
    settings: CaptureSettings, context: CaptureContext | None = None
) -> CaptureSummary:
    """
    Run the complete capture: sampling, jitter, screenshots and dataset files.

    Args:
        settings: Capture settings.
        context: Collaborators to use (reference renderer context if None).

    Returns:
        CaptureSummary of the run.
    """
    # Use the reference collaborators if none are provided
    if context is None:
        context = build_reference_context(settings)

    orchestrator = CaptureOrchestrator(context, settings)
    return orchestrator.run()
