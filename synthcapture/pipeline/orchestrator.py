import asyncio
import logging
import shutil
import threading
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from synthcapture.configs.capture_data import (
    CaptureRequest,
    CaptureSummary,
    DatasetRow,
    PerturbResult,
    Viewpoint,
)
from synthcapture.enums import ExhaustedPolicy
from synthcapture.errors import ConfigurationMissingError
from synthcapture.models.settings import CaptureSettings
from synthcapture.models.subject import Subject
from synthcapture.models.variant import EnvironmentVariant
from synthcapture.pipeline.emitters import DatasetEmitter
from synthcapture.pipeline.perturbation import ViewPerturber
from synthcapture.pipeline.sampling import generate_viewpoints
from synthcapture.rendering.protocols import Renderer, ScreenshotService

logger = logging.getLogger(__name__)


@dataclass
class CaptureContext:
    """Collaborators used by a capture run, passed in explicitly by the caller."""

    renderer: Renderer | None
    screenshot_service: ScreenshotService | None
    emitters: list[DatasetEmitter] = field(default_factory=list)
    rng: np.random.Generator = field(default_factory=np.random.default_rng)


class CaptureOrchestrator:
    """
    Drives a capture run: subjects × environment variants × viewpoints.

    The orchestrator owns the pool of capture targets spawned in the renderer,
    the per-capture requests and the emitters' row sequences. Captures are
    strictly sequential because the renderer's camera is shared state.
    """

    def __init__(self, context: CaptureContext, settings: CaptureSettings) -> None:
        self.context = context
        self.settings = settings
        self.dataset_dir = Path(settings.output_dir)

        self._spawned: list[str] = []
        self._cancel_event = threading.Event()

    # ----------------------------------------------------------------------
    # Run boundaries
    # ----------------------------------------------------------------------

    def reset(self) -> None:
        """
        Clean and prepare the scene before a capture run.

        Clears emitter rows, removes the image folders left by a previous run
        and rebuilds the pool of inactive capture targets.

        Raises:
            ValueError: If a subject's folder would fall outside the dataset directory.
        """
        for emitter in self.context.emitters:
            emitter.clear()

        renderer = self.context.renderer
        if renderer is not None:
            for subject_id in self._spawned:
                renderer.despawn_subject(subject_id)
        self._spawned.clear()

        root = self.dataset_dir.resolve()
        for subject in self.settings.subjects:
            folder = self.dataset_dir / subject.class_label
            resolved = folder.resolve()
            if resolved == root or not resolved.is_relative_to(root):
                raise ValueError(
                    f"Capture folder {folder} for subject '{subject.id}' is outside {root}"
                )
            if folder.is_dir():
                logger.info("Removing previous captures in %s", folder)
                shutil.rmtree(folder)

        if renderer is None:
            return

        for subject in self.settings.subjects:
            renderer.spawn_subject(subject)
            renderer.set_subject_active(subject.id, False)
            self._spawned.append(subject.id)

    def cancel(self) -> None:
        """Request the run to stop before the next subject."""
        self._cancel_event.set()

    def _start_run(self) -> CaptureSummary:
        self._cancel_event.clear()
        self.reset()

        if not self.settings.subjects:
            logger.warning("No subjects configured, nothing to capture")

        logger.info(
            "Starting capture of %d subjects, %d viewpoints each",
            len(self.settings.subjects),
            self.settings.viewpoints_per_subject,
        )
        return CaptureSummary(dataset_dir=self.dataset_dir)

    def _finish_run(self, summary: CaptureSummary) -> CaptureSummary:
        for emitter in self.context.emitters:
            summary.dataset_paths[emitter.format] = emitter.flush(self.dataset_dir)

        logger.info(
            "Captured %d images (%d flagged) in %s",
            summary.total_images_captured,
            len(summary.flagged_images),
            self.dataset_dir,
        )
        return summary

    def _should_stop(self, summary: CaptureSummary) -> bool:
        if self._cancel_event.is_set():
            logger.warning("Capture cancelled, flushing completed subjects")
            summary.cancelled = True
            return True
        return False

    # ----------------------------------------------------------------------
    # Public entry points
    # ----------------------------------------------------------------------

    def run(self) -> CaptureSummary:
        """
        Capture every subject and write the dataset files.

        Returns:
            CaptureSummary with counts and the paths of the dataset files.

        Raises:
            OSError: If a frame or a dataset file cannot be written.
        """
        summary = self._start_run()

        for subject in self.settings.subjects:
            if self._should_stop(summary):
                break
            for _ in self._capture_subject(subject, summary):
                pass

        return self._finish_run(summary)

    async def run_async(self) -> CaptureSummary:
        """
        Same as `run`, yielding to the event loop between captures.

        Captures never overlap: each one finishes before control is handed back.
        """
        summary = self._start_run()

        for subject in self.settings.subjects:
            if self._should_stop(summary):
                break
            for _ in self._capture_subject(subject, summary):
                await asyncio.sleep(0)

        return self._finish_run(summary)

    # ----------------------------------------------------------------------
    # Per subject
    # ----------------------------------------------------------------------

    def _check_configuration(
        self, subject: Subject | None, viewpoints: list[Viewpoint]
    ) -> None:
        """
        Verify everything a subject's captures depend on is present.

        Raises:
            ConfigurationMissingError: Describing the first missing piece.
        """
        renderer = self.context.renderer
        if renderer is None:
            raise ConfigurationMissingError("No renderer configured")
        if self.context.screenshot_service is None:
            raise ConfigurationMissingError("No screenshot service configured")
        if subject is None or subject.id not in self._spawned:
            raise ConfigurationMissingError("Subject is not part of the capture pool")
        if not viewpoints:
            raise ConfigurationMissingError("No viewpoints to capture from")

        expected = (self.settings.image_width, self.settings.image_height)
        if tuple(renderer.image_size) != expected:
            raise ConfigurationMissingError(
                f"Renderer resolution {tuple(renderer.image_size)} does not match "
                f"capture resolution {expected}"
            )

    def _capture_subject(self, subject: Subject, summary: CaptureSummary):
        """
        Capture all viewpoints of one subject, yielding after every capture.

        Misconfiguration skips the subject without raising.
        """
        viewpoints = generate_viewpoints(
            self.settings.viewpoints_per_subject, self.settings.radius, subject.center
        )

        try:
            self._check_configuration(subject, viewpoints)
        except ConfigurationMissingError as e:
            logger.warning("Skipping subject '%s': %s", subject.id, e)
            summary.skipped_subjects.append(subject.id)
            return

        renderer = self.context.renderer
        renderer.set_subject_active(subject.id, True)
        logger.info("Capturing %s", subject.class_label)

        try:
            for variant in self.settings.active_variants():
                if variant is not None:
                    logger.info("Environment: %s", variant.name)
                renderer.set_environment(variant)

                for viewpoint in viewpoints:
                    request = CaptureRequest(
                        subject=subject,
                        viewpoint=viewpoint,
                        environment_variant=variant,
                        image_width=self.settings.image_width,
                        image_height=self.settings.image_height,
                    )
                    self._capture(request, summary)
                    yield
        finally:
            renderer.set_subject_active(subject.id, False)

    # ----------------------------------------------------------------------
    # Per capture
    # ----------------------------------------------------------------------

    def _perturb(self, request: CaptureRequest) -> PerturbResult:
        renderer = self.context.renderer
        perturber = ViewPerturber(renderer, self.context.rng)
        jitter = self.settings.jitter

        return perturber.place_and_jitter(
            request.viewpoint,
            lambda: renderer.project_subject_to_screen_rect(request.subject.id),
            jitter.distance,
            jitter.rotation,
            request.image_width,
            request.image_height,
            self.settings.max_attempts,
        )

    def _capture(self, request: CaptureRequest, summary: CaptureSummary) -> None:
        """Perturb, screenshot and emit one dataset row."""
        result = self._perturb(request)
        policy = self.settings.exhausted_policy

        if result.region is None:
            logger.warning(
                "No projection for '%s' after %d attempts, skipping viewpoint",
                request.subject.id,
                result.attempts_used,
            )
            summary.discarded_captures += 1
            return

        if not result.accepted and policy is ExhaustedPolicy.DISCARD:
            logger.debug("Discarding out-of-frame capture of '%s'", request.subject.id)
            summary.discarded_captures += 1
            return

        label = request.subject.class_label
        path = self.context.screenshot_service.capture_frame(self.dataset_dir / label)
        filename = self._relative_filename(path)

        flagged = not result.accepted and policy is ExhaustedPolicy.FLAG
        row = DatasetRow(
            filename=filename,
            label=label,
            region=result.region,
            image_width=request.image_width,
            image_height=request.image_height,
            flagged=flagged,
        )
        for emitter in self.context.emitters:
            emitter.append(row)

        summary.total_images_captured += 1
        if result.accepted:
            summary.accepted_images += 1
        if flagged:
            summary.flagged_images.append(filename)

    def _relative_filename(self, path: Path) -> str:
        """Image path relative to the dataset directory when possible."""
        path = Path(path)
        try:
            return path.relative_to(self.dataset_dir).as_posix()
        except ValueError:
            return path.as_posix()
