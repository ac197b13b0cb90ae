from pathlib import Path

import numpy as np
import pytest

from synthcapture.configs.capture_data import RawRegion
from synthcapture.models.settings import CaptureSettings
from synthcapture.models.subject import Subject
from synthcapture.pipeline.emitters import build_emitters
from synthcapture.pipeline.orchestrator import CaptureContext


class FakeRenderer:
    """Records camera poses and returns scripted projections."""

    def __init__(self, image_size=(512, 512), rects=None, default_rect=None):
        self._image_size = image_size
        self.rects = list(rects or [])
        self.default_rect = default_rect or RawRegion(100.0, 120.0, 50.0, 60.0)
        self.subjects = {}
        self.active = set()
        self.environment = None
        self.poses = []
        self.events = []

    @property
    def image_size(self):
        return self._image_size

    def spawn_subject(self, subject):
        self.subjects[subject.id] = subject
        self.events.append(("spawn", subject.id))

    def despawn_subject(self, subject_id):
        self.subjects.pop(subject_id, None)
        self.events.append(("despawn", subject_id))

    def set_subject_active(self, subject_id, active):
        if active:
            self.active.add(subject_id)
        else:
            self.active.discard(subject_id)
        self.events.append(("active", subject_id, active))

    def set_environment(self, variant):
        self.environment = variant

    def set_camera_pose(self, position, look_at_target, euler_offset):
        self.poses.append((position, look_at_target, euler_offset))

    def project_subject_to_screen_rect(self, subject_id):
        if self.rects:
            return self.rects.pop(0)
        return self.default_rect


class FakeScreenshotService:
    """Touches an empty file per capture, named after the folder."""

    def __init__(self, renderer=None, on_capture=None):
        self.renderer = renderer
        self.on_capture = on_capture
        self.captured = []

    def capture_frame(self, output_directory):
        output_directory = Path(output_directory)
        output_directory.mkdir(parents=True, exist_ok=True)

        index = sum(1 for p in self.captured if p.parent == output_directory)
        path = output_directory / f"{output_directory.name}_{index:05d}.png"
        path.touch()

        environment = self.renderer.environment if self.renderer else None
        self.captured.append(path)
        if self.on_capture is not None:
            self.on_capture(path, environment)
        return path


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides) -> CaptureSettings:
        data = {
            "subjects": [Subject(id="crate"), Subject(id="can", label="soda_can")],
            "viewpoints_per_subject": 4,
            "radius": 10.0,
            "max_attempts": 1,
            "output_dir": str(tmp_path / "dataset"),
            "seed": 3,
        }
        data.update(overrides)
        return CaptureSettings(**data)

    return _make


@pytest.fixture
def make_context():
    def _make(renderer=None, screenshot_service=None, settings=None, seed=0):
        renderer = renderer if renderer is not None else FakeRenderer()
        if screenshot_service is None:
            screenshot_service = FakeScreenshotService(renderer)
        formats = settings.dataset_formats if settings else []
        return CaptureContext(
            renderer=renderer,
            screenshot_service=screenshot_service,
            emitters=build_emitters(formats),
            rng=np.random.default_rng(seed),
        )

    return _make
