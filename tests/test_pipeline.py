import json

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest
import yaml
from pydantic import ValidationError

from synthcapture.configs.capture_data import RawRegion
from synthcapture.enums import DatasetFormat, ExhaustedPolicy
from synthcapture.models.settings import CaptureSettings
from synthcapture.models.subject import Subject
from synthcapture.models.variant import EnvironmentVariant
from synthcapture.pipeline.normalization import normalize
from synthcapture.pipeline.pipeline import build_reference_context, run_capture
from synthcapture.pipeline.sampling import generate_points
from synthcapture.plotting import draw_normalized_region, plot_viewpoints
from synthcapture.utils import find_project_root, load_capture_settings_from_yaml


def test_reference_capture_end_to_end(tmp_path) -> None:
    settings = CaptureSettings(
        subjects=[{"id": "crate", "size": [1, 1, 1]}],
        viewpoints_per_subject=6,
        radius=5.0,
        image_width=128,
        image_height=96,
        jitter={"distance": 0.5, "rotation": [5, 5, 180]},
        max_attempts=10,
        dataset_formats=list(DatasetFormat),
        output_dir=str(tmp_path / "dataset"),
        seed=11,
    )

    summary = run_capture(settings)

    assert summary.total_images_captured == 6
    assert summary.accepted_images == 6
    assert len(summary.dataset_paths) == 4

    box_map = json.loads(summary.dataset_paths[DatasetFormat.BOX_MAP].read_text())
    assert len(box_map) == 6
    for filename, (x, y, w, h) in box_map.items():
        assert (tmp_path / "dataset" / filename).exists()
        assert 0 < x and 0 < y and x + w < 1 and y + h < 1


def test_reference_context_matches_resolution() -> None:
    settings = CaptureSettings(image_width=320, image_height=200, seed=1)
    context = build_reference_context(settings)

    assert context.renderer.image_size == (320, 200)
    assert context.screenshot_service.renderer is context.renderer
    assert [e.format for e in context.emitters] == settings.dataset_formats


def test_same_seed_reproduces_dataset(tmp_path) -> None:
    def capture(out):
        settings = CaptureSettings(
            subjects=[{"id": "crate"}],
            viewpoints_per_subject=5,
            output_dir=str(out),
            seed=5,
        )
        summary = run_capture(settings)
        return summary.dataset_paths[DatasetFormat.BOX_MAP].read_text()

    assert capture(tmp_path / "a") == capture(tmp_path / "b")


def test_load_settings_from_yaml(tmp_path) -> None:
    path = tmp_path / "capture.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "viewpoints_per_subject": 12,
                "exhausted_policy": "discard",
                "jitter": {"distance": 1.0, "rotation": [1, 2, 3]},
                "subjects": [{"id": "mug", "size": [0.1, 0.12, 0.1]}],
                "environment_variants": [{"name": "studio"}, {"name": "dusk"}],
                "variants_to_capture": 1,
                "dataset_formats": ["box_map", "tensorflow"],
            }
        )
    )

    settings = load_capture_settings_from_yaml(path)

    assert settings.viewpoints_per_subject == 12
    assert settings.exhausted_policy is ExhaustedPolicy.DISCARD
    assert settings.jitter.rotation == (1.0, 2.0, 3.0)
    assert settings.subjects[0].class_label == "mug"
    assert [v.name for v in settings.active_variants()] == ["studio"]
    assert settings.dataset_formats == [DatasetFormat.BOX_MAP, DatasetFormat.TENSORFLOW]


def test_bundled_example_settings_load() -> None:
    settings = load_capture_settings_from_yaml(find_project_root() / "assets" / "capture.yaml")
    assert len(settings.subjects) == 2
    assert len(settings.active_variants()) == 2


def test_missing_yaml_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_capture_settings_from_yaml(tmp_path / "missing.yaml")


def test_invalid_yaml_raises(tmp_path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("subjects: [unclosed")

    with pytest.raises(yaml.YAMLError):
        load_capture_settings_from_yaml(path)


@pytest.mark.parametrize(
    "overrides",
    [{"radius": 0}, {"max_attempts": -1}, {"variants_to_capture": -2}, {"image_width": 0}],
)
def test_invalid_settings_rejected(overrides) -> None:
    with pytest.raises(ValidationError):
        CaptureSettings(**overrides)


def test_active_variants() -> None:
    variants = [EnvironmentVariant(name=n) for n in ("a", "b")]

    assert CaptureSettings().active_variants() == [None]
    assert len(CaptureSettings(environment_variants=variants).active_variants()) == 2
    assert CaptureSettings(
        environment_variants=variants, capture_per_variant=False
    ).active_variants() == [None]


def test_plot_viewpoints_returns_figure() -> None:
    fig = plot_viewpoints(generate_points(50, 2.0), show=False)

    ax = fig.axes[0]
    assert ax.get_title() == "50 sampled viewpoints"
    assert len(ax.collections) == 2


def test_draw_normalized_region() -> None:
    image = np.zeros((100, 200, 3), dtype=np.uint8)
    region = normalize(RawRegion(20, 10, 100, 50), 200, 100)

    annotated = draw_normalized_region(image, region, color=(0, 0, 255), thickness=1)

    assert image.sum() == 0
    assert tuple(annotated[10, 20]) == (0, 0, 255)
    assert tuple(annotated[60, 120]) == (0, 0, 255)
    assert tuple(annotated[30, 60]) == (0, 0, 0)


@pytest.mark.parametrize("name", ["", "  ", ".", "..", "../precious", "a/b", "a\\b"])
def test_subject_rejects_unsafe_folder_names(name: str) -> None:
    with pytest.raises(ValidationError):
        Subject(id=name)
    with pytest.raises(ValidationError):
        Subject(id="crate", label=name)


def test_duplicate_subject_ids_rejected() -> None:
    with pytest.raises(ValidationError, match="Duplicate subject id 'x'"):
        CaptureSettings(
            subjects=[
                {"id": "x", "label": "small", "size": [0.2, 0.2, 0.2]},
                {"id": "x", "label": "big", "size": [2.0, 2.0, 2.0]},
            ]
        )


def test_repeated_runs_restart_frame_numbering(tmp_path) -> None:
    settings = CaptureSettings(
        subjects=[{"id": "crate"}],
        viewpoints_per_subject=3,
        jitter={"distance": 0.5, "rotation": [5, 5, 180]},
        output_dir=str(tmp_path / "dataset"),
        seed=2,
    )
    context = build_reference_context(settings)

    first = run_capture(settings, context)
    first_names = list(json.loads(first.dataset_paths[DatasetFormat.BOX_MAP].read_text()))
    second = run_capture(settings, context)
    second_names = list(json.loads(second.dataset_paths[DatasetFormat.BOX_MAP].read_text()))

    expected = [f"crate/crate_{i:05d}.png" for i in range(3)]
    assert first_names == expected
    assert second_names == expected
    assert sorted(p.name for p in (tmp_path / "dataset" / "crate").iterdir()) == [
        f"crate_{i:05d}.png" for i in range(3)
    ]
