import numpy as np
import pytest

from synthcapture.configs.capture_data import NormalizedRegion, RawRegion
from synthcapture.pipeline.normalization import is_fully_in_frame, normalize


def test_normalize_example_near_bottom_right() -> None:
    region = normalize(RawRegion(x=400, y=500, width=150, height=50), 512, 512)

    assert region.box == pytest.approx((0.78125, 0.9765625, 0.29296875, 0.09765625))
    assert region.x_min == pytest.approx(400 / 512)
    assert region.y_min == pytest.approx(500 / 512)
    assert region.x_max == 1.0
    assert region.y_max == 1.0


def test_in_bounds_box_and_corner_forms_agree() -> None:
    region = normalize(RawRegion(x=64, y=32, width=128, height=200), 640, 480)

    x, y, w, h = region.box
    assert region.x_min == pytest.approx(x)
    assert region.y_min == pytest.approx(y)
    assert region.x_max - region.x_min == pytest.approx(w)
    assert region.y_max - region.y_min == pytest.approx(h)


def test_each_axis_uses_its_own_dimension() -> None:
    region = normalize(RawRegion(x=100, y=100, width=100, height=100), 400, 200)

    assert region.box == pytest.approx((0.25, 0.5, 0.25, 0.5))
    assert region.corners == pytest.approx((0.25, 0.5, 0.5, 1.0))


def test_right_edge_clamps_independently() -> None:
    region = normalize(RawRegion(x=480, y=10, width=100, height=20), 512, 512)

    assert region.x_max == 1.0
    assert region.x_min == pytest.approx(480 / 512)
    assert region.x_max > region.x_min


def test_left_edge_keeps_visible_part() -> None:
    region = normalize(RawRegion(x=-50, y=10, width=100, height=20), 500, 500)

    assert region.x_min == 0.0
    assert region.x_max == pytest.approx(0.1)


def test_random_rects_stay_in_unit_range() -> None:
    rng = np.random.default_rng(0)
    for _ in range(500):
        x, y = rng.uniform(-600, 1200, size=2)
        w, h = rng.uniform(0, 900, size=2)
        width, height = rng.integers(1, 1024, size=2)

        region = normalize(RawRegion(x, y, w, h), int(width), int(height))

        assert all(0.0 <= v <= 1.0 for v in region.box + region.corners)
        assert region.x_min <= region.x_max
        assert region.y_min <= region.y_max


@pytest.mark.parametrize("width, height", [(0, 512), (512, 0), (-1, 10)])
def test_invalid_dimensions_raise(width: int, height: int) -> None:
    with pytest.raises(ValueError):
        normalize(RawRegion(0, 0, 1, 1), width, height)


@pytest.mark.parametrize(
    "corners, expected",
    [
        ((0.1, 0.1, 0.9, 0.9), True),
        ((0.0, 0.1, 0.9, 0.9), False),
        ((0.1, 0.0, 0.9, 0.9), False),
        ((0.1, 0.1, 1.0, 0.9), False),
        ((0.1, 0.1, 0.9, 1.0), False),
    ],
)
def test_fully_in_frame(corners, expected: bool) -> None:
    region = NormalizedRegion(box=(0, 0, 0, 0), corners=corners)
    assert is_fully_in_frame(region) is expected


def test_negative_extents_keep_corners_ordered() -> None:
    flipped = normalize(RawRegion(x=300, y=200, width=-100, height=-50), 400, 400)
    upright = normalize(RawRegion(x=200, y=150, width=100, height=50), 400, 400)

    assert flipped.x_min <= flipped.x_max
    assert flipped.y_min <= flipped.y_max
    assert flipped.corners == pytest.approx(upright.corners)
    assert flipped.box == pytest.approx(upright.box)
