"""Tests for brush application and the stroke throttle."""

import numpy as np
import pytest

from py_terrain.core import (
    ActiveTerrain, BrushApplicator, BrushShape, BrushSpec, EditMode, InvalidLayer,
    StrokeThrottle, TerrainTransform, apply_elevation, apply_weights, create_default_terrain,
)


def make_terrain(layers=("grass", "dirt", "rock", "sand"), resolution=10):
    # World size equals resolution so world and grid coordinates coincide
    return create_default_terrain(
        resolution, resolution, list(layers),
        TerrainTransform(size=(float(resolution), 1.0, float(resolution))),
    )


class TestApplyElevation:
    """Test elevation sculpting."""

    def test_circle_on_flat_grid(self):
        """Radius 2, strength 0.5 at (5, 5) on a flat 10x10 grid."""
        terrain = make_terrain()
        apply_elevation(terrain, (5.0, 0.0, 5.0), BrushSpec(BrushShape.CIRCLE, 2.0, 0.5))
        elevation = terrain.elevation

        assert elevation.get(5, 5) == 0.5
        assert elevation.get(7, 5) == 0.0
        assert elevation.get(5, 3) == 0.0
        assert elevation.get(8, 5) == 0.0
        assert elevation.get(7, 7) == 0.0
        assert elevation.get(6, 5) == pytest.approx(0.25)
        assert elevation.values.sum() > 0.5

    def test_elevation_stays_in_unit_range(self):
        terrain = make_terrain(resolution=16)
        rng = np.random.default_rng(7)
        shapes = list(BrushShape)
        for _ in range(60):
            spec = BrushSpec(shapes[rng.integers(len(shapes))], float(rng.uniform(0.5, 5)),
                             float(rng.uniform(0.01, 3.0)))
            point = (float(rng.uniform(0, 16)), 0.0, float(rng.uniform(0, 16)))
            apply_elevation(terrain, point, spec)
            values = terrain.elevation.values
            assert values.min() >= 0.0
            assert values.max() <= 1.0

    def test_saturation_is_a_fixed_point(self):
        terrain = make_terrain()
        spec = BrushSpec(BrushShape.CIRCLE, 3.0, 0.3)
        for _ in range(5):
            apply_elevation(terrain, (5.0, 0.0, 5.0), spec)
        assert terrain.elevation.get(5, 5) == 1.0
        snapshot = terrain.elevation.copy()
        apply_elevation(terrain, (5.0, 0.0, 5.0), spec)
        assert terrain.elevation.get(5, 5) == 1.0
        assert terrain.elevation.values.max() == 1.0
        assert np.all(terrain.elevation.values >= snapshot.values)

    def test_eraser_lowers_to_zero(self):
        terrain = make_terrain()
        apply_elevation(terrain, (5.0, 0.0, 5.0), BrushSpec(BrushShape.SQUARE, 2.0, 0.4))
        apply_elevation(terrain, (5.0, 0.0, 5.0), BrushSpec(BrushShape.ERASER, 2.0, 1.0))
        assert terrain.elevation.get(5, 5) == 0.0
        assert terrain.elevation.values.min() == 0.0

    def test_elevation_rounds_center(self):
        """Elevation strokes snap to the nearest cell."""
        terrain = make_terrain()
        apply_elevation(terrain, (5.6, 0.0, 5.6), BrushSpec(BrushShape.SQUARE, 0.5, 0.2))
        assert terrain.elevation.get(6, 6) == pytest.approx(0.2)
        assert terrain.elevation.get(5, 5) == 0.0


class TestApplyWeights:
    """Test material painting."""

    def test_paint_redistributes(self):
        terrain = make_terrain(layers=("grass", "rock"))
        apply_weights(terrain, (5.0, 0.0, 5.0), BrushSpec(BrushShape.SQUARE, 1.0, 0.3), 1)
        np.testing.assert_allclose(terrain.weights.get_weights(5, 5), [0.7, 0.3])
        np.testing.assert_allclose(terrain.weights.get_weights(0, 0), [1.0, 0.0])

    def test_equal_share_from_other_layers(self):
        terrain = make_terrain(layers=("a", "b", "c"))
        terrain.weights.values[:, :] = [0.4, 0.3, 0.3]
        apply_weights(terrain, (5.0, 0.0, 5.0), BrushSpec(BrushShape.SQUARE, 0.5, 0.2), 0)
        np.testing.assert_allclose(terrain.weights.get_weights(5, 5), [0.6, 0.2, 0.2])

    def test_clamp_then_renormalize(self):
        terrain = make_terrain(layers=("a", "b", "c"))
        terrain.weights.values[:, :] = [0.1, 0.8, 0.1]
        apply_weights(terrain, (5.0, 0.0, 5.0), BrushSpec(BrushShape.SQUARE, 0.5, 1.0), 0)
        # [1.1, 0.3, -0.4] clamps to [1.0, 0.3, 0.0] then renormalizes
        np.testing.assert_allclose(terrain.weights.get_weights(5, 5), [1.0 / 1.3, 0.3 / 1.3, 0.0])

    def test_weights_sum_to_one_after_any_strokes(self):
        terrain = make_terrain(resolution=16)
        rng = np.random.default_rng(11)
        for _ in range(80):
            shape = BrushShape.CIRCLE if rng.random() < 0.5 else BrushShape.SQUARE
            spec = BrushSpec(shape, float(rng.uniform(0.5, 6)), float(rng.uniform(0.01, 5.0)))
            point = (float(rng.uniform(0, 16)), 0.0, float(rng.uniform(0, 16)))
            apply_weights(terrain, point, spec, int(rng.integers(terrain.layer_count)))

            sums = terrain.weights.values.sum(axis=2)
            assert np.all(np.abs(sums - 1.0) <= 1e-4)
            assert terrain.weights.values.min() >= 0.0
            assert terrain.weights.values.max() <= 1.0

    def test_single_layer_is_always_full(self):
        terrain = make_terrain(layers=("grass",))
        terrain.weights.values[5, 5, 0] = 0.5
        window = apply_weights(terrain, (5.0, 0.0, 5.0), BrushSpec(BrushShape.CIRCLE, 2.0, 0.01), 0)
        assert window.touched_count > 0
        assert terrain.weights.get_weights(5, 5)[0] == 1.0
        assert np.all(terrain.weights.values == 1.0)

    def test_weights_floor_center(self):
        """Weight strokes use the cell containing the point, not the nearest one."""
        terrain = make_terrain(layers=("grass", "rock"))
        apply_weights(terrain, (5.6, 0.0, 5.6), BrushSpec(BrushShape.SQUARE, 0.5, 0.2), 1)
        np.testing.assert_allclose(terrain.weights.get_weights(5, 5), [0.8, 0.2])
        np.testing.assert_allclose(terrain.weights.get_weights(6, 6), [1.0, 0.0])

    def test_invalid_layer(self):
        terrain = make_terrain(layers=("grass", "rock"))
        spec = BrushSpec(BrushShape.CIRCLE, 2.0, 0.5)
        with pytest.raises(InvalidLayer):
            apply_weights(terrain, (5.0, 0.0, 5.0), spec, 2)
        with pytest.raises(InvalidLayer):
            apply_weights(terrain, (5.0, 0.0, 5.0), spec, -1)

    def test_eraser_does_not_paint(self):
        terrain = make_terrain(layers=("grass", "rock"))
        before = terrain.weights.copy()
        window = apply_weights(terrain, (5.0, 0.0, 5.0), BrushSpec(BrushShape.ERASER, 2.0, 0.5), 1)
        assert window.touched_count == 0
        assert terrain.weights == before


class TestStrokeThrottle:

    def test_first_tick_is_immediate(self):
        throttle = StrokeThrottle(0.1)
        assert not throttle.ready
        throttle.begin()
        assert throttle.ready
        throttle.consume()
        assert not throttle.ready
        throttle.advance(0.06)
        assert not throttle.ready
        throttle.advance(0.06)
        assert throttle.ready

    def test_end_resets(self):
        throttle = StrokeThrottle(0.1)
        throttle.begin()
        throttle.end()
        throttle.advance(5.0)
        assert not throttle.ready

    def test_step_must_be_positive(self):
        with pytest.raises(ValueError):
            StrokeThrottle(0.0)


class TestBrushApplicator:
    """Test stroke ticks against the active terrain."""

    @pytest.fixture
    def applicator(self):
        active = ActiveTerrain(make_terrain())
        return BrushApplicator(active, BrushSpec(BrushShape.CIRCLE, 2.0, 0.1), step_of_draw=0.1)

    def test_tick_without_stroke_does_nothing(self, applicator):
        assert applicator.on_stroke_tick((5.0, 0.0, 5.0), 1.0, EditMode.SCULPT) is None
        assert applicator.active.terrain.elevation.values.max() == 0.0

    def test_ticks_are_rate_limited(self, applicator):
        point = (5.0, 0.0, 5.0)
        applicator.start_stroke()
        assert applicator.ready_to_paint
        assert applicator.on_stroke_tick(point, 0.0, EditMode.SCULPT) is not None
        assert applicator.on_stroke_tick(point, 0.06, EditMode.SCULPT) is None
        assert applicator.on_stroke_tick(point, 0.06, EditMode.SCULPT) is not None
        assert applicator.active.terrain.elevation.get(5, 5) == pytest.approx(0.2)

        applicator.stop_stroke()
        assert not applicator.ready_to_paint
        assert applicator.on_stroke_tick(point, 1.0, EditMode.SCULPT) is None

    def test_tick_off_terrain_keeps_time(self, applicator):
        applicator.start_stroke()
        applicator.throttle.consume()
        assert applicator.on_stroke_tick(None, 0.2, EditMode.SCULPT) is None
        assert applicator.ready_to_paint

    def test_paint_mode_uses_target_layer(self, applicator):
        applicator.target_layer = 2
        applicator.start_stroke()
        applicator.on_stroke_tick((5.0, 0.0, 5.0), 0.0, EditMode.PAINT)
        weights = applicator.active.terrain.weights.get_weights(5, 5)
        assert weights[2] > 0.0
        assert weights.sum() == pytest.approx(1.0)

    def test_rebinds_to_replaced_terrain(self, applicator):
        old = applicator.active.terrain
        fresh = make_terrain()
        applicator.active.replace(fresh)
        applicator.apply((5.0, 0.0, 5.0), EditMode.SCULPT)
        assert fresh.elevation.get(5, 5) == pytest.approx(0.1)
        assert old.elevation.get(5, 5) == 0.0
