"""
Tests for resolution-adaptive parameters and overrides
"""

import dataclasses

import pytest

from id_detection.params import (
    ID1_ASPECT_RATIO,
    ParameterBundle,
    apply_overrides,
    load_overrides_from_env,
    select_parameters,
    with_area_ratios,
    with_edge_thresholds,
    with_target_aspect_ratio,
)


class TestSelectParameters:
    """Tests for the resolution tiers"""

    @pytest.mark.parametrize("size, expected", [
        ((320, 240), (30, 90, 0.05, 0.95, 0.02, 0.50)),
        ((640, 480), (25, 75, 0.01, 0.90, 0.015, 0.40)),
        ((1200, 900), (20, 60, 0.005, 0.85, 0.01, 0.35)),
        ((2000, 1600), (15, 45, 0.002, 0.80, 0.008, 0.30)),
    ])
    def test_tiers(self, size, expected):
        """Test each resolution tier"""
        params = select_parameters(*size)
        low, high, min_ratio, max_ratio, epsilon, tolerance = expected

        assert params.edge_threshold_low == low
        assert params.edge_threshold_high == high
        assert params.min_area_ratio == pytest.approx(min_ratio)
        assert params.max_area_ratio == pytest.approx(max_ratio)
        assert params.approx_epsilon_factor == pytest.approx(epsilon)
        assert params.aspect_tolerance == pytest.approx(tolerance)

    @pytest.mark.parametrize("min_dim, expected_low", [
        (399, 30), (400, 25), (799, 25), (800, 20), (1499, 20), (1500, 15),
    ])
    def test_tier_boundaries(self, min_dim, expected_low):
        """Test that tiers switch exactly at 400, 800 and 1500"""
        params = select_parameters(min_dim * 2, min_dim)
        assert params.edge_threshold_low == expected_low

    def test_wide_frame_adjustment(self):
        """Test wide framing halves min area ratio and widens aspect tolerance"""
        params = select_parameters(900, 300)

        assert params.min_area_ratio == pytest.approx(0.05 * 0.5)
        assert params.aspect_tolerance == pytest.approx(0.50 * 1.2)
        assert params.max_area_ratio == pytest.approx(0.95)

    def test_wide_frame_portrait(self):
        """Test the wide-frame rule applies to tall images too"""
        params = select_parameters(300, 900)
        assert params.min_area_ratio == pytest.approx(0.025)

    def test_ratio_at_limit_is_not_wide(self):
        """Test an exact 2.5 ratio keeps the tier values"""
        params = select_parameters(1000, 400)
        assert params.min_area_ratio == pytest.approx(0.01)
        assert params.aspect_tolerance == pytest.approx(0.40)

    def test_target_aspect_ratio(self):
        """Test target aspect ratio is the ID-1 card ratio"""
        params = select_parameters(640, 480)
        assert params.target_aspect_ratio == pytest.approx(1.586, abs=1e-3)
        assert ID1_ASPECT_RATIO == pytest.approx(85.6 / 53.98)

    def test_adaptive_edges_by_default(self):
        assert select_parameters(640, 480).adaptive_edges

    def test_degenerate_size(self):
        """Test zero-sized input still yields a valid bundle"""
        params = select_parameters(0, 0)
        assert params.min_area_ratio < params.max_area_ratio


class TestParameterBundle:
    """Tests for bundle invariants"""

    def test_frozen(self):
        params = ParameterBundle()
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.min_area_ratio = 0.5

    def test_min_below_max(self):
        with pytest.raises(ValueError):
            ParameterBundle(min_area_ratio=0.5, max_area_ratio=0.4)

    def test_equal_ratios_rejected(self):
        with pytest.raises(ValueError):
            ParameterBundle(min_area_ratio=0.5, max_area_ratio=0.5)

    @pytest.mark.parametrize("field_name", [
        'edge_threshold_low', 'edge_threshold_high', 'approx_epsilon_factor',
        'target_aspect_ratio', 'aspect_tolerance', 'max_working_dimension',
    ])
    def test_positive_values(self, field_name):
        with pytest.raises(ValueError):
            ParameterBundle(**{field_name: 0})

    def test_max_ratio_above_one(self):
        with pytest.raises(ValueError):
            ParameterBundle(max_area_ratio=1.5)


class TestOverrides:
    """Tests for pure override functions"""

    @pytest.fixture
    def base(self):
        return select_parameters(640, 480)

    def test_with_edge_thresholds(self, base):
        """Test fixed thresholds disable adaptive edges"""
        params = with_edge_thresholds(base, 50, 150)

        assert params.edge_threshold_low == 50
        assert params.edge_threshold_high == 150
        assert not params.adaptive_edges
        assert base.adaptive_edges, "Original bundle must not change"

    def test_with_area_ratios(self, base):
        params = with_area_ratios(base, 0.1, 0.5)
        assert (params.min_area_ratio, params.max_area_ratio) == (0.1, 0.5)
        assert base.min_area_ratio == pytest.approx(0.01)

    def test_with_area_ratios_invalid(self, base):
        with pytest.raises(ValueError):
            with_area_ratios(base, 0.5, 0.1)

    def test_with_target_aspect_ratio(self, base):
        params = with_target_aspect_ratio(base, 1.42, 0.2)
        assert params.target_aspect_ratio == 1.42
        assert params.aspect_tolerance == 0.2

    def test_apply_overrides(self, base):
        """Test string overrides map to bundle fields"""
        params = apply_overrides(base, {'min_area_ratio': '0.02', 'aspect_tolerance': '0.25'})

        assert params.min_area_ratio == pytest.approx(0.02)
        assert params.aspect_tolerance == pytest.approx(0.25)
        assert params.max_area_ratio == base.max_area_ratio
        assert params.adaptive_edges

    def test_apply_single_edge_override(self, base):
        """Test one edge threshold keeps the other and turns off adaptive edges"""
        params = apply_overrides(base, {'canny_threshold1': '40'})

        assert params.edge_threshold_low == 40
        assert params.edge_threshold_high == base.edge_threshold_high
        assert not params.adaptive_edges

    def test_apply_working_dimension(self, base):
        params = apply_overrides(base, {'max_working_dimension': '800'})
        assert params.max_working_dimension == 800
        assert isinstance(params.max_working_dimension, int)

    def test_unknown_keys_ignored(self, base):
        assert apply_overrides(base, {'language': 'en'}) is base

    def test_non_numeric_value(self, base):
        with pytest.raises(ValueError):
            apply_overrides(base, {'min_area_ratio': 'small'})

    def test_non_finite_value(self, base):
        with pytest.raises(ValueError):
            apply_overrides(base, {'aspect_tolerance': 'nan'})

    def test_invariant_violation(self, base):
        with pytest.raises(ValueError):
            apply_overrides(base, {'min_area_ratio': '0.95'})


class TestEnvironmentOverrides:
    """Tests for environment configuration"""

    def test_prefixed_keys(self):
        environ = {
            'ID_READER_MIN_AREA_RATIO': '0.02',
            'ID_READER_CANNY_THRESHOLD1': '35',
            'ID_READER_SCORING_PROFILE': 'generic',
            'ID_READER_UNKNOWN': 'x',
            'PATH': '/usr/bin',
        }
        overrides = load_overrides_from_env(environ=environ)

        assert overrides == {
            'min_area_ratio': '0.02',
            'canny_threshold1': '35',
            'scoring_profile': 'generic',
        }

    def test_custom_prefix(self):
        overrides = load_overrides_from_env(prefix='CARD_', environ={'CARD_ASPECT_TOLERANCE': '0.3'})
        assert overrides == {'aspect_tolerance': '0.3'}
