"""
Unit tests for the easing catalog
"""

import pytest

from midisynth.easing import EASING_FUNCTIONS, get_easing, linear, list_easings


START = 2.0
CHANGE = 3.0
LENGTH = 10.0


class TestEasingCatalog:
    """Tests for the name -> curve lookup."""

    def test_catalog_size(self):
        assert len(EASING_FUNCTIONS) == 34

    def test_family_names(self):
        for family in ["Back", "Bounce", "Circ", "Cubic", "Elastic", "Expo",
                       "Quad", "Quart", "Quint", "Sine"]:
            for suffix in ["In", "Out", "InOut"]:
                assert family + suffix in EASING_FUNCTIONS

    def test_linear_aliases(self):
        for name in ["Linear", "LinearIn", "LinearOut", "LinearInOut"]:
            assert get_easing(name) is linear

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown easing function"):
            get_easing("Wobbly")

    def test_list_is_sorted(self):
        names = list_easings()
        assert names == sorted(names)
        assert "SineOut" in names


class TestEasingCurves:
    """Tests for the curves themselves."""

    @pytest.mark.parametrize("name", sorted(EASING_FUNCTIONS))
    def test_starts_at_b(self, name):
        curve = EASING_FUNCTIONS[name]
        assert curve(0.0, START, CHANGE, LENGTH) == pytest.approx(START, abs=1e-9)

    @pytest.mark.parametrize("name", sorted(EASING_FUNCTIONS))
    def test_ends_at_b_plus_c(self, name):
        curve = EASING_FUNCTIONS[name]
        assert curve(LENGTH, START, CHANGE, LENGTH) == pytest.approx(START + CHANGE, abs=1e-9)

    def test_linear_midpoint(self):
        assert linear(5.0, 0.0, 1.0, 10.0) == pytest.approx(0.5)

    def test_in_out_symmetric_midpoint(self):
        for family in ["Quad", "Cubic", "Quart", "Quint", "Sine", "Circ"]:
            curve = get_easing(family + "InOut")
            assert curve(5.0, 0.0, 1.0, 10.0) == pytest.approx(0.5)

    def test_ease_in_lags_ease_out(self):
        assert get_easing("QuadIn")(2.5, 0.0, 1.0, 10.0) < 0.25
        assert get_easing("QuadOut")(2.5, 0.0, 1.0, 10.0) > 0.25

    def test_back_overshoots(self):
        assert get_easing("BackIn")(2.0, 0.0, 1.0, 10.0) < 0.0
        assert get_easing("BackOut")(8.0, 0.0, 1.0, 10.0) > 1.0

    def test_negative_change(self):
        curve = get_easing("ExpoOut")
        assert curve(0.0, 1.0, -1.0, 4.0) == pytest.approx(1.0)
        assert curve(4.0, 1.0, -1.0, 4.0) == pytest.approx(0.0)
