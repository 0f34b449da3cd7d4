"""Tests for area unit conversion and display."""

import pytest

from farmhand.core import units


class TestAreaConversion:
    """Tests for area conversions."""

    def test_square_meters_to_hectares(self):
        """Hectares are square meters over 10,000."""
        assert units.square_meters_to_hectares(25_000) == 2.5

    def test_hectares_to_acres(self):
        """One hectare is about 2.47 acres."""
        assert units.hectares_to_acres(1.0) == pytest.approx(2.4711, rel=1e-4)


class TestDisplay:
    """Tests for display formatting in both unit systems."""

    def test_metric_area(self, monkeypatch):
        """Metric areas show in hectares."""
        monkeypatch.setattr(units.settings, "display_units", "metric")
        assert units.format_area(123_400) == "12.3 ha"
        assert not units.is_imperial()

    def test_imperial_area(self, monkeypatch):
        """Imperial areas show in acres."""
        monkeypatch.setattr(units.settings, "display_units", "imperial")
        assert units.format_area(10_000) == "2.5 ac"
        assert units.is_imperial()

    def test_metric_stocking_rate(self, monkeypatch):
        """Metric rates show per hectare."""
        monkeypatch.setattr(units.settings, "display_units", "metric")
        assert units.format_stocking_rate(12.34) == "12.3 DSE/ha"

    def test_imperial_stocking_rate(self, monkeypatch):
        """10 DSE/ha is about 4 DSE per acre."""
        monkeypatch.setattr(units.settings, "display_units", "imperial")
        assert units.format_stocking_rate(10.0) == "4.0 DSE/ac"
