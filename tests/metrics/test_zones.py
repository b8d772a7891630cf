"""Tests for training zone calculations."""

import pytest

from training_load.exceptions import InvalidThresholdError
from training_load.metrics.zones import (
    calculate_hr_reserve_zones,
    calculate_hr_zones,
    calculate_pace_zones,
    calculate_power_zones,
    calculate_swim_zones,
    calculate_time_in_zones,
    compute_zones,
    format_pace_per_km,
    get_zone_for_value,
)
from training_load.models.athlete import AthleteThresholds


class TestPowerZones:
    """Tests for Coggan power zones."""

    def test_threshold_zone_for_ftp_250(self):
        """Zone 4 spans 90-105% of FTP."""
        zones = calculate_power_zones(250)
        threshold = zones[3]

        assert threshold.zone == 4
        assert threshold.name == "Threshold"
        assert threshold.min == 225
        assert threshold.max == 262.5

    def test_seven_zones_open_ended(self):
        zones = calculate_power_zones(250)

        assert len(zones) == 7
        assert zones[0].min == 0
        assert zones[-1].max is None
        assert zones[-1].name == "Neuromuscular"

    def test_zone_names_in_order(self):
        names = [z.name for z in calculate_power_zones(300)]
        assert names == [
            "Active Recovery",
            "Endurance",
            "Tempo",
            "Threshold",
            "VO2max",
            "Anaerobic",
            "Neuromuscular",
        ]

    @pytest.mark.parametrize("ftp", [0, -100])
    def test_non_positive_ftp_rejected(self, ftp):
        with pytest.raises(InvalidThresholdError):
            calculate_power_zones(ftp)


class TestHRZones:
    """Tests for LTHR-based heart rate zones."""

    def test_bounds_from_lthr(self):
        zones = calculate_hr_zones(165)

        assert len(zones) == 7
        assert zones[0].max == pytest.approx(133.65)
        assert zones[3].min == pytest.approx(153.45)
        assert zones[3].max == pytest.approx(163.35)
        assert zones[6].min == pytest.approx(174.9)

    def test_names(self):
        zones = calculate_hr_zones(170)
        assert zones[3].name == "SubThreshold"
        assert zones[4].name == "SuperThreshold"


class TestHRReserveZones:
    """Tests for Karvonen heart rate reserve zones."""

    def test_bounds_from_reserve(self):
        """Reserve of 140 bpm: each zone spans 14 bpm from 50% up to max HR."""
        zones = calculate_hr_reserve_zones(190, 50)

        assert [(z.min, z.max) for z in zones] == [
            (120, 134),
            (134, 148),
            (148, 162),
            (162, 176),
            (176, 190),
        ]
        assert [z.name for z in zones] == ["Recovery", "Aerobic", "Tempo", "Threshold", "VO2max"]

    def test_contiguous(self):
        zones = calculate_hr_reserve_zones(187, 48)
        for lower, upper in zip(zones, zones[1:]):
            assert lower.max == upper.min

    @pytest.mark.parametrize("max_hr,resting_hr", [(0, 50), (190, -1), (60, 60), (55, 60)])
    def test_invalid_values_rejected(self, max_hr, resting_hr):
        with pytest.raises(InvalidThresholdError):
            calculate_hr_reserve_zones(max_hr, resting_hr)


class TestPaceZones:
    """Tests for running pace and swim zones."""

    def test_pace_bounds_are_speed_multiples(self):
        """Higher zones are faster speeds."""
        zones = calculate_pace_zones(4.0)

        assert len(zones) == 6
        assert [z.max for z in zones[:-1]] == pytest.approx([3.0, 3.4, 3.68, 4.0, 4.4])
        assert zones[3].name == "Threshold"

    def test_pace_description_in_min_per_km(self):
        zones = calculate_pace_zones(4.0)
        assert "4:32-4:10/km" in zones[3].description

    def test_swim_zones(self):
        zones = calculate_swim_zones(1.25)

        assert len(zones) == 5
        assert zones[-1].max is None
        assert all("/100m" in z.description for z in zones)

    def test_format_pace(self):
        assert format_pace_per_km(4.0) == "4:10"
        assert format_pace_per_km(0) == "--:--"


class TestZoneContiguity:
    """Zones must tile [0, inf) with no gaps or overlaps."""

    @pytest.mark.parametrize(
        "calculator,threshold",
        [
            (calculate_hr_zones, 165),
            (calculate_hr_zones, 181.3),
            (calculate_power_zones, 250),
            (calculate_power_zones, 317),
            (calculate_pace_zones, 3.87),
            (calculate_swim_zones, 1.43),
        ],
    )
    def test_contiguous(self, calculator, threshold):
        zones = calculator(threshold)

        assert zones[0].min == 0
        assert zones[-1].max is None
        for lower, upper in zip(zones, zones[1:]):
            assert lower.max == upper.min
            assert lower.min < lower.max


class TestComputeZones:
    """Tests for computing every domain from athlete thresholds."""

    def test_missing_thresholds_are_null(self):
        tables = compute_zones(AthleteThresholds(ftp=250))

        assert tables["hr"] is None
        assert tables["pace"] is None
        assert tables["swim"] is None
        assert tables["hr_reserve"] is None
        assert len(tables["power"]) == 7

    def test_zero_threshold_treated_as_missing(self):
        tables = compute_zones(AthleteThresholds(lthr=0, ftp=200))
        assert tables["hr"] is None

    def test_all_domains(self):
        tables = compute_zones(
            AthleteThresholds(ftp=250, lthr=165, threshold_pace=4.0, css=1.3, max_hr=190, resting_hr=50)
        )
        assert {k: len(v) for k, v in tables.items()} == {
            "hr": 7,
            "hr_reserve": 5,
            "power": 7,
            "pace": 6,
            "swim": 5,
        }

    def test_hr_reserve_needs_both_values(self):
        assert compute_zones(AthleteThresholds(max_hr=190))["hr_reserve"] is None
        assert compute_zones(AthleteThresholds(resting_hr=50))["hr_reserve"] is None


class TestZoneClassification:
    """Tests for classifying samples into zones."""

    def test_lower_bound_inclusive(self):
        zones = calculate_power_zones(250)

        assert get_zone_for_value(225, zones) == 4
        assert get_zone_for_value(224.99, zones) == 3

    def test_top_zone_open(self):
        zones = calculate_power_zones(250)
        assert get_zone_for_value(1500, zones) == 7

    def test_negative_value(self):
        assert get_zone_for_value(-1, calculate_power_zones(250)) == 0

    def test_time_in_zones(self):
        zones = calculate_power_zones(250)
        samples = [100, 200, 250, 0, None, 400]

        distribution = calculate_time_in_zones(samples, zones, sample_seconds=1.0)
        by_zone = {d["zone"]: d for d in distribution}

        assert by_zone[1]["seconds"] == 1.0
        assert by_zone[1]["percentage"] == 25.0
        assert by_zone[3]["seconds"] == 1.0
        assert by_zone[4]["seconds"] == 1.0
        assert by_zone[7]["seconds"] == 1.0
        assert by_zone[2]["percentage"] == 0.0

    def test_time_in_zones_without_samples(self):
        distribution = calculate_time_in_zones([], calculate_hr_zones(160))
        assert all(d["percentage"] == 0.0 for d in distribution)
