"""Tests for update-time estimation and elapsed-time formatting."""

from datetime import timedelta

import pytest

from srsglass.analysis.estimator import (
    DEFAULT_MAJOR_LENGTH,
    DEFAULT_MINOR_LENGTH,
    ElapsedTime,
    decompose_seconds,
    elapsed_number_format,
    estimate,
    format_elapsed,
    progress,
    validate_precision,
)
from srsglass.errors import InvalidConfigurationError, MissingAggregateError


# ---------------------------------------------------------------------------
# Progress and predicted seconds
# ---------------------------------------------------------------------------

class TestEstimate:
    """progress = N / T, predicted = progress * window."""

    def test_halfway_scenario(self):
        est = estimate(500, 1000, major_length=3600, minor_length=3600)
        assert est.progress == 0.5
        assert est.major_seconds == 1800.0
        assert format_elapsed(est.major_seconds) == "0:30:00"

    def test_first_region_is_zero(self):
        est = estimate(0, 1000)
        assert est.progress == 0.0
        assert est.major_seconds == 0.0
        assert est.minor_seconds == 0.0

    def test_default_window_lengths(self):
        est = estimate(1, 2)
        assert est.major_seconds == DEFAULT_MAJOR_LENGTH / 2
        assert est.minor_seconds == DEFAULT_MINOR_LENGTH / 2

    def test_double_precision_at_low_population(self):
        # Integer or single-precision math loses the fraction here
        est = estimate(1, 3, major_length=5350, minor_length=3550)
        assert est.major_seconds == pytest.approx(5350 / 3, rel=1e-15)
        assert est.minor_seconds == pytest.approx(3550 / 3, rel=1e-15)

    def test_progress_in_unit_interval_and_monotone(self):
        pops = [3, 17, 0, 250, 1, 1, 9000, 42]
        total = sum(pops)
        before = 0
        previous = -1.0
        for pop in pops:
            est = estimate(before, total, major_length=5350, minor_length=3550)
            assert 0.0 <= est.progress < 1.0
            assert est.major_seconds >= previous
            previous = est.major_seconds
            before += pop

    def test_zero_total_is_missing_aggregate(self):
        with pytest.raises(MissingAggregateError):
            estimate(0, 0)

    def test_progress_rejects_negative_total(self):
        with pytest.raises(MissingAggregateError):
            progress(0, -5)


# ---------------------------------------------------------------------------
# Decomposition
# ---------------------------------------------------------------------------

class TestDecomposeSeconds:
    """h:mm:ss.fff split with unbounded hours."""

    def test_round_trip_example(self):
        assert format_elapsed(3661.5, precision=1) == "1:01:01.5"

    def test_components(self):
        t = decompose_seconds(3661.25, precision=2)
        assert t == ElapsedTime(hours=1, minutes=1, seconds=1, fraction=25, precision=2)

    def test_precision_zero_has_no_fraction(self):
        assert format_elapsed(59.2, precision=0) == "0:00:59"

    def test_fraction_padded(self):
        assert format_elapsed(5.007, precision=3) == "0:00:05.007"

    def test_hours_exceed_24(self):
        assert format_elapsed(25 * 3600 + 61, precision=0) == "25:01:01"
        assert format_elapsed(100 * 3600, precision=0) == "100:00:00"

    def test_rounding_carries_into_next_minute(self):
        assert format_elapsed(59.9996, precision=3) == "0:01:00.000"

    def test_rounding_at_precision_zero_carries(self):
        assert format_elapsed(3599.6, precision=0) == "1:00:00"

    def test_to_timedelta(self):
        t = decompose_seconds(3661.5, precision=1)
        assert t.to_timedelta() == timedelta(hours=1, minutes=1, seconds=1, milliseconds=500)

    def test_total_seconds(self):
        assert decompose_seconds(1800.25, precision=2).total_seconds() == pytest.approx(1800.25)

    def test_negative_offset_rejected(self):
        with pytest.raises(ValueError):
            decompose_seconds(-1.0)

    @pytest.mark.parametrize("precision", [-1, 4, 10])
    def test_precision_out_of_range(self, precision):
        with pytest.raises(InvalidConfigurationError):
            decompose_seconds(10.0, precision=precision)


# ---------------------------------------------------------------------------
# Precision and number formats
# ---------------------------------------------------------------------------

class TestPrecision:
    """Sub-second precision is 0-3 digits."""

    @pytest.mark.parametrize("precision", [0, 1, 2, 3])
    def test_valid_precisions(self, precision):
        assert validate_precision(precision) == precision

    def test_non_integer_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            validate_precision(1.5)

    def test_bool_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            validate_precision(True)

    @pytest.mark.parametrize("precision,expected", [
        (0, "[h]:mm:ss"),
        (1, "[h]:mm:ss.0"),
        (2, "[h]:mm:ss.00"),
        (3, "[h]:mm:ss.000"),
    ])
    def test_elapsed_number_format(self, precision, expected):
        assert elapsed_number_format(precision) == expected

    def test_number_format_rejects_precision_four(self):
        with pytest.raises(InvalidConfigurationError):
            elapsed_number_format(4)
