"""Tests for severity levels."""

import pytest

from telemetry_bridge.events import SeverityLevel, parse_severity


@pytest.mark.parametrize(
    "value,expected",
    [
        ("warn", SeverityLevel.WARN),
        ("WARN", SeverityLevel.WARN),
        ("Critical", SeverityLevel.CRITICAL),
        ("verbose", SeverityLevel.VERBOSE),
        ("bogus", SeverityLevel.INFO),
        ("DEBUG", SeverityLevel.INFO),
        ("", SeverityLevel.INFO),
        (None, SeverityLevel.INFO),
        (3, SeverityLevel.ERROR),
        (42, SeverityLevel.INFO),
        (SeverityLevel.ERROR, SeverityLevel.ERROR),
    ],
)
def test_parse_severity(value, expected):
    assert parse_severity(value) == expected


def test_severity_ordering():
    """Test VERBOSE < INFO < WARN < ERROR < CRITICAL with ordinals 0..4."""
    levels = list(SeverityLevel)
    assert levels == sorted(levels)
    assert [int(level) for level in levels] == [0, 1, 2, 3, 4]
