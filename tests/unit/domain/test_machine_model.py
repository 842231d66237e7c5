"""Machine model helpers: health label mapping, serviceability."""

import pytest

from scan_engine.domain.models.machine import HealthStatus, Machine, health_from_label


@pytest.mark.parametrize(
    "label,expected",
    [
        ("P/Breakdown", HealthStatus.REMOVED),
        ("removed from line", HealthStatus.REMOVED),
        ("Breakdown", HealthStatus.BREAKDOWN),
        ("half working", HealthStatus.HALF_WORKING),
        ("Working", HealthStatus.WORKING),
        ("", HealthStatus.WORKING),
        (None, HealthStatus.WORKING),
    ],
)
def test_health_from_label(label, expected):
    assert health_from_label(label) == expected


def test_is_serviceable():
    assert Machine(id="a", name="a").is_serviceable
    assert not Machine(id="a", name="a", operational_status=HealthStatus.REMOVED).is_serviceable
