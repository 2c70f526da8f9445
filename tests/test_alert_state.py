import math

import pytest

from road_safety.risk_assessment.alert_state import (
    TripParameters,
    initial_alert,
    reduce_alert,
    stopped_alert,
    suggested_speed,
    time_to_impact,
)
from road_safety.risk_assessment.hazard_classifier import Severity


@pytest.mark.parametrize("target", [0, 10, 20, 39.5, 40, 60, 120, 200])
def test_suggested_speed_table(target):
    assert suggested_speed(Severity.DANGER, target) == 0
    assert suggested_speed(Severity.WARNING, target) == max(20, target * 0.5)
    assert suggested_speed(Severity.SAFE, target) == target


def test_time_to_impact():
    # 72 km/h = 20 m/s
    assert time_to_impact(200, 72) == pytest.approx(10.0)
    assert time_to_impact(10, 36) == pytest.approx(1.0)


def test_time_to_impact_infinite_when_stopped():
    assert math.isinf(time_to_impact(200, 0))
    assert time_to_impact(200, 0) > 0


def test_reduce_alert(trip):
    alert = reduce_alert((Severity.WARNING, "Slow Moving Traffic"), 0.8, trip, 60)

    assert alert.severity == Severity.WARNING
    assert alert.condition == "Slow Moving Traffic"
    assert alert.confidence == 0.8
    assert alert.time_to_impact == pytest.approx(12.0)
    assert alert.suggested_speed == 30
    assert alert.is_warning and not alert.is_critical


def test_reduce_alert_reads_current_trip(trip):
    trip.target_speed = 100
    trip.obstacle_distance = 50

    alert = reduce_alert((Severity.SAFE, "Road Clear"), 0.9, trip, 36)

    assert alert.suggested_speed == 100
    assert alert.time_to_impact == pytest.approx(5.0)


def test_reduce_alert_when_stopped(trip):
    alert = reduce_alert((Severity.DANGER, "Animal on Road"), 0.9, trip, 0)

    assert alert.is_critical
    assert alert.suggested_speed == 0
    assert math.isinf(alert.time_to_impact)


def test_initial_alert():
    alert = initial_alert(TripParameters(target_speed=60, obstacle_distance=200))

    assert alert.severity == Severity.SAFE
    assert alert.condition == "Road Clear"
    assert alert.confidence == 0
    assert alert.suggested_speed == 60


def test_stopped_alert():
    alert = stopped_alert()

    assert alert.severity == Severity.SAFE
    assert alert.condition == "System Stopped"
    assert alert.confidence == 0
    assert math.isinf(alert.time_to_impact)
