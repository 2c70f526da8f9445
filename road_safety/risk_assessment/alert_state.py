import math
from dataclasses import dataclass
from typing import Optional

from road_safety import config
from road_safety.risk_assessment.hazard_classifier import Severity


@dataclass(frozen=True)
class Alert:
    """The alert shown to the driver for the latest frame with a result."""
    severity: Severity
    condition: str
    confidence: float
    time_to_impact: float  # seconds, math.inf when not moving
    suggested_speed: float  # km/h

    @property
    def is_critical(self):
        """Whether this alert demands an immediate stop."""
        return self.severity == Severity.DANGER

    @property
    def is_warning(self):
        """Whether this alert asks the driver to slow down."""
        return self.severity == Severity.WARNING


@dataclass
class TripParameters:
    """User controls, mutable at any time and read on every tick."""
    target_speed: float = config.DEFAULT_TARGET_SPEED  # km/h
    obstacle_distance: float = config.DEFAULT_OBSTACLE_DISTANCE  # meters
    sound_enabled: bool = config.SPEECH_ENABLED


@dataclass(frozen=True)
class ControlState:
    """Speed and announcement state carried from one frame to the next."""
    current_speed: float = 0.0  # km/h
    last_announced_severity: Optional[Severity] = None  # None until something was announced


def suggested_speed(severity, target_speed):
    """
    Speed the driver should hold for a given severity.

    Args:
        severity: Severity of the alert
        target_speed: User's speed cap in km/h

    Returns:
        0 for danger, max(20, half the target) for warning, the target when safe
    """
    if severity == Severity.DANGER:
        return 0
    if severity == Severity.WARNING:
        floor = getattr(config, "WARNING_SPEED_FLOOR", 20.0)
        factor = getattr(config, "WARNING_SPEED_FACTOR", 0.5)
        return max(floor, target_speed * factor)
    return target_speed


def time_to_impact(obstacle_distance, current_speed):
    """
    Seconds until the obstacle is reached at the current speed.

    Args:
        obstacle_distance: Distance to the obstacle in meters
        current_speed: Vehicle speed in km/h

    Returns:
        Time in seconds, math.inf when the vehicle is not moving
    """
    if current_speed <= 0:
        return math.inf
    return obstacle_distance / (current_speed * 1000 / 3600)


def reduce_alert(classified, confidence, trip, current_speed):
    """
    Build the alert for a classified detection.

    Args:
        classified: Tuple (Severity, condition) from the hazard classifier
        confidence: Confidence of the dominant detection
        trip: TripParameters read for this tick
        current_speed: Speed in km/h before this tick's adjustment

    Returns:
        Alert
    """
    severity, condition = classified
    return Alert(
        severity=severity,
        condition=condition,
        confidence=confidence,
        time_to_impact=time_to_impact(trip.obstacle_distance, current_speed),
        suggested_speed=suggested_speed(severity, trip.target_speed)
    )


def initial_alert(trip):
    """Alert shown when the system starts, before the first detection."""
    return reduce_alert((Severity.SAFE, "Road Clear"), 0.0, trip, trip.target_speed)


def stopped_alert():
    """Alert shown while the system is stopped."""
    return Alert(
        severity=Severity.SAFE,
        condition="System Stopped",
        confidence=0.0,
        time_to_impact=math.inf,
        suggested_speed=0
    )
