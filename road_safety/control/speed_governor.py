import logging

from road_safety import config
from road_safety.risk_assessment.alert_state import ControlState
from road_safety.risk_assessment.hazard_classifier import Severity

logger = logging.getLogger(__name__)

class SpeedGovernor:
    """
    Moves the simulated vehicle speed toward what the current alert allows.

    Braking is faster than accelerating: danger drops the speed by the danger
    step each tick, warnings ease it down to the suggested speed, and a safe
    road lets it creep back up to the target.
    """

    def __init__(self, danger_decel_step=None, warning_decel_step=None, accel_step=None):
        """
        Initialize the governor.

        Args:
            danger_decel_step: km/h removed per tick on danger
            warning_decel_step: km/h removed per tick on warning
            accel_step: km/h added per tick when safe
        """
        self.danger_decel_step = danger_decel_step if danger_decel_step is not None else config.DANGER_DECEL_STEP
        self.warning_decel_step = warning_decel_step if warning_decel_step is not None else config.WARNING_DECEL_STEP
        self.accel_step = accel_step if accel_step is not None else config.ACCEL_STEP

    def start(self, target_speed):
        """State when the system starts: cruising at the target, nothing announced."""
        return ControlState(current_speed=max(0, target_speed), last_announced_severity=None)

    def stop(self):
        """State when the system stops: standing still, nothing announced."""
        return ControlState(current_speed=0, last_announced_severity=None)

    def step(self, state, alert, target_speed):
        """
        Advance the speed by one tick.

        Args:
            state: ControlState before the tick
            alert: Alert for this tick
            target_speed: User's speed cap in km/h, read this tick

        Returns:
            ControlState with the new speed, clamped to [0, target_speed]
        """
        if target_speed <= 0:
            return ControlState(0, state.last_announced_severity)

        speed = state.current_speed
        if alert.severity == Severity.DANGER:
            speed = max(0, speed - self.danger_decel_step)
        elif alert.severity == Severity.WARNING:
            speed = max(alert.suggested_speed, speed - self.warning_decel_step)
        else:
            speed = min(target_speed, speed + self.accel_step)

        speed = max(0, min(target_speed, speed))
        if speed != state.current_speed:
            logger.debug(f"Speed {state.current_speed:.1f} -> {speed:.1f} km/h ({alert.severity.label})")

        return ControlState(speed, state.last_announced_severity)
