"""
Decides when an alert is worth saying out loud.

An announcement is made when the severity changes: entering a warning or a
danger, escalating from warning to danger, and the "all clear" when the road
is safe again. Repeats within the same severity are suppressed.
"""

from dataclasses import replace

from road_safety import config
from road_safety.risk_assessment.hazard_classifier import Severity

MESSAGE_TEMPLATES = {
    Severity.DANGER: "Stop immediately. {condition} ahead.",
    Severity.WARNING: "Caution. {condition}. Reduce speed.",
    Severity.SAFE: "Road clear. Proceed safely.",
}


def should_announce(alert, state, sound_enabled, confidence_threshold=None):
    """
    Whether the alert should be announced this frame.

    Args:
        alert: Alert for this frame
        state: ControlState holding the last announced severity
        sound_enabled: User's voice alert toggle
        confidence_threshold: Minimum alert confidence, defaults to config.ANNOUNCE_CONFIDENCE

    Returns:
        True if the alert should be spoken
    """
    if confidence_threshold is None:
        confidence_threshold = getattr(config, "ANNOUNCE_CONFIDENCE", 0.5)

    if not sound_enabled or alert.confidence < confidence_threshold:
        return False

    return alert.severity != state.last_announced_severity


def announce(alert, state):
    """Record that the alert was announced; returns the updated ControlState."""
    return replace(state, last_announced_severity=alert.severity)


def announcement_text(alert):
    """Spoken message for an alert."""
    return MESSAGE_TEMPLATES[alert.severity].format(condition=alert.condition)
