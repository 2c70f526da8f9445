"""
Maps a detection's class label to a severity and a display condition.
"""

from enum import IntEnum

from road_safety import config


class Severity(IntEnum):
    """Alert urgency tier, ordered SAFE < WARNING < DANGER."""

    SAFE = 0
    WARNING = 1
    DANGER = 2

    @property
    def label(self):
        return self.name.lower()


# Hazard classification tables
DANGER_CLASSES = (
    "animal", "person", "dog", "cat", "horse", "cow", "sheep",
    "fallen tree", "accident", "flood", "roadblock",
)

WARNING_CLASSES = (
    "car", "truck", "bus", "motorcycle", "bicycle",
    "traffic light", "stop sign", "construction",
    "pothole", "debris", "cone",
)

CONDITION_NAMES = {
    # Danger
    "person": "Pedestrian Crossing",
    "animal": "Animal on Road",
    "dog": "Animal on Road",
    "cat": "Animal on Road",
    "horse": "Animal on Road",
    "cow": "Animal on Road",

    # Warning
    "car": "Slow Moving Traffic",
    "truck": "Heavy Vehicle Ahead",
    "bus": "Large Vehicle Ahead",
    "motorcycle": "Two Wheeler Ahead",
    "bicycle": "Cyclist Ahead",
    "traffic light": "Traffic Signal Ahead",
    "stop sign": "Stop Sign",

    # Safe
    "road clear": "Road Clear",
}


def _matches(label, hazards, match):
    if match == "exact":
        return label in hazards
    return any(hazard in label for hazard in hazards)


def condition_name(label):
    """Display name for a label, falling back to the capitalized label."""
    label = label.strip().lower()
    if label in CONDITION_NAMES:
        return CONDITION_NAMES[label]
    return label[:1].upper() + label[1:]


def classify(detection, match=None):
    """
    Classify a detection.

    Args:
        detection: Detection to classify
        match: "substring" (a hazard name anywhere in the label, so "bulldog"
            is an animal) or "exact"; defaults to config.HAZARD_MATCH_MODE

    Returns:
        Tuple (Severity, condition string)
    """
    if detection.synthetic:
        return Severity.SAFE, CONDITION_NAMES["road clear"]

    match = match or getattr(config, "HAZARD_MATCH_MODE", "substring")
    label = detection.label

    # Danger takes priority over warning
    if _matches(label, DANGER_CLASSES, match):
        severity = Severity.DANGER
    elif _matches(label, WARNING_CLASSES, match):
        severity = Severity.WARNING
    else:
        severity = Severity.SAFE

    return severity, condition_name(label)
