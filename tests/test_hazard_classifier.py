import pytest

from road_safety.perception.detection import Detection
from road_safety.risk_assessment.hazard_classifier import (
    CONDITION_NAMES,
    DANGER_CLASSES,
    WARNING_CLASSES,
    Severity,
    classify,
    condition_name,
)


def detection(label):
    return Detection(label, 0.9, (0, 0, 100, 100))


@pytest.mark.parametrize("label, severity, condition", [
    ("dog", Severity.DANGER, "Animal on Road"),
    ("cow", Severity.DANGER, "Animal on Road"),
    ("person", Severity.DANGER, "Pedestrian Crossing"),
    ("sheep", Severity.DANGER, "Sheep"),
    ("car", Severity.WARNING, "Slow Moving Traffic"),
    ("truck", Severity.WARNING, "Heavy Vehicle Ahead"),
    ("bus", Severity.WARNING, "Large Vehicle Ahead"),
    ("motorcycle", Severity.WARNING, "Two Wheeler Ahead"),
    ("bicycle", Severity.WARNING, "Cyclist Ahead"),
    ("traffic light", Severity.WARNING, "Traffic Signal Ahead"),
    ("stop sign", Severity.WARNING, "Stop Sign"),
    ("pothole", Severity.WARNING, "Pothole"),
    ("bench", Severity.SAFE, "Bench"),
    ("fire hydrant", Severity.SAFE, "Fire hydrant"),
])
def test_classification_table(label, severity, condition):
    assert classify(detection(label)) == (severity, condition)


def test_label_is_lower_cased():
    assert classify(detection("Dog")) == (Severity.DANGER, "Animal on Road")
    assert classify(detection("CAR")) == (Severity.WARNING, "Slow Moving Traffic")


def test_substring_matching_classifies_compound_labels():
    assert classify(detection("bulldog")) == (Severity.DANGER, "Bulldog")
    assert classify(detection("traffic cone")) == (Severity.WARNING, "Traffic cone")


def test_danger_takes_priority_over_warning():
    assert classify(detection("dog in car"))[0] == Severity.DANGER


def test_exact_matching():
    assert classify(detection("bulldog"), match="exact") == (Severity.SAFE, "Bulldog")
    assert classify(detection("dog"), match="exact") == (Severity.DANGER, "Animal on Road")


def test_synthetic_detection_is_road_clear():
    marker = Detection("road clear", 0.85, (0, 0, 10, 10), synthetic=True)
    assert classify(marker) == (Severity.SAFE, "Road Clear")


def test_tables_do_not_overlap():
    assert not set(DANGER_CLASSES) & set(WARNING_CLASSES)


def test_condition_name_fallback():
    assert condition_name("horse") == CONDITION_NAMES["horse"]
    assert condition_name("kite") == "Kite"
    assert condition_name("") == ""


def test_severity_order():
    assert Severity.SAFE < Severity.WARNING < Severity.DANGER
    assert max(Severity) == Severity.DANGER
    assert Severity.WARNING.label == "warning"


def test_classification_is_deterministic():
    first = classify(detection("horse"))
    second = classify(detection("horse"))
    assert first == second
