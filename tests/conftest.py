import numpy as np
import pytest

from road_safety.perception.detection import Detection, FrameGeometry
from road_safety.risk_assessment.alert_state import TripParameters


def centered(class_name, confidence, geometry, area_fraction=0.1, offset=(0, 0)):
    """Square detection centred on the frame (plus offset) covering area_fraction of it."""
    side = (geometry.area * area_fraction) ** 0.5
    cx, cy = geometry.center
    cx += offset[0]
    cy += offset[1]
    return Detection(class_name, confidence, (cx - side / 2, cy - side / 2, side, side))


@pytest.fixture
def geometry():
    return FrameGeometry(1280, 720)


@pytest.fixture
def trip():
    return TripParameters(target_speed=60, obstacle_distance=200, sound_enabled=True)


@pytest.fixture
def frame():
    return np.zeros((720, 1280, 3), dtype=np.uint8)
