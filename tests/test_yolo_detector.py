import asyncio

import numpy as np
import pytest

from road_safety.perception.yolo_detector import ObjectDetector


class FakeTensor:
    def __init__(self, rows):
        self.rows = np.array(rows, dtype=np.float32).reshape(-1, 6)

    def cpu(self):
        return self

    def numpy(self):
        return self.rows


class FakeBoxes:
    def __init__(self, rows):
        self.data = FakeTensor(rows)


class FakeResults:
    def __init__(self, rows, names):
        self.boxes = FakeBoxes(rows)
        self.names = names


class FakeModel:
    def __init__(self, rows, names=None):
        self.rows = rows
        self.names = names or {0: "person", 2: "car", 16: "dog"}
        self.calls = []

    def __call__(self, frame, conf, device, verbose):
        self.calls.append((conf, device))
        return [FakeResults(self.rows, self.names)]


class BrokenModel:
    def __call__(self, frame, **kwargs):
        raise RuntimeError("CUDA out of memory")


@pytest.fixture
def detector(monkeypatch):
    monkeypatch.setattr(ObjectDetector, "load", lambda self: False)
    return ObjectDetector(model_path="yolov8n.pt", device="cpu", confidence=0.25)


@pytest.fixture
def frame():
    return np.zeros((720, 1280, 3), dtype=np.uint8)


def test_not_ready_without_model(detector, frame):
    assert not detector.is_ready()
    assert detector.detect(frame) == []


def test_boxes_are_converted_to_corner_and_size(detector, frame):
    detector.model = FakeModel([
        [100, 50, 300, 250, 0.9, 16],
        [500, 300, 900, 600, 0.75, 2],
    ])

    detections = detector.detect(frame)

    assert detector.is_ready()
    assert detector.model.calls == [(0.25, "cpu")]
    assert [d.class_name for d in detections] == ["dog", "car"]
    assert [d.class_id for d in detections] == [16, 2]
    assert detections[0].bbox == (100.0, 50.0, 200.0, 200.0)
    assert detections[1].bbox == (500.0, 300.0, 400.0, 300.0)
    assert detections[0].confidence == pytest.approx(0.9)
    assert all(d.is_well_formed() for d in detections)


def test_empty_result(detector, frame):
    detector.model = FakeModel([])

    assert detector.detect(frame) == []


def test_model_error_returns_no_detections(detector, frame):
    detector.model = BrokenModel()

    assert detector.detect(frame) == []


def test_detect_async_matches_detect(detector, frame):
    detector.model = FakeModel([[100, 50, 300, 250, 0.9, 16]])

    detections = asyncio.run(detector.detect_async(frame))

    assert [(d.class_name, d.bbox) for d in detections] == [("dog", (100.0, 50.0, 200.0, 200.0))]
