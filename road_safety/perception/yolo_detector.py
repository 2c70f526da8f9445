import asyncio
import logging
import os

import torch
from ultralytics import YOLO

from road_safety import config
from road_safety.model_downloader import ensure_model_exists
from road_safety.perception.detection import Detection

logger = logging.getLogger(__name__)

class ObjectDetector:
    """
    Detects objects in frames using a YOLOv8 model.

    A model that fails to load is not fatal: the detector reports itself as not
    ready and returns no detections until it is reloaded.
    """

    def __init__(self, model_path=None, device=None, confidence=None):
        """
        Initialize the object detector.

        Args:
            model_path: Path to the model file, or None to use the path from config
            device: Torch device string, or None to use cuda when available
            confidence: Raw confidence floor passed to the model
        """
        self.model_path = model_path or config.DETECTION_MODEL
        self.device = device or config.DETECTION_DEVICE or ("cuda" if torch.cuda.is_available() else "cpu")
        self.confidence = confidence if confidence is not None else config.DETECTION_MODEL_CONFIDENCE
        self.model = None

        logger.info(f"Initializing object detector with model: {self.model_path} on {self.device}")
        self.load()

    def load(self):
        """Load (or reload) the YOLO model."""
        try:
            if not os.path.exists(self.model_path):
                logger.warning(f"Model file not found: {self.model_path}")
                ensure_model_exists(self.model_path)

            self.model = YOLO(self.model_path)
            logger.info("Object detection model loaded successfully")
        except Exception as e:
            logger.error(f"Failed to load model: {e}")
            self.model = None
        return self.model is not None

    def is_ready(self):
        """Whether a model is loaded."""
        return self.model is not None

    def detect(self, frame):
        """
        Detect objects in a frame.

        Args:
            frame: Image as numpy array (BGR format from OpenCV)

        Returns:
            List of Detection objects with (x, y, width, height) boxes
        """
        if self.model is None:
            logger.debug("No model available for detection")
            return []

        try:
            results = self.model(frame, conf=self.confidence, device=self.device, verbose=False)[0]

            detections = []
            for x1, y1, x2, y2, confidence, class_id in results.boxes.data.cpu().numpy():
                class_id = int(class_id)
                detections.append(Detection(
                    class_name=results.names[class_id],
                    confidence=float(confidence),
                    bbox=(float(x1), float(y1), float(x2 - x1), float(y2 - y1)),
                    class_id=class_id
                ))

            return detections

        except Exception as e:
            logger.error(f"Error during object detection: {e}")
            return []

    async def detect_async(self, frame):
        """Run detect() in a worker thread so the frame loop can await it."""
        return await asyncio.to_thread(self.detect, frame)
