# Project configuration
import os

LOG_LEVEL = "INFO"

# Path helpers
def model_path(model_name):
    """Return the absolute path to a model file."""
    return os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "models", model_name)

# Logging / storage settings
DATA_DIR = "data"
LOG_FILE = "road_safety.log"

# Video settings
VIDEO_WIDTH = 1280
VIDEO_HEIGHT = 720
FPS = 30
WEBCAM_ID = 0  # Default webcam ID, usually 0 for built-in webcam
FRAME_POLL_INTERVAL = 0.05  # Seconds to wait when the frame source has nothing yet

# Detection model settings
DETECTION_MODEL = model_path("yolov8n.pt")  # Lightweight YOLOv8 nano model (COCO classes)
DETECTION_MODEL_URL = "https://github.com/ultralytics/assets/releases/download/v0.0.0/yolov8n.pt"
DETECTION_DEVICE = None  # None = pick cuda when available, else cpu
DETECTION_MODEL_CONFIDENCE = 0.25  # Raw model floor, the filter applies the real threshold
DETECTION_TIMEOUT_SECONDS = 2.0  # None disables the timeout

# Detection filter modes
# demo: phone/object held up to the camera, the person holding it is ignored
# road: dashcam facing the road, pedestrians are hazards
FILTER_MODES = {
    "demo": {
        "confidence_threshold": 0.65,
        "zone_width_fraction": 0.6,
        "zone_height_fraction": 0.6,
        "ignored_classes": ("person",),
    },
    "road": {
        "confidence_threshold": 0.5,
        "zone_width_fraction": 0.4,
        "zone_height_fraction": 0.6,
        "ignored_classes": (),
    },
}
DEFAULT_FILTER_MODE = "demo"
MIN_OBJECT_AREA_FRACTION = 0.05  # Objects smaller than 5% of the frame are background clutter
ROAD_MARKER_CLASSES = ("traffic light", "stop sign")
ROAD_CLEAR_CONFIDENCE = 0.85
HAZARD_MATCH_MODE = "substring"  # or "exact"

# Trip parameters (user controls)
DEFAULT_TARGET_SPEED = 60  # km/h
TARGET_SPEED_RANGE = (0, 200)
TARGET_SPEED_STEP = 5  # km/h per key press
DEFAULT_OBSTACLE_DISTANCE = 200  # meters
OBSTACLE_DISTANCE_RANGE = (10, 500)
OBSTACLE_DISTANCE_STEP = 10  # meters per key press

# Speed governor settings (km/h per tick)
DANGER_DECEL_STEP = 5.0
WARNING_DECEL_STEP = 2.0
ACCEL_STEP = 1.0
WARNING_SPEED_FLOOR = 20.0
WARNING_SPEED_FACTOR = 0.5

# Speech settings
SPEECH_ENABLED = True
ANNOUNCE_CONFIDENCE = 0.5  # Independent of the detection filter threshold
SPEECH_RATES = {  # words per minute for espeak / say
    "danger": 210,
    "warning": 175,
    "safe": 155,
}

# UI settings
DISPLAY_ENABLED = True
DISPLAY_CENTER_ZONE = True
DISPLAY_DETECTION_BOX = True
WINDOW_NAME = "Smart Road Safety System"


def clamp_trip_value(value, value_range):
    """
    Clamp a user-supplied trip value into its allowed range.

    The control loop does not validate trip parameters, callers clamp them first.
    """
    low, high = value_range
    return max(low, min(high, value))
