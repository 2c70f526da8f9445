"""
Selects the single dominant detection of a frame.

Low-confidence, ignored, off-centre and tiny detections are discarded; of what
is left the most confident detection wins. When nothing is left but a road
marker (traffic light, stop sign) was seen, a synthetic "Road Clear" detection
is returned so callers can tell a confirmed clear road from an empty frame.
"""

import logging

from road_safety import config
from road_safety.perception.detection import Detection

logger = logging.getLogger(__name__)

ROAD_CLEAR_LABEL = "road clear"


def filter_detections(detections, geometry, confidence_threshold,
                      ignored_classes=(),
                      zone_width_fraction=0.6,
                      zone_height_fraction=0.6,
                      min_object_area_fraction=config.MIN_OBJECT_AREA_FRACTION,
                      road_marker_classes=config.ROAD_MARKER_CLASSES,
                      road_clear_confidence=config.ROAD_CLEAR_CONFIDENCE):
    """
    Pick the dominant detection of one frame.

    Args:
        detections: List of Detection objects (may be empty or None)
        geometry: FrameGeometry of the frame the detections came from
        confidence_threshold: Minimum confidence (0-1) to keep a detection
        ignored_classes: Labels the system should never react to
        zone_width_fraction: Width of the centre zone as a fraction of the frame width
        zone_height_fraction: Height of the centre zone as a fraction of the frame height
        min_object_area_fraction: Minimum box area as a fraction of the frame area
        road_marker_classes: Labels that confirm a clear road when nothing else survives
        road_clear_confidence: Confidence given to the synthetic "Road Clear" result

    Returns:
        The dominant Detection, a synthetic road-clear Detection, or None
    """
    if not detections:
        return None

    ignored = {label.lower() for label in ignored_classes}
    candidates = []
    for detection in detections:
        if not detection.is_well_formed():
            logger.debug(f"Dropping malformed detection: {detection!r}")
            continue
        if detection.confidence < confidence_threshold:
            continue
        if detection.label in ignored:
            continue
        candidates.append(detection)

    zone_x1, zone_y1, zone_x2, zone_y2 = geometry.center_zone(zone_width_fraction, zone_height_fraction)
    half_width = (zone_x2 - zone_x1) / 2
    half_height = (zone_y2 - zone_y1) / 2
    center_x, center_y = geometry.center
    min_area = geometry.area * min_object_area_fraction

    in_zone = []
    for detection in candidates:
        x, y = detection.center
        # Boundary is exclusive
        if abs(x - center_x) < half_width and abs(y - center_y) < half_height and detection.area >= min_area:
            in_zone.append(detection)

    if not in_zone:
        marker = _find_road_marker(candidates, road_marker_classes)
        if marker is None:
            return None
        logger.debug(f"No hazards in zone, road marker present: {marker!r}")
        return Detection(
            class_name=ROAD_CLEAR_LABEL,
            confidence=road_clear_confidence,
            bbox=marker.bbox,
            synthetic=True
        )

    # max() keeps the first of equal scores
    return max(in_zone, key=lambda d: d.confidence)


def _find_road_marker(detections, road_marker_classes):
    for detection in detections:
        if any(marker in detection.label for marker in road_marker_classes):
            return detection
    return None


class DetectionFilter:
    """
    Detection filter bound to one of the configured filter modes.
    """

    def __init__(self, mode=None):
        """
        Initialize the filter.

        Args:
            mode: Name of an entry in config.FILTER_MODES, or None for the default mode
        """
        self.mode = mode or config.DEFAULT_FILTER_MODE
        if self.mode not in config.FILTER_MODES:
            raise ValueError(f"Unknown filter mode: {self.mode}")

        settings = config.FILTER_MODES[self.mode]
        self.confidence_threshold = settings["confidence_threshold"]
        self.zone_width_fraction = settings["zone_width_fraction"]
        self.zone_height_fraction = settings["zone_height_fraction"]
        self.ignored_classes = tuple(settings.get("ignored_classes", ()))
        self.min_object_area_fraction = getattr(config, "MIN_OBJECT_AREA_FRACTION", 0.05)
        self.road_marker_classes = tuple(getattr(config, "ROAD_MARKER_CLASSES", ()))
        self.road_clear_confidence = getattr(config, "ROAD_CLEAR_CONFIDENCE", 0.85)

        logger.info(f"Detection filter using '{self.mode}' mode "
                    f"(threshold {self.confidence_threshold}, "
                    f"zone {self.zone_width_fraction:.0%} x {self.zone_height_fraction:.0%})")

    def __call__(self, detections, geometry):
        """Return the dominant detection of a frame, or None."""
        return filter_detections(
            detections,
            geometry,
            self.confidence_threshold,
            ignored_classes=self.ignored_classes,
            zone_width_fraction=self.zone_width_fraction,
            zone_height_fraction=self.zone_height_fraction,
            min_object_area_fraction=self.min_object_area_fraction,
            road_marker_classes=self.road_marker_classes,
            road_clear_confidence=self.road_clear_confidence
        )

    def center_zone(self, geometry):
        """Centre zone rectangle (x1, y1, x2, y2) of a frame, used for drawing."""
        return geometry.center_zone(self.zone_width_fraction, self.zone_height_fraction)
