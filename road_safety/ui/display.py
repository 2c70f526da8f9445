import math
import logging
from datetime import datetime

import cv2
import numpy as np

from road_safety import config
from road_safety.risk_assessment.hazard_classifier import Severity

logger = logging.getLogger(__name__)

# BGR colors
SEVERITY_COLORS = {
    Severity.SAFE: (94, 197, 34),     # Green
    Severity.WARNING: (8, 193, 255),  # Amber
    Severity.DANGER: (0, 0, 230),     # Red
}
MUTED_COLOR = (150, 150, 150)
ZONE_COLOR = (94, 197, 34)


def banner_text(alert):
    """Headline shown in the alert banner."""
    if alert.severity == Severity.DANGER:
        return f"STOP IMMEDIATELY - {alert.condition.upper()} AHEAD!"
    if alert.severity == Severity.WARNING:
        return f"SLOW DOWN - {alert.condition} Ahead!"
    return "ROAD CLEAR - Proceed Safely"


def format_time_to_impact(seconds):
    """Time-to-impact for display; infinite when the vehicle is standing still."""
    if seconds is None or math.isinf(seconds) or math.isnan(seconds):
        return "--"
    return f"{seconds:.1f}s"


def speed_band(current_speed, max_speed):
    """
    Color band of the speed gauge.

    Returns:
        "idle" when stopped, then "safe" below 40% of the cap, "warning" below 70%, else "danger"
    """
    if current_speed <= 0:
        return "idle"
    if max_speed <= 0:
        return "danger"
    percentage = min(current_speed / max_speed * 100, 100)
    if percentage < 40:
        return "safe"
    if percentage < 70:
        return "warning"
    return "danger"


class DashboardDisplay:
    """
    Shows the camera feed with the centre zone, the dominant detection, the
    alert banner, a speed gauge and a status panel. Keys adjust the trip.
    """

    def __init__(self, trip, detection_filter, window_name=None):
        """
        Initialize the display.

        Args:
            trip: TripParameters changed by the keyboard controls
            detection_filter: DetectionFilter whose centre zone is drawn
            window_name: Name of the display window
        """
        self.trip = trip
        self.detection_filter = detection_filter
        self.window_name = window_name or config.WINDOW_NAME
        self.quit_requested = False

        cv2.namedWindow(self.window_name, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(self.window_name, config.VIDEO_WIDTH, config.VIDEO_HEIGHT)

        logger.info("Display initialized")

    def update(self, frame, outcome, current_speed):
        """
        Draw one frame and handle keyboard input.

        Args:
            frame: Image frame
            outcome: FrameOutcome for the frame
            current_speed: Speed after this frame's adjustment
        """
        if frame is None:
            return

        display_frame = frame.copy()

        if config.DISPLAY_CENTER_ZONE and outcome.geometry is not None:
            x1, y1, x2, y2 = self.detection_filter.center_zone(outcome.geometry)
            cv2.rectangle(display_frame, (int(x1), int(y1)), (int(x2), int(y2)), ZONE_COLOR, 3)

        if config.DISPLAY_DETECTION_BOX and outcome.dominant is not None and not outcome.dominant.synthetic:
            self._draw_detection(display_frame, outcome.dominant, outcome.alert.severity)

        self._draw_banner(display_frame, outcome.alert)
        self._draw_speed(display_frame, current_speed)
        self._draw_status(display_frame, outcome.alert)

        cv2.imshow(self.window_name, display_frame)
        self.handle_key(cv2.waitKey(1) & 0xFF)

    def handle_key(self, key):
        """Apply a keyboard control to the trip parameters."""
        if key == ord('q'):
            self.quit_requested = True
        elif key in (ord('+'), ord('=')):
            self.trip.target_speed = config.clamp_trip_value(
                self.trip.target_speed + config.TARGET_SPEED_STEP, config.TARGET_SPEED_RANGE)
        elif key == ord('-'):
            self.trip.target_speed = config.clamp_trip_value(
                self.trip.target_speed - config.TARGET_SPEED_STEP, config.TARGET_SPEED_RANGE)
        elif key == ord(']'):
            self.trip.obstacle_distance = config.clamp_trip_value(
                self.trip.obstacle_distance + config.OBSTACLE_DISTANCE_STEP, config.OBSTACLE_DISTANCE_RANGE)
        elif key == ord('['):
            self.trip.obstacle_distance = config.clamp_trip_value(
                self.trip.obstacle_distance - config.OBSTACLE_DISTANCE_STEP, config.OBSTACLE_DISTANCE_RANGE)
        elif key == ord('m'):
            self.trip.sound_enabled = not self.trip.sound_enabled
            logger.info(f"Voice alerts {'on' if self.trip.sound_enabled else 'off'}")

    def _draw_detection(self, frame, detection, severity):
        x, y, w, h = (int(v) for v in detection.bbox)
        color = SEVERITY_COLORS[severity]
        cv2.rectangle(frame, (x, y), (x + w, y + h), color, 2)
        cv2.putText(frame, f"{detection.class_name} {detection.confidence:.0%}", (x, max(15, y - 10)),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 2)

    def _draw_banner(self, frame, alert):
        width = frame.shape[1]
        overlay = frame.copy()
        cv2.rectangle(overlay, (0, 0), (width, 70), SEVERITY_COLORS[alert.severity], -1)
        cv2.addWeighted(overlay, 0.8, frame, 0.2, 0, frame)

        text_color = (0, 0, 0) if alert.severity == Severity.WARNING else (255, 255, 255)
        cv2.putText(frame, banner_text(alert), (20, 45),
                    cv2.FONT_HERSHEY_SIMPLEX, 1.0, text_color, 2, cv2.LINE_AA)

    def _draw_speed(self, frame, current_speed):
        height, width = frame.shape[:2]
        max_speed = self.trip.target_speed
        band = speed_band(current_speed, max_speed)
        color = {
            "idle": MUTED_COLOR,
            "safe": SEVERITY_COLORS[Severity.SAFE],
            "warning": SEVERITY_COLORS[Severity.WARNING],
            "danger": SEVERITY_COLORS[Severity.DANGER],
        }[band]

        bar_x, bar_y, bar_w, bar_h = width - 260, height - 60, 240, 16
        fill = 0 if max_speed <= 0 else float(np.clip(current_speed / max_speed, 0, 1))
        cv2.rectangle(frame, (bar_x, bar_y), (bar_x + bar_w, bar_y + bar_h), MUTED_COLOR, 1)
        cv2.rectangle(frame, (bar_x, bar_y), (bar_x + int(bar_w * fill), bar_y + bar_h), color, -1)
        cv2.putText(frame, f"{round(current_speed)} km/h", (bar_x, bar_y - 12),
                    cv2.FONT_HERSHEY_SIMPLEX, 1.0, color, 2, cv2.LINE_AA)
        cv2.putText(frame, f"Max: {max_speed} km/h", (bar_x, bar_y + bar_h + 18),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)

    def _draw_status(self, frame, alert):
        height = frame.shape[0]
        lines = [
            f"Condition: {alert.condition}",
            f"Confidence: {alert.confidence * 100:.1f}%",
            f"Time to Impact: {format_time_to_impact(alert.time_to_impact)}",
            f"Suggested Speed: {alert.suggested_speed:g} km/h",
            f"Distance: {self.trip.obstacle_distance} m  Voice: {'on' if self.trip.sound_enabled else 'off'}",
        ]
        y = height - 20 - 22 * len(lines)
        for line in lines:
            cv2.putText(frame, line, (10, y), cv2.FONT_HERSHEY_SIMPLEX, 0.55, (255, 255, 255), 1, cv2.LINE_AA)
            y += 22

        timestamp = datetime.now().strftime("%H:%M:%S")
        cv2.putText(frame, timestamp, (10, height - 8), cv2.FONT_HERSHEY_SIMPLEX, 0.5, MUTED_COLOR, 1)

    def close(self):
        """Close the display window."""
        cv2.destroyWindow(self.window_name)
