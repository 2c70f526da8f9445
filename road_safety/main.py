import asyncio
import logging
import sys
import os

# Import configuration
from . import config

# Import components
from .webcam import open_source
from .perception.detection_filter import DetectionFilter
from .perception.yolo_detector import ObjectDetector
from .pipeline import DetectionLoop, HazardPipeline
from .risk_assessment.alert_state import TripParameters
from .ui.speech_alert import SpeechAlertSystem

logger = logging.getLogger(__name__)


def setup_logging(level=None):
    """Configure logging to the console and to the log file in DATA_DIR."""
    os.makedirs(config.DATA_DIR, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, level or config.LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(stream=sys.stdout),
            logging.FileHandler(os.path.join(config.DATA_DIR, config.LOG_FILE))
        ]
    )


class RoadSafetyApp:
    """
    Main application class wiring the frame source, the detection model, the
    hazard pipeline, voice alerts and the dashboard window together.
    """

    def __init__(self, source=None, mode=None, trip=None, display=None, speech=None):
        """
        Initialize the application and its components.

        Args:
            source: Webcam ID or path to an image/video file
            mode: Detection filter mode name
            trip: Initial TripParameters
            display: Show the dashboard window, defaults to config.DISPLAY_ENABLED
            speech: Speak announcements, defaults to config.SPEECH_ENABLED
        """
        logger.info("Initializing Smart Road Safety System")

        self.trip = trip or TripParameters()
        self.frame_source = open_source(
            config.WEBCAM_ID if source is None else source,
            width=config.VIDEO_WIDTH,
            height=config.VIDEO_HEIGHT,
            fps=config.FPS
        )
        self.detector = ObjectDetector()
        self.detection_filter = DetectionFilter(mode)
        self.pipeline = HazardPipeline(self.detection_filter)

        use_speech = config.SPEECH_ENABLED if speech is None else speech
        self.speech = SpeechAlertSystem() if use_speech else None

        use_display = config.DISPLAY_ENABLED if display is None else display
        self.display = None
        if use_display:
            from .ui.display import DashboardDisplay
            self.display = DashboardDisplay(self.trip, self.detection_filter)

        self.loop = DetectionLoop(
            self.frame_source,
            self.detector,
            self.trip,
            pipeline=self.pipeline,
            announcer=self.speech,
            on_update=self._on_update
        )

    def _on_update(self, frame, outcome):
        if self.display is not None:
            self.display.update(frame, outcome, self.loop.state.current_speed)
            if self.display.quit_requested:
                self.loop.stop()
        elif outcome.has_result:
            alert = outcome.alert
            logger.info(f"{alert.severity.label.upper()}: {alert.condition} "
                        f"({alert.confidence:.0%}) speed {outcome.state.current_speed:.0f} km/h")

    async def run(self):
        """Start the frame source and the detection loop; return when the loop ends."""
        if not self.detector.is_ready():
            logger.warning("Detection model not available, no alerts will be raised until it loads")

        self.frame_source.start()
        try:
            self.loop.start()
            await self.loop.wait()
        finally:
            self.stop()

        stats = self.loop.get_stats()
        logger.info(f"Processed {stats['frames_processed']} frames, "
                    f"{stats['frames_with_result']} with a result, "
                    f"{stats['announcements']} announcements")

    def stop(self):
        """Stop the system and release resources."""
        self.loop.stop()
        self.frame_source.stop()
        if self.speech is not None:
            self.speech.shutdown()
            self.speech = None
        if self.display is not None:
            self.display.close()
            self.display = None


def main(source=None, mode=None, trip=None, display=None, speech=None):
    """Main entry point for the application."""
    app = RoadSafetyApp(source=source, mode=mode, trip=trip, display=display, speech=speech)
    try:
        asyncio.run(app.run())
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
    finally:
        app.stop()
