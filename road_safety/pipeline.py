"""
Per-frame hazard pipeline and the frame loop that drives it.

Each frame: detections -> dominant detection -> severity/condition -> alert ->
speed step -> announcement decision. The loop runs one frame at a time and
only schedules the next frame once the detection model has answered.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Optional

from road_safety import config
from road_safety.control.speed_governor import SpeedGovernor
from road_safety.perception.detection import Detection, FrameGeometry
from road_safety.perception.detection_filter import DetectionFilter
from road_safety.risk_assessment.alert_state import Alert, ControlState, initial_alert, reduce_alert, stopped_alert
from road_safety.risk_assessment.hazard_classifier import classify
from road_safety.risk_assessment.notification_gate import announce, announcement_text, should_announce

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameOutcome:
    """Result of running the pipeline on one frame."""
    alert: Alert
    state: ControlState
    dominant: Optional[Detection] = None
    announcement: Optional[str] = None
    geometry: Optional[FrameGeometry] = None

    @property
    def has_result(self):
        """Whether this frame produced a new alert."""
        return self.dominant is not None


class HazardPipeline:
    """
    Runs the filter, classifier, reducer, governor and notification gate for one frame.
    """

    def __init__(self, detection_filter=None, governor=None, match=None, announce_confidence=None):
        """
        Initialize the pipeline.

        Args:
            detection_filter: DetectionFilter, defaults to the configured mode
            governor: SpeedGovernor, defaults to the configured steps
            match: Hazard label matching mode passed to the classifier
            announce_confidence: Minimum confidence for voice alerts
        """
        self.detection_filter = detection_filter or DetectionFilter()
        self.governor = governor or SpeedGovernor()
        self.match = match
        self.announce_confidence = announce_confidence

    def process_frame(self, detections, geometry, trip, state, previous_alert):
        """
        Process the detections of one frame.

        Args:
            detections: List of Detection objects from the model (may be empty or None)
            geometry: FrameGeometry of the frame
            trip: TripParameters, read as they are now
            state: ControlState from the previous frame
            previous_alert: Alert from the previous frame

        Returns:
            FrameOutcome; alert and state are unchanged when the frame has no dominant detection
        """
        try:
            dominant = self.detection_filter(detections or [], geometry)
            if dominant is None:
                return FrameOutcome(previous_alert, state, geometry=geometry)

            classified = classify(dominant, match=self.match)
            alert = reduce_alert(classified, dominant.confidence, trip, state.current_speed)
            new_state = self.governor.step(state, alert, trip.target_speed)
        except Exception as e:
            logger.error(f"Error processing frame, treating it as empty: {e}")
            return FrameOutcome(previous_alert, state, geometry=geometry)

        announcement = None
        if should_announce(alert, new_state, trip.sound_enabled, self.announce_confidence):
            announcement = announcement_text(alert)
            new_state = announce(alert, new_state)

        return FrameOutcome(alert, new_state, dominant, announcement, geometry)


class DetectionLoop:
    """
    Cancellable repeating task that feeds frames through the hazard pipeline.

    `active` is the single source of truth for whether the loop runs. Stopping
    bumps a generation counter, so a frame whose detection call was still in
    flight is thrown away instead of touching the reset state.
    """

    def __init__(self, frame_source, detection_model, trip, pipeline=None,
                 announcer=None, on_update=None, timeout=None, poll_interval=None):
        """
        Initialize the loop.

        Args:
            frame_source: Object with read() returning the latest frame or None
            detection_model: Object with detect(frame) (sync or async) returning a list of Detection
            trip: TripParameters, mutated by the user while the loop runs
            pipeline: HazardPipeline, defaults to the configured one
            announcer: Callable(text, severity) used for voice alerts
            on_update: Callable(frame, outcome) called after every processed frame
            timeout: Seconds to wait for the detection model, defaults to config
            poll_interval: Seconds to wait when no frame is available yet
        """
        self.frame_source = frame_source
        self.detection_model = detection_model
        self.trip = trip
        self.pipeline = pipeline or HazardPipeline()
        self.announcer = announcer
        self.on_update = on_update
        self.timeout = timeout if timeout is not None else getattr(config, "DETECTION_TIMEOUT_SECONDS", None)
        self.poll_interval = poll_interval if poll_interval is not None else getattr(config, "FRAME_POLL_INTERVAL", 0.05)

        self.active = False
        self.state = self.pipeline.governor.stop()
        self.alert = stopped_alert()
        self._task = None
        self._generation = 0
        self._pending_detection = None

        self._stats = {
            "frames_processed": 0,
            "frames_with_result": 0,
            "detections_total": 0,
            "detection_failures": 0,
            "detections_skipped": 0,
            "frame_errors": 0,
            "announcements": 0,
        }

    def start(self):
        """
        Start ticking. Must be called from a running event loop.

        Returns:
            The asyncio.Task running the loop
        """
        if self.active:
            logger.warning("Detection loop already active")
            return self._task

        self.active = True
        self._generation += 1
        self.state = self.pipeline.governor.start(self.trip.target_speed)
        self.alert = initial_alert(self.trip)
        self._task = asyncio.get_running_loop().create_task(self._run(self._generation))
        logger.info(f"Detection loop started at {self.state.current_speed} km/h")
        return self._task

    def stop(self):
        """Stop ticking and reset speed and alert. Safe to call repeatedly."""
        was_active = self.active
        self.active = False
        self._generation += 1

        task, self._task = self._task, None
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()

        self.state = self.pipeline.governor.stop()
        self.alert = stopped_alert()
        if was_active:
            logger.info("Detection loop stopped")

    async def wait(self):
        """Wait until the loop task finishes (stopped or source exhausted)."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if self._task is task:
                raise

    async def _run(self, generation):
        while self._is_current(generation):
            try:
                await self.tick(generation)
            except Exception as e:
                logger.error(f"Error processing frame: {e}")
                self._stats["frame_errors"] += 1
                await asyncio.sleep(self.poll_interval)
                continue
            # Yield to the host between frames
            await asyncio.sleep(0)

    def _is_current(self, generation):
        return self.active and generation == self._generation

    async def tick(self, generation=None):
        """
        Process a single frame.

        Returns:
            FrameOutcome, or None when there was no frame or the tick went stale
        """
        if generation is None:
            generation = self._generation

        frame = self.frame_source.read()
        if frame is None:
            if getattr(self.frame_source, "finished", False):
                logger.info("Frame source finished")
                self.stop()
                return None
            await asyncio.sleep(self.poll_interval)
            return None

        # Dimensions may change between frames (e.g. a new upload)
        geometry = FrameGeometry.from_frame(frame)
        detections = await self._detect(frame)

        if not self._is_current(generation):
            logger.debug("Discarding frame finished after stop")
            return None

        outcome = self.pipeline.process_frame(detections, geometry, self.trip, self.state, self.alert)
        self.state = outcome.state
        self.alert = outcome.alert

        self._stats["frames_processed"] += 1
        self._stats["detections_total"] += len(detections)
        if outcome.has_result:
            self._stats["frames_with_result"] += 1

        if outcome.announcement:
            self._stats["announcements"] += 1
            logger.info(f"Announcing: {outcome.announcement}")
            if self.announcer is not None:
                self.announcer(outcome.announcement, outcome.alert.severity)

        if self.on_update is not None:
            self.on_update(frame, outcome)

        return outcome

    async def _detect(self, frame):
        """
        Run the detection model; any failure counts as no detections.

        A detection that timed out keeps running in the background (a worker
        thread cannot be interrupted). No new detection starts until it ends,
        frames arriving meanwhile get no detections.
        """
        pending = self._pending_detection
        if pending is not None and not pending.done():
            await asyncio.wait({pending}, timeout=self.timeout)
            if not pending.done():
                logger.debug("Detection model still busy, skipping frame")
                self._stats["detections_skipped"] += 1
                return []

        detect = getattr(self.detection_model, "detect_async", None) or self.detection_model.detect
        try:
            result = detect(frame)
            if inspect.isawaitable(result):
                pending = asyncio.ensure_future(result)
                pending.add_done_callback(_consume_result)
                self._pending_detection = pending
                if self.timeout is not None:
                    result = await asyncio.wait_for(asyncio.shield(pending), self.timeout)
                else:
                    result = await pending
        except asyncio.TimeoutError:
            logger.warning(f"Detection timed out after {self.timeout}s")
            self._stats["detection_failures"] += 1
            return []
        except Exception as e:
            logger.error(f"Detection model failed: {e}")
            self._stats["detection_failures"] += 1
            return []

        return list(result or [])

    def get_stats(self):
        """Loop statistics."""
        return self._stats.copy()


def _consume_result(future):
    # Results of abandoned detections are never awaited
    if not future.cancelled():
        future.exception()


def _current_task():
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
