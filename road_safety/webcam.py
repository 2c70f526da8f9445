import os
import cv2
import time
import logging
from threading import Thread, Lock

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp", ".webp")

class WebcamCapture:
    """
    Handles webcam capture with buffering to ensure smooth frame retrieval.
    Uses a separate thread for capture so the frame loop always gets the newest frame.
    """

    def __init__(self, camera_id=0, width=1280, height=720, fps=30):
        """
        Initialize the webcam capture.

        Args:
            camera_id: ID of the webcam (usually 0 for built-in)
            width: Desired frame width
            height: Desired frame height
            fps: Desired frames per second
        """
        self.camera_id = camera_id
        self.width = width
        self.height = height
        self.fps = fps

        self.cap = None
        self.thread = None
        self.frame = None
        self.lock = Lock()
        self.grabbed = False
        self.stopped = False
        self.finished = False
        self.frame_count = 0
        self.start_time = None

    def _open(self):
        cap = cv2.VideoCapture(self.camera_id)
        if not cap.isOpened():
            raise RuntimeError(f"Failed to open webcam with ID {self.camera_id}")

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        cap.set(cv2.CAP_PROP_FPS, self.fps)
        return cap

    def start(self, wait_timeout=5.0):
        """
        Start the capture thread and wait for the first frame.

        Args:
            wait_timeout: Seconds to wait for the first frame before returning anyway
        """
        logger.info(f"Starting capture from {self.describe()}")

        self.cap = self._open()
        self.stopped = False
        self.finished = False

        self.start_time = time.time()
        self.thread = Thread(target=self._update, daemon=True)
        self.thread.start()

        deadline = time.time() + wait_timeout
        while not self.grabbed and not self.stopped and time.time() < deadline:
            time.sleep(0.05)

        return self

    def describe(self):
        return f"webcam {self.camera_id} ({self.width}x{self.height} @ {self.fps}fps)"

    def _update(self):
        """Background thread function to continuously grab frames."""
        while not self.stopped:
            grabbed, frame = self.cap.read()
            if not grabbed:
                self._on_read_failure()
                break

            with self.lock:
                self.frame = frame
                self.grabbed = True
                self.frame_count += 1

    def _on_read_failure(self):
        logger.error("Failed to grab frame from webcam")
        self.finished = True
        self.stopped = True

    def read(self):
        """
        Return the current frame.

        Returns:
            Current frame or None if not available
        """
        if self.finished:
            return None
        with self.lock:
            return self.frame if self.grabbed else None

    def get_fps(self):
        """
        Calculate the actual FPS being achieved.

        Returns:
            Actual frames per second
        """
        if self.start_time is None:
            return 0
        elapsed_time = time.time() - self.start_time
        if elapsed_time > 0:
            return self.frame_count / elapsed_time
        return 0

    def stop(self):
        """Stop the capture thread and release resources."""
        self.stopped = True
        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=1.0)

        if self.cap is not None and self.cap.isOpened():
            self.cap.release()

        logger.info("Capture stopped")


class VideoFileSource(WebcamCapture):
    """
    Plays an uploaded video file at its own frame rate.
    read() returns None and `finished` is set once the file ends.
    """

    def __init__(self, path):
        super().__init__(camera_id=path)
        self.path = path

    def _open(self):
        cap = cv2.VideoCapture(self.path)
        if not cap.isOpened():
            raise RuntimeError(f"Failed to open video file {self.path}")

        file_fps = cap.get(cv2.CAP_PROP_FPS)
        if file_fps and file_fps > 0:
            self.fps = file_fps
        return cap

    def describe(self):
        return f"video file {self.path}"

    def _update(self):
        frame_interval = 1.0 / self.fps if self.fps else 0
        while not self.stopped:
            started = time.time()
            grabbed, frame = self.cap.read()
            if not grabbed:
                self._on_read_failure()
                break

            with self.lock:
                self.frame = frame
                self.grabbed = True
                self.frame_count += 1

            # Pace playback to the file's frame rate
            remaining = frame_interval - (time.time() - started)
            if remaining > 0:
                time.sleep(remaining)

    def _on_read_failure(self):
        logger.info(f"End of video file {self.path}")
        self.finished = True
        self.stopped = True


class ImageSource:
    """Serves an uploaded still image as an endless stream of identical frames."""

    def __init__(self, path):
        self.path = path
        self.frame = None
        self.finished = False

    def start(self):
        logger.info(f"Loading image {self.path}")
        self.frame = cv2.imread(self.path)
        if self.frame is None:
            raise RuntimeError(f"Failed to read image {self.path}")
        return self

    def read(self):
        return self.frame

    def stop(self):
        self.frame = None


def open_source(source, width=1280, height=720, fps=30):
    """
    Create a frame source from a command-line value.

    Args:
        source: Webcam ID (int or digit string), or path to an image or video file

    Returns:
        An unstarted WebcamCapture, VideoFileSource or ImageSource
    """
    if isinstance(source, int) or str(source).isdigit():
        return WebcamCapture(camera_id=int(source), width=width, height=height, fps=fps)

    if not os.path.exists(source):
        raise RuntimeError(f"Source not found: {source}")

    if source.lower().endswith(IMAGE_EXTENSIONS):
        return ImageSource(source)
    return VideoFileSource(source)
