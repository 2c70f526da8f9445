import math
import numbers

class Detection:
    """Represents an object detection with bounding box and metadata."""

    def __init__(self, class_name, confidence, bbox, class_id=None, synthetic=False):
        """
        Initialize a detection.

        Args:
            class_name: String name of the detected class
            confidence: Detection confidence score (0-1)
            bbox: Bounding box as (x, y, width, height) where (x, y) is the top-left corner
            class_id: Numeric ID of the detected class, if the model provides one
            synthetic: True for results made up by the filter rather than seen by the model
        """
        self.class_name = class_name
        self.confidence = confidence
        self.bbox = bbox
        self.class_id = class_id
        self.synthetic = synthetic

    @property
    def label(self):
        """Normalized (lower-case) class label."""
        return str(self.class_name).strip().lower()

    @property
    def width(self):
        """Width of the bounding box."""
        return self.bbox[2]

    @property
    def height(self):
        """Height of the bounding box."""
        return self.bbox[3]

    @property
    def area(self):
        """Area of the bounding box."""
        return self.width * self.height

    @property
    def center(self):
        """Center point (x, y) of the bounding box."""
        return (
            self.bbox[0] + self.width / 2,
            self.bbox[1] + self.height / 2
        )

    def is_well_formed(self):
        """
        Whether the detection carries a usable confidence and bounding box.

        Returns:
            False for missing, non-numeric, NaN or empty boxes
        """
        try:
            values = list(self.bbox)
        except TypeError:
            return False

        # Numeric strings such as "0.9" do not count
        if not all(isinstance(v, numbers.Real) for v in values + [self.confidence]):
            return False
        values = [float(v) for v in values]
        confidence = float(self.confidence)

        if len(values) != 4:
            return False
        if any(math.isnan(v) or math.isinf(v) for v in values + [confidence]):
            return False
        return values[2] > 0 and values[3] > 0

    def __repr__(self):
        return f"Detection({self.class_name!r}, {self.confidence!r}, {self.bbox!r})"


class FrameGeometry:
    """Width and height of the frame a set of detections came from."""

    def __init__(self, width, height):
        self.width = width
        self.height = height

    @classmethod
    def from_frame(cls, frame):
        """Build the geometry of an image array (height, width[, channels])."""
        height, width = frame.shape[:2]
        return cls(width, height)

    @property
    def area(self):
        return self.width * self.height

    @property
    def center(self):
        return (self.width / 2, self.height / 2)

    def center_zone(self, width_fraction, height_fraction):
        """
        Rectangle centred on the frame covering the given fractions of it.

        Returns:
            Tuple (x1, y1, x2, y2) in pixels
        """
        zone_width = self.width * width_fraction
        zone_height = self.height * height_fraction
        x1 = (self.width - zone_width) / 2
        y1 = (self.height - zone_height) / 2
        return (x1, y1, x1 + zone_width, y1 + zone_height)

    def __eq__(self, other):
        return isinstance(other, FrameGeometry) and (self.width, self.height) == (other.width, other.height)

    def __repr__(self):
        return f"FrameGeometry({self.width}x{self.height})"
