"""Data models for floor plan fusion."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


class RoomType(str, Enum):
    """Function label of a room."""

    UNKNOWN = "unknown"
    BEDROOM = "bedroom"
    BATHROOM = "bathroom"
    KITCHEN = "kitchen"
    LIVING_ROOM = "living room"
    DINING_ROOM = "dining room"
    HALLWAY = "hallway"
    CLOSET = "closet"
    LAUNDRY = "laundry"
    GARAGE = "garage"
    OFFICE = "office"
    OTHER = "other"


class FurnitureType(str, Enum):
    """Kind of a detected furniture or fixture item."""

    DOOR = "door"
    WINDOW = "window"
    TABLE = "table"
    CHAIR = "chair"
    SOFA = "sofa"
    BED = "bed"
    SINK = "sink"
    TOILET = "toilet"
    BATHTUB = "bathtub"
    STOVE = "stove"
    REFRIGERATOR = "refrigerator"
    CABINET = "cabinet"
    COUNTER = "counter"
    STAIRS = "stairs"
    OTHER = "other"


class ClassificationSource(str, Enum):
    """Which signal decided a room's type.

    Moves one way only: UNCLASSIFIED -> LABEL/GEOMETRY -> FURNITURE.
    """

    UNCLASSIFIED = "unclassified"
    LABEL = "label"
    GEOMETRY = "geometry"
    FURNITURE = "furniture"


class Orientation(str, Enum):
    """Reading direction of a dimension text."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


REFINABLE_ROOM_TYPES = frozenset({RoomType.UNKNOWN, RoomType.OTHER})


class Point(BaseModel):
    """A 2D coordinate in detection-image pixel space."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class BoundingBox(BaseModel):
    """Axis-aligned box; ``x``/``y`` are the box center."""

    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    @property
    def top(self) -> float:
        return self.y - self.height / 2

    @property
    def bottom(self) -> float:
        return self.y + self.height / 2

    @property
    def center(self) -> Point:
        return Point(x=self.x, y=self.y)

    def corners(self) -> List[Point]:
        """Corners in top-left, top-right, bottom-left, bottom-right order."""
        return [
            Point(x=self.left, y=self.top),
            Point(x=self.right, y=self.top),
            Point(x=self.left, y=self.bottom),
            Point(x=self.right, y=self.bottom),
        ]

    def to_polygon(self) -> List[Point]:
        """Rectangle ring in drawing order."""
        return [
            Point(x=self.left, y=self.top),
            Point(x=self.right, y=self.top),
            Point(x=self.right, y=self.bottom),
            Point(x=self.left, y=self.bottom),
        ]


class RawDetection(BaseModel):
    """A single prediction from the image-recognition service."""

    model_config = ConfigDict(populate_by_name=True)

    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)
    confidence: float = 0.0
    class_label: str = Field(default="", alias="class")
    polygon: Optional[List[Point]] = Field(default=None, alias="points")
    class_id: Optional[int] = None
    detection_id: Optional[str] = None

    @property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox(x=self.x, y=self.y, width=self.width, height=self.height)

    def resolved_polygon(self) -> List[Point]:
        """Detection polygon, or the bounding box rectangle when none was sent."""
        if self.polygon:
            return list(self.polygon)
        return self.bounding_box.to_polygon()


class ImageSize(BaseModel):
    """Dimensions of the analysed image."""

    width: int
    height: int


class DetectionResponse(BaseModel):
    """Response envelope of the image-recognition service."""

    predictions: List[RawDetection] = Field(default_factory=list)
    image: Optional[ImageSize] = None


class TextToken(BaseModel):
    """A text token returned by the OCR service."""

    text: str = Field(validation_alias=AliasChoices("text", "description"))
    vertices: List[Point] = Field(
        default_factory=list,
        validation_alias=AliasChoices("vertices", AliasPath("boundingPoly", "vertices")),
    )

    @field_validator("vertices", mode="before")
    @classmethod
    def _fill_missing_coordinates(cls, value):
        # The OCR service leaves out coordinates equal to zero
        if not isinstance(value, list):
            return value
        filled = []
        for vertex in value:
            if isinstance(vertex, dict):
                vertex = {"x": vertex.get("x", 0), "y": vertex.get("y", 0)}
            filled.append(vertex)
        return filled


class RoomDimensions(BaseModel):
    """Pixel and physical measurements of a room."""

    width_px: float
    height_px: float
    area_px: float
    width_phys: float
    height_phys: float
    area_phys: float
    aspect_ratio: float


class OcrDimensions(BaseModel):
    """Room measurements read from dimension text, in meters."""

    width_m: Optional[float] = None
    height_m: Optional[float] = None
    area_m2: Optional[float] = None
    verified: bool = False


class Room(BaseModel):
    """A classified, dimensioned room."""

    id: str
    class_label: str = ""
    confidence: float = 0.0
    polygon: List[Point]  # detected outline, used for containment and distance
    outline: List[Point] = Field(default_factory=list)  # simplified, for display
    bounding_box: BoundingBox
    room_type: RoomType = RoomType.UNKNOWN
    classification_source: ClassificationSource = ClassificationSource.UNCLASSIFIED
    color: str
    dimensions: RoomDimensions
    label_position: Optional[Point] = None
    ocr_dimensions: Optional[OcrDimensions] = None

    @property
    def can_refine(self) -> bool:
        """Whether furniture evidence may still decide this room's type."""
        return (
            self.room_type in REFINABLE_ROOM_TYPES
            and self.classification_source != ClassificationSource.FURNITURE
        )

    def refined_by_furniture(self, room_type: RoomType, color: str) -> "Room":
        """Return a copy typed from furniture evidence.

        Raises:
            ValueError: If the room was already classified with confidence
        """
        if not self.can_refine:
            raise ValueError(
                f"Room {self.id} is already classified as {self.room_type.value} "
                f"({self.classification_source.value})"
            )
        return self.model_copy(
            update={
                "room_type": room_type,
                "color": color,
                "classification_source": ClassificationSource.FURNITURE,
            }
        )


class FurnitureItem(BaseModel):
    """A detected furniture item, optionally linked to its room."""

    id: str
    class_label: str = ""
    confidence: float = 0.0
    bounding_box: BoundingBox
    furniture_type: FurnitureType = FurnitureType.OTHER
    color: str
    assigned_room_id: Optional[str] = None


class DimensionAnnotation(BaseModel):
    """A dimension label read from the floor plan."""

    raw_text: str
    raw_value: float
    unit: str
    value_m: float
    bounding_polygon: List[Point]
    center: Optional[Point] = None
    orientation: Orientation = Orientation.HORIZONTAL


class AnalysisResult(BaseModel):
    """Complete floor plan fusion result."""

    rooms: List[Room]
    furniture: List[FurnitureItem] = Field(default_factory=list)
    dimensions: List[DimensionAnnotation] = Field(default_factory=list)
    scale_factor: float
    total_area_phys: float = 0.0
    total_ocr_area_m2: Optional[float] = None
    image: Optional[ImageSize] = None


# Square feet to square meters
SQ_FEET_TO_SQ_METERS = 0.09290304


@dataclass
class SizeThresholds:
    """Upper bounds of the room size buckets, in physical area units.

    The defaults are square feet and assume a feet-per-pixel scale factor.
    """

    tiny: float = 30.0  # closets
    small: float = 80.0  # bathrooms
    medium: float = 150.0  # bedrooms
    large: float = 250.0  # master bedrooms, dining rooms
    huge: float = 400.0  # living rooms

    @classmethod
    def square_meters(cls) -> "SizeThresholds":
        """Default buckets for a meters-per-pixel scale factor."""
        feet = cls()
        return cls(
            tiny=feet.tiny * SQ_FEET_TO_SQ_METERS,
            small=feet.small * SQ_FEET_TO_SQ_METERS,
            medium=feet.medium * SQ_FEET_TO_SQ_METERS,
            large=feet.large * SQ_FEET_TO_SQ_METERS,
            huge=feet.huge * SQ_FEET_TO_SQ_METERS,
        )


@dataclass
class ClassifierParams:
    """Parameters for size and shape based room classification."""

    size_thresholds: SizeThresholds = field(default_factory=SizeThresholds)
    narrow_aspect_ratio: float = 0.4  # hallways
    square_aspect_ratio: float = 0.85  # dining rooms
    use_geometry_fallback: bool = True
    simplify_tolerance: float = 1.0  # pixels
    simplify_min_points: int = 10


@dataclass
class FusionParams:
    """Parameters for furniture-based room classification."""

    acceptance_threshold: float = 3.0
    min_dining_chairs: int = 3
    dining_chair_bonus: float = 8.0


@dataclass
class DimensionParams:
    """Parameters for OCR dimension interpretation and assignment."""

    min_value_m: float = 0.1
    max_value_m: float = 50.0
    room_tolerance_px: float = 20.0
    skip_first_token: bool = False


@dataclass
class PipelineParams:
    """Parameters for a full analysis run."""

    scale_factor: float = 0.1  # feet per pixel
    classifier: ClassifierParams = field(default_factory=ClassifierParams)
    fusion: FusionParams = field(default_factory=FusionParams)
    dimensions: DimensionParams = field(default_factory=DimensionParams)
