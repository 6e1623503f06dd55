"""Room classification from detection geometry and class labels."""

from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from .geometry import aspect_ratio, centroid_approx, polygon_area, simplify_polygon
from .models import (
    ClassificationSource,
    ClassifierParams,
    RawDetection,
    Room,
    RoomDimensions,
    RoomType,
)


# Display colors per room type
ROOM_COLORS: Mapping[RoomType, str] = MappingProxyType({
    RoomType.BEDROOM: "#4f46e5",      # Indigo
    RoomType.BATHROOM: "#0ea5e9",     # Sky blue
    RoomType.KITCHEN: "#16a34a",      # Green
    RoomType.LIVING_ROOM: "#f97316",  # Orange
    RoomType.DINING_ROOM: "#8b5cf6",  # Violet
    RoomType.HALLWAY: "#94a3b8",      # Slate
    RoomType.CLOSET: "#a1a1aa",       # Zinc
    RoomType.LAUNDRY: "#2dd4bf",      # Teal
    RoomType.GARAGE: "#737373",       # Neutral gray
    RoomType.OFFICE: "#f43f5e",       # Rose
    RoomType.OTHER: "#a8a29e",        # Stone
    RoomType.UNKNOWN: "#cbd5e1",      # Light slate
})

# Label substrings per room type, checked in order
_LABEL_KEYWORDS = (
    (RoomType.BATHROOM, ("bath", "wc", "toilet")),
    (RoomType.BEDROOM, ("bed",)),
    (RoomType.KITCHEN, ("kit",)),
    (RoomType.LIVING_ROOM, ("living", "lounge")),
    (RoomType.DINING_ROOM, ("dining",)),
    (RoomType.HALLWAY, ("hall", "corridor", "entrance")),
    (RoomType.CLOSET, ("closet", "storage", "wardrobe")),
    (RoomType.LAUNDRY, ("laundry", "utility")),
    (RoomType.GARAGE, ("garage", "parking")),
    (RoomType.OFFICE, ("office", "study")),
)


def identify_room_type_from_label(label: Optional[str]) -> RoomType:
    """Map a detection class label to a room type.

    Args:
        label: Class label from the detection service

    Returns:
        Matching RoomType, UNKNOWN for generic or unrecognised labels
    """
    if not label or not isinstance(label, str):
        return RoomType.UNKNOWN

    lower_label = label.lower().strip()

    # Generic room needs further classification
    if lower_label == "room":
        return RoomType.UNKNOWN

    for room_type, keywords in _LABEL_KEYWORDS:
        if any(keyword in lower_label for keyword in keywords):
            return room_type

    return RoomType.UNKNOWN


def classify_by_geometry(
    area_phys: float,
    ratio: float,
    params: Optional[ClassifierParams] = None,
) -> RoomType:
    """Guess a room type from its physical area and aspect ratio.

    Args:
        area_phys: Room area in physical units
        ratio: Aspect ratio, ``min / max`` of the bounding box sides
        params: Classification parameters

    Returns:
        Estimated RoomType
    """
    params = params or ClassifierParams()
    thresholds = params.size_thresholds

    # Very narrow rooms are likely hallways
    if ratio < params.narrow_aspect_ratio:
        return RoomType.HALLWAY

    if area_phys < thresholds.tiny:
        return RoomType.CLOSET
    if area_phys < thresholds.small:
        return RoomType.BATHROOM
    if area_phys < thresholds.medium:
        return RoomType.BEDROOM
    if area_phys < thresholds.large:
        # Nearly square rooms of this size are usually dining rooms
        if ratio > params.square_aspect_ratio:
            return RoomType.DINING_ROOM
        return RoomType.BEDROOM
    if area_phys < thresholds.huge:
        return RoomType.LIVING_ROOM

    return RoomType.LIVING_ROOM


def classify_room(
    detection: RawDetection,
    scale_factor: float,
    params: Optional[ClassifierParams] = None,
    index: int = 0,
) -> Room:
    """Build a dimensioned, provisionally typed room from a detection.

    Args:
        detection: Raw room detection
        scale_factor: Physical length per pixel
        params: Classification parameters
        index: Position of the detection, used for the fallback id

    Returns:
        Classified Room

    Raises:
        ValueError: If the scale factor is not positive
    """
    if scale_factor <= 0:
        raise ValueError(f"Scale factor must be positive, got {scale_factor}")

    params = params or ClassifierParams()
    polygon = detection.resolved_polygon()

    width_px = detection.width
    height_px = detection.height
    area_px = polygon_area(polygon)
    ratio = aspect_ratio(width_px, height_px)

    dimensions = RoomDimensions(
        width_px=width_px,
        height_px=height_px,
        area_px=area_px,
        width_phys=width_px * scale_factor,
        height_phys=height_px * scale_factor,
        area_phys=area_px * scale_factor * scale_factor,
        aspect_ratio=ratio,
    )

    room_type = identify_room_type_from_label(detection.class_label)
    source = ClassificationSource.LABEL

    if room_type == RoomType.UNKNOWN:
        if params.use_geometry_fallback:
            room_type = classify_by_geometry(dimensions.area_phys, ratio, params)
            source = ClassificationSource.GEOMETRY
        else:
            source = ClassificationSource.UNCLASSIFIED

    # Assignment and area use the detected polygon; only the display outline is reduced
    outline = simplify_polygon(
        polygon,
        params.simplify_tolerance,
        min_points=params.simplify_min_points,
    )

    return Room(
        id=detection.detection_id or f"room_{index}",
        class_label=detection.class_label,
        confidence=detection.confidence,
        polygon=polygon,
        outline=outline,
        bounding_box=detection.bounding_box,
        room_type=room_type,
        classification_source=source,
        color=ROOM_COLORS[room_type],
        dimensions=dimensions,
        label_position=centroid_approx(outline),
    )


def classify_rooms(
    detections: Iterable[RawDetection],
    scale_factor: float,
    params: Optional[ClassifierParams] = None,
) -> List[Room]:
    """Classify every room detection, keeping input order.

    Args:
        detections: Raw room detections
        scale_factor: Physical length per pixel
        params: Classification parameters

    Returns:
        List of classified rooms
    """
    return [
        classify_room(detection, scale_factor, params, index=i)
        for i, detection in enumerate(detections)
    ]
