"""Dimension extraction from OCR text on floor plans."""

import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from .geometry import centroid_approx, distance_to_polygon, is_point_in_or_near
from .models import (
    DimensionAnnotation,
    DimensionParams,
    OcrDimensions,
    Orientation,
    Point,
    Room,
    TextToken,
)

logger = logging.getLogger(__name__)


# A whole token such as "3000", "3.5m", "3,5 m", "12ft" or "12'"
DIMENSION_PATTERN = re.compile(
    r"^\s*(\d+(?:[.,]\d+)?)\s*(mm|cm|m|ft|in|['\"′″])?\s*$",
    re.IGNORECASE,
)

# Meters per unit
UNIT_TO_METERS = {
    "mm": 0.001,
    "cm": 0.01,
    "m": 1.0,
    "ft": 0.3048,
    "in": 0.0254,
}

_UNIT_SYMBOLS = {
    "'": "ft",
    "′": "ft",  # prime
    '"': "in",
    "″": "in",  # double prime
}

# Unitless values at or above this are taken as millimeters, below as meters.
# Values of 100-999 may really be centimeters; the rule is kept as is.
MILLIMETER_INFERENCE_THRESHOLD = 100.0


@dataclass
class DimensionValue:
    """A dimension text interpreted as a length."""

    raw_value: float
    unit: str
    value_m: float


def interpret_dimension_text(text: str) -> Optional[DimensionValue]:
    """Parse a dimension text into a length in meters.

    Architectural drawings often omit the unit:
    - "3000" -> 3000 mm = 3.0 m
    - "3.5" -> 3.5 m

    Args:
        text: Dimension text

    Returns:
        DimensionValue, or None if the text is not a dimension
    """
    if not text:
        return None

    match = DIMENSION_PATTERN.match(text)
    if not match:
        return None

    raw_value = float(match.group(1).replace(",", "."))
    unit = (match.group(2) or "").lower()
    unit = _UNIT_SYMBOLS.get(unit, unit)

    if not unit:
        unit = "mm" if raw_value >= MILLIMETER_INFERENCE_THRESHOLD else "m"

    return DimensionValue(
        raw_value=raw_value,
        unit=unit,
        value_m=raw_value * UNIT_TO_METERS[unit],
    )


def infer_orientation(vertices: Sequence[Point]) -> Orientation:
    """Infer text orientation from the shape of its bounding box.

    Args:
        vertices: Bounding polygon of the text

    Returns:
        HORIZONTAL if the box is wider than tall, otherwise VERTICAL
    """
    if not vertices:
        return Orientation.VERTICAL

    xs = [v.x for v in vertices]
    ys = [v.y for v in vertices]

    width = max(xs) - min(xs)
    height = max(ys) - min(ys)

    return Orientation.HORIZONTAL if width > height else Orientation.VERTICAL


def filter_implausible(
    annotations: Iterable[DimensionAnnotation],
    min_value_m: float = 0.1,
    max_value_m: float = 50.0,
) -> List[DimensionAnnotation]:
    """Drop dimensions outside the range plausible for a floor plan.

    Args:
        annotations: Dimension annotations
        min_value_m: Smallest accepted value in meters
        max_value_m: Largest accepted value in meters

    Returns:
        Annotations within range
    """
    kept = []
    for annotation in annotations:
        if min_value_m <= annotation.value_m <= max_value_m:
            kept.append(annotation)
        else:
            logger.debug(
                "Dropping implausible dimension %r (%.3f m)",
                annotation.raw_text,
                annotation.value_m,
            )
    return kept


def extract_dimensions_from_tokens(
    tokens: Iterable[TextToken],
    params: Optional[DimensionParams] = None,
) -> List[DimensionAnnotation]:
    """Extract dimension annotations from OCR text tokens.

    Args:
        tokens: Text tokens from the OCR service
        params: Dimension parameters

    Returns:
        Plausible dimension annotations, in token order
    """
    params = params or DimensionParams()
    tokens = list(tokens)

    # Some OCR services emit the full page text as the first token
    if params.skip_first_token:
        tokens = tokens[1:]

    annotations = []
    for token in tokens:
        text = token.text.strip()
        value = interpret_dimension_text(text)
        if value is None:
            logger.debug("Ignoring non-dimension text %r", text)
            continue

        annotations.append(
            DimensionAnnotation(
                raw_text=text,
                raw_value=value.raw_value,
                unit=value.unit,
                value_m=value.value_m,
                bounding_polygon=list(token.vertices),
                center=centroid_approx(token.vertices) if token.vertices else None,
                orientation=infer_orientation(token.vertices),
            )
        )

    return filter_implausible(annotations, params.min_value_m, params.max_value_m)


def assign_dimensions_to_rooms(
    annotations: Iterable[DimensionAnnotation],
    rooms: Sequence[Room],
    tolerance: float = 20.0,
) -> Dict[str, List[DimensionAnnotation]]:
    """Assign each dimension to the nearest room around its center.

    Candidate rooms contain the center or lie within ``tolerance`` pixels of
    it; the candidate whose boundary is closest wins, ties going to the
    earlier room.

    Args:
        annotations: Dimension annotations
        rooms: Classified rooms
        tolerance: Maximum distance to a room boundary in pixels

    Returns:
        Annotations per room id; every room id is present
    """
    by_room: Dict[str, List[DimensionAnnotation]] = {room.id: [] for room in rooms}

    for annotation in annotations:
        if annotation.center is None:
            continue

        nearest_room = None
        shortest_distance = math.inf

        for room in rooms:
            if not is_point_in_or_near(annotation.center, room.polygon, tolerance):
                continue

            distance = distance_to_polygon(annotation.center, room.polygon)
            if distance < shortest_distance:
                shortest_distance = distance
                nearest_room = room

        if nearest_room is not None:
            by_room[nearest_room.id].append(annotation)

    return by_room


def update_room_with_ocr_dimensions(
    room: Room,
    annotations: Sequence[DimensionAnnotation],
) -> Room:
    """Attach OCR-read width, height and area to a room.

    The largest horizontal dimension is taken as the width and the largest
    vertical one as the height. Geometric dimensions are left untouched.

    Args:
        room: Room to update
        annotations: Dimensions assigned to the room

    Returns:
        New room with ``ocr_dimensions`` set, or the room itself if there are none
    """
    if not annotations:
        return room

    horizontal = [a for a in annotations if a.orientation == Orientation.HORIZONTAL]
    vertical = [a for a in annotations if a.orientation == Orientation.VERTICAL]

    width = max(a.value_m for a in horizontal) if horizontal else None
    height = max(a.value_m for a in vertical) if vertical else None

    verified = width is not None and height is not None
    ocr = OcrDimensions(
        width_m=width,
        height_m=height,
        area_m2=width * height if verified else None,
        verified=verified,
    )

    return room.model_copy(update={"ocr_dimensions": ocr})


def apply_ocr_dimensions(
    rooms: Sequence[Room],
    annotations: Iterable[DimensionAnnotation],
    tolerance: float = 20.0,
) -> List[Room]:
    """Assign dimensions to rooms and update each room with them.

    Args:
        rooms: Classified rooms
        annotations: Plausible dimension annotations
        tolerance: Maximum distance to a room boundary in pixels

    Returns:
        New list of rooms
    """
    by_room = assign_dimensions_to_rooms(annotations, rooms, tolerance)
    return [update_room_with_ocr_dimensions(room, by_room[room.id]) for room in rooms]
