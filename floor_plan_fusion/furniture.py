"""Furniture typing and furniture-to-room assignment."""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .geometry import point_in_polygon
from .models import FurnitureItem, FurnitureType, RawDetection, Room


# Display colors per furniture type
FURNITURE_COLORS: Mapping[FurnitureType, str] = MappingProxyType({
    FurnitureType.DOOR: "#FF5733",          # Red-orange
    FurnitureType.WINDOW: "#33A8FF",        # Light blue
    FurnitureType.TABLE: "#33FF57",         # Light green
    FurnitureType.CHAIR: "#FF33F5",         # Pink
    FurnitureType.SOFA: "#33FFF5",          # Cyan
    FurnitureType.BED: "#5733FF",           # Purple
    FurnitureType.SINK: "#33FFE0",          # Turquoise
    FurnitureType.TOILET: "#F5FF33",        # Yellow
    FurnitureType.BATHTUB: "#338AFF",       # Blue
    FurnitureType.STOVE: "#FF3333",         # Red
    FurnitureType.REFRIGERATOR: "#33FF8A",  # Green
    FurnitureType.CABINET: "#A833FF",       # Violet
    FurnitureType.COUNTER: "#FFB833",       # Orange
    FurnitureType.STAIRS: "#FF8C33",        # Dark orange
    FurnitureType.OTHER: "#AAAAAA",         # Gray
})

# Label substrings per furniture type, checked in order
_LABEL_KEYWORDS = (
    (FurnitureType.DOOR, ("door",)),
    (FurnitureType.WINDOW, ("window",)),
    (FurnitureType.TABLE, ("table", "desk")),
    (FurnitureType.CHAIR, ("chair",)),
    (FurnitureType.SOFA, ("sofa", "couch", "outside_sitting")),
    (FurnitureType.BED, ("bed",)),
    (FurnitureType.SINK, ("sink",)),
    (FurnitureType.TOILET, ("toilet", "wc", "washroom_seat")),
    (FurnitureType.BATHTUB, ("bathtub", "shower")),
    (FurnitureType.STOVE, ("stove", "oven")),
    (FurnitureType.REFRIGERATOR, ("refrigerator", "fridge")),
    (FurnitureType.CABINET, ("cabinet", "wardrobe")),
    (FurnitureType.COUNTER, ("counter",)),
    (FurnitureType.STAIRS, ("stair",)),
)

# Corners of a box that must lie in one room when its center lies in none.
# TODO: revisit once straddling furniture can be compared by overlap area
MIN_CORNERS_IN_ROOM = 2


def map_to_furniture_type(label: Optional[str]) -> FurnitureType:
    """Map a detection class label to a furniture type."""
    if not label:
        return FurnitureType.OTHER

    lower_label = label.lower().strip()
    for furniture_type, keywords in _LABEL_KEYWORDS:
        if any(keyword in lower_label for keyword in keywords):
            return furniture_type

    return FurnitureType.OTHER


def process_furniture_item(detection: RawDetection, index: int = 0) -> FurnitureItem:
    """Convert a raw furniture detection to a FurnitureItem.

    Args:
        detection: Raw furniture detection
        index: Position of the detection, used for the fallback id

    Returns:
        Unassigned FurnitureItem
    """
    furniture_type = map_to_furniture_type(detection.class_label)

    return FurnitureItem(
        id=detection.detection_id or f"furniture_{index}",
        class_label=detection.class_label,
        confidence=detection.confidence,
        bounding_box=detection.bounding_box,
        furniture_type=furniture_type,
        color=FURNITURE_COLORS[furniture_type],
    )


def process_furniture_items(detections: Iterable[RawDetection]) -> List[FurnitureItem]:
    """Convert raw furniture detections, keeping input order."""
    return [process_furniture_item(d, index=i) for i, d in enumerate(detections)]


def find_containing_room(item: FurnitureItem, rooms: Sequence[Room]) -> Optional[Room]:
    """Find the room a furniture item belongs to.

    The item's center is tested first and the first room containing it wins.
    Otherwise the room holding the most box corners wins, provided it holds at
    least ``MIN_CORNERS_IN_ROOM`` of them; on equal counts the room that
    reached the count first wins.

    Args:
        item: Furniture item
        rooms: Rooms in priority order

    Returns:
        The containing room or None
    """
    center = item.bounding_box.center
    for room in rooms:
        if point_in_polygon(center, room.polygon):
            return room

    # Center is in no room, fall back to counting corners
    corner_counts: Dict[str, int] = {}
    max_count = 0
    best_room = None

    for corner in item.bounding_box.corners():
        for room in rooms:
            if point_in_polygon(corner, room.polygon):
                corner_counts[room.id] = corner_counts.get(room.id, 0) + 1

                if corner_counts[room.id] > max_count:
                    max_count = corner_counts[room.id]
                    best_room = room

    if max_count >= MIN_CORNERS_IN_ROOM:
        return best_room

    return None


def assign_furniture_to_rooms(
    furniture: Iterable[FurnitureItem],
    rooms: Sequence[Room],
) -> List[FurnitureItem]:
    """Link each furniture item to its containing room.

    Args:
        furniture: Furniture items
        rooms: Classified rooms in priority order

    Returns:
        New furniture items with ``assigned_room_id`` set where a room was found
    """
    assigned = []

    for item in furniture:
        room = find_containing_room(item, rooms)
        assigned.append(
            item.model_copy(update={"assigned_room_id": room.id if room else None})
        )

    return assigned


def group_furniture_by_room(furniture: Iterable[FurnitureItem]) -> Dict[str, List[FurnitureItem]]:
    """Group assigned furniture by room id; unassigned items are skipped."""
    by_room: Dict[str, List[FurnitureItem]] = {}

    for item in furniture:
        if item.assigned_room_id is not None:
            by_room.setdefault(item.assigned_room_id, []).append(item)

    return by_room


def count_furniture_by_type(furniture: Iterable[FurnitureItem]) -> Dict[FurnitureType, int]:
    """Count furniture items per type."""
    counts: Dict[FurnitureType, int] = {}
    for item in furniture:
        counts[item.furniture_type] = counts.get(item.furniture_type, 0) + 1
    return counts


def count_furniture_by_room(
    furniture: Iterable[FurnitureItem],
) -> Dict[str, Dict[FurnitureType, int]]:
    """Count assigned furniture items per room and type."""
    return {
        room_id: count_furniture_by_type(items)
        for room_id, items in group_furniture_by_room(furniture).items()
    }
