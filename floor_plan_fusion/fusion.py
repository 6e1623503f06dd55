"""Room type refinement from the furniture found in each room."""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .furniture import count_furniture_by_type, group_furniture_by_room
from .models import FurnitureItem, FurnitureType, FusionParams, Room, RoomType
from .room_classification import ROOM_COLORS

logger = logging.getLogger(__name__)


# Evidence weight per room type contributed by each furniture item
FURNITURE_EVIDENCE: Mapping[FurnitureType, Tuple[Tuple[RoomType, float], ...]] = MappingProxyType({
    FurnitureType.BED: ((RoomType.BEDROOM, 10.0),),
    FurnitureType.TOILET: ((RoomType.BATHROOM, 10.0),),
    FurnitureType.BATHTUB: ((RoomType.BATHROOM, 8.0),),
    FurnitureType.SINK: ((RoomType.BATHROOM, 3.0), (RoomType.KITCHEN, 2.0)),
    FurnitureType.STOVE: ((RoomType.KITCHEN, 10.0),),
    FurnitureType.REFRIGERATOR: ((RoomType.KITCHEN, 10.0),),
    FurnitureType.COUNTER: ((RoomType.KITCHEN, 5.0),),
    FurnitureType.SOFA: ((RoomType.LIVING_ROOM, 8.0),),
    FurnitureType.TABLE: (
        (RoomType.DINING_ROOM, 5.0),
        (RoomType.KITCHEN, 2.0),
        (RoomType.OFFICE, 2.0),
    ),
    FurnitureType.CABINET: ((RoomType.CLOSET, 3.0), (RoomType.KITCHEN, 2.0)),
})

# Per-chair evidence when the chairs do not form a dining set
CHAIR_EVIDENCE = (
    (RoomType.DINING_ROOM, 1.0),
    (RoomType.OFFICE, 1.0),
    (RoomType.LIVING_ROOM, 0.5),
)


def score_room_types(
    furniture: Iterable[FurnitureItem],
    params: Optional[FusionParams] = None,
) -> Dict[RoomType, float]:
    """Accumulate furniture evidence for every room type.

    Args:
        furniture: Furniture items found in one room
        params: Fusion parameters

    Returns:
        Score per RoomType, in RoomType declaration order
    """
    params = params or FusionParams()
    counts = count_furniture_by_type(furniture)
    scores = {room_type: 0.0 for room_type in RoomType}

    for furniture_type, evidence in FURNITURE_EVIDENCE.items():
        count = counts.get(furniture_type, 0)
        for room_type, weight in evidence:
            scores[room_type] += count * weight

    chairs = counts.get(FurnitureType.CHAIR, 0)
    tables = counts.get(FurnitureType.TABLE, 0)

    # Several chairs around a table make a dining set
    if chairs >= params.min_dining_chairs and tables:
        scores[RoomType.DINING_ROOM] += params.dining_chair_bonus
    else:
        for room_type, weight in CHAIR_EVIDENCE:
            scores[room_type] += chairs * weight

    return scores


def infer_room_type_from_furniture(
    furniture: Sequence[FurnitureItem],
    params: Optional[FusionParams] = None,
) -> RoomType:
    """Infer a room type from the furniture inside a room.

    Args:
        furniture: Furniture items found in one room
        params: Fusion parameters

    Returns:
        Best-scoring RoomType, or UNKNOWN when the evidence is below threshold
    """
    params = params or FusionParams()
    if not furniture:
        return RoomType.UNKNOWN

    scores = score_room_types(furniture, params)

    best_type = RoomType.UNKNOWN
    best_score = 0.0
    for room_type, score in scores.items():
        if score > best_score:
            best_type, best_score = room_type, score

    if best_score < params.acceptance_threshold:
        return RoomType.UNKNOWN

    return best_type


def reclassify_rooms(
    rooms: Iterable[Room],
    furniture_by_room: Mapping[str, Sequence[FurnitureItem]],
    params: Optional[FusionParams] = None,
) -> List[Room]:
    """Type unresolved rooms from their furniture.

    Rooms already typed by label or geometry are returned unchanged, so
    running this twice gives the same result as running it once.

    Args:
        rooms: Classified rooms
        furniture_by_room: Furniture grouped by room id
        params: Fusion parameters

    Returns:
        New list of rooms
    """
    params = params or FusionParams()
    updated = []

    for room in rooms:
        if not room.can_refine:
            updated.append(room)
            continue

        inferred = infer_room_type_from_furniture(furniture_by_room.get(room.id, []), params)
        if inferred == RoomType.UNKNOWN:
            updated.append(room)
            continue

        logger.debug("Room %s refined from furniture: %s", room.id, inferred.value)
        updated.append(room.refined_by_furniture(inferred, ROOM_COLORS[inferred]))

    return updated


def classify_rooms_by_furniture(
    rooms: Iterable[Room],
    furniture: Iterable[FurnitureItem],
    params: Optional[FusionParams] = None,
) -> List[Room]:
    """Group assigned furniture by room, then reclassify the rooms."""
    return reclassify_rooms(rooms, group_furniture_by_room(furniture), params)
