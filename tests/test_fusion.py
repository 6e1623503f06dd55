"""Tests for furniture-based room classification."""

import pytest

from floor_plan_fusion.furniture import assign_furniture_to_rooms, process_furniture_item
from floor_plan_fusion.fusion import (
    classify_rooms_by_furniture,
    infer_room_type_from_furniture,
    reclassify_rooms,
    score_room_types,
)
from floor_plan_fusion.models import (
    ClassificationSource,
    ClassifierParams,
    FusionParams,
    RawDetection,
    RoomType,
)
from floor_plan_fusion.room_classification import ROOM_COLORS, classify_room


def _furniture(*labels, room_id=None):
    items = []
    for i, label in enumerate(labels):
        item = process_furniture_item(
            RawDetection(x=50, y=50, width=10, height=10, class_label=label), index=i
        )
        items.append(item.model_copy(update={"assigned_room_id": room_id}))
    return items


def _room(room_id, label="", geometry=False):
    detection = RawDetection(
        x=50, y=50, width=100, height=100, class_label=label, detection_id=room_id
    )
    params = ClassifierParams(use_geometry_fallback=geometry)
    return classify_room(detection, scale_factor=0.1, params=params)


def test_single_bed_is_bedroom():
    """Test that one bed is enough evidence for a bedroom."""
    assert infer_room_type_from_furniture(_furniture("bed")) == RoomType.BEDROOM


def test_single_chair_is_not_enough():
    """Test that one chair stays below the acceptance threshold."""
    assert infer_room_type_from_furniture(_furniture("chair")) == RoomType.UNKNOWN


def test_no_furniture_is_unknown():
    """Test that an empty room gives no evidence."""
    assert infer_room_type_from_furniture([]) == RoomType.UNKNOWN


@pytest.mark.parametrize(
    "labels, expected",
    [
        (("toilet", "sink"), RoomType.BATHROOM),
        (("bathtub",), RoomType.BATHROOM),
        (("sink",), RoomType.BATHROOM),
        (("stove", "sink"), RoomType.KITCHEN),
        (("refrigerator", "cabinet", "cabinet"), RoomType.KITCHEN),
        (("counter",), RoomType.KITCHEN),
        (("sofa", "chair"), RoomType.LIVING_ROOM),
        (("table", "chair", "chair", "chair"), RoomType.DINING_ROOM),
        (("cabinet",), RoomType.CLOSET),
    ],
)
def test_infer_room_type_from_furniture(labels, expected):
    """Test weighted voting over typical furniture sets."""
    assert infer_room_type_from_furniture(_furniture(*labels)) == expected


def test_score_table_with_few_chairs():
    """Test that two chairs and a table score per chair."""
    scores = score_room_types(_furniture("table", "chair", "chair"))

    assert scores[RoomType.DINING_ROOM] == pytest.approx(7.0)
    assert scores[RoomType.OFFICE] == pytest.approx(4.0)
    assert scores[RoomType.KITCHEN] == pytest.approx(2.0)
    assert scores[RoomType.LIVING_ROOM] == pytest.approx(1.0)


def test_score_dining_set_bonus():
    """Test the dining set bonus replaces per-chair scores."""
    scores = score_room_types(_furniture("table", "chair", "chair", "chair"))

    assert scores[RoomType.DINING_ROOM] == pytest.approx(13.0)
    assert scores[RoomType.OFFICE] == pytest.approx(2.0)
    assert scores[RoomType.LIVING_ROOM] == 0.0


def test_score_ties_go_to_earlier_room_type():
    """Test that equal scores resolve in room type order."""
    # Three chairs without a table: dining 3, office 3
    assert infer_room_type_from_furniture(_furniture("chair", "chair", "chair")) == (
        RoomType.DINING_ROOM
    )


def test_furniture_without_evidence():
    """Test that doors and windows say nothing about the room."""
    assert infer_room_type_from_furniture(_furniture("door", "window")) == RoomType.UNKNOWN


def test_custom_acceptance_threshold():
    """Test that a stricter threshold rejects weak evidence."""
    params = FusionParams(acceptance_threshold=4.0)

    assert infer_room_type_from_furniture(_furniture("cabinet"), params) == RoomType.UNKNOWN
    assert infer_room_type_from_furniture(_furniture("bed"), params) == RoomType.BEDROOM


def test_reclassify_unknown_room():
    """Test that an unknown room is refined by its furniture."""
    room = _room("r1")
    furniture = {"r1": _furniture("bed", room_id="r1")}

    updated = reclassify_rooms([room], furniture)[0]

    assert updated.room_type == RoomType.BEDROOM
    assert updated.color == ROOM_COLORS[RoomType.BEDROOM]
    assert updated.classification_source == ClassificationSource.FURNITURE
    assert room.room_type == RoomType.UNKNOWN


def test_reclassify_keeps_unknown_on_weak_evidence():
    """Test that a room with a single chair stays unknown."""
    room = _room("r1")
    furniture = {"r1": _furniture("chair", room_id="r1")}

    updated = reclassify_rooms([room], furniture)[0]

    assert updated.room_type == RoomType.UNKNOWN
    assert updated.classification_source == ClassificationSource.UNCLASSIFIED


def test_reclassify_other_room():
    """Test that rooms typed OTHER can be refined."""
    room = _room("r1").model_copy(update={"room_type": RoomType.OTHER})
    furniture = {"r1": _furniture("stove", room_id="r1")}

    assert reclassify_rooms([room], furniture)[0].room_type == RoomType.KITCHEN


def test_reclassify_never_overrides_label():
    """Test that labeled rooms ignore contradicting furniture."""
    room = _room("r1", label="kitchen")
    furniture = {"r1": _furniture("bed", room_id="r1")}

    updated = reclassify_rooms([room], furniture)[0]

    assert updated.room_type == RoomType.KITCHEN
    assert updated.classification_source == ClassificationSource.LABEL


def test_reclassify_never_overrides_geometry():
    """Test that geometry-typed rooms ignore contradicting furniture."""
    room = _room("r1", geometry=True)
    furniture = {"r1": _furniture("toilet", room_id="r1")}

    updated = reclassify_rooms([room], furniture)[0]

    assert updated.room_type == room.room_type
    assert updated.classification_source == ClassificationSource.GEOMETRY


def test_reclassify_is_idempotent():
    """Test that running fusion twice equals running it once."""
    rooms = [_room("r1"), _room("r2"), _room("r3", label="bathroom")]
    furniture = {
        "r1": _furniture("bed", room_id="r1"),
        "r2": _furniture("chair", room_id="r2"),
        "r3": _furniture("sofa", room_id="r3"),
    }

    once = reclassify_rooms(rooms, furniture)
    twice = reclassify_rooms(once, furniture)

    assert [r.room_type for r in twice] == [r.room_type for r in once]
    assert [r.room_type for r in once] == [
        RoomType.BEDROOM,
        RoomType.UNKNOWN,
        RoomType.BATHROOM,
    ]


def test_refined_room_cannot_be_refined_again():
    """Test that the refinement transition happens only once."""
    refined = _room("r1").refined_by_furniture(RoomType.BEDROOM, ROOM_COLORS[RoomType.BEDROOM])

    assert not refined.can_refine
    with pytest.raises(ValueError):
        refined.refined_by_furniture(RoomType.OFFICE, ROOM_COLORS[RoomType.OFFICE])


def test_labeled_room_cannot_be_refined():
    """Test that refining a confidently typed room is rejected."""
    with pytest.raises(ValueError):
        _room("r1", label="kitchen").refined_by_furniture(
            RoomType.BEDROOM, ROOM_COLORS[RoomType.BEDROOM]
        )


def test_classify_rooms_by_furniture():
    """Test grouping and reclassification from assigned furniture."""
    rooms = [_room("r1")]
    furniture = assign_furniture_to_rooms(_furniture("toilet", "sink"), rooms)

    updated = classify_rooms_by_furniture(rooms, furniture)

    assert updated[0].room_type == RoomType.BATHROOM
