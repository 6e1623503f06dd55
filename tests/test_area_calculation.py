"""Tests for area calculation module."""

import pytest

from floor_plan_fusion.area_calculation import (
    calculate_total_area,
    calculate_total_ocr_area,
    count_rooms_by_type,
    generate_area_report,
    get_room_statistics,
)
from floor_plan_fusion.models import OcrDimensions, RawDetection, RoomType
from floor_plan_fusion.room_classification import classify_room


def _room(room_id, width, height, label="room"):
    detection = RawDetection(
        x=width / 2, y=height / 2, width=width, height=height,
        class_label=label, detection_id=room_id,
    )
    return classify_room(detection, scale_factor=0.1)


def _verified(room, width_m, height_m):
    ocr = OcrDimensions(
        width_m=width_m, height_m=height_m, area_m2=width_m * height_m, verified=True
    )
    return room.model_copy(update={"ocr_dimensions": ocr})


def test_calculate_total_area():
    """Test total area calculation."""
    # 100x100 px at 0.1 ft/px = 100 ft²
    rooms = [_room("a", 100, 100), _room("b", 200, 100), _room("c", 50, 60)]

    assert calculate_total_area(rooms) == pytest.approx(100.0 + 200.0 + 30.0)


def test_calculate_total_area_empty():
    """Test total area of an empty plan."""
    assert calculate_total_area([]) == 0.0


def test_calculate_total_ocr_area():
    """Test that only verified rooms count towards the OCR total."""
    partial = _room("c", 100, 100).model_copy(
        update={"ocr_dimensions": OcrDimensions(width_m=3.0)}
    )
    rooms = [
        _verified(_room("a", 100, 100), 3.0, 4.0),
        _verified(_room("b", 100, 100), 2.0, 2.5),
        partial,
        _room("d", 100, 100),
    ]

    assert calculate_total_ocr_area(rooms) == pytest.approx(17.0)


def test_calculate_total_ocr_area_none_verified():
    """Test that the OCR total is absent without verified rooms."""
    assert calculate_total_ocr_area([_room("a", 100, 100)]) is None
    assert calculate_total_ocr_area([]) is None


def test_count_rooms_by_type():
    """Test counting rooms per type."""
    rooms = [
        _room("a", 100, 100, label="kitchen"),
        _room("b", 100, 100, label="bedroom"),
        _room("c", 100, 100, label="bedroom"),
    ]

    assert count_rooms_by_type(rooms) == {RoomType.KITCHEN: 1, RoomType.BEDROOM: 2}


def test_get_room_statistics():
    """Test room statistics calculation."""
    rooms = [_room("a", 100, 100), _room("b", 200, 100), _room("c", 300, 100)]

    stats = get_room_statistics(rooms)

    assert stats["num_rooms"] == 3
    assert stats["total_area"] == pytest.approx(600.0)
    assert stats["mean_area"] == pytest.approx(200.0)
    assert stats["median_area"] == pytest.approx(200.0)
    assert stats["min_area"] == pytest.approx(100.0)
    assert stats["max_area"] == pytest.approx(300.0)


def test_get_room_statistics_empty():
    """Test statistics with no rooms."""
    assert get_room_statistics([]) == {}


def test_generate_area_report():
    """Test the formatted area report."""
    rooms = [
        _room("small", 100, 100, label="bathroom"),
        _verified(_room("big", 300, 100, label="kitchen"), 9.0, 3.0),
    ]

    report = generate_area_report(rooms, calculate_total_area(rooms))

    assert "FLOOR PLAN ROOM ANALYSIS" in report
    assert "TOTAL" in report
    assert "400.00" in report
    assert "OCR 9.00 x 3.00 m" in report
    # Largest room first
    assert report.index("big") < report.index("small")


def test_generate_area_report_zero_total():
    """Test that a zero total does not divide by zero."""
    report = generate_area_report([_room("a", 0, 0)], 0.0)

    assert "0.0%" in report
