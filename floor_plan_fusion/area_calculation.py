"""Area totals and summaries for classified rooms."""

from typing import Dict, Iterable, List, Optional

import numpy as np

from .models import Room, RoomType


def calculate_total_area(rooms: Iterable[Room]) -> float:
    """Calculate total area from all rooms.

    Args:
        rooms: Classified rooms

    Returns:
        Total area in physical units
    """
    total = 0.0
    for room in rooms:
        total += room.dimensions.area_phys
    return total


def calculate_total_ocr_area(rooms: Iterable[Room]) -> Optional[float]:
    """Calculate total area of rooms whose dimensions were verified by OCR.

    Args:
        rooms: Classified rooms

    Returns:
        Total area in square meters, or None if no room is verified
    """
    areas = [
        room.ocr_dimensions.area_m2
        for room in rooms
        if room.ocr_dimensions is not None
        and room.ocr_dimensions.verified
        and room.ocr_dimensions.area_m2 is not None
    ]

    if not areas:
        return None

    return float(sum(areas))


def count_rooms_by_type(rooms: Iterable[Room]) -> Dict[RoomType, int]:
    """Count rooms per room type."""
    counts: Dict[RoomType, int] = {}
    for room in rooms:
        counts[room.room_type] = counts.get(room.room_type, 0) + 1
    return counts


def get_room_statistics(rooms: Iterable[Room]) -> Dict[str, float]:
    """Calculate statistics about room sizes.

    Args:
        rooms: Classified rooms

    Returns:
        Dictionary with statistics
    """
    areas = [room.dimensions.area_phys for room in rooms]

    if not areas:
        return {}

    return {
        "mean_area": float(np.mean(areas)),
        "median_area": float(np.median(areas)),
        "min_area": float(np.min(areas)),
        "max_area": float(np.max(areas)),
        "std_area": float(np.std(areas)),
        "total_area": float(np.sum(areas)),
        "num_rooms": len(areas),
    }


def generate_area_report(rooms: List[Room], total_area: float) -> str:
    """Generate a formatted report of room areas.

    Args:
        rooms: Classified rooms
        total_area: Total floor area in physical units

    Returns:
        Formatted report string
    """
    report_lines = [
        "=" * 60,
        "FLOOR PLAN ROOM ANALYSIS",
        "=" * 60,
        "",
    ]

    # Sort rooms by area (largest first)
    sorted_rooms = sorted(rooms, key=lambda r: r.dimensions.area_phys, reverse=True)

    report_lines.append("ROOM AREAS:")
    report_lines.append("-" * 60)

    for room in sorted_rooms:
        area = room.dimensions.area_phys
        percentage = (area / total_area * 100) if total_area > 0 else 0
        line = f"{room.id:14s} {room.room_type.value:12s}: {area:8.2f} ({percentage:5.1f}%)"

        ocr = room.ocr_dimensions
        if ocr is not None and ocr.verified:
            line += f"  OCR {ocr.width_m:.2f} x {ocr.height_m:.2f} m"

        report_lines.append(line)

    report_lines.extend(["", "-" * 60, f"{'TOTAL':27s}: {total_area:8.2f}", "=" * 60])

    return "\n".join(report_lines)
