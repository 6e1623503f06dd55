"""Polygon geometry primitives for room and furniture detections.

Polygons are sequences of points in image-pixel space. Points may be given
as ``Point`` models or plain ``(x, y)`` tuples.
"""

import math
from typing import List, Sequence, Tuple, Union

import numpy as np

from .models import Point

PointLike = Union[Point, Tuple[float, float]]


def _xy(point: PointLike) -> Tuple[float, float]:
    if isinstance(point, Point):
        return point.x, point.y
    return float(point[0]), float(point[1])


def _as_array(polygon: Sequence[PointLike]) -> np.ndarray:
    """Convert a polygon to an (n, 2) float array."""
    if len(polygon) == 0:
        return np.empty((0, 2), dtype=float)
    return np.array([_xy(p) for p in polygon], dtype=float)


def polygon_area(polygon: Sequence[PointLike]) -> float:
    """Calculate polygon area with the Shoelace formula.

    Args:
        polygon: Polygon vertices in order

    Returns:
        Absolute area in square pixels, 0 for fewer than 3 points
    """
    if len(polygon) < 3:
        return 0.0

    pts = _as_array(polygon)
    x, y = pts[:, 0], pts[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)

    return float(abs(np.sum(x * y_next - x_next * y)) / 2.0)


def point_in_polygon(point: PointLike, polygon: Sequence[PointLike]) -> bool:
    """Test whether a point lies inside a polygon (even-odd ray casting).

    Points exactly on an edge may be reported either way.

    Args:
        point: Point to test
        polygon: Polygon vertices

    Returns:
        True if the point is inside
    """
    if len(polygon) < 3:
        return False

    px, py = _xy(point)
    pts = [_xy(p) for p in polygon]

    inside = False
    j = len(pts) - 1
    for i in range(len(pts)):
        xi, yi = pts[i]
        xj, yj = pts[j]
        if (yi > py) != (yj > py):
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < x_cross:
                inside = not inside
        j = i

    return inside


def distance_to_segment(point: PointLike, a: PointLike, b: PointLike) -> float:
    """Distance from a point to the line segment ``a``-``b``.

    Args:
        point: The point
        a: Segment start
        b: Segment end

    Returns:
        Euclidean distance in pixels
    """
    px, py = _xy(point)
    ax, ay = _xy(a)
    bx, by = _xy(b)

    dx, dy = bx - ax, by - ay
    length_sq = dx * dx + dy * dy

    # Degenerate segment
    if length_sq == 0:
        return math.hypot(px - ax, py - ay)

    t = ((px - ax) * dx + (py - ay) * dy) / length_sq
    t = max(0.0, min(1.0, t))

    return math.hypot(px - (ax + t * dx), py - (ay + t * dy))


def distance_to_polygon(point: PointLike, polygon: Sequence[PointLike]) -> float:
    """Minimum distance from a point to any polygon edge.

    The distance is to the boundary, so it is positive for interior points too.

    Args:
        point: The point
        polygon: Polygon vertices

    Returns:
        Distance in pixels, ``inf`` for an empty polygon
    """
    if len(polygon) == 0:
        return math.inf

    pts = _as_array(polygon)
    p = np.array(_xy(point), dtype=float)

    starts = pts
    ends = np.roll(pts, -1, axis=0)
    edges = ends - starts

    length_sq = np.sum(edges * edges, axis=1)
    safe_length_sq = np.where(length_sq == 0, 1.0, length_sq)
    t = np.sum((p - starts) * edges, axis=1) / safe_length_sq
    t = np.clip(np.where(length_sq == 0, 0.0, t), 0.0, 1.0)

    closest = starts + edges * t[:, np.newaxis]
    distances = np.hypot(closest[:, 0] - p[0], closest[:, 1] - p[1])

    return float(np.min(distances))


def is_point_in_or_near(
    point: PointLike,
    polygon: Sequence[PointLike],
    tolerance: float,
) -> bool:
    """Check if a point is inside a polygon or within ``tolerance`` of its boundary."""
    if point_in_polygon(point, polygon):
        return True
    return distance_to_polygon(point, polygon) <= tolerance


def centroid_approx(polygon: Sequence[PointLike]) -> Point:
    """Mean of the polygon vertices.

    This is not the area-weighted centroid; use it for label placement only.
    """
    if len(polygon) == 0:
        return Point(x=0.0, y=0.0)

    mean = _as_array(polygon).mean(axis=0)
    return Point(x=float(mean[0]), y=float(mean[1]))


def _perpendicular_distance(point: PointLike, a: PointLike, b: PointLike) -> float:
    """Distance from a point to the infinite line through ``a`` and ``b``."""
    px, py = _xy(point)
    ax, ay = _xy(a)
    bx, by = _xy(b)

    dx, dy = bx - ax, by - ay
    length = math.hypot(dx, dy)
    if length == 0:
        return math.hypot(px - ax, py - ay)

    return abs(dy * px - dx * py + bx * ay - by * ax) / length


def simplify_polygon(
    points: Sequence[PointLike],
    tolerance: float,
    min_points: int = 10,
) -> List[PointLike]:
    """Drop nearly collinear vertices in a single pass.

    Each interior vertex is compared against the line through its neighbours
    in the original sequence and dropped if closer than ``tolerance``. This is
    a cheap approximation, not recursive Douglas-Peucker.

    Args:
        points: Polygon vertices
        tolerance: Minimum perpendicular distance to keep a vertex, in pixels
        min_points: Polygons with this many points or fewer are returned as is

    Returns:
        New list of vertices
    """
    if len(points) <= max(min_points, 4):
        return list(points)

    simplified = [points[0]]
    for i in range(1, len(points) - 1):
        if _perpendicular_distance(points[i], points[i - 1], points[i + 1]) >= tolerance:
            simplified.append(points[i])
    simplified.append(points[-1])

    return simplified


def aspect_ratio(width: float, height: float) -> float:
    """Narrowness of a box, ``min / max`` in (0, 1].

    A zero-sized box counts as square; a box with one zero side as fully narrow.
    """
    longest = max(width, height)
    if longest <= 0:
        return 1.0
    return min(width, height) / longest
