"""
Polyline geometry helpers for wall editing.

Segment i of a polyline runs from points[i] to points[i + 1]; a closed
polyline has one more segment from the last point back to the first.
"""

import math
from typing import Optional

from models.drawing import DrawingObject, Point, Rect, NO_OBJECT


def angle_from_points(start: Point, end: Point) -> float:
    """Angle of the vector start -> end in degrees, 0 <= angle < 360 (y down)."""
    angle = math.degrees(math.atan2(end.y - start.y, end.x - start.x))
    if angle < 0:
        angle += 360
    return angle


def segment_count(points: list[Point], closed: bool) -> int:
    if len(points) < 2:
        return 0
    return len(points) if closed and len(points) > 2 else len(points) - 1


def segment_points(points: list[Point], closed: bool, index: int) -> tuple[Point, Point]:
    """Endpoints of segment index."""
    return points[index], points[(index + 1) % len(points)]


def project_onto_segment(p: Point, a: Point, b: Point) -> Point:
    """Closest point to p on segment a-b."""
    dx = b.x - a.x
    dy = b.y - a.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return Point(a.x, a.y)
    t = ((p.x - a.x) * dx + (p.y - a.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return Point(a.x + t * dx, a.y + t * dy)


def distance_to_segment(p: Point, a: Point, b: Point) -> float:
    q = project_onto_segment(p, a, b)
    return math.hypot(p.x - q.x, p.y - q.y)


def hit_segment(
    points: list[Point],
    closed: bool,
    p: Point,
    tolerance: Optional[float] = None
) -> int:
    """
    Index of the segment nearest to p.

    Returns NO_OBJECT when the polyline has no segments or the nearest
    segment is farther than tolerance.
    """
    best_index = NO_OBJECT
    best_distance = math.inf
    for i in range(segment_count(points, closed)):
        a, b = segment_points(points, closed, i)
        d = distance_to_segment(p, a, b)
        if d < best_distance:
            best_distance = d
            best_index = i
    if tolerance is not None and best_distance > tolerance:
        return NO_OBJECT
    return best_index


def poly_frame(points: list[Point]) -> Rect:
    """Bounding rectangle of a point list."""
    if not points:
        return Rect()
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return Rect(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


def insert_corner(obj: DrawingObject, hit_point: Point, tolerance: Optional[float] = None) -> int:
    """
    Add a vertex to a wall at the point nearest hit_point.

    The new vertex is snapped onto the hit segment. Returns the index of the
    new vertex, or NO_OBJECT when nothing was hit.
    """
    segment = hit_segment(obj.points, obj.closed, hit_point, tolerance)
    if segment < 0:
        return NO_OBJECT

    a, b = segment_points(obj.points, obj.closed, segment)
    corner = project_onto_segment(hit_point, a, b)
    obj.points.insert(segment + 1, corner)
    obj.frame = poly_frame(obj.points)
    return segment + 1


def split_polyline(
    points: list[Point],
    closed: bool,
    segment: int,
    at: Optional[Point] = None
) -> list[list[Point]]:
    """
    Split a polyline at a segment.

    A closed polyline is opened by removing the segment, giving one open
    point list that starts after it. An open polyline is cut at `at`
    (default: the segment midpoint), giving two point lists.
    """
    if segment < 0 or segment >= segment_count(points, closed):
        return [list(points)]

    if closed:
        return [points[segment + 1:] + points[:segment + 1]]

    a, b = points[segment], points[segment + 1]
    cut = at if at is not None else Point((a.x + b.x) / 2, (a.y + b.y) / 2)
    cut = project_onto_segment(cut, a, b)
    first = points[:segment + 1] + [Point(cut.x, cut.y)]
    second = [Point(cut.x, cut.y)] + points[segment + 1:]
    return [first, second]
