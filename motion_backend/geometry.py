# motion_backend/geometry.py
from __future__ import annotations
from typing import NamedTuple, Sequence, Tuple
import math

class Point(NamedTuple):
    x: float
    y: float

def distance(a, b) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])

def closest_point_on_segment(p, a, b) -> Point:
    """Projection of p onto segment a-b, clamped to the segment ends."""
    px, py = p; ax, ay = a; bx, by = b
    cx, cy = bx - ax, by - ay
    len_sq = cx*cx + cy*cy
    if len_sq == 0:
        # zero-length segment
        return Point(float(ax), float(ay))
    t = ((px - ax)*cx + (py - ay)*cy) / len_sq
    t = max(0.0, min(1.0, t))
    return Point(ax + t*cx, ay + t*cy)

def point_to_segment_distance(p, a, b) -> float:
    return distance(p, closest_point_on_segment(p, a, b))

def nearest_point_on_curve(p, curve: Sequence) -> Tuple[Point, float]:
    best, best_d = Point(float(curve[0][0]), float(curve[0][1])), math.inf
    for i in range(len(curve) - 1):
        q = closest_point_on_segment(p, curve[i], curve[i + 1])
        d = distance(p, q)
        if d < best_d:
            best, best_d = q, d
    return best, best_d

def point_to_curve_distance(p, curve: Sequence) -> float:
    """Minimum segment distance over consecutive curve points. O(len(curve))."""
    best = math.inf
    for i in range(len(curve) - 1):
        best = min(best, point_to_segment_distance(p, curve[i], curve[i + 1]))
    return best

def snap_to_curve(p, curve: Sequence, max_distance: float) -> Point:
    """Nearest point on the curve if it lies within max_distance, else p itself."""
    q, d = nearest_point_on_curve(p, curve)
    if d <= max_distance:
        return q
    return Point(float(p[0]), float(p[1]))

def to_screen(normalized, width: float, height: float, mirrored: bool = False) -> Point:
    # normalized camera space -> pixel space of the play area
    nx, ny = normalized
    if mirrored:
        nx = 1.0 - nx
    return Point(nx * width, ny * height)
