# trackers/path_tracker.py
from __future__ import annotations
from typing import Any, Dict, FrozenSet, Optional, Sequence
import math

import numpy as np

from motion_backend.geometry import Point, distance, point_to_curve_distance

class PathTracker:
    """
    Coverage engine for one round on one fixed curve.

    Per position:
      - every uncovered curve vertex closer than proximity_tolerance becomes covered (never undone)
      - coverage = covered vertices / curve length
      - on track  <=> segment distance to the curve < proximity_tolerance
      - off-track counter += 1 when that distance > off_track_tolerance

    Vertex proximity (not segment distance) decides coverage: cheaper, slightly more forgiving.
    """
    def __init__(
        self,
        curve: Sequence,
        proximity_tolerance: float,
        off_track_tolerance: Optional[float] = None,
        coverage_target: float = 0.70,
        goal: Optional[Sequence[float]] = None,
        goal_radius: float = 50.0,
    ):
        if curve is None or len(curve) < 2:
            raise ValueError(f"curve needs at least 2 points, got {0 if curve is None else len(curve)}")
        if not proximity_tolerance > 0:
            raise ValueError(f"proximity_tolerance must be positive, got {proximity_tolerance}")
        if off_track_tolerance is None:
            off_track_tolerance = 2.0 * proximity_tolerance
        if off_track_tolerance < proximity_tolerance:
            raise ValueError(
                f"off_track_tolerance ({off_track_tolerance}) must not be below proximity_tolerance ({proximity_tolerance})"
            )
        if not 0.0 < coverage_target <= 1.0:
            raise ValueError(f"coverage_target must be in (0, 1], got {coverage_target}")
        if not goal_radius > 0:
            raise ValueError(f"goal_radius must be positive, got {goal_radius}")

        self.curve = tuple(Point(float(p[0]), float(p[1])) for p in curve)
        self._pts = np.array(self.curve, dtype=float)
        self.proximity_tolerance = float(proximity_tolerance)
        self.off_track_tolerance = float(off_track_tolerance)
        self.coverage_target = float(coverage_target)
        self.goal = Point(float(goal[0]), float(goal[1])) if goal is not None else None
        self.goal_radius = float(goal_radius)
        self.reset()

    def reset(self):
        self._covered = np.zeros(len(self.curve), dtype=bool)
        self._coverage = 0.0
        self._on_track = False
        self._off_track = 0
        self._last_dist: Optional[float] = None
        self._goal_reached = False

    # --- accessors ---
    @property
    def coverage(self) -> float:
        return self._coverage

    @property
    def currently_on_track(self) -> bool:
        return self._on_track

    @property
    def off_track_count(self) -> int:
        return self._off_track

    @property
    def covered_indices(self) -> FrozenSet[int]:
        return frozenset(int(i) for i in np.flatnonzero(self._covered))

    @property
    def last_distance(self) -> Optional[float]:
        return self._last_dist

    @property
    def goal_reached(self) -> bool:
        return self._goal_reached

    # --- per-frame update ---
    def update_position(self, point) -> None:
        px, py = float(point[0]), float(point[1])

        near = np.hypot(self._pts[:, 0] - px, self._pts[:, 1] - py) < self.proximity_tolerance
        self._covered |= near
        self._coverage = max(self._coverage, float(self._covered.sum()) / len(self.curve))

        d = point_to_curve_distance((px, py), self.curve)
        self._last_dist = d
        self._on_track = d < self.proximity_tolerance
        if d > self.off_track_tolerance:
            self._off_track += 1

        if self.goal is not None and distance((px, py), self.goal) < self.goal_radius:
            self._goal_reached = True

    def is_round_complete(self) -> bool:
        return self._coverage >= self.coverage_target or self._goal_reached

    def snapshot(self) -> Dict[str, Any]:
        d = self._last_dist
        return {
            "coverage": round(self._coverage, 4),
            "coverage_pct": int(round(self._coverage * 100)),
            "on_track": self._on_track,
            "off_track_count": self._off_track,
            "distance_to_path": None if d is None or math.isinf(d) else round(d, 1),
            "goal_reached": self._goal_reached,
            "complete": self.is_round_complete(),
        }
