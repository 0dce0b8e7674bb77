# protocols/trace_round.py
from __future__ import annotations
from typing import Any, Dict, Optional
import logging
import random
import time

from motion_backend.config import RoundSettings
from motion_backend.curves import curve_kind_for_round, generate_curve, tolerance_for_difficulty
from motion_backend.geometry import Point, snap_to_curve, to_screen
from motion_backend.smoothing import MotionSmoother
from motion_backend.utils import valid_sample
from trackers.path_tracker import PathTracker

logger = logging.getLogger(__name__)

# curves whose end point doubles as a goal marker
_OPEN_KINDS = ("line", "arc", "wave", "random")

def grade_round(final_coverage: float, off_track_count: int, coverage_target: float = 0.70,
                max_off_track: int = 10, three_star: float = 0.90, two_star: float = 0.80) -> int:
    """Stars (0-3) for a finished round. Pure; call once at round end."""
    if final_coverage < coverage_target:
        return 0
    if final_coverage >= three_star and off_track_count < max_off_track:
        return 3
    if final_coverage >= two_star:
        return 2
    return 1

class TraceRound:
    """
    One tracing round: landmark samples in, cursor + coverage state out.
    Call .start(width, height, difficulty), then .on_sample(sample) every frame, then .stop().

    sample is a normalized (x, y) or None when the landmark source lost the hand/face;
    losing the feature resets the smoother so stale velocity cannot fling the cursor.
    """
    def __init__(self, cfg: dict):
        self.cfg = cfg
        self.settings = RoundSettings.from_cfg(cfg)
        g = cfg.get("grading", {})
        self.three_star = float(g.get("three_star_coverage", 0.90))
        self.two_star = float(g.get("two_star_coverage", 0.80))
        self.max_off_track = int(g.get("max_off_track", 10))
        self.rounds_played = 0
        self.reset()

    # -------- lifecycle --------
    def reset(self):
        self.active: bool = False
        self.width: float = 0.0
        self.height: float = 0.0
        self.difficulty: int = 1
        self.kind: Optional[str] = None
        self.curve = ()
        self.tracker: Optional[PathTracker] = None
        self.smoother = MotionSmoother(self.settings.smoothing_alpha, self.settings.velocity_decay)
        self.detecting: bool = False
        self.cursor: Optional[Point] = None
        self.samples: int = 0
        self.tracking_lost: int = 0
        self.started_at: float = 0.0
        self.deadline: Optional[float] = None
        self.timed_out: bool = False

    def start(self, width: float, height: float, difficulty: int = 1, kind: Optional[str] = None,
              rng: Optional[random.Random] = None) -> Dict[str, Any]:
        self.reset()
        self.rounds_played += 1
        s = self.settings
        self.width, self.height = float(width), float(height)
        self.difficulty = int(difficulty)
        self.kind = kind or curve_kind_for_round(self.rounds_played)
        self.curve = generate_curve(self.width, self.height, self.difficulty, kind=self.kind, rng=rng,
                                    marker_size=2 * s.goal_radius)

        tol = s.proximity_tolerance
        if s.scale_tolerance:
            tol = tolerance_for_difficulty(tol, self.difficulty, s.tolerance_floor)
        goal = self.curve[-1] if self.kind in _OPEN_KINDS else None
        self.tracker = PathTracker(
            self.curve, tol,
            off_track_tolerance=tol * s.off_track_factor,
            coverage_target=s.coverage_target,
            goal=goal, goal_radius=s.goal_radius,
        )
        self.active = True
        self.started_at = time.time()
        if s.round_time_s > 0:
            self.deadline = self.started_at + s.round_time_s
        logger.info(f"Round {self.rounds_played} started: kind={self.kind} difficulty={self.difficulty} "
                    f"points={len(self.curve)} tolerance={tol}")
        return self.state()

    def stop(self) -> Dict[str, Any]:
        self.active = False
        report = self._build_report()
        logger.info(f"Round {self.rounds_played} finished: coverage={report['coverage']} stars={report['stars']}")
        return {"active": False, "done": True, "report": report}

    # -------- frame update (call this every frame) --------
    def on_sample(self, sample) -> Dict[str, Any]:
        if not self.active:
            return self.state()
        if self._expired():
            return self.state(hint="Time's up!")

        if not valid_sample(sample):
            if self.detecting:
                logger.debug("Landmark lost, resetting smoother")
                self.smoother.reset()
                self.tracking_lost += 1
            self.detecting = False
            return self.state(hint="Show your finger to the camera")

        self.detecting = True
        raw = to_screen(sample, self.width, self.height, mirrored=self.settings.mirrored)
        smoothed = self.smoother.update(raw.x, raw.y)
        if self.settings.snap_distance > 0:
            smoothed = snap_to_curve(smoothed, self.curve, self.settings.snap_distance)
        self.cursor = smoothed
        self.tracker.update_position(smoothed)
        self.samples += 1
        return self.state()

    def is_complete(self) -> bool:
        return self.tracker is not None and self.tracker.is_round_complete()

    def time_remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.time())

    def _expired(self) -> bool:
        # past the deadline the round stops taking samples and is graded as it stands
        if not self.timed_out and self.active and self.deadline is not None and time.time() >= self.deadline:
            logger.info(f"Round {self.rounds_played} timed out at coverage={self.tracker.coverage:.2f}")
            self.timed_out = True
        return self.timed_out

    # -------- reporting --------
    def _build_report(self) -> Dict[str, Any]:
        coverage = self.tracker.coverage if self.tracker else 0.0
        off_track = self.tracker.off_track_count if self.tracker else 0
        return {
            "round": self.rounds_played,
            "kind": self.kind,
            "difficulty": self.difficulty,
            "coverage": round(coverage, 4),
            "off_track_count": off_track,
            "completed": self.is_complete(),
            "timed_out": self.timed_out,
            "stars": grade_round(coverage, off_track, self.settings.coverage_target,
                                 self.max_off_track, self.three_star, self.two_star),
            "samples": self.samples,
            "tracking_lost": self.tracking_lost,
            "duration_s": round(time.time() - self.started_at, 1) if self.started_at else 0.0,
        }

    def state(self, hint: Optional[str] = None) -> Dict[str, Any]:
        self._expired()
        left = self.time_remaining()
        metrics = self.tracker.snapshot() if self.tracker else {}
        if hint is None and self.tracker is not None and self.detecting:
            if metrics.get("complete"):
                hint = "Great job! You reached the target!"
            elif not metrics.get("on_track"):
                hint = "Stay on the path"
        return {
            "active": self.active,
            "round": self.rounds_played,
            "kind": self.kind,
            "difficulty": self.difficulty,
            "detecting": self.detecting,
            "timed_out": self.timed_out,
            "time_remaining": None if left is None else round(left, 1),
            "cursor": {"x": round(self.cursor.x, 1), "y": round(self.cursor.y, 1)} if self.cursor else None,
            **metrics,
            "hint": hint,
        }
