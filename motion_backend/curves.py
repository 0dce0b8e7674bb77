# motion_backend/curves.py
from __future__ import annotations
from typing import Optional, Tuple
import logging
import math
import random

import numpy as np

from motion_backend.geometry import Point

logger = logging.getLogger(__name__)

Curve = Tuple[Point, ...]

CURVE_KINDS = ("line", "arc", "wave", "circle", "figure8", "random")

MIN_DIFFICULTY, MAX_DIFFICULTY = 1, 5

# (sine cycles over the span, amplitude as a fraction of height) per difficulty
_WAVE_TABLE = {
    1: (0.5, 0.15),
    2: (0.75, 0.20),
    3: (1.5, 0.18),
    4: (1.0, 0.22),
    5: (2.0, 0.25),
}

def _clamp_difficulty(difficulty) -> int:
    return int(max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, round(difficulty))))

def intensity(difficulty) -> float:
    """0.3 at difficulty 1 up to 0.7 at difficulty 5."""
    return 0.3 + 0.1 * (_clamp_difficulty(difficulty) - 1)

def point_count(difficulty) -> int:
    return 100 + 25 * (_clamp_difficulty(difficulty) - 1)

def tolerance_for_difficulty(base: float, difficulty, floor: float = 30.0) -> float:
    # tighter tolerance on harder rounds, never below the floor
    return max(float(floor), float(base) - 5.0 * (_clamp_difficulty(difficulty) - 1))

def curve_kind_for_round(round_idx: int) -> str:
    """Cycle the deterministic kinds across rounds; `random` is opt-in."""
    kinds = CURVE_KINDS[:-1]
    return kinds[max(0, int(round_idx) - 1) % len(kinds)]

def _margins(width: float, height: float, marker_size: float) -> Tuple[float, float]:
    mx = min(width / 2.0, max(0.1 * width, marker_size / 2.0))
    my = min(height / 2.0, max(0.1 * height, marker_size / 2.0))
    return mx, my

def _as_curve(xs: np.ndarray, ys: np.ndarray) -> Curve:
    return tuple(Point(float(x), float(y)) for x, y in zip(xs, ys))

# ---------- deterministic kinds ----------
def _line(w, h, d, mx, my) -> Curve:
    # straight line with a perpendicular sinusoidal offset
    t = np.linspace(0.0, 1.0, point_count(d))
    amp = (h / 2.0 - my) * intensity(d)
    xs = mx + (w - 2*mx) * t
    ys = h / 2.0 + amp * np.sin(2 * math.pi * t)
    return _as_curve(xs, ys)

def _arc(w, h, d, mx, my) -> Curve:
    # quadratic Bezier from left to right margin
    t = np.linspace(0.0, 1.0, point_count(d))
    cy = h / 2.0
    start = np.array([mx, cy]); end = np.array([w - mx, cy])
    lift = min(0.25 * h * intensity(d) * 2.0, 2.0 * (cy - my))
    control = np.array([w / 2.0, cy - lift])
    pts = ((1 - t)**2)[:, None] * start + (2 * (1 - t) * t)[:, None] * control + (t**2)[:, None] * end
    return _as_curve(pts[:, 0], pts[:, 1])

def _wave(w, h, d, mx, my) -> Curve:
    dd = _clamp_difficulty(d)
    cycles, amp_frac = _WAVE_TABLE[dd]
    t = np.linspace(0.0, 1.0, point_count(dd))
    amp = min(amp_frac * h, h / 2.0 - my)
    envelope = np.ones_like(t)
    if dd == 4:
        envelope = 1.0 - 0.2 * t
    elif dd == 5:
        envelope = 0.6 + 0.4 * t
    xs = mx + (w - 2*mx) * t
    ys = h / 2.0 + amp * np.sin(2 * math.pi * cycles * t) * envelope
    return _as_curve(xs, ys)

def _circle(w, h, d, mx, my) -> Curve:
    theta = np.linspace(0.0, 2 * math.pi, point_count(d))
    r = min(w / 2.0 - mx, h / 2.0 - my) * (0.6 + 0.1 * (_clamp_difficulty(d) - 1))
    xs = w / 2.0 + r * np.cos(theta)
    ys = h / 2.0 + r * np.sin(theta)
    return _as_curve(xs, ys)

def _figure8(w, h, d, mx, my) -> Curve:
    # Lissajous 1:2
    theta = np.linspace(0.0, 2 * math.pi, point_count(d))
    scale = 0.5 + 0.1 * (_clamp_difficulty(d) - 1)
    xs = w / 2.0 + (w / 2.0 - mx) * scale * np.sin(theta)
    ys = h / 2.0 + (h / 2.0 - my) * scale * np.sin(2 * theta)
    return _as_curve(xs, ys)

# ---------- random waypoints ----------
def _random_waypoints(w, h, d, mx, my, rng: random.Random, max_attempts: int = 20) -> np.ndarray:
    count = 3 + _clamp_difficulty(d)
    min_sep = 0.15 * min(w, h)
    pts = []
    for _ in range(count):
        attempts = 0
        while True:
            x = mx + rng.random() * (w - 2*mx)
            y = my + rng.random() * (h - 2*my)
            attempts += 1
            # give up on separation after a few tries so tiny regions still terminate
            if attempts >= max_attempts or all(math.hypot(x - px, y - py) >= min_sep for px, py in pts):
                break
        pts.append((x, y))
    return np.array(pts, dtype=float)

def _densify(waypoints: np.ndarray, n: int) -> Curve:
    seg = np.hypot(np.diff(waypoints[:, 0]), np.diff(waypoints[:, 1]))
    cum = np.concatenate([[0.0], np.cumsum(seg)])
    total = cum[-1]
    if total < 1e-9:
        return _as_curve(np.repeat(waypoints[0, 0], n), np.repeat(waypoints[0, 1], n))
    s = np.linspace(0.0, total, n)
    idx = np.clip(np.searchsorted(cum, s, side="right") - 1, 0, len(seg) - 1)
    seg_len = np.where(seg[idx] > 0, seg[idx], 1.0)
    frac = np.clip((s - cum[idx]) / seg_len, 0.0, 1.0)
    a = waypoints[idx]; b = waypoints[idx + 1]
    pts = a + (b - a) * frac[:, None]
    return _as_curve(pts[:, 0], pts[:, 1])

def _random(w, h, d, mx, my, rng) -> Curve:
    return _densify(_random_waypoints(w, h, d, mx, my, rng), point_count(d))

_GENERATORS = {
    "line": _line,
    "arc": _arc,
    "wave": _wave,
    "circle": _circle,
    "figure8": _figure8,
}

def generate_curve(width: float, height: float, difficulty=1, kind: str = "wave",
                   rng: Optional[random.Random] = None, marker_size: float = 0.0) -> Curve:
    """
    Polyline a round is judged against, inside a width x height region.

    Pure for every kind except "random", which draws from `rng`.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"region must be positive, got {width}x{height}")
    mx, my = _margins(float(width), float(height), float(marker_size))
    if kind == "random":
        curve = _random(float(width), float(height), difficulty, mx, my, rng or random.Random())
    elif kind in _GENERATORS:
        curve = _GENERATORS[kind](float(width), float(height), difficulty, mx, my)
    else:
        raise ValueError(f"unknown curve kind '{kind}', expected one of {CURVE_KINDS}")
    logger.debug(f"generated {kind} curve: {len(curve)} points, difficulty={difficulty}, region={width}x{height}")
    return curve
