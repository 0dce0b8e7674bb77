# smoothing.py
from __future__ import annotations
from typing import Tuple

from motion_backend.geometry import Point

class MotionSmoother:
    """
    Predictive exponential filter for a single tracked cursor.

      predicted = position + velocity
      position  = predicted + alpha * (raw - predicted)
      velocity  = decay * velocity + (1 - decay) * (position - previous position)

    Velocity comes from the observed displacement, so callers may tick at any rate.
    Samples are not validated here: NaN/inf must be dropped by the caller.
    """
    def __init__(self, alpha: float = 0.85, velocity_decay: float = 0.7):
        if not 0.0 < alpha < 1.0:
            raise ValueError(f"alpha must be in (0, 1), got {alpha}")
        if not 0.0 < velocity_decay < 1.0:
            raise ValueError(f"velocity_decay must be in (0, 1), got {velocity_decay}")
        self.alpha = float(alpha)
        self.velocity_decay = float(velocity_decay)
        self.reset()

    def reset(self):
        self._x = 0.0; self._y = 0.0
        self._vx = 0.0; self._vy = 0.0
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def position(self) -> Point:
        return Point(self._x, self._y)

    @property
    def velocity(self) -> Tuple[float, float]:
        return (self._vx, self._vy)

    def update(self, raw_x: float, raw_y: float) -> Point:
        if not self._initialized:
            self._x, self._y = raw_x, raw_y
            self._vx = self._vy = 0.0
            self._initialized = True
            return Point(raw_x, raw_y)

        px = self._x + self._vx
        py = self._y + self._vy
        nx = px + self.alpha * (raw_x - px)
        ny = py + self.alpha * (raw_y - py)

        d = self.velocity_decay
        self._vx = d * self._vx + (1 - d) * (nx - self._x)
        self._vy = d * self._vy + (1 - d) * (ny - self._y)
        self._x, self._y = nx, ny
        return Point(nx, ny)
