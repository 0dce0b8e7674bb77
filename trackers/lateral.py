# trackers/lateral.py
from __future__ import annotations
import math
from typing import Optional

def _ema(prev: Optional[float], new: float, alpha: float) -> float:
    return new if prev is None else (alpha * new + (1 - alpha) * prev)

class LateralClassifier:
    """
    Left / center / right classification of a signed lateral amount in [-1, 1]
    (e.g. jaw offset relative to mouth width).

    Hysteresis: a side is entered past +/-enter and only left again once the
    amount crosses the opposite +/-leave band. State belongs to this instance;
    create or reset() one per round.
    """
    def __init__(self, enter: float = 0.12, leave: float = 0.08, alpha: float = 0.3):
        if not 0.0 < leave <= enter:
            raise ValueError(f"need 0 < leave <= enter, got leave={leave} enter={enter}")
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        self.enter = float(enter)
        self.leave = float(leave)
        self.alpha = float(alpha)
        self.reset()

    def reset(self):
        self._ema: Optional[float] = None
        self._position = "center"

    @property
    def position(self) -> str:
        return self._position

    @property
    def amount(self) -> Optional[float]:
        return self._ema

    def update(self, amount: float) -> str:
        if not math.isfinite(amount):
            return self._position
        amount = max(-1.0, min(1.0, float(amount)))
        a = self._ema = _ema(self._ema, amount, self.alpha)

        if self._position == "left":
            if a > self.leave:
                self._position = "right" if a > self.enter else "center"
        elif self._position == "right":
            if a < -self.leave:
                self._position = "left" if a < -self.enter else "center"
        else:
            if a < -self.enter:
                self._position = "left"
            elif a > self.enter:
                self._position = "right"
        return self._position
