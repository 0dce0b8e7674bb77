# utils.py
import math

def valid_sample(sample) -> bool:
    """True for an (x, y) pair of finite numbers; None/NaN/inf/strings count as 'not detecting'."""
    if sample is None: return False
    try:
        x, y = sample[0], sample[1]
    except (TypeError, IndexError, KeyError):
        return False
    for v in (x, y):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return False
        if not math.isfinite(v):
            return False
    return True
