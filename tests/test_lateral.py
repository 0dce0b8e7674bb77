import pytest

from trackers.lateral import LateralClassifier

def test_hysteresis_keeps_side_until_opposite_band():
    lc = LateralClassifier(enter=0.12, leave=0.08, alpha=1.0)
    assert lc.update(0.0) == "center"
    assert lc.update(0.10) == "center"
    assert lc.update(0.15) == "right"
    assert lc.update(0.0) == "right"
    assert lc.update(-0.05) == "right"
    assert lc.update(-0.10) == "center"
    assert lc.update(-0.20) == "left"
    assert lc.update(0.10) == "center"

def test_direct_swing_across():
    lc = LateralClassifier(alpha=1.0)
    lc.update(-0.5)
    assert lc.position == "left"
    assert lc.update(0.5) == "right"

def test_state_is_per_instance_and_resettable():
    a = LateralClassifier(alpha=1.0)
    b = LateralClassifier(alpha=1.0)
    a.update(0.9)
    assert a.position == "right"
    assert b.position == "center"
    a.reset()
    assert a.position == "center"
    assert a.amount is None

def test_smoothing_delays_switch():
    lc = LateralClassifier(alpha=0.3)
    lc.update(0.0)
    assert lc.update(0.2) == "center"
    assert lc.update(0.2) == "center"
    assert lc.update(0.2) == "right"
    assert lc.amount == pytest.approx(0.1314)

def test_rejects_inverted_bands():
    with pytest.raises(ValueError):
        LateralClassifier(enter=0.05, leave=0.1)

def test_non_finite_amount_leaves_state_alone():
    lc = LateralClassifier()
    lc.update(0.9)
    before = lc.amount
    assert lc.update(float("nan")) == "right"
    assert lc.update(float("-inf")) == "right"
    assert lc.amount == before
