# motion_backend/config.py
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
import logging
import os

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = ROOT / "config" / "settings.yaml"

def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Read settings.yaml (if present) and fill in every default the engine relies on.
    HOST / PORT environment variables (or a .env file) override the server block.
    """
    load_dotenv()
    cfg_path = Path(path) if path else Path(os.getenv("TRACE_CONFIG", DEFAULT_CONFIG_PATH))
    cfg: Dict[str, Any] = {}
    if cfg_path.exists():
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    else:
        logger.info(f"No config at {cfg_path}, using defaults")

    trk = cfg.setdefault("tracking", {})
    trk.setdefault("smoothing_alpha", 0.85)
    trk.setdefault("velocity_decay", 0.7)
    trk.setdefault("proximity_tolerance", 60.0)
    trk.setdefault("off_track_factor", 2.0)
    trk.setdefault("coverage_target", 0.70)
    trk.setdefault("snap_distance", 80.0)
    trk.setdefault("goal_radius", 50.0)
    trk.setdefault("tolerance_floor", 30.0)
    trk.setdefault("scale_tolerance", False)
    trk.setdefault("mirrored", True)
    trk.setdefault("round_time_s", 20.0)
    cfg.setdefault("grading", {}).setdefault("three_star_coverage", 0.90)
    cfg["grading"].setdefault("two_star_coverage", 0.80)
    cfg["grading"].setdefault("max_off_track", 10)
    cfg.setdefault("lateral", {}).setdefault("enter", 0.12)
    cfg["lateral"].setdefault("leave", 0.08)
    cfg["lateral"].setdefault("alpha", 0.3)
    cfg.setdefault("server", {}).setdefault("host", "0.0.0.0")
    cfg["server"]["host"] = os.getenv("HOST", cfg["server"]["host"])
    cfg["server"]["port"] = int(os.getenv("PORT", cfg["server"].get("port", 8000)))
    return cfg


class RoundSettings(BaseModel):
    """Per-round numeric constants, validated once when a round starts."""
    smoothing_alpha: float = 0.85
    velocity_decay: float = 0.7
    proximity_tolerance: float = 60.0
    off_track_factor: float = 2.0
    coverage_target: float = 0.70
    snap_distance: float = 80.0
    goal_radius: float = 50.0
    tolerance_floor: float = 30.0
    scale_tolerance: bool = False
    mirrored: bool = True
    round_time_s: float = 20.0

    @field_validator("smoothing_alpha", "velocity_decay")
    @classmethod
    def _unit_open(cls, v: float) -> float:
        if not 0.0 < v < 1.0:
            raise ValueError("must be in (0, 1)")
        return v

    @field_validator("proximity_tolerance", "goal_radius")
    @classmethod
    def _positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("off_track_factor")
    @classmethod
    def _factor(cls, v: float) -> float:
        if v < 1.0:
            raise ValueError("off-track tolerance cannot be tighter than the proximity tolerance")
        return v

    @field_validator("coverage_target")
    @classmethod
    def _target(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError("must be in (0, 1]")
        return v

    @field_validator("snap_distance", "tolerance_floor", "round_time_s")
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @classmethod
    def from_cfg(cls, cfg: dict) -> "RoundSettings":
        known = set(cls.model_fields)
        return cls(**{k: v for k, v in (cfg.get("tracking") or {}).items() if k in known})
