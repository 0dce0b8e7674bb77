# motion_backend/schemas.py
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional

def _to_dict(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump()

class StartRoundIn(BaseModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    difficulty: int = 1
    kind: Optional[str] = None

class LandmarkIn(BaseModel):
    # x/y are normalized camera coordinates; missing means nothing detected
    x: Optional[float] = None
    y: Optional[float] = None

    def sample(self):
        if self.x is None or self.y is None:
            return None
        return (self.x, self.y)

class TrackingOut(BaseModel):
    status: str
    state: Dict[str, Any] = {}
    curve: Optional[list] = None
    message: Optional[str] = None

    @staticmethod
    def ok(state, curve=None):
        return _to_dict(TrackingOut(status="ok", state=state, curve=curve))

    @staticmethod
    def paused(msg):
        return _to_dict(TrackingOut(status="paused", message=msg))
