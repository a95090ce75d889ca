from pydantic import BaseModel, Field, StrictBool
from typing import Optional, List

class SendIn(BaseModel):
    session: str = Field(..., min_length=1)
    id: str = Field(..., min_length=1)
    # milliseconds; clamped server-side
    ttl: Optional[int] = Field(default=None, gt=0)

class StatusIn(BaseModel):
    session: str = Field(..., min_length=1)
    active: StrictBool

class ViewerIn(BaseModel):
    deviceId: str = Field(..., min_length=1)
    operatorName: str = Field(..., min_length=1)
    operatorId: int = Field(..., ge=1)

class OkOut(BaseModel):
    ok: bool = True

class SendOut(OkOut):
    version: int
    time: int
    duplicate: Optional[bool] = None

class NextOut(OkOut):
    id: Optional[str] = None
    time: int

class StatusOut(OkOut):
    active: bool
    lastUpdate: int

class ViewerOut(BaseModel):
    deviceId: str
    operatorName: str
    operatorId: int
    lastSeen: int

class ViewersOut(OkOut):
    viewers: List[ViewerOut]

class ErrorOut(BaseModel):
    ok: bool = False
    error: str
    sessionActive: Optional[bool] = None
