from typing import Optional

from fastapi import APIRouter, Depends, Request

from .. import schemas
from ..exceptions import RelayValidationError
from ..relay import RelayService

router = APIRouter(
    responses={
        400: {"model": schemas.ErrorOut},
        403: {"model": schemas.ErrorOut},
        500: {"model": schemas.ErrorOut},
    }
)


def get_relay(request: Request) -> RelayService:
    return request.app.state.relay


def _required(value: Optional[str], name: str) -> str:
    if not value:
        raise RelayValidationError(f"Missing {name} parameter")
    return value


@router.post("/send", response_model=schemas.SendOut, response_model_exclude_none=True)
def send(body: schemas.SendIn, relay: RelayService = Depends(get_relay)):
    result = relay.send(body.session, body.id, body.ttl)
    return {
        "version": result.version,
        "time": relay.clock(),
        "duplicate": True if result.duplicate else None,
    }


@router.get("/next", response_model=schemas.NextOut, response_model_exclude_none=True)
def next_message(session: Optional[str] = None, relay: RelayService = Depends(get_relay)):
    message_id = relay.next(_required(session, "session"))
    return {"id": message_id, "time": relay.clock()}


@router.get("/status", response_model=schemas.StatusOut)
def get_status(session: Optional[str] = None, relay: RelayService = Depends(get_relay)):
    state = relay.status(_required(session, "session"))
    return {"active": state.active, "lastUpdate": state.last_update}


@router.post("/status", response_model=schemas.OkOut)
def set_status(body: schemas.StatusIn, relay: RelayService = Depends(get_relay)):
    relay.set_status(body.session, body.active)
    return {"ok": True}


# === VIEWERS ===
@router.get("/viewers", response_model=schemas.ViewersOut)
def list_viewers(operatorId: Optional[str] = None, relay: RelayService = Depends(get_relay)):
    raw = _required(operatorId, "operatorId")
    try:
        operator_id = int(raw)
    except ValueError:
        raise RelayValidationError("operatorId must be an integer")
    viewers = relay.viewers.list(operator_id)
    return {"viewers": [v.to_public() for v in viewers]}


@router.post("/viewers", response_model=schemas.OkOut)
def register_viewer(body: schemas.ViewerIn, relay: RelayService = Depends(get_relay)):
    relay.viewers.register(body.deviceId, body.operatorName, body.operatorId)
    return {"ok": True}


@router.delete("/viewers", response_model=schemas.OkOut)
def unregister_viewer(deviceId: Optional[str] = None, relay: RelayService = Depends(get_relay)):
    relay.viewers.unregister(_required(deviceId, "deviceId"))
    return {"ok": True}
