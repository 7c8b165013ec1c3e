# planora_core/catchup/subscribers.py
from uuid import UUID

from planora_core.catchup.services import CatchUpService
from planora_core.common.events import subscribe


@subscribe("enrollment.cancelled")
def on_enrollment_cancelled(payload: dict) -> None:
    CatchUpService.record_cancellation(
        business_id=UUID(payload["business_id"]),
        session_id=UUID(payload["session_id"]),
        client_id=UUID(payload["client_id"]),
    )


@subscribe("enrollment.created")
def on_enrollment_created(payload: dict) -> None:
    CatchUpService.record_booking(
        business_id=UUID(payload["business_id"]),
        session_id=UUID(payload["session_id"]),
        client_id=UUID(payload["client_id"]),
        is_catch_up=bool(payload.get("is_catch_up")),
    )
