"""REST endpoint for submitting outbound commands."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from pydantic import BaseModel

from ..websocket import MessageRouter

router = APIRouter(tags=["command"])


def get_message_router(request: Request) -> MessageRouter:
    """Get the message router from app state, raising if not initialized."""
    message_router = getattr(request.app.state, "message_router", None)
    if message_router is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Message router not initialized",
        )
    return message_router


class CommandAccepted(BaseModel):
    """Response for an accepted command."""

    status: str = "accepted"


@router.post("/command", status_code=status.HTTP_202_ACCEPTED, response_model=CommandAccepted)
async def submit_command(
    command: Any = Body(default=None),
    message_router: MessageRouter = Depends(get_message_router),
):
    """Accept a command. Delivery is not guaranteed; it is only logged for now."""
    await message_router.broadcast_command(command)
    return CommandAccepted()
