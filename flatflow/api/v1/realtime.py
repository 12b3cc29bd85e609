import asyncio
import logging
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, WebSocketException, status
from sqlalchemy.orm import Session
from typing import Optional

from flatflow.core.events import Subscription, notifier
from flatflow.core.exception import CustomException
from flatflow.database import get_db
from flatflow.services.auth_service import AuthService
from flatflow.services.household_service import HouseholdService

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_tables(tables: Optional[str]) -> Optional[list]:
    if not tables:
        return None
    names = [name.strip() for name in tables.split(",") if name.strip()]
    return names or None


@router.websocket("/households/{household_id}")
async def household_changes(
    websocket: WebSocket,
    household_id: int,
    token: Optional[str] = Query(None),
    tables: Optional[str] = Query(None, description="Comma separated table names"),
    db: Session = Depends(get_db),
):
    """
    Stream change events of one household.

    Each message is ``{"table", "household_id", "action"}``; clients refetch
    the affected data. The connection is refused unless ``token`` belongs to
    a member of the household.
    """
    if not token:
        raise WebSocketException(code=status.WS_1008_POLICY_VIOLATION, reason="Not authenticated")

    try:
        user = AuthService(db).verify_token(token)
        HouseholdService(db).require_member(household_id, user.id)
    except CustomException as exc:
        raise WebSocketException(code=status.WS_1008_POLICY_VIOLATION, reason=exc.detail)
    finally:
        db.close()

    await websocket.accept()
    subscription = notifier.subscribe(household_id, _parse_tables(tables))
    logger.info("User %s subscribed to household %s", user.id, household_id)

    try:
        await websocket.send_json({
            "status": "subscribed",
            "household_id": household_id,
            "tables": sorted(subscription.tables) if subscription.tables else None,
        })
        await _stream(websocket, subscription)
    finally:
        notifier.unsubscribe(subscription)
        logger.info("User %s unsubscribed from household %s", user.id, household_id)


async def _stream(websocket: WebSocket, subscription: Subscription) -> None:
    """Forward events until the client goes away."""

    async def forward():
        while True:
            event = await subscription.get()
            await websocket.send_json(event.to_dict())

    async def drain():
        # Incoming messages are ignored; receiving is how a disconnect shows up.
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            return

    tasks = [asyncio.ensure_future(forward()), asyncio.ensure_future(drain())]
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.debug("Change stream ended: %r", task.exception())
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
