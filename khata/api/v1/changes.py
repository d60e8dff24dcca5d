"""WS /v1/changes - stream committed inserts/updates/deletes"""

import asyncio
import logging
from typing import Optional
from dataclasses import asdict
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from khata.api.dependencies import get_change_feed
from khata.infrastructure.realtime.feed import ChangeFeed, Subscription

router = APIRouter()


async def _close_on_disconnect(websocket: WebSocket, subscription: Subscription) -> None:
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        subscription.close()


@router.websocket("/changes")
async def stream_changes(
    websocket: WebSocket,
    table: Optional[str] = Query(None, description="customers | transactions | products | notifications"),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Forward change events to the client in arrival order until it disconnects"""
    # Subscribe before the handshake completes so no post-accept event is missed
    subscription = feed.subscribe(table)
    watcher = None
    try:
        await websocket.accept()
        watcher = asyncio.create_task(_close_on_disconnect(websocket, subscription))
        async for event in subscription:
            await websocket.send_json(asdict(event))
    except WebSocketDisconnect:
        pass
    finally:
        if watcher is not None:
            watcher.cancel()
        subscription.close()
        logging.info("Change stream closed", extra={"table": table, "subscribers": feed.subscriber_count})
