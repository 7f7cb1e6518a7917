import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from ..services.messaging import list_conversation, message_to_public
from ..services.realtime import ConnectionManager
from ..utils.dependencies import authenticate_websocket, get_current_user
from ..utils.error_handlers import AuthError, NotFoundError
from ..utils.jwt import TokenClaims

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


@router.websocket("/ws")
async def realtime_endpoint(websocket: WebSocket):
    """
    Realtime messaging socket: connect with `/ws?token=<jwt>`.

    The token is verified once, before the handshake is accepted; a bad token
    closes the socket with 1008 and no connection is established. After that the
    socket stays bound to the token's user until it closes.
    """
    try:
        claims = authenticate_websocket(websocket)
    except AuthError as e:
        logger.info("Rejected realtime handshake: %s", e.message)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
        return

    manager: ConnectionManager = websocket.app.state.realtime
    await manager.connect(websocket, claims.user_id)
    try:
        while True:
            raw = await websocket.receive_text()
            # One frame at a time: a send completes (or fails) before the next is read.
            await manager.dispatch(websocket, raw)
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket)


@router.get("/api/messages/{other_user_id:int}")
def conversation_history(
    other_user_id: int,
    db: Session = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
):
    if db.get(User, other_user_id) is None:
        raise NotFoundError("User not found")

    messages = list_conversation(db, user_id=user.user_id, other_user_id=other_user_id)
    return [message_to_public(m) for m in messages]
