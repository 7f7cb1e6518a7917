"""
Message persistence.

Messages are append-only rows; a thread is the implicit set of rows between two
users. Everything returned to clients goes through `message_to_public` so the
relayed copy, the sender's acknowledgment and the history view share one shape.
"""
import logging

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import session_scope
from ..models.message import Message
from ..models.user import User
from ..schemas.realtime import MessageOut
from ..utils.error_handlers import NotFoundError, StoreError, get_error_message

logger = logging.getLogger(__name__)


def message_to_public(message: Message) -> dict:
    return MessageOut.model_validate(message).model_dump(mode="json")


def create_message(db: Session, *, sender_id: int, receiver_id: int, content: str) -> Message:
    receiver = db.get(User, receiver_id)
    if receiver is None:
        raise NotFoundError("Recipient not found")

    message = Message(sender_id=sender_id, receiver_id=receiver_id, content=content)
    try:
        db.add(message)
        db.commit()
        db.refresh(message)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to store message from %s to %s", sender_id, receiver_id)
        raise StoreError(get_error_message("message_failed")) from e
    return message


def save_message(sender_id: int, receiver_id: int, content: str) -> dict:
    """Persist a message in its own session and return the stored record."""
    with session_scope() as db:
        return message_to_public(
            create_message(db, sender_id=sender_id, receiver_id=receiver_id, content=content)
        )


def list_conversation(db: Session, *, user_id: int, other_user_id: int, limit: int = 200) -> list[Message]:
    """Messages exchanged between two users, oldest first."""
    pair = or_(
        and_(Message.sender_id == user_id, Message.receiver_id == other_user_id),
        and_(Message.sender_id == other_user_id, Message.receiver_id == user_id),
    )
    newest = (
        db.query(Message)
        .filter(pair)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(limit)
        .all()
    )
    return list(reversed(newest))
