from sqlalchemy import select

from app.extensions import db
from app.models import Notifications


def notify(user_id, title, message, type="general", related_id=None):
    """Queue an in-app notification on the current session; the caller commits."""
    notification = Notifications(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        related_id=related_id,
        is_read=False,
    )
    db.session.add(notification)
    return notification


def already_notified(user_id, type, related_id):
    stmt = select(Notifications.id).where(
        Notifications.user_id == user_id,
        Notifications.type == type,
        Notifications.related_id == related_id,
    )
    return db.session.scalar(stmt) is not None
