import datetime
import uuid
from functools import wraps

import bcrypt
import jwt
from flask import current_app, g, jsonify, request
from sqlalchemy import select

from app.extensions import db
from app.models import ADMIN_TYPE_IDS, SecurityEvents, Users, UserSessions, utcnow
from app.services import settings_service
from app.utils.serializers import serialize_session_user


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, stored_hash) -> bool:
    if not stored_hash:
        return False
    if isinstance(stored_hash, str):
        stored_hash = stored_hash.encode("utf-8")
    try:
        return bcrypt.checkpw(password.encode("utf-8"), stored_hash)
    except ValueError:
        # Not a bcrypt hash (legacy placeholder rows)
        return False


def client_ip():
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr


def client_device():
    return (request.user_agent.string or "Unknown")[:255]


def create_token(user):
    """Sign a session token for ``user``; returns (token, jti, expires_at)."""
    expires_at = utcnow() + datetime.timedelta(
        hours=current_app.config["JWT_EXPIRES_HOURS"]
    )
    jti = uuid.uuid4().hex
    payload = {
        "user": serialize_session_user(user),
        "sub": str(user.id),
        "jti": jti,
        "exp": expires_at.replace(tzinfo=datetime.timezone.utc),
    }
    token = jwt.encode(
        payload,
        current_app.config["SECRET_KEY"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )
    return token, jti, expires_at


def decode_token(token):
    """Return the payload of a valid token, or None when it is bad or expired."""
    try:
        return jwt.decode(
            token,
            current_app.config["SECRET_KEY"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except jwt.PyJWTError:
        return None


def bearer_token():
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    token = header[len("Bearer "):].strip()
    return token or None


def start_session(user):
    token, jti, expires_at = create_token(user)
    db.session.add(
        UserSessions(
            user_id=user.id,
            token_jti=jti,
            ip_address=client_ip(),
            device=client_device(),
            expires_at=expires_at,
        )
    )
    return token


def find_session(jti):
    return db.session.scalar(select(UserSessions).where(UserSessions.token_jti == jti))


def record_security_event(event_type, user_email=None, status="success"):
    """Add an audit row unless audit logging is switched off. Caller commits."""
    if not settings_service.get_setting(settings_service.SECURITY, "auditLogging"):
        return None
    event = SecurityEvents(
        event_type=event_type,
        user_email=user_email,
        ip_address=client_ip(),
        device=client_device(),
        status=status,
    )
    db.session.add(event)
    return event


def token_required(view):
    """Reject requests without a valid, unrevoked session token."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"status": "error", "message": "Authorization token is missing"}), 401

        payload = decode_token(token)
        if not payload or "jti" not in payload:
            return jsonify({"status": "error", "message": "Invalid or expired token"}), 401

        session = find_session(payload["jti"])
        if not session or session.revoked_at is not None:
            return jsonify({"status": "error", "message": "Session has been revoked"}), 401

        user = db.session.get(Users, session.user_id)
        if not user or not user.is_active:
            return jsonify({"status": "error", "message": "User is not active"}), 401

        session.last_activity = utcnow()
        db.session.commit()

        g.current_user = user
        g.current_session = session
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    """token_required plus a Super Admin / Admin user type check."""

    @wraps(view)
    def guarded(*args, **kwargs):
        if g.current_user.user_type not in ADMIN_TYPE_IDS:
            return jsonify({"status": "error", "message": "Admin access required"}), 403
        return view(*args, **kwargs)

    return token_required(guarded)
