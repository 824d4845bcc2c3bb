"""
Persisted admin settings.

Each settings group is one JSON document in ``system_settings``. Reads merge
the stored values over the defaults, so a fresh database behaves exactly
like the defaults and new keys appear without a migration.
"""
import copy

from sqlalchemy import select

from app.extensions import db
from app.models import SystemSettings
from app.utils.validation import ValidationError, check_email

GENERAL = "general"
SECURITY = "security"

DEFAULT_GENERAL_SETTINGS = {
    "siteName": "Brandspace Admin",
    "siteDescription": "Mall and shop management platform",
    "adminEmail": "admin@brandspace.com",
    "supportEmail": "support@brandspace.com",
    "maintenanceMode": False,
    "registrationEnabled": True,
    "emailNotifications": True,
    "smsNotifications": False,
    "autoBackup": True,
    "backupFrequency": "daily",
    "maxFileSize": 10,
    "allowedFileTypes": ["jpg", "jpeg", "png", "pdf", "doc", "docx"],
    "theme": "light",
    "language": "en",
    "timezone": "UTC",
}

DEFAULT_SECURITY_SETTINGS = {
    "twoFactorAuth": True,
    "passwordExpiry": True,
    "sessionTimeout": True,
    "ipWhitelist": False,
    "auditLogging": True,
    "emailAlerts": True,
}

DEFAULTS = {
    GENERAL: DEFAULT_GENERAL_SETTINGS,
    SECURITY: DEFAULT_SECURITY_SETTINGS,
}

BACKUP_FREQUENCIES = ("hourly", "daily", "weekly", "monthly")
THEMES = ("light", "dark", "system")
LANGUAGES = ("en", "ar")
MAX_FILE_SIZE_RANGE = (1, 100)


def _require_bool(key, value):
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be true or false", field=key)
    return value


def _require_text(key, value, allow_empty=False):
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be text", field=key)
    value = value.strip()
    if not value and not allow_empty:
        raise ValidationError(f"{key} cannot be empty", field=key)
    return value


def _require_choice(key, value, choices):
    if value not in choices:
        raise ValidationError(
            f"{key} must be one of: {', '.join(choices)}", field=key
        )
    return value


def validate_general_settings(changes):
    """Check a partial general-settings update and return the cleaned values."""
    if not isinstance(changes, dict):
        raise ValidationError("Settings payload must be an object")

    cleaned = {}
    for key, value in changes.items():
        if key not in DEFAULT_GENERAL_SETTINGS:
            raise ValidationError(f"Unknown setting '{key}'", field=key)

        if key in ("siteName", "timezone"):
            cleaned[key] = _require_text(key, value)
        elif key == "siteDescription":
            cleaned[key] = _require_text(key, value, allow_empty=True)
        elif key in ("adminEmail", "supportEmail"):
            cleaned[key] = check_email(_require_text(key, value), field=key)
        elif key == "backupFrequency":
            cleaned[key] = _require_choice(key, value, BACKUP_FREQUENCIES)
        elif key == "theme":
            cleaned[key] = _require_choice(key, value, THEMES)
        elif key == "language":
            cleaned[key] = _require_choice(key, value, LANGUAGES)
        elif key == "maxFileSize":
            low, high = MAX_FILE_SIZE_RANGE
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError("maxFileSize must be a whole number", field=key)
            if not low <= value <= high:
                raise ValidationError(
                    f"maxFileSize must be between {low} and {high} MB", field=key
                )
            cleaned[key] = value
        elif key == "allowedFileTypes":
            if not isinstance(value, list) or not all(
                isinstance(item, str) and item.strip() for item in value
            ):
                raise ValidationError(
                    "allowedFileTypes must be a list of extensions", field=key
                )
            cleaned[key] = [item.strip().lower().lstrip(".") for item in value]
        else:
            cleaned[key] = _require_bool(key, value)

    return cleaned


def validate_security_settings(changes):
    if not isinstance(changes, dict):
        raise ValidationError("Settings payload must be an object")

    cleaned = {}
    for key, value in changes.items():
        if key not in DEFAULT_SECURITY_SETTINGS:
            raise ValidationError(f"Unknown setting '{key}'", field=key)
        cleaned[key] = _require_bool(key, value)
    return cleaned


VALIDATORS = {
    GENERAL: validate_general_settings,
    SECURITY: validate_security_settings,
}


def merge_settings(defaults, stored):
    merged = copy.deepcopy(defaults)
    for key, value in (stored or {}).items():
        if key in merged:
            merged[key] = value
    return merged


def _get_row(group):
    return db.session.scalar(
        select(SystemSettings).where(SystemSettings.setting_key == group)
    )


def get_settings(group):
    row = _get_row(group)
    return merge_settings(DEFAULTS[group], row.setting_value if row else None)


def get_setting(group, key):
    return get_settings(group)[key]


def update_settings(group, changes):
    """Validate and persist a partial update; returns the merged settings."""
    cleaned = VALIDATORS[group](changes)
    row = _get_row(group)
    current = merge_settings(DEFAULTS[group], row.setting_value if row else None)
    current.update(cleaned)

    if row:
        # Reassign so the JSON column is flagged dirty
        row.setting_value = dict(current)
    else:
        db.session.add(SystemSettings(setting_key=group, setting_value=dict(current)))
    db.session.commit()
    return current


def reset_settings(group):
    row = _get_row(group)
    defaults = copy.deepcopy(DEFAULTS[group])
    if row:
        row.setting_value = dict(defaults)
    else:
        db.session.add(SystemSettings(setting_key=group, setting_value=dict(defaults)))
    db.session.commit()
    return defaults
