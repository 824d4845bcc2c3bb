import pytest

from app.models import SystemSettings
from app.services import settings_service
from app.utils.validation import ValidationError


@pytest.mark.unit
class TestSettingsService:
    def test_defaults_without_rows(self, db):
        assert settings_service.get_settings(settings_service.GENERAL) == settings_service.DEFAULT_GENERAL_SETTINGS
        assert settings_service.get_setting(settings_service.SECURITY, "auditLogging") is True

    def test_partial_update_merges(self, db):
        settings = settings_service.update_settings(
            settings_service.GENERAL, {"maxFileSize": 25, "allowedFileTypes": [".PDF", "png"]}
        )

        assert settings["maxFileSize"] == 25
        assert settings["allowedFileTypes"] == ["pdf", "png"]
        assert settings["siteName"] == "Brandspace Admin"
        assert db.session.query(SystemSettings).count() == 1

    def test_second_update_keeps_first(self, db):
        settings_service.update_settings(settings_service.GENERAL, {"theme": "dark"})
        settings_service.update_settings(settings_service.GENERAL, {"language": "ar"})

        settings = settings_service.get_settings(settings_service.GENERAL)
        assert settings["theme"] == "dark"
        assert settings["language"] == "ar"

    def test_invalid_update_not_saved(self, db):
        with pytest.raises(ValidationError):
            settings_service.update_settings(settings_service.SECURITY, {"twoFactorAuth": "yes"})

        assert db.session.query(SystemSettings).count() == 0

    def test_reset(self, db):
        settings_service.update_settings(settings_service.SECURITY, {"emailAlerts": False})
        settings = settings_service.reset_settings(settings_service.SECURITY)

        assert settings == settings_service.DEFAULT_SECURITY_SETTINGS
        assert settings_service.get_setting(settings_service.SECURITY, "emailAlerts") is True

    def test_stored_unknown_keys_ignored(self, db):
        db.session.add(SystemSettings(setting_key="general", setting_value={"legacyFlag": 1, "theme": "dark"}))
        db.session.commit()

        settings = settings_service.get_settings(settings_service.GENERAL)
        assert "legacyFlag" not in settings
        assert settings["theme"] == "dark"
