"""Seed script: defaults for a fresh database."""

from __future__ import annotations

from mirror.models.config_version import CONFIG_VERSION_ID, ConfigVersion
from mirror.models.system_state import SYSTEM_STATE_ID, SystemState
from mirror.models.widget import Widget
from mirror.scripts.seed import DEFAULT_SETTINGS, DEFAULT_WIDGETS, main, seed_database
from mirror.services.auth import authenticate_user
from mirror.services.settings_service import get_category_settings, get_weather_settings
from tests.test_constants import TEST_PASSWORD, TEST_PASSWORD_WRONG

SEED_EMAIL = "owner@example.com"


class TestSeedDatabase:
    def test_fresh_database(self, db):
        created = seed_database(db, SEED_EMAIL, TEST_PASSWORD)
        assert created == {
            "users": 1,
            "widgets": len(DEFAULT_WIDGETS),
            "settings": len(DEFAULT_SETTINGS),
        }
        assert db.get(ConfigVersion, CONFIG_VERSION_ID).version == 1
        assert db.get(SystemState, SYSTEM_STATE_ID) is not None
        assert authenticate_user(db, SEED_EMAIL, TEST_PASSWORD) is not None

    def test_widget_order_and_settings(self, db):
        seed_database(db, SEED_EMAIL, TEST_PASSWORD)
        widgets = db.query(Widget).order_by(Widget.order).all()
        assert [w.id for w in widgets] == [w["id"] for w in DEFAULT_WIDGETS]
        assert get_weather_settings(db)["location"] == "Fort Wayne, IN"
        assert get_category_settings(db, "calendar") == {"daysAhead": 7, "maxEvents": 8}

    def test_rerun_creates_nothing_and_resets_password(self, db):
        seed_database(db, SEED_EMAIL, TEST_PASSWORD)
        created = seed_database(db, SEED_EMAIL, TEST_PASSWORD_WRONG)
        assert created == {"users": 0, "widgets": 0, "settings": 0}
        assert authenticate_user(db, SEED_EMAIL, TEST_PASSWORD_WRONG) is not None
        assert db.get(ConfigVersion, CONFIG_VERSION_ID).version == 1

    def test_main_requires_password(self, monkeypatch):
        monkeypatch.delenv("ADMIN_PASSWORD", raising=False)
        assert main() == 1
