from catalog_view.core.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.inventory_base_url == "http://localhost:5184"
    assert settings.notice_visible_seconds == 3.0
    assert settings.export_date_format == "%d.%m.%Y"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("INVENTORY_BASE_URL", "https://inventory.example.com/")
    monkeypatch.setenv("CURRENT_USER_ID", "  ")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example.com/, https://b.example.com")

    settings = Settings(_env_file=None)

    assert settings.inventory_base_url == "https://inventory.example.com"
    assert settings.current_user_id is None
    assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]


def test_clear_interval_follows_visibility():
    settings = Settings(_env_file=None, notice_visible_seconds=5, notice_clear_seconds=1)

    assert settings.notice_clear_seconds == 5
