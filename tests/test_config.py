from pathlib import Path

import pytest

from casejobs.config import Settings, get_settings


def test_defaults_from_environment():
    settings = get_settings()
    assert settings.db_url.startswith("sqlite:///")
    assert settings.vat_rate == 20
    assert settings.city_prefixes == ("Antalya",)
    assert settings.resolution_strategy == "first-contains"
    assert settings.random_seed == 7
    assert settings.similarity_tiers == {"likely": 90, "probable": 75, "possible": 60}
    assert settings.export_dir.exists()


def test_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CASEJOBS_CITY_PREFIXES", "Antalya, Korkuteli ,")
    monkeypatch.setenv("CASEJOBS_RESOLUTION_STRATEGY", "best-similarity")
    monkeypatch.setenv("CASEJOBS_AUTO_CREATE_COURTS", "yes")
    monkeypatch.setenv("CASEJOBS_SYNTHESIZE_DATES", "0")
    monkeypatch.setenv("CASEJOBS_VAT_RATE", "18")
    monkeypatch.setenv("CASEJOBS_LOG_LEVEL", "debug")
    monkeypatch.setenv("CASEJOBS_EXPORT_DIR", str(tmp_path / "out"))
    settings = Settings.from_env()
    assert settings.city_prefixes == ("Antalya", "Korkuteli")
    assert settings.resolution_strategy == "best-similarity"
    assert settings.auto_create_courts is True
    assert settings.synthesize_dates is False
    assert settings.vat_rate == 18
    assert settings.log_level == "DEBUG"
    assert settings.export_dir == Path(tmp_path / "out")


def test_invalid_strategy(monkeypatch):
    monkeypatch.setenv("CASEJOBS_RESOLUTION_STRATEGY", "random")
    with pytest.raises(ValueError):
        Settings.from_env()
