import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from casejobs import init_db
from casejobs.config import get_settings
from casejobs import db as db_module
from casejobs.db import RecordStore


@pytest.fixture(autouse=True)
def configure_env(tmp_path, monkeypatch):
    db_path = tmp_path / "test.db"
    export_path = tmp_path / "exports"
    monkeypatch.setenv("CASEJOBS_DB_URL", f"sqlite:///{db_path}")
    monkeypatch.setenv("CASEJOBS_EXPORT_DIR", str(export_path))
    monkeypatch.setenv("CASEJOBS_RANDOM_SEED", "7")
    get_settings.cache_clear()
    init_db()
    yield
    get_settings.cache_clear()
    for conn in db_module._connection_cache.values():
        conn.close()
    db_module._connection_cache.clear()


@pytest.fixture
def store():
    return RecordStore()


@pytest.fixture
def vehicle(store):
    vehicle_id = store.insert(
        "vehicles",
        {"plate": "07 ABC 123", "brand": "Fiat", "model": "Doblo", "year": 2020, "type": "Hafif Ticari"},
    )
    return store.find_one("vehicles", id=vehicle_id)


@pytest.fixture
def family_court(store):
    court_id = store.insert("courts", {"name": "5. Aile Mahkemesi", "city": "Antalya"})
    return store.find_one("courts", id=court_id)
