import pytest

from casejobs import db as db_module
from casejobs.config import get_settings
from casejobs.errors import MissingPrecondition, PersistenceFailure


def job_record(court_id, file_number="2023/770"):
    return {
        "received_date": "2025-01-02",
        "scheduled_date": "2025-01-06",
        "court_id": court_id,
        "file_number": file_number,
        "total_amount": 1440.0,
        "base_amount": 1200.0,
        "vat_amount": 240.0,
        "payment_status": "Ödendi",
        "invoice_status": "Kesildi",
        "status": "Tamamlandı",
        "status_date": "2025-01-13",
    }


def test_insert_find_update(store):
    court_id = store.insert("courts", {"name": "5. Aile Mahkemesi", "city": "Antalya"})
    assert store.find_one("courts", name="5. Aile Mahkemesi")["id"] == court_id
    assert store.find_by("courts", city="İzmir") == []

    store.update("courts", court_id, {"phone": "0242 000 00 00"})
    assert store.find_one("courts", id=court_id)["phone"] == "0242 000 00 00"
    with pytest.raises(PersistenceFailure):
        store.update("courts", 999, {"phone": "x"})


def test_court_file_pair_is_unique(store, family_court):
    store.insert("jobs", job_record(family_court["id"]))
    with pytest.raises(PersistenceFailure):
        store.insert("jobs", job_record(family_court["id"]))
    store.insert("jobs", job_record(family_court["id"], "2022/342"))
    assert store.count("jobs") == 2


def test_store_rejects_invalid_records(store, family_court):
    with pytest.raises(PersistenceFailure):
        store.insert("courts", {"name": "5. Aile Mahkemesi", "city": "Antalya"})
    with pytest.raises(PersistenceFailure):
        store.insert("jobs", dict(job_record(family_court["id"]), total_amount=0))
    with pytest.raises(ValueError):
        store.insert("courts", {"name": "x", "city": "y", "judge": "z"})
    with pytest.raises(ValueError):
        store.all("hearings")


def test_delete_all_respects_references(store, family_court):
    store.insert("jobs", job_record(family_court["id"]))
    with pytest.raises(PersistenceFailure):
        store.delete_all("courts")
    assert store.delete_all("jobs") == 1
    assert store.delete_all("courts") == 1


def test_only_sqlite_urls(monkeypatch):
    monkeypatch.setenv("CASEJOBS_DB_URL", "postgresql://localhost/casejobs")
    get_settings.cache_clear()
    with pytest.raises(MissingPrecondition):
        db_module.get_connection()
