from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from infra.models import FormulaRecord, FormulaVersion
from infra.store import FormulaStore


class TickingClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, 0)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def store(mock_session):
    return FormulaStore(mock_session, clock=TickingClock())


def _save(store, code, **kwargs):
    return store.save_formula(code, formula={"formula": {}, "hero": None}, input={"dominant": "woody"}, **kwargs)


def test_first_save_creates_record(store):
    version = _save(store, "OWS-001", scent_name="Night Amber", customer_email="a@b.c")

    assert version.id == "OWS-001-v1"
    assert version.version == 1
    assert version.status == "draft"

    record = store.get_formula("OWS-001")
    assert record.scent_name == "Night Amber"
    assert record.customer_email == "a@b.c"
    assert record.current_version == 1


def test_versions_increase(store):
    ids = [_save(store, "OWS-001").id for _ in range(3)]
    assert ids == ["OWS-001-v1", "OWS-001-v2", "OWS-001-v3"]
    assert [v.version for v in store.get_formula("OWS-001").versions] == [1, 2, 3]


def test_metadata_kept_when_not_given(store):
    _save(store, "OWS-001", scent_name="Night Amber", customer_name="Ada")
    _save(store, "OWS-001", customer_name="Grace")

    record = store.get_formula("OWS-001")
    assert record.scent_name == "Night Amber"
    assert record.customer_name == "Grace"


def test_get_version(store):
    _save(store, "OWS-001", notes="first")
    _save(store, "OWS-001", notes="second")

    assert store.get_formula_version("OWS-001").notes == "second"
    assert store.get_formula_version("OWS-001", 1).notes == "first"
    assert store.get_formula_version("OWS-001", 7) is None
    assert store.get_formula_version("missing") is None


def test_update_status(store):
    _save(store, "OWS-001")
    assert store.update_formula_status("OWS-001", 1, "approved") is True
    assert store.get_formula_version("OWS-001", 1).status == "approved"

    assert store.update_formula_status("OWS-001", 9, "approved") is False
    assert store.update_formula_status("missing", 1, "approved") is False


def test_unknown_status_rejected(store):
    _save(store, "OWS-001")
    with pytest.raises(ValueError, match="Unknown status"):
        store.update_formula_status("OWS-001", 1, "shipped")


def test_list_newest_first(store):
    _save(store, "A")
    _save(store, "B")
    _save(store, "C")
    assert [r.scent_code for r in store.list_formulas()] == ["C", "B", "A"]

    store.update_formula_status("A", 1, "archived")
    assert [r.scent_code for r in store.list_formulas()] == ["A", "C", "B"]
    assert [r.scent_code for r in store.list_formulas(limit=1, offset=1)] == ["C"]


def test_delete(store, mock_session):
    _save(store, "OWS-001")
    _save(store, "OWS-001")

    assert store.delete_formula("OWS-001") is True
    assert store.get_formula("OWS-001") is None
    assert mock_session.query(FormulaVersion).count() == 0
    assert store.delete_formula("OWS-001") is False


def test_payload_objects_serialized(store):
    class Payload:
        def to_dict(self):
            return {"hero": "Ambroxan"}

    version = store.save_formula("FCA-002", formula=Payload(), scent_card=Payload())
    assert version.formula == {"hero": "Ambroxan"}
    assert version.scent_card == {"hero": "Ambroxan"}
    assert version.batch_sheet is None


def test_record_to_dict(store):
    _save(store, "OWS-001")
    data = store.get_formula("OWS-001").to_dict()
    assert data["versions"][0]["id"] == "OWS-001-v1"
    assert data["created_at"].startswith("2026-01-01")


def test_commit_failure_rolls_back(store, mock_session):
    with patch.object(mock_session, "commit", side_effect=OperationalError("INSERT", {}, Exception("locked"))):
        with pytest.raises(OperationalError):
            _save(store, "OWS-001")
    assert mock_session.query(FormulaRecord).count() == 0
