from lidera.audit import ACTION_CREATE, ACTION_UPDATE, AuditLogger, diff_records
from lidera.errors import ErrorCode, StoreError
from lidera.store import AUDIT_LOGS, EMPLOYEES


USER = {"id": "u1", "email": "gestor@alpha.com", "name": "Gestor"}


def test_diff_records_ignores_bookkeeping_fields():
    old = {"id": "e1", "name": "Ana", "sector": "Vendas", "updatedAt": "2024-01-01", "companyId": "c1"}
    new = {"id": "e1", "name": "Ana", "sector": "RH", "status": "Ativo", "updatedAt": "2024-02-01"}

    assert diff_records(old, new) == {
        "sector": {"old": "Vendas", "new": "RH"},
        "status": {"old": None, "new": "Ativo"},
    }


def test_diff_records_for_creation_and_deletion():
    assert diff_records(None, {"name": "Ana"}) == {"name": {"old": None, "new": "Ana"}}
    assert diff_records({"name": "Ana"}, None) == {"name": {"old": "Ana", "new": None}}


def test_log_action_writes_entry(store, company):
    audit = AuditLogger(store, USER, company["id"])

    log_id = audit.log_action(ACTION_UPDATE, EMPLOYEES, "e1", entity_name="Ana",
                              changes={"sector": {"old": "Vendas", "new": "RH"}})

    entry = store.get(AUDIT_LOGS, log_id, company["id"])
    assert entry["userId"] == "u1"
    assert entry["userEmail"] == "gestor@alpha.com"
    assert entry["userName"] == "Gestor"
    assert entry["action"] == ACTION_UPDATE
    assert entry["entityType"] == EMPLOYEES
    assert entry["entityName"] == "Ana"
    assert entry["changes"]["sector"]["new"] == "RH"
    assert entry["metadata"] == {}
    assert isinstance(entry["timestamp"], str)


def test_log_action_skipped_without_user_or_company(store, company):
    assert AuditLogger(store, None, company["id"]).log_action(ACTION_CREATE, EMPLOYEES) is None
    assert AuditLogger(store, USER, None).log_action(ACTION_CREATE, EMPLOYEES) is None
    assert store.fetch_all(AUDIT_LOGS, company["id"]) == []


class FailingStore:
    def create(self, collection, data, company_id=None):
        raise StoreError(ErrorCode.RESOURCE_EXHAUSTED)


def test_log_action_failure_does_not_raise():
    audit = AuditLogger(FailingStore(), USER, "c1")
    assert audit.log_action(ACTION_CREATE, EMPLOYEES, "e1") is None


def test_recent_newest_first_per_company(store, company, other_company):
    audit = AuditLogger(store, USER, company["id"])
    for name in ["Ana", "Bruno", "Carla"]:
        audit.log_action(ACTION_CREATE, EMPLOYEES, entity_name=name)
    AuditLogger(store, USER, other_company["id"]).log_action(ACTION_CREATE, EMPLOYEES, entity_name="Outro")

    entries = audit.recent(limit=2)

    assert [e["entityName"] for e in entries] == ["Carla", "Bruno"]
    assert [e["entityName"] for e in audit.recent(other_company["id"])] == ["Outro"]
