import pytest

from lidera.errors import ErrorCode, StoreError
from lidera.store import COMPANIES, CRITERIA, EMPLOYEES, EVALUATIONS, is_tenant_scoped


def test_create_and_get_returns_record_with_id(store, company):
    employee_id = store.create(EMPLOYEES, {"name": "Ana"}, company["id"])

    record = store.get(EMPLOYEES, employee_id, company["id"])

    assert record["id"] == employee_id
    assert record["name"] == "Ana"
    assert record["companyId"] == company["id"]


def test_tenant_scoped_create_requires_company(store):
    with pytest.raises(StoreError) as exc:
        store.create(EMPLOYEES, {"name": "Ana"})
    assert exc.value.code == ErrorCode.FAILED_PRECONDITION


def test_fetch_all_only_returns_company_records(store, company, other_company):
    store.create(EMPLOYEES, {"name": "Ana"}, company["id"])
    store.create(EMPLOYEES, {"name": "Zé"}, other_company["id"])

    names = [r["name"] for r in store.fetch_all(EMPLOYEES, company["id"])]

    assert names == ["Ana"]


def test_get_from_another_company_is_denied(store, company, other_company):
    employee_id = store.create(EMPLOYEES, {"name": "Ana"}, company["id"])

    with pytest.raises(StoreError) as exc:
        store.get(EMPLOYEES, employee_id, other_company["id"])
    assert exc.value.code == ErrorCode.PERMISSION_DENIED


def test_missing_record_is_not_found(store, company):
    with pytest.raises(StoreError) as exc:
        store.get(EMPLOYEES, "missing", company["id"])
    assert exc.value.code == ErrorCode.NOT_FOUND

    with pytest.raises(StoreError) as exc:
        store.delete(EMPLOYEES, "missing", company["id"])
    assert exc.value.code == ErrorCode.NOT_FOUND


def test_update_merges_and_returns_record(store, company):
    employee_id = store.create(EMPLOYEES, {"name": "Ana", "sector": "Vendas"}, company["id"])

    updated = store.update(EMPLOYEES, employee_id, {"sector": "Produção"}, company["id"])

    assert updated == {"id": employee_id, "name": "Ana", "sector": "Produção", "companyId": company["id"]}
    assert store.get(EMPLOYEES, employee_id)["sector"] == "Produção"


def test_companies_are_tenant_global(store, company, other_company):
    assert not is_tenant_scoped(COMPANIES)
    assert not is_tenant_scoped(CRITERIA)
    assert is_tenant_scoped(EVALUATIONS)

    names = sorted(c["name"] for c in store.fetch_all(COMPANIES, company["id"]))
    assert names == ["Alpha Ltda", "Beta SA"]


def test_criteria_visible_by_membership(store, company, other_company):
    store.create(CRITERIA, {"name": "Global", "companyIds": []})
    store.create(CRITERIA, {"name": "Só Alpha", "companyIds": [company["id"]]})
    store.create(CRITERIA, {"name": "Só Beta", "companyIds": [other_company["id"]]})

    names = sorted(c["name"] for c in store.fetch_all(CRITERIA, company["id"]))

    assert names == ["Global", "Só Alpha"]


def test_fetch_page_walks_newest_first(store, company):
    for i in range(5):
        store.create(EVALUATIONS, {"employeeName": f"E{i}"}, company["id"])

    first = store.fetch_page(EVALUATIONS, company["id"], None, 2)
    second = store.fetch_page(EVALUATIONS, company["id"], first.next_cursor, 2)
    last = store.fetch_page(EVALUATIONS, company["id"], second.next_cursor, 2)

    assert [r["employeeName"] for r in first.items] == ["E4", "E3"]
    assert [r["employeeName"] for r in second.items] == ["E2", "E1"]
    assert [r["employeeName"] for r in last.items] == ["E0"]
    assert first.has_more and second.has_more
    assert not last.has_more
    assert last.next_cursor is None


def test_fetch_page_rejects_invalid_size(store, company):
    with pytest.raises(StoreError):
        store.fetch_page(EVALUATIONS, company["id"], None, 0)


def test_query_filters_by_equality(store, company):
    store.create(EMPLOYEES, {"name": "Ana", "status": "Ativo"}, company["id"])
    store.create(EMPLOYEES, {"name": "Bruno", "status": "Férias"}, company["id"])

    assert [r["name"] for r in store.query(EMPLOYEES, company["id"], status="Férias")] == ["Bruno"]
    assert store.exists(EMPLOYEES, company["id"], name="Ana")
    assert not store.exists(EMPLOYEES, company["id"], name="Carla")


def test_batch_is_all_or_nothing(store, company):
    existing = store.create(EMPLOYEES, {"name": "Ana"}, company["id"])

    with pytest.raises(StoreError):
        with store.batch() as batch:
            batch.create(EMPLOYEES, {"name": "Bruno"}, company["id"])
            batch.update(EMPLOYEES, existing, {"name": "Ana Souza"}, company["id"])
            batch.delete(EMPLOYEES, "missing", company["id"])

    records = store.fetch_all(EMPLOYEES, company["id"])
    assert [r["name"] for r in records] == ["Ana"]


def test_batch_commits_every_write(store, company):
    with store.batch() as batch:
        first = batch.create(EMPLOYEES, {"name": "Ana"}, company["id"])
        batch.create(EMPLOYEES, {"name": "Bruno"}, company["id"])
        batch.update(EMPLOYEES, first, {"status": "Ativo"}, company["id"])

    records = store.fetch_all(EMPLOYEES, company["id"])
    assert [r["name"] for r in records] == ["Ana", "Bruno"]
    assert records[0]["status"] == "Ativo"


def test_set_creates_then_replaces(store, company):
    store.set(EMPLOYEES, "emp-1", {"name": "Ana", "sector": "Vendas"}, company["id"])
    store.set(EMPLOYEES, "emp-1", {"name": "Ana Souza"}, company["id"])

    record = store.get(EMPLOYEES, "emp-1", company["id"])
    assert record["name"] == "Ana Souza"
    assert "sector" not in record
