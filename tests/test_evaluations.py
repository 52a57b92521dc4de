from datetime import date

import pytest

from lidera.errors import StoreError
from lidera.performance.evaluations import (
    active_criteria,
    apply_edit,
    build_evaluation,
    bulk_delete,
    bulk_update_level,
    find_existing,
    previous_month,
    resolve_level,
)
from lidera.store import EVALUATIONS


EMPLOYEE = {"id": "e1", "name": "Ana Souza", "sector": "Vendas", "role": "Vendedora",
            "roleId": "r1", "companyId": "c1"}

CRITERIA = [
    {"id": "k1", "name": "Comunicação", "type": "Operacional", "companyIds": []},
    {"id": "k2", "name": "Metas", "type": "Operacional", "companyIds": ["c1"]},
    {"id": "k3", "name": "Postura", "type": "Operacional", "companyIds": ["c2"]},
    {"id": "k4", "name": "Visão", "type": "Estratégico", "companyIds": []},
]


@pytest.mark.parametrize("today, expected", [
    (date(2024, 3, 15), "2024-02"),
    (date(2024, 1, 2), "2023-12"),
    (date(2024, 11, 30), "2024-10"),
])
def test_previous_month(today, expected):
    assert previous_month(today) == expected


def test_active_criteria_filters_level_and_company():
    names = [c["name"] for c in active_criteria(CRITERIA, "Operacional", "c1")]
    assert names == ["Comunicação", "Metas"]
    assert [c["name"] for c in active_criteria(CRITERIA, "Estratégico", "c1")] == ["Visão"]


def test_resolve_level_from_role_then_employee():
    roles = [{"id": "r1", "name": "Vendedora", "level": "Tático"}]

    assert resolve_level(EMPLOYEE, roles) == "Tático"
    assert resolve_level({**EMPLOYEE, "roleId": None, "role": "Vendedora"}, roles) == "Tático"
    assert resolve_level({"jobLevel": "Líder"}, roles) == "Líder"
    assert resolve_level({}, []) == "Operacional"


def test_build_evaluation_record():
    record = build_evaluation(
        EMPLOYEE, "2024-02", {"Comunicação": 8, "Metas": "7,5"},
        level="Operacional", criteria=CRITERIA[:2],
        observations="  bom mês ", highlight=True, highlight_reason=" liderou a equipe "
    )

    assert record["companyId"] == "c1"
    assert record["employeeId"] == "e1"
    assert record["date"] == "2024-02-01"
    assert record["type"] == "Operacional"
    assert record["details"] == {"Comunicação": 8.0, "Metas": 7.5}
    assert record["average"] == 7.75
    assert record["observations"] == "bom mês"
    assert record["funcionarioMes"] == "Sim"
    assert record["motivoDestaque"] == "liderou a equipe"


def test_build_evaluation_fills_unscored_criteria_and_clamps():
    record = build_evaluation(EMPLOYEE, "2024-02", {"Comunicação": 12}, criteria=CRITERIA[:2])

    assert record["details"] == {"Comunicação": 10.0, "Metas": 0.0}
    assert record["average"] == 5.0
    assert record["funcionarioMes"] == "Não"
    assert record["motivoDestaque"] == ""


def test_build_evaluation_validation():
    with pytest.raises(ValueError):
        build_evaluation({}, "2024-02", {})
    with pytest.raises(ValueError):
        build_evaluation({"id": "e1", "name": "Ana"}, "2024-02", {})
    with pytest.raises(ValueError):
        build_evaluation(EMPLOYEE, "fevereiro", {})


def test_apply_edit_recomputes_average():
    record = {"details": {"a": 5.0, "b": 5.0}, "average": 5.0, "funcionarioMes": "Não"}

    changes = apply_edit(record, scores={"a": 9, "b": 8})

    assert changes["details"] == {"a": 9.0, "b": 8.0}
    assert changes["average"] == 8.5
    assert "updatedAt" in changes
    assert "employeeId" not in changes


def test_apply_edit_clears_reason_when_unhighlighted():
    record = {"funcionarioMes": "Sim", "motivoDestaque": "antigo"}

    assert apply_edit(record, highlight=False)["motivoDestaque"] == ""
    assert apply_edit(record, highlight_reason="novo")["motivoDestaque"] == "novo"
    assert apply_edit(record) == {}


def test_find_existing_same_month():
    evaluations = [{"id": "v1", "employeeId": "e1", "date": "2024-02-01"}]

    assert find_existing(evaluations, "e1", "2024-02")["id"] == "v1"
    assert find_existing(evaluations, "e1", "2024-03") is None
    assert find_existing(evaluations, "e2", "2024-02") is None


def test_bulk_update_level(store, company, seeded_evaluations):
    ids = [ev["id"] for ev in seeded_evaluations[:2]]

    assert bulk_update_level(store, ids, "Líder", company["id"]) == 2

    levels = {ev["id"]: ev["type"] for ev in store.fetch_all(EVALUATIONS, company["id"])}
    assert levels[ids[0]] == levels[ids[1]] == "Líder"
    assert levels[seeded_evaluations[2]["id"]] == "Operacional"


def test_bulk_update_rejects_unknown_level(store, company, seeded_evaluations):
    with pytest.raises(ValueError):
        bulk_update_level(store, [seeded_evaluations[0]["id"]], "Diretor", company["id"])


def test_bulk_delete_is_atomic(store, company, seeded_evaluations):
    ids = [ev["id"] for ev in seeded_evaluations[:2]]

    with pytest.raises(StoreError):
        bulk_delete(store, ids + ["missing"], company["id"])
    assert len(store.fetch_all(EVALUATIONS, company["id"])) == 6

    assert bulk_delete(store, ids, company["id"]) == 2
    assert len(store.fetch_all(EVALUATIONS, company["id"])) == 4
    assert bulk_delete(store, [], company["id"]) == 0
