import pytest

from lidera.performance.goals import GoalService, describe_goal, resolve_goal, specificity
from lidera.store import GOALS


GOALS_LIST = [
    {"id": "g0", "goalValue": 8.0},
    {"id": "g1", "level": "Tático", "goalValue": 8.2},
    {"id": "g2", "roleId": "r1", "goalValue": 8.4},
    {"id": "g3", "sectorId": "s1", "goalValue": 8.6},
    {"id": "g4", "sectorId": "s1", "roleId": "r1", "goalValue": 9.5},
]


def test_specificity_order():
    assert [specificity(g) for g in GOALS_LIST] == [0, 1, 2, 3, 4]
    assert specificity({"level": "Geral"}) == 0


@pytest.mark.parametrize("sector_id, role_id, level, expected", [
    ("s1", "r1", None, 9.5),
    ("s1", "r2", None, 8.6),
    ("s2", "r1", None, 8.4),
    ("s2", "r2", "Tático", 8.2),
    ("s2", "r2", "Operacional", 8.0),
    (None, None, None, 8.0),
])
def test_most_specific_goal_wins(sector_id, role_id, level, expected):
    assert resolve_goal(GOALS_LIST, sector_id, role_id, level) == expected


def test_default_goal_without_matches():
    assert resolve_goal([]) == 9.0
    assert resolve_goal([{"sectorId": "s9", "goalValue": 7}], "s1") == 9.0
    assert resolve_goal([], default=7.5) == 7.5


def test_describe_goal_uses_lookup_names():
    label = describe_goal(GOALS_LIST[4], {"s1": "Vendas"}, {"r1": "Caixa"})
    assert label == "Setor: Vendas • Cargo: Caixa"
    assert describe_goal(GOALS_LIST[0]) == "Meta geral da empresa"


def test_service_replaces_goal_with_same_scope(store, company):
    service = GoalService(store, company["id"])

    first = service.save(8.0, sector_id="s1")
    second = service.save("8,8", sector_id="s1", level="Geral")

    goals = store.fetch_all(GOALS, company["id"])
    assert first == second
    assert len(goals) == 1
    assert goals[0]["goalValue"] == 8.8
    assert service.goal_value_for(sector_id="s1") == 8.8
    assert service.goal_value_for(sector_id="s2") == 9.0


def test_service_rejects_out_of_range(store, company):
    with pytest.raises(ValueError):
        GoalService(store, company["id"]).save(11)


def test_service_delete(store, company):
    service = GoalService(store, company["id"])
    goal_id = service.save(7.0)

    service.delete(goal_id)

    assert service.list() == []
