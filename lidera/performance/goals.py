# lidera/performance/goals.py
"""
Performance goals per company.

A goal may be scoped by sector, role and/or level. The most specific
matching goal wins: (sector + role) > sector > role > level > unscoped
company default > DEFAULT_GOAL.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..store import DocumentStore, GOALS
from .constants import DEFAULT_GOAL, MAX_SCORE, MIN_SCORE
from .models import PerformanceGoal
from .parsing import parse_score

logger = logging.getLogger(__name__)

# 'Geral' in the level field means the goal is not level-scoped
GENERAL_LEVEL = 'Geral'


def _scope(goal: Dict[str, Any]) -> Dict[str, Optional[str]]:
    level = goal.get('level')
    return {
        'sectorId': goal.get('sectorId') or None,
        'roleId': goal.get('roleId') or None,
        'level': level if level and level != GENERAL_LEVEL else None,
    }


def specificity(goal: Dict[str, Any]) -> int:
    scope = _scope(goal)
    if scope['sectorId'] and scope['roleId']:
        return 4
    if scope['sectorId']:
        return 3
    if scope['roleId']:
        return 2
    if scope['level']:
        return 1
    return 0


def _matches(goal: Dict[str, Any], sector_id: Optional[str], role_id: Optional[str], level: Optional[str]) -> bool:
    scope = _scope(goal)
    wanted = {'sectorId': sector_id or None, 'roleId': role_id or None, 'level': level or None}
    return all(value is None or value == wanted[name] for name, value in scope.items())


def resolve_goal(
    goals: List[Dict[str, Any]],
    sector_id: str = None,
    role_id: str = None,
    level: str = None,
    default: float = DEFAULT_GOAL
) -> float:
    """
    Goal value for a sector / role / level combination.

    Returns the most specific matching goal, or `default` when nothing matches.
    """
    best = None
    for goal in goals or []:
        if not _matches(goal, sector_id, role_id, level):
            continue
        if best is None or specificity(goal) > specificity(best):
            best = goal

    if best is None:
        return default
    return parse_score(best.get('goalValue'))


def describe_goal(goal: Dict[str, Any], sectors: Dict[str, str] = None, roles: Dict[str, str] = None) -> str:
    """Human label of a goal's scope, e.g. 'Setor: Vendas • Cargo: Caixa'."""
    scope = _scope(goal)
    sectors = sectors or {}
    roles = roles or {}
    parts = []
    if scope['sectorId']:
        parts.append(f"Setor: {sectors.get(scope['sectorId'], scope['sectorId'])}")
    if scope['roleId']:
        parts.append(f"Cargo: {roles.get(scope['roleId'], scope['roleId'])}")
    if scope['level']:
        parts.append(f"Nível: {scope['level']}")
    return ' • '.join(parts) if parts else 'Meta geral da empresa'


class GoalService:
    """
    CRUD over performance_goals for one company.

    Usage:
        goals = GoalService(store, company_id)
        goals.save(8.5, sector_id=sector['id'])
        goals.goal_value_for(sector_id, role_id, level)
    """

    def __init__(self, store: DocumentStore, company_id: str, default: float = DEFAULT_GOAL):
        self.store = store
        self.company_id = company_id
        self.default = default

    def list(self) -> List[Dict[str, Any]]:
        return self.store.fetch_all(GOALS, self.company_id)

    def save(self, goal_value: Any, sector_id: str = None, role_id: str = None, level: str = None) -> str:
        """
        Create or update the goal with exactly this scope.

        Raises:
            ValueError: goal outside 0..10
        """
        value = parse_score(goal_value)
        if value < MIN_SCORE or value > MAX_SCORE:
            raise ValueError("A meta deve estar entre 0 e 10")

        data = PerformanceGoal(
            goalValue=value,
            sectorId=sector_id or None,
            roleId=role_id or None,
            level=level if level and level != GENERAL_LEVEL else None,
            companyId=self.company_id,
            extras={'updatedAt': datetime.now()},
        ).to_record()

        for goal in self.list():
            if _scope(goal) == _scope(data):
                self.store.update(GOALS, goal['id'], data, self.company_id)
                logger.info(f"🎯 Goal updated: {describe_goal(data)} = {value}")
                return goal['id']

        data['createdAt'] = datetime.now()
        goal_id = self.store.create(GOALS, data, self.company_id)
        logger.info(f"🎯 Goal created: {describe_goal(data)} = {value}")
        return goal_id

    def delete(self, goal_id: str):
        self.store.delete(GOALS, goal_id, self.company_id)

    def goal_value_for(self, sector_id: str = None, role_id: str = None, level: str = None) -> float:
        return resolve_goal(self.list(), sector_id, role_id, level, self.default)


__all__ = [
    'resolve_goal',
    'specificity',
    'describe_goal',
    'GoalService',
    'GENERAL_LEVEL',
]
