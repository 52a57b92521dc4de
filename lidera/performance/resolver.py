# lidera/performance/resolver.py
"""
Employee resolution for evaluations.

Evaluations reference employees by id, but imported history often only
carries an employee code or a name. Resolution order:

1. exact employee id
2. normalized employee code (from employeeCode, or an employeeId that is
   really a code)
3. case-insensitive, whitespace-collapsed name

When nothing matches, a placeholder is built from the evaluation's own
name/sector/role snapshot. The resolution key is `id:<employee id>` for
matches and `name:<normalized name>` for placeholders, so two spellings
of an unmatched name become two employees. There is no fuzzy matching.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .constants import DEFAULT_LEVEL, DEFAULT_STATUS, UNKNOWN_EMPLOYEE, UNDEFINED
from .parsing import normalize_code, normalize_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedEmployee:
    """Outcome of resolving one evaluation."""
    key: str
    name: str
    employee: Optional[Dict[str, Any]]

    @property
    def matched(self) -> bool:
        return self.employee is not None

    @property
    def employee_id(self) -> Optional[str]:
        return self.employee.get('id') if self.employee else None

    @property
    def status(self) -> str:
        if not self.employee:
            return DEFAULT_STATUS
        return self.employee.get('status') or DEFAULT_STATUS


def evaluation_name(evaluation: Dict[str, Any]) -> str:
    return str(evaluation.get('employeeName') or evaluation.get('displayName') or '').strip()


class EmployeeResolver:
    """
    Lookup tables over the tenant's employees.

    Usage:
        resolver = EmployeeResolver(employees)
        resolved = resolver.resolve(evaluation)
        resolved.key        # 'id:abc123' or 'name:ana souza'
    """

    def __init__(self, employees: List[Dict[str, Any]]):
        self.by_id: Dict[str, Dict] = {}
        self.by_code: Dict[str, Dict] = {}
        self.by_name: Dict[str, Dict] = {}

        # first record wins on duplicated codes or names
        for emp in employees or []:
            emp_id = emp.get('id')
            if emp_id and emp_id not in self.by_id:
                self.by_id[emp_id] = emp

            code = normalize_code(emp.get('employeeCode'))
            if code and code not in self.by_code:
                self.by_code[code] = emp

            name = normalize_name(emp.get('name'))
            if name and name not in self.by_name:
                self.by_name[name] = emp

    def match(self, evaluation: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Authoritative employee record for an evaluation, or None."""
        emp_id = evaluation.get('employeeId')
        if isinstance(emp_id, str) and emp_id in self.by_id:
            return self.by_id[emp_id]

        for candidate in (evaluation.get('employeeCode'), emp_id):
            code = normalize_code(candidate)
            if code and code in self.by_code:
                return self.by_code[code]

        name = normalize_name(evaluation_name(evaluation))
        if name and name in self.by_name:
            return self.by_name[name]

        return None

    def resolve(self, evaluation: Dict[str, Any]) -> ResolvedEmployee:
        employee = self.match(evaluation)
        if employee is not None:
            return ResolvedEmployee(
                key=f"id:{employee.get('id')}",
                name=employee.get('name') or evaluation_name(evaluation) or UNKNOWN_EMPLOYEE,
                employee=employee,
            )

        name = evaluation_name(evaluation) or UNKNOWN_EMPLOYEE
        return ResolvedEmployee(
            key=f"name:{normalize_name(name)}",
            name=name,
            employee=None,
        )

    def resolve_all(self, evaluations: List[Dict[str, Any]]) -> List[ResolvedEmployee]:
        resolved = [self.resolve(ev) for ev in evaluations]
        unmatched = sum(1 for r in resolved if not r.matched)
        if unmatched:
            logger.debug(f"{unmatched}/{len(resolved)} evaluations resolved to name placeholders")
        return resolved


def current_assignment(resolved: ResolvedEmployee, evaluation: Dict[str, Any]) -> Dict[str, str]:
    """Sector / role / level from the employee record, falling back to the evaluation snapshot."""
    emp = resolved.employee or {}
    return {
        'sector': emp.get('sector') or evaluation.get('sector') or UNDEFINED,
        'role': emp.get('role') or evaluation.get('role') or UNDEFINED,
        'level': emp.get('jobLevel') or evaluation.get('level') or evaluation.get('type') or DEFAULT_LEVEL,
    }


__all__ = [
    'EmployeeResolver',
    'ResolvedEmployee',
    'evaluation_name',
    'current_assignment',
]
