# lidera/performance/evaluations.py
"""
Evaluation form and bulk-edit operations.

Builds evaluation records from form input (clamped scores, average
rounded to 2 decimals, first-of-month reference date) and applies edits,
bulk level changes and bulk deletes. Bulk operations go through a single
store batch: all records change or none do.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from ..store import DocumentStore, EVALUATIONS
from .constants import DEFAULT_LEVEL, HIGHLIGHT_NO, HIGHLIGHT_YES, LEVELS
from .models import Evaluation
from .parsing import average_of, clamp_score, month_key, reference_date

logger = logging.getLogger(__name__)


def previous_month(today: date = None) -> str:
    """Default reference month of the form: the month before today, 'YYYY-MM'."""
    today = today or date.today()
    if today.month == 1:
        return f"{today.year - 1}-12"
    return f"{today.year}-{today.month - 1:02d}"


def active_criteria(criteria: List[Dict[str, Any]], level: str, company_id: str = None) -> List[Dict[str, Any]]:
    """Criteria of a level visible to the company (empty companyIds = every company)."""
    result = []
    for criterion in criteria or []:
        if criterion.get('type') != level:
            continue
        company_ids = criterion.get('companyIds') or []
        if company_id and company_ids and company_id not in company_ids:
            continue
        result.append(criterion)
    return result


def resolve_level(employee: Dict[str, Any], roles: List[Dict[str, Any]]) -> str:
    """Level of the employee's role, then the employee's own jobLevel, else Operacional."""
    role_id = employee.get('roleId')
    role_name = employee.get('role')
    for role in roles or []:
        if (role_id and role.get('id') == role_id) or (role_name and role.get('name') == role_name):
            if role.get('level'):
                return role['level']
    return employee.get('jobLevel') or DEFAULT_LEVEL


def build_evaluation(
    employee: Dict[str, Any],
    month: str,
    scores: Dict[str, Any],
    level: str = None,
    criteria: List[Dict[str, Any]] = None,
    observations: str = '',
    highlight: bool = False,
    highlight_reason: str = '',
    company_id: str = None
) -> Dict[str, Any]:
    """
    New evaluation record from form input.

    Args:
        employee: Employee record being evaluated
        month: Reference month 'YYYY-MM'
        scores: Criterion name -> score
        level: Evaluation level (form type)
        criteria: Active criteria; unscored ones are saved as 0
        observations: Free text
        highlight: Selected as employee of the month
        highlight_reason: Why the employee was highlighted
        company_id: Tenant, defaults to the employee's

    Raises:
        ValueError: missing employee, company or invalid month
    """
    if not employee or not employee.get('id'):
        raise ValueError("Selecione um colaborador.")

    tenant = company_id or employee.get('companyId')
    if not tenant:
        raise ValueError("Selecione uma empresa.")

    key = month_key(month)
    if not key:
        raise ValueError("Mês de referência inválido.")

    details = {name: clamp_score(value) for name, value in (scores or {}).items()}
    for criterion in criteria or []:
        details.setdefault(criterion.get('name'), 0.0)

    return Evaluation(
        companyId=tenant,
        employeeId=employee['id'],
        employeeName=employee.get('name', ''),
        role=employee.get('role', ''),
        sector=employee.get('sector', ''),
        type=level or DEFAULT_LEVEL,
        date=reference_date(key),
        average=average_of(details),
        details=details,
        observations=(observations or '').strip(),
        funcionarioMes=HIGHLIGHT_YES if highlight else HIGHLIGHT_NO,
        motivoDestaque=(highlight_reason or '').strip() if highlight else '',
        createdAt=datetime.now().isoformat(),
    ).to_record()


def apply_edit(
    record: Dict[str, Any],
    scores: Dict[str, Any] = None,
    observations: str = None,
    highlight: bool = None,
    highlight_reason: str = None
) -> Dict[str, Any]:
    """
    Changes for an edited evaluation.

    Identity fields (employee, date, company) never change; the average is
    recomputed only from the edited scores.
    """
    changes: Dict[str, Any] = {}

    if scores is not None:
        details = {name: clamp_score(value) for name, value in scores.items()}
        changes['details'] = details
        changes['average'] = average_of(details)

    if observations is not None:
        changes['observations'] = observations.strip()

    if highlight is not None:
        changes['funcionarioMes'] = HIGHLIGHT_YES if highlight else HIGHLIGHT_NO
        if not highlight:
            changes['motivoDestaque'] = ''

    if highlight_reason is not None and (highlight or (highlight is None and record.get('funcionarioMes') == HIGHLIGHT_YES)):
        changes['motivoDestaque'] = highlight_reason.strip()

    if changes:
        changes['updatedAt'] = datetime.now().isoformat()
    return changes


def find_existing(evaluations: Iterable[Dict[str, Any]], employee_id: str, month: str) -> Optional[Dict[str, Any]]:
    """Evaluation of the same employee in the same reference month, if any."""
    key = month_key(month)
    for ev in evaluations or []:
        if ev.get('employeeId') == employee_id and month_key(ev.get('date')) == key:
            return ev
    return None


def bulk_update_level(store: DocumentStore, ids: List[str], level: str, company_id: str = None) -> int:
    """Set `type` on every selected evaluation in one batch."""
    if level not in LEVELS:
        raise ValueError(f"Nível inválido: {level}")
    if not ids:
        return 0

    with store.batch() as batch:
        for evaluation_id in ids:
            batch.update(EVALUATIONS, evaluation_id, {'type': level}, company_id)

    logger.info(f"✏️ {len(ids)} evaluations moved to level {level}")
    return len(ids)


def bulk_delete(store: DocumentStore, ids: List[str], company_id: str = None) -> int:
    """Delete every selected evaluation in one batch."""
    if not ids:
        return 0

    with store.batch() as batch:
        for evaluation_id in ids:
            batch.delete(EVALUATIONS, evaluation_id, company_id)

    logger.info(f"🗑️ {len(ids)} evaluations deleted")
    return len(ids)


__all__ = [
    'previous_month',
    'active_criteria',
    'resolve_level',
    'build_evaluation',
    'apply_edit',
    'find_existing',
    'bulk_update_level',
    'bulk_delete',
]
