# lidera/performance/models.py
"""
Typed views over store records.

Records stay plain dicts in the store. Each dataclass names the fields the
app relies on; any other key is kept in `extras` and written back
unchanged by to_record().
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from .constants import DEFAULT_LEVEL, DEFAULT_STATUS, HIGHLIGHT_NO
from .parsing import evaluation_details, evaluation_score, parse_score


@dataclass
class RecordModel:
    """Base: field mapping plus the open `extras` map."""

    id: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def _field_names(cls) -> List[str]:
        return [f.name for f in fields(cls) if f.name != 'extras']

    @classmethod
    def from_record(cls, record: Dict[str, Any]):
        names = set(cls._field_names())
        known = {k: v for k, v in record.items() if k in names and v is not None}
        extras = {k: v for k, v in record.items() if k not in names}
        return cls(**known, extras=extras)

    def to_record(self) -> Dict[str, Any]:
        record = dict(self.extras)
        for name in self._field_names():
            value = getattr(self, name)
            if name == 'id' and value is None:
                continue
            record[name] = value
        return record


@dataclass
class Employee(RecordModel):
    name: str = ''
    employeeCode: Optional[str] = None
    email: str = ''
    sector: str = ''
    role: str = ''
    status: str = DEFAULT_STATUS
    admissionDate: Optional[str] = None
    terminationDate: Optional[str] = None
    behavioralProfile: Optional[str] = None
    photoUrl: Optional[str] = None
    jobLevel: Optional[str] = None
    companyId: Optional[str] = None


@dataclass
class Evaluation(RecordModel):
    employeeId: Optional[str] = None
    employeeName: str = ''
    role: str = ''
    sector: str = ''
    type: str = DEFAULT_LEVEL
    date: str = ''
    details: Dict[str, float] = field(default_factory=dict)
    average: float = 0.0
    observations: str = ''
    funcionarioMes: str = HIGHLIGHT_NO
    motivoDestaque: str = ''
    companyId: Optional[str] = None
    createdAt: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]):
        model = super().from_record(record)
        model.details = evaluation_details(record)
        model.average = evaluation_score(record)
        return model


@dataclass
class Criterion(RecordModel):
    name: str = ''
    type: str = DEFAULT_LEVEL
    section: str = ''
    description: str = ''
    companyIds: List[str] = field(default_factory=list)


@dataclass
class Sector(RecordModel):
    name: str = ''
    manager: str = ''
    companyId: Optional[str] = None


@dataclass
class Role(RecordModel):
    name: str = ''
    level: str = DEFAULT_LEVEL
    cbo: str = ''
    companyId: Optional[str] = None


@dataclass
class Company(RecordModel):
    name: str = ''


@dataclass
class PerformanceGoal(RecordModel):
    goalValue: float = 0.0
    sectorId: Optional[str] = None
    roleId: Optional[str] = None
    level: Optional[str] = None
    companyId: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]):
        model = super().from_record(record)
        model.goalValue = parse_score(record.get('goalValue'))
        return model


@dataclass
class AuditLog(RecordModel):
    userId: Optional[str] = None
    userEmail: str = ''
    userName: str = ''
    action: str = ''
    entityType: str = ''
    entityId: Optional[str] = None
    entityName: str = ''
    changes: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: Optional[str] = None
    companyId: Optional[str] = None


__all__ = [
    'RecordModel',
    'Employee',
    'Evaluation',
    'Criterion',
    'Sector',
    'Role',
    'Company',
    'PerformanceGoal',
    'AuditLog',
]
