# lidera/performance/registers.py
"""
Master-data registers (criteria, sectors, roles, employees, companies).

Each register is described by an EntityConfig: the collection, the form
fields and which CSV import target feeds it. RegisterService does the
validation and the writes for the generic CRUD page, records an audit
entry and drops the cached collection after every change.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..audit import AuditLogger, ACTION_CREATE, ACTION_DELETE, ACTION_UPDATE, diff_records
from ..errors import StoreError, get_user_message
from ..store import (
    DocumentStore,
    COMPANIES,
    CRITERIA,
    EMPLOYEES,
    ROLES,
    SECTORS,
    is_tenant_scoped,
)
from .constants import DEFAULT_LEVEL, DEFAULT_STATUS, LEVELS, STATUSES
from .parsing import normalize_name
from .queries import EvaluationQueries

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

FIELD_TEXT = 'text'
FIELD_EMAIL = 'email'
FIELD_DATE = 'date'
FIELD_SELECT = 'select'
FIELD_TEXTAREA = 'textarea'


@dataclass
class FieldSpec:
    key: str
    label: str
    kind: str = FIELD_TEXT
    options: List[str] = field(default_factory=list)
    linked_collection: Optional[str] = None
    required: bool = False
    default: Any = ''


@dataclass
class EntityConfig:
    collection: str
    title: str
    fields: List[FieldSpec]
    import_target: Optional[str] = None
    help_text: str = ''
    master_only: bool = False

    @property
    def name_field(self) -> str:
        return self.fields[0].key

    @property
    def columns(self) -> Dict[str, str]:
        return {f.key: f.label for f in self.fields}


REGISTERS: Dict[str, EntityConfig] = {
    'criteria': EntityConfig(
        collection=CRITERIA,
        title="Critérios de Avaliação",
        import_target='criteria',
        help_text='Defina as perguntas que aparecerão no formulário, separadas por nível.',
        fields=[
            FieldSpec('name', 'Competência / Pergunta', required=True),
            FieldSpec('type', 'Público Alvo', FIELD_SELECT, options=LEVELS, default=DEFAULT_LEVEL),
            FieldSpec('section', 'Seção'),
            FieldSpec('description', 'Descrição da Competência', FIELD_TEXTAREA),
        ],
    ),
    'sectors': EntityConfig(
        collection=SECTORS,
        title="Setores",
        import_target='sectors',
        fields=[
            FieldSpec('name', 'Nome do Setor', required=True),
            FieldSpec('manager', 'Gestor Responsável'),
        ],
    ),
    'roles': EntityConfig(
        collection=ROLES,
        title="Cargos",
        import_target='roles',
        help_text='O nível hierárquico do cargo define qual formulário de avaliação é aberto.',
        fields=[
            FieldSpec('name', 'Título do Cargo', required=True),
            FieldSpec('level', 'Nível Hierárquico', FIELD_SELECT, options=LEVELS, default=DEFAULT_LEVEL),
            FieldSpec('cbo', 'CBO (Opcional)'),
        ],
    ),
    'employees': EntityConfig(
        collection=EMPLOYEES,
        title="Funcionários",
        import_target='employees',
        fields=[
            FieldSpec('name', 'Nome Completo', required=True),
            FieldSpec('employeeCode', 'Matrícula'),
            FieldSpec('email', 'Email Corporativo', FIELD_EMAIL),
            FieldSpec('sector', 'Setor', FIELD_SELECT, linked_collection=SECTORS),
            FieldSpec('role', 'Cargo', FIELD_SELECT, linked_collection=ROLES),
            FieldSpec('admissionDate', 'Data de Admissão', FIELD_DATE, default=None),
            FieldSpec('terminationDate', 'Data de Desligamento', FIELD_DATE, default=None),
            FieldSpec('status', 'Status', FIELD_SELECT, options=STATUSES, default=DEFAULT_STATUS),
            FieldSpec('behavioralProfile', 'Perfil Comportamental', FIELD_TEXTAREA),
        ],
    ),
    'companies': EntityConfig(
        collection=COMPANIES,
        title="Empresas",
        master_only=True,
        fields=[
            FieldSpec('name', 'Nome da Empresa', required=True),
        ],
    ),
}


def linked_options(config: EntityConfig, queries: EvaluationQueries) -> Dict[str, List[str]]:
    """Option lists of select fields backed by another collection."""
    options = {}
    for spec in config.fields:
        if spec.linked_collection:
            names = [r.get('name', '') for r in queries.get_collection(spec.linked_collection)]
            options[spec.key] = sorted({n for n in names if n})
    return options


def validate_record(config: EntityConfig, values: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate form values.

    Returns:
        Tuple of (is_valid, error_message)
    """
    for spec in config.fields:
        value = values.get(spec.key)
        if spec.required and not (isinstance(value, str) and value.strip()):
            return False, f"O campo '{spec.label}' é obrigatório."
        if spec.kind == FIELD_EMAIL and value and not EMAIL_RE.match(str(value).strip()):
            return False, f"Email inválido: {value}"
        if spec.kind == FIELD_SELECT and spec.options and value and value not in spec.options:
            return False, f"Valor inválido para '{spec.label}': {value}"
    return True, None


class RegisterService:
    """
    Generic CRUD for one register.

    Usage:
        service = RegisterService(store, company_id, audit)
        ok, msg, record_id = service.save(REGISTERS['sectors'], {'name': 'Vendas'})
    """

    def __init__(self, store: DocumentStore, company_id: str = None, audit: AuditLogger = None):
        self.store = store
        self.company_id = company_id
        self.audit = audit

    def list(self, config: EntityConfig) -> List[Dict[str, Any]]:
        return EvaluationQueries(self.store, self.company_id).get_collection(config.collection)

    def _is_duplicate(self, config: EntityConfig, values: Dict[str, Any], record_id: str = None) -> bool:
        name = normalize_name(values.get(config.name_field))
        for record in self.list(config):
            if record['id'] == record_id:
                continue
            if normalize_name(record.get(config.name_field)) != name:
                continue
            # criteria are unique per name + level
            if config.collection == CRITERIA and record.get('type') != values.get('type'):
                continue
            return True
        return False

    def _clean(self, config: EntityConfig, values: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = {}
        for spec in config.fields:
            value = values.get(spec.key, spec.default)
            if isinstance(value, str):
                value = value.strip()
            cleaned[spec.key] = value
        return cleaned

    def save(
        self,
        config: EntityConfig,
        values: Dict[str, Any],
        record_id: str = None
    ) -> Tuple[bool, str, Optional[str]]:
        """
        Create (record_id=None) or update a record.

        Returns:
            Tuple of (success, message, record_id)
        """
        data = self._clean(config, values)
        is_valid, error = validate_record(config, data)
        if not is_valid:
            return False, error, None

        if self._is_duplicate(config, data, record_id):
            return False, f"Já existe um registro com o nome '{data[config.name_field]}'.", None

        try:
            if record_id:
                old = self.store.get(config.collection, record_id, self._scope(config))
                data['updatedAt'] = datetime.now()
                new = self.store.update(config.collection, record_id, data, self._scope(config))
                self._log(ACTION_UPDATE, config, record_id, data[config.name_field], diff_records(old, new))
                message = "✅ Registro atualizado com sucesso"
            else:
                if config.collection == CRITERIA and self.company_id:
                    data['companyIds'] = [self.company_id]
                data['createdAt'] = datetime.now()
                record_id = self.store.create(config.collection, data, self._scope(config))
                self._log(ACTION_CREATE, config, record_id, data[config.name_field], diff_records(None, data))
                message = "✅ Registro criado com sucesso"
        except StoreError as e:
            logger.error(f"Error saving {config.collection}: {e}")
            return False, get_user_message(e), None

        EvaluationQueries.invalidate(self._cache_company(config), config.collection)
        logger.info(f"💾 {config.collection} saved: {record_id}")
        return True, message, record_id

    def delete(self, config: EntityConfig, record: Dict[str, Any]) -> Tuple[bool, str]:
        try:
            self.store.delete(config.collection, record['id'], self._scope(config))
        except StoreError as e:
            logger.error(f"Error deleting {config.collection}/{record.get('id')}: {e}")
            return False, get_user_message(e)

        self._log(ACTION_DELETE, config, record['id'], record.get(config.name_field, ''), diff_records(record, None))
        EvaluationQueries.invalidate(self._cache_company(config), config.collection)
        logger.info(f"🗑️ {config.collection} deleted: {record['id']}")
        return True, "🗑️ Registro excluído"

    def _scope(self, config: EntityConfig) -> Optional[str]:
        return self.company_id if is_tenant_scoped(config.collection) else None

    def _cache_company(self, config: EntityConfig) -> Optional[str]:
        # tenant-global collections are cached under company None
        return None if config.collection == COMPANIES else self.company_id

    def _log(self, action: str, config: EntityConfig, record_id: str, name: str, changes: Dict):
        if self.audit:
            self.audit.log_action(action, config.collection, record_id, entity_name=name, changes=changes)


__all__ = [
    'FieldSpec',
    'EntityConfig',
    'REGISTERS',
    'RegisterService',
    'linked_options',
    'validate_record',
    'FIELD_TEXT',
    'FIELD_EMAIL',
    'FIELD_DATE',
    'FIELD_SELECT',
    'FIELD_TEXTAREA',
]
