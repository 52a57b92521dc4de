# lidera/performance/importer.py
"""
CSV Import for registers and evaluation history

Targets:
- criteria, sectors, roles, employees (column mapping guessed from headers)
- evaluations_leaders, evaluations_collaborators (one row per evaluation)
- evaluations_gomes (long layout: one row per metric, grouped per
  employee + month, creating missing sectors, roles, criteria and employees)

Rows failing required fields are skipped and counted. Duplicates against
the store and within the same file are skipped. Everything that survives
is written in one batch.

Usage:
    importer = CsvImporter(store, company_id)
    result = importer.import_file('evaluations_collaborators', uploaded_file)
    st.success(f"{result.imported} importados, {result.skipped} ignorados")
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from ..store import DocumentStore, CRITERIA, EMPLOYEES, EVALUATIONS, ROLES, SECTORS
from .constants import (
    LEVEL_COLLABORATOR,
    LEVEL_LEADER,
    STATUS_ACTIVE,
)
from .parsing import (
    average_of,
    clamp_score,
    clean_text,
    normalize_code,
    normalize_name,
    parse_reference_month,
)
from .resolver import EmployeeResolver

logger = logging.getLogger(__name__)

# =============================================================================
# TARGETS
# =============================================================================

IMPORT_TARGETS = {
    'criteria': 'Critérios de Avaliação',
    'sectors': 'Setores',
    'roles': 'Cargos',
    'employees': 'Funcionários',
    'evaluations_leaders': 'Histórico (Líderes)',
    'evaluations_collaborators': 'Histórico (Colaboradores)',
    'evaluations_gomes': 'Histórico Completo (Layout Gomes)',
}

LEADER_DETAIL_COLUMNS = {
    'Comunicacao_Clara_Coerente': 'Comunicação',
    'Acompanhamento_Membros_Equipe': 'Gestão de Equipe',
    'Cumprimento_Metas_Setor': 'Metas',
    'Capacidade_Decisao_Resolucao': 'Decisão',
    'Assiduidade_Pontualidade_Lider': 'Assiduidade',
}

COLLABORATOR_DETAIL_COLUMNS = {
    'Assiduidade_Pontualidade': 'Assiduidade',
    'Cumprimento_Tarefas': 'Tarefas',
    'Proatividade': 'Proatividade',
    'Organizacao_Limpeza': 'Organização',
    'Uso_Uniforme_EPI': 'Uniforme',
}

CRITERIA_CATEGORY_LEVELS = {
    'Operadores': LEVEL_COLLABORATOR,
    'Líderes': LEVEL_LEADER,
}

EMPLOYEE_HEADER_CANDIDATES = {
    'name': ['colaborador', 'nome', 'name', 'funcionario'],
    'email': ['email', 'e-mail'],
    'sector': ['setor', 'depart', 'area'],
    'role': ['cargo', 'funcao', 'função', 'role'],
}


@dataclass
class ImportResult:
    imported: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)
    created: Dict[str, int] = field(default_factory=dict)

    def summary(self) -> str:
        text = f"{self.imported} registros importados ({self.skipped} ignorados)."
        extras = [f"{count} {name}" for name, count in self.created.items() if count]
        if extras:
            text += f" Criados automaticamente: {', '.join(extras)}."
        return text


def _first(row: Dict[str, Any], *columns: str) -> str:
    """First non-empty value among candidate columns."""
    for column in columns:
        value = clean_text(row.get(column))
        if value:
            return value
    return ''


def guess_employee_mapping(headers: List[str]) -> Dict[str, str]:
    """Pick the CSV header for each employee field by substring match."""
    lowered = [h.lower() for h in headers]
    mapping = {}
    for target, candidates in EMPLOYEE_HEADER_CANDIDATES.items():
        mapping[target] = ''
        for header, low in zip(headers, lowered):
            if any(c in low for c in candidates):
                mapping[target] = header
                break
    return mapping


def read_csv(source) -> List[Dict[str, str]]:
    """UTF-8 CSV with header row into a list of string dicts."""
    df = pd.read_csv(source, dtype=str, keep_default_na=False, encoding='utf-8-sig', skip_blank_lines=True)
    df.columns = [str(c).strip() for c in df.columns]
    return df.to_dict('records')


# =============================================================================
# IMPORTER
# =============================================================================

class CsvImporter:
    """Per-target CSV import for one company."""

    def __init__(self, store: DocumentStore, company_id: str = None):
        self.store = store
        self.company_id = company_id

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    def import_file(self, target: str, source, mapping: Dict[str, str] = None) -> ImportResult:
        rows = read_csv(source)
        logger.info(f"📥 Importing {len(rows)} rows into {target}")
        return self.import_rows(target, rows, mapping)

    def import_rows(self, target: str, rows: List[Dict[str, Any]], mapping: Dict[str, str] = None) -> ImportResult:
        """
        Import parsed CSV rows.

        Raises:
            ValueError: unknown target or no company selected for tenant data
            StoreError: the batch write failed (nothing was written)
        """
        if target not in IMPORT_TARGETS:
            raise ValueError(f"Destino de importação desconhecido: {target}")
        if target != 'criteria' and not self.company_id:
            raise ValueError("Selecione uma empresa antes de importar dados.")

        if target == 'evaluations_gomes':
            result = self._import_gomes(rows)
        elif target == 'employees':
            result = self._import_employees(rows, mapping or guess_employee_mapping(list(rows[0].keys()) if rows else []))
        else:
            result = self._import_simple(target, rows)

        logger.info(f"✅ Import {target}: {result.imported} imported, {result.skipped} skipped")
        return result

    # =========================================================================
    # ROW MAPPERS
    # =========================================================================

    @staticmethod
    def _map_criterion(row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        level = CRITERIA_CATEGORY_LEVELS.get(_first(row, 'Categoria_Avaliacao'))
        raw_name = _first(row, 'ID_Avaliacao')
        if not level or not raw_name:
            return None
        return {
            'name': raw_name.replace('_', ' '),
            'type': level,
            'section': _first(row, 'Secao', 'Seção', 'Categoria'),
            'description': '',
            'companyIds': [],
        }

    @staticmethod
    def _map_sector(row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        name = _first(row, 'Nome_Setor', 'Setor', 'Nome')
        if not name:
            return None
        return {'name': name, 'manager': _first(row, 'Gestor', 'Responsavel', 'Responsável')}

    @staticmethod
    def _map_role(row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        name = _first(row, 'Nome_Cargo', 'Cargo', 'Nome')
        if not name:
            return None
        return {
            'name': name,
            'level': _first(row, 'Nível', 'Nivel') or LEVEL_COLLABORATOR,
            'cbo': _first(row, 'CBO'),
        }

    @staticmethod
    def _map_history(row: Dict[str, Any], leaders: bool) -> Optional[Dict[str, Any]]:
        code = _first(row, 'ID_Funcionario')
        if leaders:
            name = _first(row, 'Nome_Lider_Avaliado', 'Nome_Colaborador')
            columns, final_column, level = LEADER_DETAIL_COLUMNS, 'Pontuacao_Lider', LEVEL_LEADER
        else:
            name = _first(row, 'Nome_Colaborador') or (f"Func. {code}" if code else '')
            columns, final_column, level = COLLABORATOR_DETAIL_COLUMNS, 'Pontuacao_Colaborador', LEVEL_COLLABORATOR

        date = parse_reference_month(_first(row, 'Mes_Referencia'))
        if not name or not date:
            return None

        details = {label: clamp_score(row.get(column)) for column, label in columns.items()}
        final = _first(row, final_column)

        return {
            'employeeName': name,
            'employeeCode': code,
            'role': _first(row, 'Cargo'),
            'sector': _first(row, 'Setor'),
            'type': level,
            'date': date,
            'average': round(clamp_score(final), 2) if final else average_of(details),
            'details': details,
        }

    # =========================================================================
    # SIMPLE TARGETS
    # =========================================================================

    def _import_simple(self, target: str, rows: List[Dict[str, Any]]) -> ImportResult:
        mappers: Dict[str, Tuple[str, Callable]] = {
            'criteria': (CRITERIA, self._map_criterion),
            'sectors': (SECTORS, self._map_sector),
            'roles': (ROLES, self._map_role),
            'evaluations_leaders': (EVALUATIONS, lambda r: self._map_history(r, leaders=True)),
            'evaluations_collaborators': (EVALUATIONS, lambda r: self._map_history(r, leaders=False)),
        }
        collection, mapper = mappers[target]
        is_evaluation = collection == EVALUATIONS

        existing = self.store.fetch_all(collection, self.company_id)
        seen = {self._dedup_key(collection, record) for record in existing}
        resolver = EmployeeResolver(self.store.fetch_all(EMPLOYEES, self.company_id)) if is_evaluation else None

        result = ImportResult()
        now = datetime.now().isoformat()

        with self.store.batch() as batch:
            for line, row in enumerate(rows, start=2):
                data = mapper(row)
                if data is None:
                    result.skipped += 1
                    result.errors.append(f"Linha {line}: campos obrigatórios ausentes")
                    continue

                key = self._dedup_key(collection, data)
                if key in seen:
                    result.skipped += 1
                    continue
                seen.add(key)

                if is_evaluation:
                    employee = resolver.match(data)
                    data['employeeId'] = employee['id'] if employee else None
                    data['companyId'] = self.company_id
                    data['importedAt'] = now
                else:
                    data['importedAt'] = now
                    data['source'] = 'csv-import'

                batch.create(collection, data, None if collection == CRITERIA else self.company_id)
                result.imported += 1

        return result

    # =========================================================================
    # EMPLOYEES
    # =========================================================================

    def _import_employees(self, rows: List[Dict[str, Any]], mapping: Dict[str, str]) -> ImportResult:
        result = ImportResult(created={'setores': 0, 'cargos': 0})
        if not mapping.get('name'):
            result.skipped = len(rows)
            result.errors.append("Coluna de nome não identificada no arquivo.")
            return result

        seen = {normalize_name(e.get('name')) for e in self.store.fetch_all(EMPLOYEES, self.company_id)}
        sectors = self._index_by_name(SECTORS)
        roles = self._index_by_name(ROLES)
        now = datetime.now().isoformat()

        with self.store.batch() as batch:
            for line, row in enumerate(rows, start=2):
                name = clean_text(row.get(mapping['name']))
                if not name:
                    result.skipped += 1
                    result.errors.append(f"Linha {line}: nome ausente")
                    continue
                if normalize_name(name) in seen:
                    result.skipped += 1
                    continue
                seen.add(normalize_name(name))

                sector = clean_text(row.get(mapping.get('sector'))) if mapping.get('sector') else ''
                role = clean_text(row.get(mapping.get('role'))) if mapping.get('role') else ''

                sector_id = self._ensure(batch, SECTORS, sectors, sector, {'name': sector, 'manager': ''}, result, 'setores')
                role_id = self._ensure(batch, ROLES, roles, role, {'name': role, 'level': LEVEL_COLLABORATOR}, result, 'cargos')

                batch.create(EMPLOYEES, {
                    'name': name,
                    'email': clean_text(row.get(mapping.get('email'))) if mapping.get('email') else '',
                    'sector': sector,
                    'role': role,
                    'sectorId': sector_id,
                    'roleId': role_id,
                    'status': STATUS_ACTIVE,
                    'importedAt': now,
                    'source': 'csv-import',
                }, self.company_id)
                result.imported += 1

        return result

    # =========================================================================
    # LONG LAYOUT (one row per metric)
    # =========================================================================

    def _import_gomes(self, rows: List[Dict[str, Any]]) -> ImportResult:
        result = ImportResult(created={'setores': 0, 'cargos': 0, 'critérios': 0, 'funcionários': 0})

        sectors = self._index_by_name(SECTORS)
        roles = self._index_by_name(ROLES)
        criteria = {
            (normalize_name(c.get('name')), c.get('type')): c['id']
            for c in self.store.fetch_all(CRITERIA, self.company_id)
        }
        employees = self.store.fetch_all(EMPLOYEES, self.company_id)
        employees_by_code = {normalize_code(e.get('employeeCode')): e['id'] for e in employees if e.get('employeeCode')}
        employees_by_name = {normalize_name(e.get('name')): e['id'] for e in employees}

        existing = {
            self._dedup_key(EVALUATIONS, ev)
            for ev in self.store.fetch_all(EVALUATIONS, self.company_id)
        }
        now = datetime.now().isoformat()
        grouped: Dict[Tuple[str, str], Dict[str, Any]] = {}

        with self.store.batch() as batch:
            for line, row in enumerate(rows, start=2):
                name = _first(row, 'Nome_Colaborador', 'Nome')
                date = parse_reference_month(_first(row, 'Mes_Referencia'))
                if not name or not date:
                    result.skipped += 1
                    result.errors.append(f"Linha {line}: nome ou mês de referência ausente")
                    continue

                metric = _first(row, 'Nome_Metrica')
                sector = _first(row, 'Setor')
                role = _first(row, 'Cargo')
                level = _first(row, 'Nivel', 'Nível') or LEVEL_COLLABORATOR
                code = _first(row, 'ID_Avaliacao')

                sector_id = self._ensure(batch, SECTORS, sectors, sector, {'name': sector, 'manager': ''}, result, 'setores')
                role_id = self._ensure(batch, ROLES, roles, role, {'name': role, 'level': level}, result, 'cargos')

                if metric and (normalize_name(metric), level) not in criteria:
                    criteria[(normalize_name(metric), level)] = batch.create(CRITERIA, {
                        'name': metric,
                        'type': level,
                        'section': 'Geral',
                        'description': 'Importado automaticamente',
                        'companyIds': [self.company_id],
                        'importedAt': now,
                    })
                    result.created['critérios'] += 1

                employee_id = employees_by_code.get(normalize_code(code)) if code else None
                employee_id = employee_id or employees_by_name.get(normalize_name(name))
                if not employee_id:
                    employee_id = batch.create(EMPLOYEES, {
                        'name': name,
                        'employeeCode': code,
                        'sector': sector,
                        'role': role,
                        'sectorId': sector_id,
                        'roleId': role_id,
                        'jobLevel': level,
                        'status': STATUS_ACTIVE,
                        'importedAt': now,
                        'source': 'gomes-import',
                    }, self.company_id)
                    result.created['funcionários'] += 1
                    if code:
                        employees_by_code[normalize_code(code)] = employee_id
                    employees_by_name[normalize_name(name)] = employee_id

                group = grouped.setdefault((normalize_name(name), date), {
                    'employeeName': name,
                    'employeeId': employee_id,
                    'employeeCode': code,
                    'role': role,
                    'sector': sector,
                    'type': level,
                    'date': date,
                    'details': {},
                })
                if metric:
                    group['details'][metric] = clamp_score(row.get('Nota'))

            for (name_key, date), group in grouped.items():
                if (name_key, date) in existing:
                    result.skipped += 1
                    continue
                group['average'] = average_of(group['details'])
                group['companyId'] = self.company_id
                group['importedAt'] = now
                group['source'] = 'gomes-full-import'
                batch.create(EVALUATIONS, group, self.company_id)
                result.imported += 1

        return result

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _dedup_key(collection: str, record: Dict[str, Any]):
        if collection == EVALUATIONS:
            return normalize_name(record.get('employeeName')), parse_reference_month(record.get('date')) or record.get('date')
        if collection == CRITERIA:
            return normalize_name(record.get('name')), record.get('type')
        return normalize_name(record.get('name'))

    def _index_by_name(self, collection: str) -> Dict[str, str]:
        return {normalize_name(r.get('name')): r['id'] for r in self.store.fetch_all(collection, self.company_id)}

    def _ensure(self, batch, collection: str, index: Dict[str, str], name: str,
                data: Dict[str, Any], result: ImportResult, counter: str) -> str:
        """Id of the named record, queuing its creation when missing."""
        if not name:
            return ''
        key = normalize_name(name)
        if key not in index:
            index[key] = batch.create(collection, {**data, 'importedAt': datetime.now().isoformat()}, self.company_id)
            result.created[counter] += 1
        return index[key]


__all__ = [
    'CsvImporter',
    'ImportResult',
    'IMPORT_TARGETS',
    'guess_employee_mapping',
    'read_csv',
]
