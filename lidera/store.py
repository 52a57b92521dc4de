# lidera/store.py
"""
Document Store Client

Thin wrapper issuing create / read / update / delete, equality-filtered
reads and cursor pagination against named collections. Every collection
lives in the single `documents` table; records are schema-less dicts
returned as {'id': ..., **data}.

Tenant scoping:
- most collections are filtered by equality on companyId
- companies, users and user_roles are global
- evaluation_criteria is filtered by membership in its companyIds list
  (an empty list means the criterion is shared by every company)

Usage:
    store = DocumentStore()
    employees = store.fetch_all('employees', company_id)
    page = store.fetch_page('evaluations', company_id, cursor=None, page_size=20)

    with store.batch() as batch:
        for doc_id in selected_ids:
            batch.update('evaluations', doc_id, {'type': 'Líder'})
"""

import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from .db import documents, get_db_engine, get_transaction
from .errors import ErrorCode, StoreError, from_sqlalchemy

logger = logging.getLogger(__name__)

# =============================================================================
# COLLECTIONS
# =============================================================================

EMPLOYEES = 'employees'
EVALUATIONS = 'evaluations'
SECTORS = 'sectors'
ROLES = 'roles'
CRITERIA = 'evaluation_criteria'
COMPANIES = 'companies'
USERS = 'users'
USER_ROLES = 'user_roles'
GOALS = 'performance_goals'
AUDIT_LOGS = 'audit_logs'

TENANT_GLOBAL_COLLECTIONS = {COMPANIES, USERS, USER_ROLES}

# collection -> list field holding the company ids allowed to see a record
MEMBERSHIP_COLLECTIONS = {CRITERIA: 'companyIds'}

TENANT_FIELD = 'companyId'


def is_tenant_scoped(collection: str) -> bool:
    return collection not in TENANT_GLOBAL_COLLECTIONS and collection not in MEMBERSHIP_COLLECTIONS


def _jsonable(value: Any) -> Any:
    """Make dates and nested containers safe for the JSON column."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(v) for v in value]
    return value


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Page:
    """One page of a paginated read."""
    items: List[Dict[str, Any]]
    next_cursor: Optional[int]
    has_more: bool


# =============================================================================
# STORE
# =============================================================================

class DocumentStore:
    """Collection-oriented CRUD over the documents table."""

    def __init__(self, engine: Engine = None):
        self._engine = engine

    @property
    def engine(self) -> Engine:
        """Lazy load database engine."""
        if self._engine is None:
            self._engine = get_db_engine()
        return self._engine

    # =========================================================================
    # READS
    # =========================================================================

    def fetch_all(self, collection: str, company_id: str = None) -> List[Dict[str, Any]]:
        """Load every record of a collection visible to the company."""
        stmt = self._scoped_select(collection, company_id).order_by(documents.c.seq)
        rows = self._read(stmt, f"fetch_all({collection})")
        records = [self._to_record(row) for row in rows]
        records = self._apply_membership(collection, company_id, records)
        logger.debug(f"fetch_all({collection}, {company_id}) returned {len(records)} records")
        return records

    def fetch_page(
        self,
        collection: str,
        company_id: str = None,
        cursor: Optional[int] = None,
        page_size: int = 20
    ) -> Page:
        """
        Load one page, newest first.

        Args:
            collection: Collection name
            company_id: Tenant filter (ignored for global collections)
            cursor: next_cursor of the previous page, None for the first
            page_size: Maximum items in the page

        Returns:
            Page with items, next_cursor and has_more
        """
        if page_size <= 0:
            raise StoreError(ErrorCode.FAILED_PRECONDITION, "Tamanho de página inválido.")

        stmt = self._scoped_select(collection, company_id)
        if cursor is not None:
            stmt = stmt.where(documents.c.seq < cursor)
        stmt = stmt.order_by(documents.c.seq.desc()).limit(page_size + 1)

        rows = list(self._read(stmt, f"fetch_page({collection})"))
        has_more = len(rows) > page_size
        rows = rows[:page_size]

        items = self._apply_membership(collection, company_id, [self._to_record(r) for r in rows])
        next_cursor = rows[-1].seq if rows and has_more else None

        return Page(items=items, next_cursor=next_cursor, has_more=has_more)

    def query(self, collection: str, company_id: str = None, **equals) -> List[Dict[str, Any]]:
        """Equality-filtered read: every keyword must match the record field."""
        records = self.fetch_all(collection, company_id)
        return [r for r in records if all(r.get(k) == v for k, v in equals.items())]

    def exists(self, collection: str, company_id: str = None, **equals) -> bool:
        return bool(self.query(collection, company_id, **equals))

    def get(self, collection: str, doc_id: str, company_id: str = None) -> Dict[str, Any]:
        """Load one record by id, NOT_FOUND when missing."""
        stmt = select(documents).where(
            documents.c.collection == collection,
            documents.c.id == doc_id
        )
        rows = list(self._read(stmt, f"get({collection})"))
        if not rows:
            raise StoreError(ErrorCode.NOT_FOUND, details={'collection': collection, 'id': doc_id})
        row = rows[0]
        self._check_tenant(collection, row, company_id)
        return self._to_record(row)

    # =========================================================================
    # WRITES
    # =========================================================================

    def create(
        self,
        collection: str,
        data: Dict[str, Any],
        company_id: str = None,
        doc_id: str = None
    ) -> str:
        """Insert a record and return its generated id."""
        return self._write(
            lambda conn: self._insert(conn, collection, data, company_id, doc_id),
            f"create({collection})"
        )

    def update(
        self,
        collection: str,
        doc_id: str,
        changes: Dict[str, Any],
        company_id: str = None
    ) -> Dict[str, Any]:
        """Merge changes into an existing record and return the result."""
        return self._write(
            lambda conn: self._merge(conn, collection, doc_id, changes, company_id),
            f"update({collection})"
        )

    def set(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        company_id: str = None
    ) -> str:
        """Create or fully replace the record with the given id."""
        def op(conn):
            row = self._find_row(conn, collection, doc_id)
            if row is None:
                return self._insert(conn, collection, data, company_id, doc_id)
            self._check_tenant(collection, row, company_id)
            payload = self._payload(collection, data, company_id or row.company_id)
            conn.execute(
                documents.update()
                .where(documents.c.seq == row.seq)
                .values(data=payload, company_id=payload.get(TENANT_FIELD), updated_at=datetime.now())
            )
            return doc_id

        return self._write(op, f"set({collection})")

    def delete(self, collection: str, doc_id: str, company_id: str = None):
        """Delete a record, NOT_FOUND when missing."""
        self._write(
            lambda conn: self._remove(conn, collection, doc_id, company_id),
            f"delete({collection})"
        )

    @contextmanager
    def batch(self):
        """
        Queue writes and commit them atomically on exit.

        Any failure rolls back every queued write and raises one StoreError.
        """
        write_batch = WriteBatch(self)
        yield write_batch
        write_batch.commit()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _scoped_select(self, collection: str, company_id: Optional[str]):
        stmt = select(documents).where(documents.c.collection == collection)
        if company_id and is_tenant_scoped(collection):
            stmt = stmt.where(documents.c.company_id == company_id)
        return stmt

    @staticmethod
    def _apply_membership(collection: str, company_id: Optional[str], records: List[Dict]) -> List[Dict]:
        list_field = MEMBERSHIP_COLLECTIONS.get(collection)
        if not list_field or not company_id:
            return records
        return [r for r in records if not r.get(list_field) or company_id in r.get(list_field)]

    @staticmethod
    def _to_record(row) -> Dict[str, Any]:
        record = dict(row.data or {})
        record['id'] = row.id
        return record

    @staticmethod
    def _check_tenant(collection: str, row, company_id: Optional[str]):
        if company_id and is_tenant_scoped(collection) and row.company_id != company_id:
            raise StoreError(
                ErrorCode.PERMISSION_DENIED,
                details={'collection': collection, 'id': row.id, 'company_id': company_id}
            )

    @staticmethod
    def _payload(collection: str, data: Dict[str, Any], company_id: Optional[str]) -> Dict[str, Any]:
        payload = {k: v for k, v in data.items() if k != 'id'}
        tenant = company_id or payload.get(TENANT_FIELD)
        if is_tenant_scoped(collection):
            if not tenant:
                raise StoreError(
                    ErrorCode.FAILED_PRECONDITION,
                    "Selecione uma empresa antes de salvar.",
                    details={'collection': collection}
                )
            payload[TENANT_FIELD] = tenant
        return _jsonable(payload)

    def _read(self, stmt, operation: str):
        try:
            with self.engine.connect() as conn:
                return conn.execute(stmt).fetchall()
        except SQLAlchemyError as e:
            logger.error(f"Error executing {operation}: {e}")
            raise from_sqlalchemy(e, operation) from e

    def _write(self, op, operation: str):
        try:
            with get_transaction(self.engine) as conn:
                return op(conn)
        except SQLAlchemyError as e:
            logger.error(f"Error executing {operation}: {e}")
            raise from_sqlalchemy(e, operation) from e

    @staticmethod
    def _find_row(conn: Connection, collection: str, doc_id: str):
        return conn.execute(
            select(documents).where(
                documents.c.collection == collection,
                documents.c.id == doc_id
            )
        ).fetchone()

    def _insert(self, conn: Connection, collection: str, data: Dict[str, Any],
                company_id: Optional[str], doc_id: Optional[str]) -> str:
        payload = self._payload(collection, data, company_id)
        doc_id = doc_id or _new_id()
        now = datetime.now()
        conn.execute(
            documents.insert().values(
                id=doc_id,
                collection=collection,
                company_id=payload.get(TENANT_FIELD) if is_tenant_scoped(collection) else None,
                data=payload,
                created_at=now,
                updated_at=now,
            )
        )
        return doc_id

    def _merge(self, conn: Connection, collection: str, doc_id: str,
               changes: Dict[str, Any], company_id: Optional[str]) -> Dict[str, Any]:
        row = self._find_row(conn, collection, doc_id)
        if row is None:
            raise StoreError(ErrorCode.NOT_FOUND, details={'collection': collection, 'id': doc_id})
        self._check_tenant(collection, row, company_id)

        merged = dict(row.data or {})
        merged.update(_jsonable({k: v for k, v in changes.items() if k != 'id'}))
        conn.execute(
            documents.update()
            .where(documents.c.seq == row.seq)
            .values(data=merged, updated_at=datetime.now())
        )
        merged['id'] = doc_id
        return merged

    def _remove(self, conn: Connection, collection: str, doc_id: str, company_id: Optional[str]):
        row = self._find_row(conn, collection, doc_id)
        if row is None:
            raise StoreError(ErrorCode.NOT_FOUND, details={'collection': collection, 'id': doc_id})
        self._check_tenant(collection, row, company_id)
        conn.execute(documents.delete().where(documents.c.seq == row.seq))


@dataclass
class WriteBatch:
    """Writes queued by DocumentStore.batch(), applied in one transaction."""
    store: DocumentStore
    operations: List[Tuple[str, tuple]] = field(default_factory=list)
    created_ids: List[str] = field(default_factory=list)

    def create(self, collection: str, data: Dict[str, Any], company_id: str = None) -> str:
        doc_id = _new_id()
        self.operations.append(('create', (collection, data, company_id, doc_id)))
        self.created_ids.append(doc_id)
        return doc_id

    def update(self, collection: str, doc_id: str, changes: Dict[str, Any], company_id: str = None):
        self.operations.append(('update', (collection, doc_id, changes, company_id)))

    def delete(self, collection: str, doc_id: str, company_id: str = None):
        self.operations.append(('delete', (collection, doc_id, company_id)))

    def __len__(self) -> int:
        return len(self.operations)

    def commit(self) -> int:
        """Apply every queued write or none of them."""
        if not self.operations:
            return 0

        store = self.store

        def apply_all(conn):
            for kind, args in self.operations:
                if kind == 'create':
                    store._insert(conn, *args)
                elif kind == 'update':
                    store._merge(conn, *args)
                else:
                    store._remove(conn, *args)
            return len(self.operations)

        count = store._write(apply_all, f"batch({len(self.operations)} ops)")
        logger.info(f"✅ Batch committed: {count} writes")
        self.operations = []
        return count


__all__ = [
    'DocumentStore',
    'WriteBatch',
    'Page',
    'is_tenant_scoped',
    'EMPLOYEES',
    'EVALUATIONS',
    'SECTORS',
    'ROLES',
    'CRITERIA',
    'COMPANIES',
    'USERS',
    'USER_ROLES',
    'GOALS',
    'AUDIT_LOGS',
    'TENANT_GLOBAL_COLLECTIONS',
    'MEMBERSHIP_COLLECTIONS',
]
