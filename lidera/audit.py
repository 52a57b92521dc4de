# lidera/audit.py
"""
Audit trail for user actions.

Every create / update / delete / import / export done through the pages is
written to the audit_logs collection with the acting user and the
field-level changes. Writing a log entry never interrupts the user flow.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from .config import config
from .store import AUDIT_LOGS, DocumentStore

logger = logging.getLogger(__name__)

ACTION_CREATE = 'create'
ACTION_UPDATE = 'update'
ACTION_DELETE = 'delete'
ACTION_VIEW = 'view'
ACTION_EXPORT = 'export'
ACTION_IMPORT = 'import'

ACTIONS = [ACTION_CREATE, ACTION_UPDATE, ACTION_DELETE, ACTION_VIEW, ACTION_EXPORT, ACTION_IMPORT]

ACTION_LABELS = {
    ACTION_CREATE: '➕ Criação',
    ACTION_UPDATE: '✏️ Alteração',
    ACTION_DELETE: '🗑️ Exclusão',
    ACTION_VIEW: '👁️ Visualização',
    ACTION_EXPORT: '📤 Exportação',
    ACTION_IMPORT: '📥 Importação',
}

IGNORED_FIELDS = {'id', 'updatedAt', 'createdAt', 'companyId'}


def diff_records(old: Optional[Dict[str, Any]], new: Optional[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """
    Field-level changes between two versions of a record.

    Returns:
        {field: {'old': value, 'new': value}} for every field that differs
    """
    old = old or {}
    new = new or {}
    changes = {}
    for name in sorted(set(old) | set(new)):
        if name in IGNORED_FIELDS:
            continue
        if old.get(name) != new.get(name):
            changes[name] = {'old': old.get(name), 'new': new.get(name)}
    return changes


class AuditLogger:
    """
    Usage:
        audit = AuditLogger(store, user, company_id)
        audit.log_action('update', 'employees', emp_id,
                         entity_name=emp['name'], changes=diff_records(old, new))
    """

    def __init__(self, store: DocumentStore, user: Dict[str, Any] = None, company_id: str = None):
        """
        Args:
            store: DocumentStore instance
            user: Current user dict (id, email, name) from AuthManager.get_current_user()
            company_id: Current company
        """
        self.store = store
        self.user = user or {}
        self.company_id = company_id

    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: str = None,
        entity_name: str = '',
        changes: Dict[str, Dict[str, Any]] = None,
        metadata: Dict[str, Any] = None
    ) -> Optional[str]:
        """
        Write one audit entry.

        Skipped when auditing is disabled, when there is no logged user or
        no current company. Failures are logged and swallowed.

        Returns:
            Audit log id, or None when nothing was written
        """
        if not config.is_feature_enabled('audit_log'):
            return None
        if not self.user.get('id') or not self.company_id:
            return None

        entry = {
            'userId': self.user.get('id'),
            'userEmail': self.user.get('email', ''),
            'userName': self.user.get('name') or self.user.get('email', ''),
            'action': action,
            'entityType': entity_type,
            'entityId': entity_id,
            'entityName': entity_name or '',
            'changes': changes or {},
            'metadata': metadata or {},
            'timestamp': datetime.now(),
        }

        try:
            log_id = self.store.create(AUDIT_LOGS, entry, self.company_id)
            logger.debug(f"Audit: {action} {entity_type}/{entity_id}")
            return log_id
        except Exception as e:
            logger.error(f"Error writing audit log ({action} {entity_type}/{entity_id}): {e}")
            return None

    def recent(self, company_id: str = None, limit: int = 100) -> List[Dict[str, Any]]:
        """Latest audit entries of a company, newest first."""
        page = self.store.fetch_page(AUDIT_LOGS, company_id or self.company_id, None, limit)
        return page.items


__all__ = [
    'AuditLogger',
    'diff_records',
    'ACTIONS',
    'ACTION_LABELS',
    'ACTION_CREATE',
    'ACTION_UPDATE',
    'ACTION_DELETE',
    'ACTION_VIEW',
    'ACTION_EXPORT',
    'ACTION_IMPORT',
]
