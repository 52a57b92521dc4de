# lidera/tenant.py
"""
Current company (tenant) of the session.

The selected company lives in st.session_state. Switching company drops the
cached data of the company being left and resets every paginator kept in
the session; the cache of other companies stays warm.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, MutableMapping, Optional

import streamlit as st

from .auth import ROLE_COMPANY
from .errors import ErrorCode, StoreError
from .pagination import Paginator
from .performance.queries import EvaluationQueries
from .store import COMPANIES, DocumentStore

logger = logging.getLogger(__name__)

CURRENT_COMPANY_KEY = 'current_company'


class TenantSession:
    """
    Usage:
        tenant = TenantSession(store, auth.get_current_user())
        companies = tenant.available_companies()
        tenant.select(companies[0])
        company_id = tenant.require_company()
    """

    def __init__(
        self,
        store: DocumentStore,
        user: Dict[str, Any] = None,
        state: MutableMapping = None
    ):
        """
        Args:
            store: DocumentStore instance
            user: Current user dict (role, company_id) from AuthManager
            state: Session mapping, st.session_state by default
        """
        self.store = store
        self.user = user or {}
        self.state = state if state is not None else st.session_state

    @property
    def current(self) -> Optional[Dict[str, Any]]:
        return self.state.get(CURRENT_COMPANY_KEY)

    @property
    def company_id(self) -> Optional[str]:
        company = self.current
        return company.get('id') if company else None

    @property
    def company_name(self) -> str:
        company = self.current
        return company.get('name', '') if company else ''

    def available_companies(self) -> List[Dict[str, Any]]:
        """Every company for masters, only the pinned one for company users."""
        companies = EvaluationQueries(self.store).get_companies()
        pinned = self.user.get('company_id')
        if self.user.get('role') == ROLE_COMPANY:
            return [c for c in companies if c['id'] == pinned]
        return companies

    def select(self, company: Optional[Dict[str, Any]]) -> bool:
        """
        Switch the session to another company.

        Returns:
            True when the company changed
        """
        new_id = company.get('id') if company else None
        old_id = self.company_id
        if new_id == old_id:
            return False

        if company and self.user.get('role') == ROLE_COMPANY and new_id != self.user.get('company_id'):
            raise StoreError(ErrorCode.PERMISSION_DENIED)

        if old_id:
            EvaluationQueries.invalidate(old_id)
        self._reset_paginators()

        if company:
            self.state[CURRENT_COMPANY_KEY] = {'id': new_id, 'name': company.get('name', '')}
        elif CURRENT_COMPANY_KEY in self.state:
            del self.state[CURRENT_COMPANY_KEY]

        logger.info(f"🏢 Company switched: {old_id} -> {new_id}")
        return True

    def ensure_default(self) -> Optional[Dict[str, Any]]:
        """Select the only available company when the session has none."""
        if self.current:
            return self.current
        companies = self.available_companies()
        if len(companies) == 1:
            self.select(companies[0])
        return self.current

    def require_company(self) -> str:
        """Current company id, or stop the page asking for a selection."""
        company_id = self.company_id
        if not company_id:
            st.warning("🏢 Selecione uma empresa na página inicial para continuar.")
            st.stop()
        return company_id

    def add_company(self, name: str) -> str:
        name = (name or '').strip()
        if not name:
            raise ValueError("Informe o nome da empresa.")
        if self.user.get('role') == ROLE_COMPANY:
            raise StoreError(ErrorCode.PERMISSION_DENIED)

        company_id = self.store.create(COMPANIES, {'name': name, 'createdAt': datetime.now()})
        EvaluationQueries.invalidate(None, COMPANIES)
        logger.info(f"🏢 Company created: {name}")
        return company_id

    def _reset_paginators(self):
        for key in list(self.state.keys()):
            value = self.state[key]
            if isinstance(value, Paginator):
                value.reset()


__all__ = ['TenantSession', 'CURRENT_COMPANY_KEY']
