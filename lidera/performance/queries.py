# lidera/performance/queries.py
"""
Data Loading for Performance Evaluations

Handles all store reads for one tenant:
- Employees, evaluations, goals (tenant-scoped)
- Sectors, roles, criteria (lookup data)
- Companies (tenant-global)

Reads go through a module-level st.cache_data loader keyed by
(company, collection, generation). Invalidating bumps the generation of the
matching keys, so switching away from a tenant only drops that tenant's
entries and switching back reloads nothing else.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Set, Tuple

import streamlit as st

from ..config import config
from ..store import (
    DocumentStore,
    COMPANIES,
    CRITERIA,
    EMPLOYEES,
    EVALUATIONS,
    GOALS,
    ROLES,
    SECTORS,
    Page,
)
from .constants import CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)

CacheKey = Tuple[Optional[str], str]

CACHE_TTL = config.get_app_setting('CACHE_TTL_SECONDS', CACHE_TTL_SECONDS)

# Generation per (company, collection); bumped on invalidate
_generations: Dict[CacheKey, int] = {}
# Keys loaded since their last invalidation
_loaded: Set[CacheKey] = set()
_lock = threading.Lock()


# =============================================================================
# CACHED QUERY FUNCTIONS (Module-level for st.cache_data)
# =============================================================================

@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def _load_collection_cached(
    _store: DocumentStore,
    company_id: Optional[str],
    collection: str,
    generation: int,
) -> List[Dict[str, Any]]:
    """
    Cached read of one collection for one tenant.

    Note: _store is not hashed; generation changes the key after invalidate.
    """
    records = _store.fetch_all(collection, company_id)
    logger.debug(f"Loaded {len(records)} {collection} for company {company_id} (gen {generation})")
    return records


class EvaluationQueries:
    """
    Data loading class for one company.

    Usage:
        queries = EvaluationQueries(store, company_id)

        evaluations = queries.get_evaluations()
        employees = queries.get_employees()

        # After a write
        EvaluationQueries.invalidate(company_id, EVALUATIONS)
    """

    def __init__(self, store: DocumentStore, company_id: str = None):
        """
        Initialize with store and tenant.

        Args:
            store: DocumentStore instance
            company_id: Current company (None only for tenant-global reads)
        """
        self.store = store
        self.company_id = company_id

    # =========================================================================
    # TENANT DATA
    # =========================================================================

    def get_employees(self) -> List[Dict[str, Any]]:
        return self._cached(EMPLOYEES)

    def get_evaluations(self) -> List[Dict[str, Any]]:
        return self._cached(EVALUATIONS)

    def get_goals(self) -> List[Dict[str, Any]]:
        return self._cached(GOALS)

    def get_evaluations_page(self, cursor: Optional[int], limit: int) -> Page:
        """One page of evaluations, newest first. Not cached."""
        return self.store.fetch_page(EVALUATIONS, self.company_id, cursor, limit)

    # =========================================================================
    # LOOKUP DATA
    # =========================================================================

    def get_sectors(self) -> List[Dict[str, Any]]:
        return self._cached(SECTORS)

    def get_roles(self) -> List[Dict[str, Any]]:
        return self._cached(ROLES)

    def get_criteria(self) -> List[Dict[str, Any]]:
        return self._cached(CRITERIA)

    def get_companies(self) -> List[Dict[str, Any]]:
        return self._cached(COMPANIES, tenant_global=True)

    def get_lookup_maps(self) -> Dict[str, Dict[str, str]]:
        """id -> name maps for sectors and roles (goal labels, selectors)."""
        return {
            'sectors': {s['id']: s.get('name', '') for s in self.get_sectors()},
            'roles': {r['id']: r.get('name', '') for r in self.get_roles()},
        }

    def get_collection(self, collection: str) -> List[Dict[str, Any]]:
        return self._cached(collection, tenant_global=(collection == COMPANIES))

    # =========================================================================
    # CACHE
    # =========================================================================

    def _cached(self, collection: str, tenant_global: bool = False) -> List[Dict[str, Any]]:
        company_id = None if tenant_global else self.company_id
        key = (company_id, collection)
        with _lock:
            generation = _generations.get(key, 0)
            _loaded.add(key)
        return _load_collection_cached(self.store, company_id, collection, generation)

    @classmethod
    def invalidate(cls, company_id: str = None, collection: str = None):
        """
        Drop cached entries.

        Args:
            company_id: Only this tenant's entries (None = every tenant)
            collection: Only this collection (None = every collection)
        """
        with _lock:
            if company_id is None and collection is None:
                _load_collection_cached.clear()
                _generations.clear()
                _loaded.clear()
                return
            for key in list(_loaded):
                cached_company, cached_collection = key
                if company_id is not None and cached_company != company_id:
                    continue
                if collection is not None and cached_collection != collection:
                    continue
                _generations[key] = _generations.get(key, 0) + 1
                _loaded.discard(key)

    @classmethod
    def cached_keys(cls) -> List[CacheKey]:
        with _lock:
            return sorted(_loaded, key=lambda k: (k[0] or '', k[1]))


__all__ = ['EvaluationQueries']
