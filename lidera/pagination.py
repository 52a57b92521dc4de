# lidera/pagination.py
"""
Cursor-based "load more" state for incremental list loading.

A Paginator lives in st.session_state between reruns:

    if 'eval_pager' not in st.session_state:
        st.session_state.eval_pager = Paginator(page_size=20)
    pager = st.session_state.eval_pager

    if st.button("Carregar mais", disabled=not pager.can_load_more):
        pager.load_more(lambda cursor, limit: store.fetch_page('evaluations', company_id, cursor, limit))

States: idle -> loading -> loaded (has_more) | exhausted.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from .store import Page

logger = logging.getLogger(__name__)

IDLE = 'idle'
LOADING = 'loading'
LOADED = 'loaded'
EXHAUSTED = 'exhausted'

FetchFn = Callable[[Optional[Any], int], Page]


class Paginator:
    """Accumulates pages and keeps the cursor for the next one."""

    def __init__(self, page_size: int = 20, initial_load: int = None):
        self.page_size = page_size
        self.initial_load = initial_load or page_size
        self.reset()

    def reset(self):
        self.items: List[Dict[str, Any]] = []
        self.cursor = None
        self.has_more = True
        self.state = IDLE
        self.error: Optional[Exception] = None
        self._latch = False

    @property
    def loading(self) -> bool:
        return self.state == LOADING

    @property
    def can_load_more(self) -> bool:
        return self.has_more and not self._latch

    def load_more(self, fetch_fn: FetchFn) -> bool:
        """
        Fetch the next page and append it.

        Returns False without calling fetch_fn while a load is in flight or
        the list is exhausted. A failing fetch is kept in `error` and the
        previous state is restored.
        """
        if self._latch or not self.has_more:
            return False

        self._latch = True
        previous_state = self.state
        self.state = LOADING
        self.error = None

        try:
            limit = self.initial_load if not self.items else self.page_size
            page = fetch_fn(self.cursor, limit)

            self.items.extend(page.items)
            self.cursor = page.next_cursor
            self.has_more = page.has_more
            self.state = LOADED if page.has_more else EXHAUSTED
            return True
        except Exception as e:
            logger.error(f"Error loading page: {e}")
            self.error = e
            self.state = previous_state
            return False
        finally:
            self._latch = False

    # ==================== LOCAL MUTATIONS ====================

    def prepend(self, item: Dict[str, Any]):
        self.items.insert(0, item)

    def update_item(self, item_id: str, updates: Dict[str, Any]):
        self.items = [
            {**item, **updates} if item.get('id') == item_id else item
            for item in self.items
        ]

    def remove_item(self, item_id: str):
        self.items = [item for item in self.items if item.get('id') != item_id]

    def remove_items(self, item_ids):
        ids = set(item_ids)
        self.items = [item for item in self.items if item.get('id') not in ids]

    def __len__(self) -> int:
        return len(self.items)


__all__ = ['Paginator', 'IDLE', 'LOADING', 'LOADED', 'EXHAUSTED']
