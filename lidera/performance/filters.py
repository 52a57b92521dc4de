# lidera/performance/filters.py
"""
Sidebar Filter Components for Performance Evaluations

Renders filter UI elements:
- Name search
- Sector selector
- Period (start / end month)
- Employee status selector

Values are applied only when the user submits the form, so editing a
filter does not rerun every aggregation.
"""

import logging
from typing import Dict, List, Optional, Tuple

import streamlit as st

from .analytics import AnalyticsFilters
from .constants import STATUSES, PT_MONTH_NAMES

logger = logging.getLogger(__name__)

ALL_SECTORS = 'Todos os setores'


def month_options(periods: List[str]) -> List[str]:
    """'YYYY-MM' keys newest first, for the period selectors."""
    return sorted({p for p in periods if p}, reverse=True)


def format_month(key: str) -> str:
    """'2024-03' -> 'Março 2024'"""
    if not key:
        return '-'
    year, month = key.split('-')
    return f"{PT_MONTH_NAMES[int(month) - 1]} {year}"


def month_bounds(start_key: Optional[str], end_key: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Month keys to inclusive ISO date bounds.

    The end bound is the last day of the end month written as 'YYYY-MM-31';
    string comparison on ISO dates makes that inclusive for every month.
    """
    start = f"{start_key}-01" if start_key else None
    end = f"{end_key}-31" if end_key else None
    if start and end and start > end:
        start, end = f"{end_key}-01", f"{start_key}-31"
    return start, end


class EvaluationFilters:
    """
    Sidebar filter renderer.

    Usage:
        filters_ui = EvaluationFilters(key_prefix='dashboard')
        filters, submitted = filters_ui.render_filter_form(
            sectors=analytics.sectors(),
            periods=[row['period'] for row in analytics.all_rows]
        )
    """

    def __init__(self, key_prefix: str = 'filters'):
        self.key_prefix = key_prefix

    @property
    def _state_key(self) -> str:
        return f"{self.key_prefix}_applied"

    def render_filter_form(
        self,
        sectors: List[str],
        periods: List[str],
        show_status: bool = True
    ) -> Tuple[AnalyticsFilters, bool]:
        """
        Render filters inside a form - only applies when user clicks Apply.

        Args:
            sectors: Sector names present in the data
            periods: 'YYYY-MM' keys present in the data
            show_status: Whether to render the employee status selector

        Returns:
            Tuple of (AnalyticsFilters, submitted boolean)
        """
        applied: AnalyticsFilters = st.session_state.get(self._state_key) or AnalyticsFilters()
        months = month_options(periods)

        with st.sidebar:
            st.header("🎛️ Filtros")

            with st.form(f"{self.key_prefix}_form", border=False):
                search_term = st.text_input(
                    "🔍 Buscar colaborador",
                    value=applied.search_term,
                    placeholder="Nome do colaborador"
                )

                sector_options = [ALL_SECTORS] + list(sectors)
                sector_index = sector_options.index(applied.sector) if applied.sector in sector_options else 0
                sector = st.selectbox("🏢 Setor", options=sector_options, index=sector_index)

                st.markdown("**📅 Período**")
                col_start, col_end = st.columns(2)
                period_options = [''] + months
                with col_start:
                    start_key = st.selectbox(
                        "De",
                        options=period_options,
                        index=self._index_of(period_options, applied.date_start),
                        format_func=lambda k: format_month(k) if k else 'Início'
                    )
                with col_end:
                    end_key = st.selectbox(
                        "Até",
                        options=period_options,
                        index=self._index_of(period_options, applied.date_end),
                        format_func=lambda k: format_month(k) if k else 'Hoje'
                    )

                statuses: List[str] = []
                if show_status:
                    statuses = st.multiselect(
                        "👥 Status do colaborador",
                        options=STATUSES,
                        default=applied.statuses,
                        help="Avaliações sem cadastro de colaborador são ocultadas quando um status é selecionado"
                    )

                submitted = st.form_submit_button("🔍 Aplicar filtros", use_container_width=True, type="primary")

            if st.button("↺ Limpar filtros", key=f"{self.key_prefix}_clear", use_container_width=True):
                st.session_state[self._state_key] = AnalyticsFilters()
                st.rerun()

        if submitted:
            date_start, date_end = month_bounds(start_key or None, end_key or None)
            applied = AnalyticsFilters(
                search_term=search_term.strip(),
                sector='' if sector == ALL_SECTORS else sector,
                date_start=date_start,
                date_end=date_end,
                statuses=list(statuses),
            )
            st.session_state[self._state_key] = applied
            logger.info(f"Filters applied: {self.get_filter_summary(applied)}")

        return applied, submitted

    @staticmethod
    def _index_of(options: List[str], bound: Optional[str]) -> int:
        key = bound[:7] if bound else ''
        return options.index(key) if key in options else 0

    # =========================================================================
    # FILTER STATE HELPERS
    # =========================================================================

    @staticmethod
    def describe(filters: AnalyticsFilters) -> Dict[str, str]:
        """Filter label -> value, for report headers."""
        return {
            'Busca': filters.search_term,
            'Setor': filters.sector,
            'De': format_month(filters.date_start[:7]) if filters.date_start else '',
            'Até': format_month(filters.date_end[:7]) if filters.date_end else '',
            'Status': ', '.join(filters.statuses),
        }

    @staticmethod
    def get_filter_summary(filters: AnalyticsFilters) -> str:
        """Get human-readable summary of current filters."""
        parts = [f"{label}: {value}" for label, value in EvaluationFilters.describe(filters).items() if value]
        return " • ".join(parts) if parts else "Sem filtros"


__all__ = [
    'EvaluationFilters',
    'month_options',
    'month_bounds',
    'format_month',
    'ALL_SECTORS',
]
