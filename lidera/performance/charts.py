# lidera/performance/charts.py
"""
Altair Chart Builders for Performance Evaluations

All visualization components using Altair:
- Overview metric cards (using st.metric)
- Evaluations per period (bar + average line)
- Ranking bars and distribution donuts
- Competency heatmap and gap chart
- Cumulative score lines for the top ranked employees
- Evolution by level (with goal line) and by sector
- Individual vs sector vs company comparison
"""

import logging
from typing import Any, Dict, List

import pandas as pd
import altair as alt
import streamlit as st

from .constants import (
    CHART_HEIGHT,
    CHART_WIDTH,
    COLORS,
    EVOLUTION_LEVELS,
    SERIES_COLORS,
    TIER_LABELS,
)

logger = logging.getLogger(__name__)


def _label_order(df: pd.DataFrame) -> List[str]:
    """Month labels ordered by their 'YYYY-MM' period."""
    if df.empty or 'period' not in df.columns:
        return []
    ordered = df.sort_values('period')
    return list(dict.fromkeys(ordered['label'].tolist()))


class EvaluationCharts:
    """
    Chart builders for the performance dashboard.

    All methods are static - can be called without instantiation.

    Usage:
        EvaluationCharts.render_metric_cards(analytics.general_metrics())
        chart = EvaluationCharts.build_period_chart(analytics.period_summary())
        st.altair_chart(chart, use_container_width=True)
    """

    # =========================================================================
    # METRIC CARDS (Using st.metric)
    # =========================================================================

    @staticmethod
    def render_metric_cards(metrics: Dict[str, Any], goal: float = None):
        col1, col2, col3, col4 = st.columns(4)

        with col1:
            delta = None
            if goal is not None and metrics['total_evaluations']:
                delta = f"{metrics['health_score'] - goal:+.2f} vs meta"
            st.metric(
                label="Score de Saúde",
                value=f"{metrics['health_score']:.2f}",
                delta=delta,
                help="Média das notas das avaliações filtradas"
            )
        with col2:
            st.metric(label="Avaliações", value=metrics['total_evaluations'])
        with col3:
            st.metric(label="Setores Ativos", value=metrics['active_sectors'])
        with col4:
            st.metric(label="Cargos Ativos", value=metrics['active_roles'])

        col5, col6, col7, col8 = st.columns(4)
        with col5:
            st.metric(label="Colaboradores Avaliados", value=metrics['active_employees'])
        with col6:
            st.metric(label="Em Férias", value=metrics['on_vacation'])
        with col7:
            st.metric(label="Afastados", value=metrics['on_leave'])
        with col8:
            top = metrics.get('top_employee')
            st.metric(
                label="Maior Nota",
                value=f"{top['score']:.2f}" if top else "-",
                help=top['name'] if top else None
            )

    # =========================================================================
    # PERIOD CHART
    # =========================================================================

    @staticmethod
    def build_period_chart(
        summary_df: pd.DataFrame,
        title: str = "📅 Avaliações por Período"
    ) -> alt.Chart:
        """
        Bars with the number of evaluations and a line with the mean score.

        Args:
            summary_df: Output of period_summary()
            title: Chart title
        """
        if summary_df.empty:
            return EvaluationCharts._empty_chart()

        order = _label_order(summary_df)

        bars = alt.Chart(summary_df).mark_bar(color=COLORS['secondary'], opacity=0.7).encode(
            x=alt.X('label:N', sort=order, title='Período'),
            y=alt.Y('count:Q', title='Avaliações'),
            tooltip=[
                alt.Tooltip('label:N', title='Período'),
                alt.Tooltip('count:Q', title='Avaliações'),
                alt.Tooltip('average:Q', title='Média', format='.2f')
            ]
        )

        line = alt.Chart(summary_df).mark_line(
            point=True, color=COLORS['primary'], strokeWidth=2
        ).encode(
            x=alt.X('label:N', sort=order),
            y=alt.Y('average:Q', title='Média', scale=alt.Scale(domain=[0, 10]))
        )

        line_text = alt.Chart(summary_df).mark_text(
            align='center', baseline='bottom', dy=-8, fontSize=10, color=COLORS['primary']
        ).encode(
            x=alt.X('label:N', sort=order),
            y=alt.Y('average:Q', scale=alt.Scale(domain=[0, 10])),
            text=alt.Text('average:Q', format='.1f')
        )

        return alt.layer(bars, line, line_text).resolve_scale(
            y='independent'
        ).properties(
            width=CHART_WIDTH,
            height=CHART_HEIGHT,
            title=title
        )

    # =========================================================================
    # RANKING & DISTRIBUTION
    # =========================================================================

    @staticmethod
    def build_ranking_chart(
        ranking_df: pd.DataFrame,
        top_n: int = 10,
        title: str = "🏆 Ranking por Média"
    ) -> alt.Chart:
        if ranking_df.empty:
            return EvaluationCharts._empty_chart()

        df = ranking_df.head(top_n)

        bars = alt.Chart(df).mark_bar(color=COLORS['primary']).encode(
            x=alt.X('mean_score:Q', title='Média', scale=alt.Scale(domain=[0, 10])),
            y=alt.Y('name:N', sort=None, title=None),
            tooltip=[
                alt.Tooltip('name:N', title='Nome'),
                alt.Tooltip('sector:N', title='Setor'),
                alt.Tooltip('mean_score:Q', title='Média', format='.2f'),
                alt.Tooltip('count:Q', title='Avaliações'),
                alt.Tooltip('highlights_score:Q', title='Destaques (Top 5)')
            ]
        )

        text = bars.mark_text(align='left', dx=4, fontSize=10, color=COLORS['text_dark']).encode(
            text=alt.Text('mean_score:Q', format='.2f')
        )

        return alt.layer(bars, text).properties(
            width=CHART_WIDTH,
            height=max(200, 28 * len(df)),
            title=title
        )

    @staticmethod
    def build_donut_chart(distribution: List[Dict[str, Any]], title: str) -> alt.Chart:
        """Donut of {'name', 'value'} slices (already grouped into 'Outros')."""
        if not distribution:
            return EvaluationCharts._empty_chart()

        df = pd.DataFrame(distribution)
        order = df['name'].tolist()

        return alt.Chart(df).mark_arc(innerRadius=60).encode(
            theta=alt.Theta('value:Q'),
            color=alt.Color(
                'name:N',
                sort=order,
                scale=alt.Scale(domain=order, range=SERIES_COLORS[:len(order)]),
                legend=alt.Legend(title=None, orient='right')
            ),
            tooltip=[
                alt.Tooltip('name:N', title='Nome'),
                alt.Tooltip('value:Q', title='Avaliações')
            ]
        ).properties(
            height=300,
            title=title
        )

    # =========================================================================
    # COMPETENCIES
    # =========================================================================

    @staticmethod
    def build_competency_heatmap(
        matrix_df: pd.DataFrame,
        title: str = "🧩 Matriz de Competências"
    ) -> alt.Chart:
        """Criterion x sector heatmap; empty cells are left blank."""
        sector_columns = [c for c in matrix_df.columns if c not in ('criteria', 'type', 'average')]
        if matrix_df.empty or not sector_columns:
            return EvaluationCharts._empty_chart()

        long_df = matrix_df.melt(
            id_vars=['criteria', 'type'],
            value_vars=sector_columns,
            var_name='sector',
            value_name='score'
        ).dropna(subset=['score'])

        base = alt.Chart(long_df).encode(
            x=alt.X('sector:N', title='Setor'),
            y=alt.Y('criteria:N', title=None),
        )

        heat = base.mark_rect().encode(
            color=alt.Color(
                'score:Q',
                title='Média',
                scale=alt.Scale(domain=[0, 10], range=[COLORS['goal'], '#FDE68A', COLORS[EVOLUTION_LEVELS[2]]])
            ),
            tooltip=[
                alt.Tooltip('criteria:N', title='Competência'),
                alt.Tooltip('type:N', title='Nível'),
                alt.Tooltip('sector:N', title='Setor'),
                alt.Tooltip('score:Q', title='Média', format='.2f')
            ]
        )

        text = base.mark_text(fontSize=10, color=COLORS['text_dark']).encode(
            text=alt.Text('score:Q', format='.1f')
        )

        return alt.layer(heat, text).properties(
            width=CHART_WIDTH,
            height=max(200, 24 * matrix_df['criteria'].nunique()),
            title=title
        )

    @staticmethod
    def build_gap_chart(gaps_df: pd.DataFrame, title: str = "📉 Gap por Competência") -> alt.Chart:
        if gaps_df.empty:
            return EvaluationCharts._empty_chart()

        return alt.Chart(gaps_df).mark_bar(color=COLORS['goal']).encode(
            x=alt.X('gap:Q', title='Distância da nota máxima'),
            y=alt.Y('criteria:N', sort='-x', title=None),
            tooltip=[
                alt.Tooltip('criteria:N', title='Competência'),
                alt.Tooltip('average:Q', title='Média', format='.2f'),
                alt.Tooltip('gap:Q', title='Gap', format='.2f')
            ]
        ).properties(
            width=CHART_WIDTH,
            height=max(200, 24 * len(gaps_df)),
            title=title
        )

    # =========================================================================
    # TIME SERIES
    # =========================================================================

    @staticmethod
    def build_cumulative_chart(
        series_df: pd.DataFrame,
        title: str = "📈 Pontuação Acumulada (Top 10)"
    ) -> alt.Chart:
        """One line per employee; points before the first evaluation are not drawn."""
        name_columns = [c for c in series_df.columns if c not in ('period', 'label')]
        if series_df.empty or not name_columns:
            return EvaluationCharts._empty_chart()

        order = _label_order(series_df)
        long_df = series_df.melt(
            id_vars=['period', 'label'],
            value_vars=name_columns,
            var_name='Colaborador',
            value_name='Pontos'
        ).dropna(subset=['Pontos'])
        long_df['Pontos'] = long_df['Pontos'].astype(float)

        return alt.Chart(long_df).mark_line(point=True, strokeWidth=2).encode(
            x=alt.X('label:N', sort=order, title='Período'),
            y=alt.Y('Pontos:Q', title='Pontuação acumulada'),
            color=alt.Color(
                'Colaborador:N',
                sort=name_columns,
                scale=alt.Scale(domain=name_columns, range=SERIES_COLORS[:len(name_columns)]),
                legend=alt.Legend(orient='bottom', columns=5)
            ),
            tooltip=[
                alt.Tooltip('label:N', title='Período'),
                alt.Tooltip('Colaborador:N'),
                alt.Tooltip('Pontos:Q', format='.2f')
            ]
        ).properties(
            width=CHART_WIDTH,
            height=CHART_HEIGHT,
            title=title
        )

    @staticmethod
    def build_level_evolution_chart(
        evolution_df: pd.DataFrame,
        title: str = "📊 Evolução por Nível"
    ) -> alt.Chart:
        """Monthly mean per level and overall, with the goal as a dashed rule."""
        if evolution_df.empty:
            return EvaluationCharts._empty_chart()

        order = _label_order(evolution_df)
        series = EVOLUTION_LEVELS + ['Média Geral']
        long_df = evolution_df.melt(
            id_vars=['period', 'label'],
            value_vars=series,
            var_name='Nível',
            value_name='Média'
        )

        lines = alt.Chart(long_df).mark_line(point=True, strokeWidth=2).encode(
            x=alt.X('label:N', sort=order, title='Período'),
            y=alt.Y('Média:Q', scale=alt.Scale(domain=[0, 10])),
            color=alt.Color(
                'Nível:N',
                scale=alt.Scale(domain=series, range=[COLORS[level] for level in EVOLUTION_LEVELS] + [COLORS['average']]),
                legend=alt.Legend(orient='bottom')
            ),
            tooltip=[
                alt.Tooltip('label:N', title='Período'),
                alt.Tooltip('Nível:N'),
                alt.Tooltip('Média:Q', format='.1f')
            ]
        )

        goal = alt.Chart(evolution_df).mark_rule(
            color=COLORS['goal'], strokeDash=[6, 4], strokeWidth=2
        ).encode(
            y=alt.Y('mean(Meta):Q'),
            tooltip=[alt.Tooltip('mean(Meta):Q', title='Meta', format='.1f')]
        )

        return alt.layer(lines, goal).properties(
            width=CHART_WIDTH,
            height=CHART_HEIGHT,
            title=title
        )

    @staticmethod
    def build_sector_evolution_chart(
        evolution_df: pd.DataFrame,
        title: str = "🏢 Evolução por Setor"
    ) -> alt.Chart:
        sector_columns = [c for c in evolution_df.columns if c not in ('period', 'label')]
        if evolution_df.empty or not sector_columns:
            return EvaluationCharts._empty_chart()

        order = _label_order(evolution_df)
        long_df = evolution_df.melt(
            id_vars=['period', 'label'],
            value_vars=sector_columns,
            var_name='Setor',
            value_name='Média'
        )

        return alt.Chart(long_df).mark_line(point=True).encode(
            x=alt.X('label:N', sort=order, title='Período'),
            y=alt.Y('Média:Q', scale=alt.Scale(domain=[0, 10])),
            color=alt.Color('Setor:N', legend=alt.Legend(orient='bottom')),
            tooltip=['label:N', 'Setor:N', alt.Tooltip('Média:Q', format='.1f')]
        ).properties(
            width=CHART_WIDTH,
            height=CHART_HEIGHT,
            title=title
        )

    @staticmethod
    def build_employee_timeline(timeline_df: pd.DataFrame, goal: float = None) -> alt.Chart:
        if timeline_df.empty:
            return EvaluationCharts._empty_chart()

        order = _label_order(timeline_df)
        line = alt.Chart(timeline_df).mark_line(
            point=True, color=COLORS['primary'], strokeWidth=2
        ).encode(
            x=alt.X('label:N', sort=order, title='Período'),
            y=alt.Y('score:Q', title='Nota', scale=alt.Scale(domain=[0, 10])),
            tooltip=[alt.Tooltip('label:N', title='Período'), alt.Tooltip('score:Q', title='Nota', format='.2f')]
        )

        if goal is None:
            return line.properties(height=300)

        rule = alt.Chart(pd.DataFrame({'Meta': [goal]})).mark_rule(
            color=COLORS['goal'], strokeDash=[6, 4]
        ).encode(y='Meta:Q')
        return alt.layer(line, rule).properties(height=300)

    # =========================================================================
    # COMPARATIVE VIEW
    # =========================================================================

    @staticmethod
    def build_comparative_chart(
        comparison_df: pd.DataFrame,
        title: str = "⚖️ Individual x Setor x Empresa"
    ) -> alt.Chart:
        """Individual score bars colored by tier, with sector and company averages as ticks."""
        if comparison_df.empty:
            return EvaluationCharts._empty_chart()

        df = comparison_df.copy()
        df['tier_label'] = df['tier'].map(TIER_LABELS)
        df['row'] = df['name'] + ' (' + df['label'] + ')'

        tiers = list(TIER_LABELS.keys())
        bars = alt.Chart(df).mark_bar().encode(
            x=alt.X('individual_score:Q', title='Nota', scale=alt.Scale(domain=[0, 10])),
            y=alt.Y('row:N', sort='-x', title=None),
            color=alt.Color(
                'tier_label:N',
                title='Classificação',
                scale=alt.Scale(domain=[TIER_LABELS[t] for t in tiers], range=[COLORS[t] for t in tiers]),
                legend=alt.Legend(orient='bottom')
            ),
            tooltip=[
                alt.Tooltip('name:N', title='Nome'),
                alt.Tooltip('sector:N', title='Setor'),
                alt.Tooltip('individual_score:Q', title='Nota', format='.2f'),
                alt.Tooltip('sector_avg:Q', title='Média Setor', format='.2f'),
                alt.Tooltip('company_avg:Q', title='Média Empresa', format='.2f')
            ]
        )

        sector_tick = alt.Chart(df).mark_tick(color=COLORS['text_dark'], thickness=2).encode(
            x='sector_avg:Q',
            y=alt.Y('row:N', sort='-x')
        )

        company_rule = alt.Chart(df).mark_rule(color=COLORS['average'], strokeDash=[4, 4]).encode(
            x='mean(company_avg):Q'
        )

        return alt.layer(bars, sector_tick, company_rule).properties(
            width=CHART_WIDTH,
            height=max(200, 22 * len(df)),
            title=title
        )

    @staticmethod
    def _empty_chart(message: str = "Sem dados para exibir") -> alt.Chart:
        """Create an empty chart with a message."""
        return alt.Chart(pd.DataFrame({'note': [message]})).mark_text(
            text=message,
            fontSize=16,
            color=COLORS['text_light']
        ).properties(
            width=CHART_WIDTH,
            height=200
        )


__all__ = ['EvaluationCharts']
