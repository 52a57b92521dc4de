# lidera/performance/analytics.py
"""
Aggregations for Performance Evaluation dashboards

Handles every derived view:
- Period summaries (jan/24 labels)
- Employee ranking with score / selection highlights
- Sector / role / level rollups
- Competency matrix and gap analysis
- Cumulative score series for the top ranked employees
- Individual comparative view (individual vs sector vs company)
- Overview metrics and monthly evolution by level / sector
- Employee history for the profile page

Everything is recomputed from the raw records on each call. Inputs are
never mutated and malformed values are coerced, never raised.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .constants import (
    DEFAULT_GOAL,
    DEFAULT_LEVEL,
    DEFAULT_SECTOR,
    DONUT_TOP_N,
    CUMULATIVE_TOP_N,
    LEVEL_STRATEGIC,
    LEVEL_TACTICAL,
    LEVEL_OPERATIONAL,
    OTHERS_LABEL,
    PERFORMANCE_LIST_SIZE,
    STATUS_ON_LEAVE,
    STATUS_ON_VACATION,
    TIER_ABOVE_SECTOR,
    TIER_BELOW_COMPANY,
    TIER_BELOW_SECTOR,
    TOP_PER_PERIOD,
    UNDEFINED,
)
from .parsing import (
    evaluation_details,
    evaluation_score,
    in_date_range,
    is_highlight,
    month_key,
    month_label,
    normalize_name,
)
from .resolver import EmployeeResolver, current_assignment

logger = logging.getLogger(__name__)

RANKING_DIMENSIONS = ('sector', 'role', 'level')


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass
class AnalyticsFilters:
    """Caller-supplied filters applied before every aggregation."""
    search_term: str = ''
    sector: str = ''
    date_start: Optional[str] = None
    date_end: Optional[str] = None
    statuses: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.search_term or self.sector or self.date_start or self.date_end or self.statuses)


@dataclass
class RankingEntry:
    key: str
    name: str
    employee_id: Optional[str]
    sector: str
    role: str
    level: str
    total_score: float = 0.0
    count: int = 0
    history: List[Tuple[str, float]] = field(default_factory=list)
    highlights_selection: int = 0
    highlights_score: int = 0

    @property
    def mean_score(self) -> float:
        return self.total_score / self.count if self.count else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'name': self.name,
            'employee_id': self.employee_id,
            'sector': self.sector,
            'role': self.role,
            'level': self.level,
            'total_score': round(self.total_score, 2),
            'count': self.count,
            'mean_score': round(self.mean_score, 2),
            'highlights_selection': self.highlights_selection,
            'highlights_score': self.highlights_score,
        }


@dataclass
class RollupResult:
    groups: pd.DataFrame
    overall_average: float


def top_n_with_others(counts: Dict[str, int], top_n: int = DONUT_TOP_N) -> List[Dict[str, Any]]:
    """Largest `top_n` slices plus one 'Outros' slice with the remainder."""
    ordered = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    slices = [{'name': name, 'value': value} for name, value in ordered[:top_n]]
    others = sum(value for _, value in ordered[top_n:])
    if others > 0:
        slices.append({'name': OTHERS_LABEL, 'value': others})
    return slices


# =============================================================================
# ANALYTICS
# =============================================================================

class EvaluationAnalytics:
    """
    Derived views over one tenant's evaluations.

    Usage:
        analytics = EvaluationAnalytics(evaluations, employees, filters)

        periods = analytics.period_summary()
        ranking = analytics.ranking()
        matrix = analytics.competency_matrix()
        series = analytics.cumulative_series(top_n=10)
    """

    ROW_COLUMNS = [
        'id', 'key', 'employee_id', 'name', 'sector', 'role', 'level', 'status',
        'score', 'date', 'period', 'label', 'highlight', 'highlight_reason',
    ]

    def __init__(
        self,
        evaluations: List[Dict[str, Any]],
        employees: List[Dict[str, Any]],
        filters: AnalyticsFilters = None,
        goal: float = DEFAULT_GOAL
    ):
        """
        Initialize with data.

        Args:
            evaluations: Evaluation records of the tenant
            employees: Employee records of the tenant
            filters: Search / sector / period / status filters
            goal: Goal line drawn in the level evolution
        """
        self.evaluations = list(evaluations or [])
        self.employees = list(employees or [])
        self.filters = filters or AnalyticsFilters()
        self.goal = goal
        self.resolver = EmployeeResolver(self.employees)

        self.all_rows = [self._build_row(ev) for ev in self.evaluations]
        self.rows = [row for row in self.all_rows if self._passes(row)]
        self.df = self._to_frame(self.rows)

    # =========================================================================
    # NORMALIZATION
    # =========================================================================

    def _build_row(self, evaluation: Dict[str, Any]) -> Dict[str, Any]:
        resolved = self.resolver.resolve(evaluation)
        emp = resolved.employee or {}
        date_raw = evaluation.get('date') if isinstance(evaluation.get('date'), str) else ''
        period = month_key(evaluation.get('date'))

        return {
            'id': evaluation.get('id'),
            'key': resolved.key,
            'employee_id': resolved.employee_id,
            'name': resolved.name,
            # per-evaluation rows keep the snapshot taken at evaluation time
            'sector': evaluation.get('sector') or emp.get('sector') or DEFAULT_SECTOR,
            'role': evaluation.get('role') or emp.get('role') or UNDEFINED,
            'level': evaluation.get('type') or evaluation.get('level') or emp.get('jobLevel') or DEFAULT_LEVEL,
            'status': resolved.status,
            'matched': resolved.matched,
            'score': evaluation_score(evaluation),
            'details': evaluation_details(evaluation),
            'date': date_raw or (f"{period}-01" if period else ''),
            'period': period,
            'label': month_label(period),
            'highlight': is_highlight(evaluation.get('funcionarioMes', evaluation.get('funcionario_mes'))),
            'highlight_reason': evaluation.get('motivoDestaque') or '',
            'assignment': current_assignment(resolved, evaluation),
            'record': evaluation,
        }

    def _passes(self, row: Dict[str, Any]) -> bool:
        f = self.filters
        if f.search_term and normalize_name(f.search_term) not in normalize_name(row['name']):
            return False
        if f.sector and row['sector'] != f.sector:
            return False
        if (f.date_start or f.date_end) and not in_date_range(row['date'], f.date_start, f.date_end):
            return False
        if f.statuses and (not row['matched'] or row['status'] not in f.statuses):
            return False
        return True

    def _to_frame(self, rows: List[Dict[str, Any]]) -> pd.DataFrame:
        if not rows:
            return pd.DataFrame(columns=self.ROW_COLUMNS)
        return pd.DataFrame([{c: r[c] for c in self.ROW_COLUMNS} for r in rows])

    # =========================================================================
    # OPTIONS
    # =========================================================================

    def sectors(self) -> List[str]:
        return sorted({row['sector'] for row in self.all_rows})

    def roles(self) -> List[str]:
        return sorted({row['role'] for row in self.all_rows})

    def levels(self) -> List[str]:
        return sorted({row['level'] for row in self.all_rows})

    @property
    def company_average(self) -> float:
        if not self.rows:
            return 0.0
        return sum(row['score'] for row in self.rows) / len(self.rows)

    # =========================================================================
    # PERIOD GROUPING
    # =========================================================================

    def period_summary(self) -> pd.DataFrame:
        """
        Count and mean score per reference month, newest first.

        Returns:
            DataFrame with period ('YYYY-MM'), label ('jan/24'), count, average
        """
        dated = self.df[self.df['period'].notna()] if not self.df.empty else self.df
        if dated.empty:
            return pd.DataFrame(columns=['period', 'label', 'count', 'average'])

        summary = dated.groupby('period').agg(
            count=('score', 'size'),
            average=('score', 'mean'),
        ).reset_index()
        summary['label'] = summary['period'].apply(month_label)
        summary['count'] = summary['count'].astype(int)

        summary = summary.sort_values('period', ascending=False).reset_index(drop=True)
        return summary[['period', 'label', 'count', 'average']]

    # =========================================================================
    # RANKING
    # =========================================================================

    def ranking(self, dimension: str = None, value: str = None) -> List[RankingEntry]:
        """
        Employees ordered by mean score (non-increasing, stable on ties).

        Args:
            dimension: Optional 'sector', 'role' or 'level' restriction
            value: Value the dimension must equal

        Returns:
            List of RankingEntry
        """
        entries: "OrderedDict[str, RankingEntry]" = OrderedDict()

        for row in self.rows:
            entry = entries.get(row['key'])
            if entry is None:
                assignment = row['assignment']
                entry = RankingEntry(
                    key=row['key'],
                    name=row['name'],
                    employee_id=row['employee_id'],
                    sector=assignment['sector'],
                    role=assignment['role'],
                    level=assignment['level'],
                )
                entries[row['key']] = entry

            entry.total_score += row['score']
            entry.count += 1
            entry.history.append((row['period'] or row['date'], row['score']))
            if row['highlight']:
                entry.highlights_selection += 1

        for entry in entries.values():
            entry.history.sort(key=lambda item: item[0] or '')

        # Top-N of every distinct period counts as a score highlight
        by_period: Dict[str, List[Dict]] = OrderedDict()
        for row in self.rows:
            if row['period']:
                by_period.setdefault(row['period'], []).append(row)

        # One slot per employee per period, taken by their best row
        for period in sorted(by_period):
            best: Dict[str, Dict] = {}
            for row in by_period[period]:
                if row['key'] not in best or row['score'] > best[row['key']]['score']:
                    best[row['key']] = row
            top = sorted(best.values(), key=lambda r: r['score'], reverse=True)[:TOP_PER_PERIOD]
            for row in top:
                entries[row['key']].highlights_score += 1

        ranked = sorted(entries.values(), key=lambda e: e.mean_score, reverse=True)

        if dimension in RANKING_DIMENSIONS and value:
            ranked = [e for e in ranked if getattr(e, dimension) == value]

        return ranked

    def ranking_options(self, dimension: str) -> List[str]:
        """Values ranking(dimension, value) can match (current assignment, not the snapshot)."""
        if dimension not in RANKING_DIMENSIONS:
            return []
        return sorted({getattr(e, dimension) for e in self.ranking() if getattr(e, dimension)})

    def ranking_frame(self, dimension: str = None, value: str = None) -> pd.DataFrame:
        entries = self.ranking(dimension, value)
        columns = list(RankingEntry('', '', None, '', '', '').to_dict().keys())
        if not entries:
            return pd.DataFrame(columns=['position'] + columns)
        df = pd.DataFrame([e.to_dict() for e in entries])
        df.insert(0, 'position', range(1, len(df) + 1))
        return df

    # =========================================================================
    # ROLLUPS
    # =========================================================================

    def rollup(self, dimension: str = 'sector') -> RollupResult:
        """
        Count and mean score per sector, role or level.

        overall_average is the unweighted mean of the group means.
        """
        if dimension not in RANKING_DIMENSIONS:
            raise ValueError(f"Invalid rollup dimension: {dimension}")

        if self.df.empty:
            return RollupResult(pd.DataFrame(columns=['name', 'count', 'average']), 0.0)

        groups = self.df.groupby(dimension).agg(
            count=('score', 'size'),
            average=('score', 'mean'),
        ).reset_index().rename(columns={dimension: 'name'})
        groups['count'] = groups['count'].astype(int)
        groups = groups.sort_values('average', ascending=False, kind='mergesort').reset_index(drop=True)

        overall = float(groups['average'].mean()) if not groups.empty else 0.0
        return RollupResult(groups, overall)

    # =========================================================================
    # COMPETENCIES
    # =========================================================================

    def competency_matrix(self) -> pd.DataFrame:
        """
        Criterion x sector mean scores.

        Returns:
            DataFrame with criteria, type, one column per sector (NaN where the
            sector has no score for the criterion) and average, the unweighted
            mean of the row's sector cells.
        """
        cells: "OrderedDict[str, Dict[str, List[float]]]" = OrderedDict()
        criteria_type: Dict[str, str] = {}

        for row in self.rows:
            for criterion, score in row['details'].items():
                criteria_type.setdefault(criterion, row['level'])
                sector_scores = cells.setdefault(criterion, {})
                sector_scores.setdefault(row['sector'], []).append(score)

        sectors = sorted({s for by_sector in cells.values() for s in by_sector})
        if not cells:
            return pd.DataFrame(columns=['criteria', 'type', 'average'])

        records = []
        for criterion, by_sector in cells.items():
            record = {'criteria': criterion, 'type': criteria_type[criterion]}
            means = []
            for sector in sectors:
                if sector in by_sector:
                    cell = sum(by_sector[sector]) / len(by_sector[sector])
                    record[sector] = cell
                    means.append(cell)
                else:
                    record[sector] = np.nan
            record['average'] = sum(means) / len(means) if means else 0.0
            records.append(record)

        return pd.DataFrame(records, columns=['criteria', 'type'] + sectors + ['average'])

    def gap_analysis(self) -> pd.DataFrame:
        """Gap to the maximum score per criterion, weakest criteria first."""
        matrix = self.competency_matrix()
        if matrix.empty:
            return pd.DataFrame(columns=['criteria', 'type', 'average', 'gap'])

        gaps = matrix[['criteria', 'type', 'average']].copy()
        gaps['gap'] = 10 - gaps['average']
        return gaps.sort_values('average', ascending=True, kind='mergesort').reset_index(drop=True)

    # =========================================================================
    # TIME SERIES
    # =========================================================================

    def cumulative_series(self, top_n: int = CUMULATIVE_TOP_N, ranking: List[RankingEntry] = None) -> pd.DataFrame:
        """
        Running sum of scores for the top ranked employees.

        One row per reference month where any of them was evaluated, one
        column per employee. Months without a new evaluation keep the
        previous value; months before the first evaluation are None.
        """
        top = (ranking if ranking is not None else self.ranking())[:top_n]
        if not top:
            return pd.DataFrame(columns=['period', 'label'])

        top_keys = {entry.key for entry in top}
        columns = self._series_columns(top)

        per_period: Dict[str, Dict[str, float]] = {}
        for row in self.rows:
            if row['key'] in top_keys and row['period']:
                bucket = per_period.setdefault(row['period'], {})
                bucket[row['key']] = bucket.get(row['key'], 0.0) + row['score']

        running: Dict[str, Optional[float]] = {entry.key: None for entry in top}
        points = []
        for period in sorted(per_period):
            for key, added in per_period[period].items():
                running[key] = (running[key] or 0.0) + added
            point = {'period': period, 'label': month_label(period)}
            for entry in top:
                point[columns[entry.key]] = running[entry.key]
            points.append(point)

        return pd.DataFrame(points, columns=['period', 'label'] + [columns[e.key] for e in top], dtype=object)

    @staticmethod
    def _series_columns(entries: List[RankingEntry]) -> Dict[str, str]:
        """Column name per entry; repeated display names get a numeric suffix."""
        columns, seen = {}, {}
        for entry in entries:
            seen[entry.name] = seen.get(entry.name, 0) + 1
            columns[entry.key] = entry.name if seen[entry.name] == 1 else f"{entry.name} ({seen[entry.name]})"
        return columns

    def level_evolution(self) -> pd.DataFrame:
        """Monthly mean by level plus overall mean and the goal line, oldest first."""
        columns = ['period', 'label', LEVEL_STRATEGIC, LEVEL_TACTICAL, LEVEL_OPERATIONAL, 'Média Geral', 'Meta']
        dated = [row for row in self.rows if row['period']]
        if not dated:
            return pd.DataFrame(columns=columns)

        buckets: Dict[str, Dict[str, List[float]]] = {}
        for row in dated:
            level = row['level'] if row['level'] in (LEVEL_STRATEGIC, LEVEL_TACTICAL) else LEVEL_OPERATIONAL
            buckets.setdefault(row['period'], {}).setdefault(level, []).append(row['score'])

        records = []
        for period in sorted(buckets):
            by_level = buckets[period]
            every = [s for scores in by_level.values() for s in scores]
            record = {'period': period, 'label': month_label(period)}
            for level in (LEVEL_STRATEGIC, LEVEL_TACTICAL, LEVEL_OPERATIONAL):
                scores = by_level.get(level, [])
                record[level] = round(sum(scores) / len(scores), 1) if scores else 0.0
            record['Média Geral'] = round(sum(every) / len(every), 1)
            record['Meta'] = self.goal
            records.append(record)

        return pd.DataFrame(records, columns=columns)

    def sector_evolution(self) -> pd.DataFrame:
        """Monthly mean per sector (0 where the sector has no evaluation), oldest first."""
        dated = self.df[self.df['period'].notna()] if not self.df.empty else self.df
        if dated.empty:
            return pd.DataFrame(columns=['period', 'label'])

        pivot = dated.pivot_table(index='period', columns='sector', values='score', aggfunc='mean')
        pivot = pivot.round(1).fillna(0.0).sort_index()
        pivot.columns.name = None
        pivot = pivot.reset_index()
        pivot.insert(1, 'label', pivot['period'].apply(month_label))
        return pivot

    # =========================================================================
    # COMPARATIVE VIEW
    # =========================================================================

    @staticmethod
    def classify(score: float, sector_avg: float, company_avg: float) -> str:
        if score >= sector_avg:
            return TIER_ABOVE_SECTOR
        if score >= company_avg:
            return TIER_BELOW_SECTOR
        return TIER_BELOW_COMPANY

    def individual_comparison(self) -> pd.DataFrame:
        """
        Each evaluation against its sector and the company.

        Sector and company averages cover the whole filtered set, not the
        evaluation's own period.
        """
        columns = [
            'id', 'key', 'name', 'sector', 'period', 'label', 'individual_score',
            'sector_avg', 'company_avg', 'diff_sector', 'diff_company', 'tier',
        ]
        if not self.rows:
            return pd.DataFrame(columns=columns)

        sector_scores: Dict[str, List[float]] = {}
        for row in self.rows:
            sector_scores.setdefault(row['sector'], []).append(row['score'])
        sector_avgs = {s: sum(v) / len(v) for s, v in sector_scores.items()}
        company_avg = self.company_average

        records = []
        for row in self.rows:
            sector_avg = sector_avgs[row['sector']]
            records.append({
                'id': row['id'],
                'key': row['key'],
                'name': row['name'],
                'sector': row['sector'],
                'period': row['period'],
                'label': row['label'],
                'individual_score': round(row['score'], 2),
                'sector_avg': round(sector_avg, 2),
                'company_avg': round(company_avg, 2),
                'diff_sector': round(row['score'] - sector_avg, 2),
                'diff_company': round(row['score'] - company_avg, 2),
                'tier': self.classify(row['score'], sector_avg, company_avg),
            })

        return pd.DataFrame(records, columns=columns)

    # =========================================================================
    # OVERVIEW
    # =========================================================================

    def general_metrics(self) -> Dict[str, Any]:
        """Headline numbers for the overview tab."""
        total = len(self.rows)
        sector_counts: Dict[str, int] = {}
        role_counts: Dict[str, int] = {}
        for row in self.rows:
            sector_counts[row['sector']] = sector_counts.get(row['sector'], 0) + 1
            role_counts[row['role']] = role_counts.get(row['role'], 0) + 1

        by_score = sorted(self.rows, key=lambda r: r['score'], reverse=True)
        performance_list = [
            {
                'name': r['name'],
                'sector': r['sector'],
                'role': r['role'],
                'label': r['label'],
                'score': round(r['score'], 2),
                'highlight': r['highlight'],
            }
            for r in by_score[:PERFORMANCE_LIST_SIZE]
        ]

        statuses = [emp.get('status') for emp in self.employees]

        return {
            'health_score': self.company_average,
            'total_evaluations': total,
            'active_sectors': len(sector_counts),
            'active_roles': len(role_counts),
            'active_employees': len({r['key'] for r in self.rows}),
            'sector_distribution': top_n_with_others(sector_counts),
            'role_distribution': top_n_with_others(role_counts),
            'top_employee': performance_list[0] if performance_list else None,
            'performance_list': performance_list,
            'on_vacation': statuses.count(STATUS_ON_VACATION),
            'on_leave': statuses.count(STATUS_ON_LEAVE),
        }

    # =========================================================================
    # EMPLOYEE HISTORY
    # =========================================================================

    def employee_history(self, key: str) -> Dict[str, Any]:
        """
        Every evaluation of one resolution key, ignoring the filters.

        Returns:
            Dict with evaluations (oldest first), criteria means, average, count
        """
        rows = sorted(
            (row for row in self.all_rows if row['key'] == key),
            key=lambda r: r['date'] or ''
        )

        criteria: Dict[str, List[float]] = OrderedDict()
        for row in rows:
            for criterion, score in row['details'].items():
                criteria.setdefault(criterion, []).append(score)

        criteria_df = pd.DataFrame(
            [{'criteria': c, 'average': sum(v) / len(v), 'count': len(v)} for c, v in criteria.items()],
            columns=['criteria', 'average', 'count']
        )

        scores = [row['score'] for row in rows]
        return {
            'evaluations': [row['record'] for row in rows],
            'timeline': pd.DataFrame(
                [{'period': r['period'], 'label': r['label'], 'score': r['score']} for r in rows],
                columns=['period', 'label', 'score']
            ),
            'criteria': criteria_df,
            'average': sum(scores) / len(scores) if scores else 0.0,
            'count': len(rows),
            'highlights': sum(1 for r in rows if r['highlight']),
        }


__all__ = [
    'EvaluationAnalytics',
    'AnalyticsFilters',
    'RankingEntry',
    'RollupResult',
    'top_n_with_others',
    'RANKING_DIMENSIONS',
]
