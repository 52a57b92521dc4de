# lidera/performance/__init__.py
"""
Performance Evaluation Module

Components:
- parsing / resolver: score, date and name normalization; evaluation -> employee
- analytics: rankings, rollups, competency matrix, time series, comparisons
- queries: per-company data loading with cache
- evaluations / goals: evaluation form, bulk edits and performance goals
- importer / export: CSV import, CSV / Excel / PDF export
- registers: master-data CRUD configuration
- filters / charts / formatters: sidebar filters, Altair charts, display helpers

Usage:
    from lidera.performance import (
        EvaluationQueries,
        EvaluationAnalytics,
        EvaluationFilters,
        EvaluationCharts,
        EvaluationExport,
    )
"""

from .analytics import EvaluationAnalytics, AnalyticsFilters, RankingEntry, RollupResult
from .resolver import EmployeeResolver, ResolvedEmployee
from .queries import EvaluationQueries
from .filters import EvaluationFilters
from .charts import EvaluationCharts
from .export import EvaluationExport, evaluations_csv
from .importer import CsvImporter, ImportResult, IMPORT_TARGETS
from .goals import GoalService, resolve_goal
from .registers import REGISTERS, RegisterService

# Constants
from .constants import (
    COLORS,
    LEVELS,
    STATUSES,
    DEFAULT_GOAL,
    DEFAULT_LEVEL,
    CHART_WIDTH,
    CHART_HEIGHT,
)

__all__ = [
    # Classes
    'EvaluationAnalytics',
    'AnalyticsFilters',
    'RankingEntry',
    'RollupResult',
    'EmployeeResolver',
    'ResolvedEmployee',
    'EvaluationQueries',
    'EvaluationFilters',
    'EvaluationCharts',
    'EvaluationExport',
    'CsvImporter',
    'ImportResult',
    'GoalService',
    'RegisterService',

    # Functions
    'evaluations_csv',
    'resolve_goal',

    # Constants
    'REGISTERS',
    'IMPORT_TARGETS',
    'COLORS',
    'LEVELS',
    'STATUSES',
    'DEFAULT_GOAL',
    'DEFAULT_LEVEL',
    'CHART_WIDTH',
    'CHART_HEIGHT',
]

__version__ = '1.0.0'
