# lidera/performance/constants.py
"""
Constants for Performance Evaluation Module

Centralized configuration for:
- Hierarchical levels and employee statuses
- Month labels (pt-BR)
- Color schemes
- Excel styles
"""

# =====================================================================
# LEVELS & STATUSES
# =====================================================================

LEVEL_STRATEGIC = 'Estratégico'
LEVEL_TACTICAL = 'Tático'
LEVEL_OPERATIONAL = 'Operacional'
LEVEL_COLLABORATOR = 'Colaborador'
LEVEL_LEADER = 'Líder'

LEVELS = [LEVEL_STRATEGIC, LEVEL_TACTICAL, LEVEL_OPERATIONAL, LEVEL_COLLABORATOR, LEVEL_LEADER]

DEFAULT_LEVEL = LEVEL_OPERATIONAL

# Levels drawn as their own line in the evolution chart, everything else is Operacional
EVOLUTION_LEVELS = [LEVEL_STRATEGIC, LEVEL_TACTICAL, LEVEL_OPERATIONAL]

STATUS_ACTIVE = 'Ativo'
STATUS_INACTIVE = 'Inativo'
STATUS_ON_LEAVE = 'Afastado'
STATUS_ON_VACATION = 'Férias'

STATUSES = [STATUS_ACTIVE, STATUS_INACTIVE, STATUS_ON_LEAVE, STATUS_ON_VACATION]

DEFAULT_STATUS = STATUS_ACTIVE

# =====================================================================
# DEFAULT LABELS
# =====================================================================

UNKNOWN_EMPLOYEE = 'Colaborador Desconhecido'
DEFAULT_SECTOR = 'Geral'
UNDEFINED = 'Não definido'
OTHERS_LABEL = 'Outros'

HIGHLIGHT_YES = 'Sim'
HIGHLIGHT_NO = 'Não'

# =====================================================================
# SCORES & GOALS
# =====================================================================

MIN_SCORE = 0.0
MAX_SCORE = 10.0
DEFAULT_GOAL = 9.0

TOP_PER_PERIOD = 5       # top-N of a period counted as a score highlight
DONUT_TOP_N = 5          # slices before grouping into "Outros"
PERFORMANCE_LIST_SIZE = 10
CUMULATIVE_TOP_N = 10

# Comparative tiers
TIER_ABOVE_SECTOR = 'above_sector'
TIER_BELOW_SECTOR = 'below_sector'
TIER_BELOW_COMPANY = 'below_company'

TIER_LABELS = {
    TIER_ABOVE_SECTOR: 'Acima da média do setor',
    TIER_BELOW_SECTOR: 'Abaixo do setor, acima da empresa',
    TIER_BELOW_COMPANY: 'Abaixo da média da empresa',
}

# =====================================================================
# MONTHS (pt-BR)
# =====================================================================

PT_MONTHS = ['jan', 'fev', 'mar', 'abr', 'mai', 'jun', 'jul', 'ago', 'set', 'out', 'nov', 'dez']

PT_MONTH_NUMBERS = {name: i + 1 for i, name in enumerate(PT_MONTHS)}

PT_MONTH_NAMES = [
    'Janeiro', 'Fevereiro', 'Março', 'Abril', 'Maio', 'Junho',
    'Julho', 'Agosto', 'Setembro', 'Outubro', 'Novembro', 'Dezembro'
]

# =====================================================================
# COLOR SCHEME
# =====================================================================

COLORS = {
    "primary": "#0F52BA",             # Sapphire
    "secondary": "#4CA1AF",           # Teal
    "goal": "#EF4444",                # Red
    "average": "#6B7280",             # Gray

    # Levels
    LEVEL_STRATEGIC: "#0F52BA",
    LEVEL_TACTICAL: "#F59E0B",
    LEVEL_OPERATIONAL: "#10B981",

    # Comparative tiers
    TIER_ABOVE_SECTOR: "#10B981",     # Green
    TIER_BELOW_SECTOR: "#F59E0B",     # Amber
    TIER_BELOW_COMPANY: "#EF4444",    # Red

    "text_dark": "#333333",
    "text_light": "#666666",
    "grid": "#e0e0e0",
}

SERIES_COLORS = [
    '#0F52BA', '#4CA1AF', '#10B981', '#F59E0B', '#EF4444',
    '#8B5CF6', '#EC4899', '#14B8A6', '#F97316', '#6366F1',
]

CHART_WIDTH = 800
CHART_HEIGHT = 400

# =====================================================================
# EXCEL EXPORT STYLES
# =====================================================================

EXCEL_STYLES = {
    "header_fill": "0F52BA",
    "header_font_color": "FFFFFF",
    "title_font_size": 14,
    "subtitle_font_size": 11,
    "good_fill": "D1FAE5",
    "warn_fill": "FEF3C7",
    "bad_fill": "FEE2E2",
    "border_color": "D1D5DB",
}

# =====================================================================
# CACHE
# =====================================================================

CACHE_TTL_SECONDS = 300
