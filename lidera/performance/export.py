# lidera/performance/export.py
"""
Report Export for Performance Evaluations

Creates:
- CSV of the filtered evaluation list (details splatted into columns)
- Excel workbook: Resumo Geral, Ranking, Distribuição Setores,
  Matriz Competências, Evolução Temporal, Comparativo Individual
- PDF report (A4, pages added as the tables grow)

Uses openpyxl for Excel formatting and reportlab for PDF layout.
"""

import logging
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, List, Tuple
from xml.sax.saxutils import escape

import pandas as pd

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.formatting.rule import CellIsRule

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from .analytics import EvaluationAnalytics
from .constants import EXCEL_STYLES, HIGHLIGHT_NO, HIGHLIGHT_YES, TIER_LABELS
from .models import Evaluation
from .parsing import is_highlight

logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MIME = "text/csv"
PDF_MIME = "application/pdf"

Columns = List[Tuple[str, str, int]]


def evaluations_to_frame(evaluations: List[Dict[str, Any]]) -> pd.DataFrame:
    """Flat table of evaluations, one extra column per criterion."""
    rows = []
    for ev in evaluations:
        model = Evaluation.from_record(ev)
        row = {
            'Nome': model.employeeName,
            'Cargo': model.role,
            'Setor': model.sector,
            'Nível': model.type,
            'Data': model.date,
            'Nota_Final': f"{model.average:.2f}",
            'Destaque': HIGHLIGHT_YES if is_highlight(model.funcionarioMes) else HIGHLIGHT_NO,
            'Observações': model.observations,
        }
        for criterion, score in model.details.items():
            row[criterion] = score
        rows.append(row)
    return pd.DataFrame(rows)


def evaluations_csv(evaluations: List[Dict[str, Any]]) -> bytes:
    """UTF-8 CSV (with BOM so Excel reads accents) of the evaluation list."""
    df = evaluations_to_frame(evaluations)
    return df.to_csv(index=False).encode('utf-8-sig')


def export_filename(prefix: str, company_name: str, extension: str) -> str:
    safe_company = ''.join(c if c.isalnum() else '_' for c in (company_name or 'empresa')).strip('_')
    return f"{prefix}_{safe_company}_{datetime.now().strftime('%Y-%m-%d')}.{extension}"


class EvaluationExport:
    """
    Excel / PDF report generator for the dashboard.

    Usage:
        exporter = EvaluationExport()
        excel_bytes = exporter.create_report(analytics, company_name, filters)

        st.download_button(
            label="📥 Excel",
            data=excel_bytes,
            file_name=export_filename('relatorio_dashboard', company_name, 'xlsx'),
            mime=XLSX_MIME
        )
    """

    def __init__(self):
        """Initialize with default styles."""
        self.wb = None
        self._init_styles()

    def _init_styles(self):
        """Initialize reusable styles."""
        self.header_fill = PatternFill(
            start_color=EXCEL_STYLES['header_fill'],
            end_color=EXCEL_STYLES['header_fill'],
            fill_type='solid'
        )
        self.header_font = Font(bold=True, color=EXCEL_STYLES['header_font_color'], size=11)
        self.title_font = Font(bold=True, size=EXCEL_STYLES['title_font_size'])
        self.subtitle_font = Font(bold=True, size=EXCEL_STYLES['subtitle_font_size'])

        thin = Side(style='thin', color=EXCEL_STYLES['border_color'])
        self.cell_border = Border(left=thin, right=thin, top=thin, bottom=thin)

        self.center_align = Alignment(horizontal='center', vertical='center')
        self.right_align = Alignment(horizontal='right', vertical='center')

        self.score_format = '0.00'

    # =========================================================================
    # EXCEL
    # =========================================================================

    def create_report(
        self,
        analytics: EvaluationAnalytics,
        company_name: str = '',
        filters: Dict[str, Any] = None
    ) -> BytesIO:
        """
        Create the multi-sheet dashboard workbook.

        Args:
            analytics: Analytics over the filtered evaluations
            company_name: Shown on the summary sheet
            filters: Filter description shown on the summary sheet

        Returns:
            BytesIO containing Excel file
        """
        self.wb = Workbook()
        metrics = analytics.general_metrics()

        self._create_summary_sheet(metrics, company_name, filters or {})
        self._create_table_sheet("Ranking", analytics.ranking_frame(), [
            ('position', 'Posição', 10),
            ('name', 'Nome', 30),
            ('sector', 'Setor', 20),
            ('role', 'Cargo', 20),
            ('level', 'Nível', 14),
            ('mean_score', 'Média', 10),
            ('count', 'Avaliações', 12),
            ('total_score', 'Pontuação Acumulada', 20),
            ('highlights_selection', 'Destaques (Seleção)', 18),
            ('highlights_score', 'Destaques (Top 5)', 18),
        ], score_columns={'mean_score', 'total_score'})

        distribution = pd.DataFrame(metrics['sector_distribution'], columns=['name', 'value'])
        self._create_table_sheet("Distribuição Setores", distribution, [
            ('name', 'Setor', 30),
            ('value', 'Quantidade', 14),
        ])

        matrix = analytics.competency_matrix()
        sector_columns = [c for c in matrix.columns if c not in ('criteria', 'type', 'average')]
        self._create_table_sheet("Matriz Competências", matrix, [
            ('criteria', 'Competência', 30),
            ('type', 'Nível', 14),
            ('average', 'Média Geral', 12),
        ] + [(c, f"Setor: {c}", 16) for c in sector_columns],
            score_columns={'average', *sector_columns}, highlight_scores=True)

        self._create_table_sheet("Evolução Temporal", analytics.level_evolution(), [
            ('label', 'Período', 12),
            ('Estratégico', 'Estratégico', 12),
            ('Tático', 'Tático', 12),
            ('Operacional', 'Operacional', 12),
            ('Média Geral', 'Média Geral', 12),
            ('Meta', 'Meta', 10),
        ], score_columns={'Estratégico', 'Tático', 'Operacional', 'Média Geral', 'Meta'})

        comparison = analytics.individual_comparison()
        if not comparison.empty:
            comparison = comparison.assign(tier=comparison['tier'].map(TIER_LABELS))
        self._create_table_sheet("Comparativo Individual", comparison, [
            ('name', 'Nome', 30),
            ('sector', 'Setor', 20),
            ('label', 'Período', 10),
            ('individual_score', 'Score Individual', 16),
            ('sector_avg', 'Média Setor', 14),
            ('company_avg', 'Média Empresa', 14),
            ('diff_sector', 'Diferença vs Setor', 18),
            ('diff_company', 'Diferença vs Empresa', 20),
            ('tier', 'Classificação', 32),
        ], score_columns={'individual_score', 'sector_avg', 'company_avg', 'diff_sector', 'diff_company'})

        output = BytesIO()
        self.wb.save(output)
        output.seek(0)

        logger.info(f"Excel report created successfully ({len(self.wb.sheetnames)} sheets)")
        return output

    def _create_summary_sheet(self, metrics: Dict[str, Any], company_name: str, filters: Dict[str, Any]):
        """Cover sheet with headline metrics."""
        ws = self.wb.active
        ws.title = "Resumo Geral"

        row = 1
        ws.cell(row=row, column=1, value="Relatório de Desempenho").font = self.title_font
        ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=3)
        row += 2

        info = [("Empresa:", company_name or '-'), ("Gerado em:", datetime.now().strftime('%d/%m/%Y %H:%M'))]
        info += [(f"{label}:", value) for label, value in filters.items() if value]
        for label, value in info:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=str(value))
            row += 1
        row += 1

        ws.cell(row=row, column=1, value="Métrica").font = self.header_font
        ws.cell(row=row, column=1).fill = self.header_fill
        ws.cell(row=row, column=2, value="Valor").font = self.header_font
        ws.cell(row=row, column=2).fill = self.header_fill
        row += 1

        top = metrics.get('top_employee')
        summary_rows = [
            ("Score de Saúde", round(metrics['health_score'], 2)),
            ("Total de Avaliações", metrics['total_evaluations']),
            ("Setores Ativos", metrics['active_sectors']),
            ("Cargos Ativos", metrics['active_roles']),
            ("Colaboradores Avaliados", metrics['active_employees']),
            ("Em Férias", metrics['on_vacation']),
            ("Afastados", metrics['on_leave']),
            ("Maior Nota", f"{top['name']} ({top['score']:.2f})" if top else '-'),
        ]
        for label, value in summary_rows:
            ws.cell(row=row, column=1, value=label).border = self.cell_border
            cell = ws.cell(row=row, column=2, value=value)
            cell.border = self.cell_border
            cell.alignment = self.right_align
            row += 1

        ws.column_dimensions['A'].width = 28
        ws.column_dimensions['B'].width = 30

    def _create_table_sheet(
        self,
        title: str,
        df: pd.DataFrame,
        columns: Columns,
        score_columns: set = None,
        highlight_scores: bool = False
    ):
        """One header row plus data rows; missing columns are left blank."""
        ws = self.wb.create_sheet(title)
        score_columns = score_columns or set()

        for col_idx, (_, header, width) in enumerate(columns, 1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = self.center_align
            cell.border = self.cell_border
            ws.column_dimensions[get_column_letter(col_idx)].width = width

        for row_idx, record in enumerate(df.to_dict('records'), 2):
            for col_idx, (col_name, _, _) in enumerate(columns, 1):
                value = record.get(col_name, '')
                if isinstance(value, float) and pd.isna(value):
                    value = None
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.border = self.cell_border
                if col_name in score_columns:
                    cell.number_format = self.score_format
                    cell.alignment = self.right_align

        if highlight_scores and len(df) > 0:
            last_col = get_column_letter(len(columns))
            cell_range = f"C2:{last_col}{len(df) + 1}"
            ws.conditional_formatting.add(cell_range, CellIsRule(
                operator='lessThan', formula=['6'],
                fill=PatternFill(start_color=EXCEL_STYLES['bad_fill'], end_color=EXCEL_STYLES['bad_fill'], fill_type='solid')
            ))
            ws.conditional_formatting.add(cell_range, CellIsRule(
                operator='greaterThanOrEqual', formula=['8'],
                fill=PatternFill(start_color=EXCEL_STYLES['good_fill'], end_color=EXCEL_STYLES['good_fill'], fill_type='solid')
            ))

        ws.freeze_panes = 'A2'

    # =========================================================================
    # PDF
    # =========================================================================

    def create_pdf(
        self,
        analytics: EvaluationAnalytics,
        company_name: str = '',
        filters: Dict[str, Any] = None,
        ranking_limit: int = 20
    ) -> BytesIO:
        """
        Create the A4 PDF report.

        Tables repeat their header row and flow onto new pages as needed.
        """
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=1.5 * cm,
            rightMargin=1.5 * cm,
            topMargin=1.5 * cm,
            bottomMargin=1.5 * cm,
            title="Relatório de Desempenho",
        )
        styles = getSampleStyleSheet()
        elements = []

        metrics = analytics.general_metrics()

        elements.append(Paragraph(f"Relatório de Desempenho - {escape(company_name or 'Empresa')}", styles['Title']))
        elements.append(Paragraph(f"Gerado em: {datetime.now().strftime('%d/%m/%Y %H:%M')}", styles['Normal']))
        for label, value in (filters or {}).items():
            if value:
                elements.append(Paragraph(f"{escape(str(label))}: {escape(str(value))}", styles['Normal']))
        elements.append(Spacer(1, 12))

        elements.append(Paragraph("Resumo Geral", styles['Heading2']))
        elements.append(self._pdf_table([
            ['Métrica', 'Valor'],
            ['Score de Saúde', f"{metrics['health_score']:.2f}"],
            ['Total de Avaliações', str(metrics['total_evaluations'])],
            ['Setores Ativos', str(metrics['active_sectors'])],
            ['Cargos Ativos', str(metrics['active_roles'])],
            ['Colaboradores Avaliados', str(metrics['active_employees'])],
        ]))
        elements.append(Spacer(1, 12))

        ranking = analytics.ranking()[:ranking_limit]
        if ranking:
            elements.append(Paragraph(f"Ranking (Top {len(ranking)})", styles['Heading2']))
            data = [['#', 'Nome', 'Setor', 'Média', 'Avaliações']]
            for position, entry in enumerate(ranking, 1):
                data.append([str(position), entry.name, entry.sector, f"{entry.mean_score:.2f}", str(entry.count)])
            elements.append(self._pdf_table(data))
            elements.append(Spacer(1, 12))

        sectors = analytics.rollup('sector')
        if not sectors.groups.empty:
            elements.append(Paragraph("Médias por Setor", styles['Heading2']))
            data = [['Setor', 'Avaliações', 'Média']]
            for record in sectors.groups.to_dict('records'):
                data.append([record['name'], str(record['count']), f"{record['average']:.2f}"])
            data.append(['Média dos setores', '', f"{sectors.overall_average:.2f}"])
            elements.append(self._pdf_table(data))
            elements.append(Spacer(1, 12))

        gaps = analytics.gap_analysis()
        if not gaps.empty:
            elements.append(Paragraph("Competências (menor média primeiro)", styles['Heading2']))
            data = [['Competência', 'Nível', 'Média', 'Gap']]
            for record in gaps.to_dict('records'):
                data.append([record['criteria'], record['type'], f"{record['average']:.2f}", f"{record['gap']:.2f}"])
            elements.append(self._pdf_table(data))

        doc.build(elements)
        buffer.seek(0)

        logger.info("PDF report created successfully")
        return buffer

    @staticmethod
    def _pdf_table(data: List[List[str]]) -> Table:
        table = Table(data, repeatRows=1, hAlign='LEFT')
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(f"#{EXCEL_STYLES['header_fill']}")),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F3F4F6')]),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 6),
        ]))
        return table


__all__ = [
    'EvaluationExport',
    'evaluations_to_frame',
    'evaluations_csv',
    'export_filename',
    'XLSX_MIME',
    'CSV_MIME',
    'PDF_MIME',
]
