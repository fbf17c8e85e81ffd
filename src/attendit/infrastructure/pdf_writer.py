"""
PDF Writer Module

Generates printable PDF attendance reports using fpdf2.
Renders the structured report summary as a table, followed by an
optional day-by-day grid.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fpdf import FPDF

from attendit.config.config_manager import ColorLogic
from attendit.domain.date_range import month_dates, parse_date
from attendit.domain.entities import AttendanceStatus, RateTier
from attendit.domain.report_summary import ReportSummary
from attendit.infrastructure.logger import get_logger

logger = get_logger("PdfWriter")

FALLBACK_FONT = "Helvetica"


# ==============================================================================
# AttendancePdf Class (A4 Landscape)
# ==============================================================================
class AttendancePdf(FPDF):
    """
    Custom FPDF class for A4 landscape attendance reports.

    Uses a custom TrueType font when one is configured, otherwise the
    core Helvetica font (Latin-1 only).
    """

    _font_family: str = FALLBACK_FONT
    _font_loaded: bool = False

    def __init__(self, title: str = "", subtitle: str = "", custom_font_path: Optional[str] = None):
        # A4 Landscape: 297mm x 210mm
        super().__init__(orientation='L', unit='mm', format='A4')
        self.title_text = title
        self.subtitle_text = subtitle
        self._setup_font(custom_font_path)

    def _setup_font(self, custom_font_path: Optional[str] = None) -> None:
        """Load the custom font if available."""
        if not custom_font_path:
            return

        font_path = Path(custom_font_path)
        if not font_path.exists():
            logger.warning(f"Custom font not found: {font_path}")
            return

        try:
            self.add_font("ReportFont", "", str(font_path))
            self._font_family = "ReportFont"
            self._font_loaded = True
            logger.info(f"Loaded custom font: {font_path.name}")
        except Exception as e:
            logger.warning(f"Unable to load font {font_path}: {e}")
            self._font_family = FALLBACK_FONT
            self._font_loaded = False

    @property
    def font_family_name(self) -> str:
        return self._font_family

    def safe_text(self, text: str) -> str:
        """Replace characters the core font cannot encode."""
        if self._font_loaded:
            return text
        return text.encode('latin-1', errors='replace').decode('latin-1')

    def header(self) -> None:
        """Draw page header with centered title and subtitle."""
        self.set_font(self._font_family, '', 14)
        self.set_text_color(0, 0, 0)
        self.cell(0, 9, self.safe_text(self.title_text), align='C', new_x='LMARGIN', new_y='NEXT')
        if self.subtitle_text:
            self.set_font(self._font_family, '', 9)
            self.cell(0, 5, self.safe_text(self.subtitle_text), align='C', new_x='LMARGIN', new_y='NEXT')
        self.ln(3)

    def footer(self) -> None:
        """Draw page footer with page number."""
        self.set_y(-12)
        self.set_font(self._font_family, '', 8)
        self.set_text_color(0, 0, 0)
        self.cell(0, 10, f'Page {self.page_no()}/{{nb}}', align='C')


# ==============================================================================
# PdfWriter Class
# ==============================================================================
class PdfWriter:
    """
    Generates PDF attendance reports.

    Features:
    - A4 landscape
    - Summary counters block and per-employee table
    - Rate column colored by RateTier
    - Optional daily grid with present/absent coloring
    """

    COLORS: Dict[str, Tuple[int, int, int]] = {
        'green': (144, 238, 144),
        'red': (255, 107, 107),
        'yellow': (255, 215, 0),
        'orange': (255, 165, 0),
        'blue': (107, 140, 255),
        'purple': (221, 160, 221),
        'pink': (255, 182, 193),
        'black': (51, 51, 51),
        'gray': (211, 211, 211),
        'header': (68, 114, 196),
        'white': (255, 255, 255),
    }

    HEX_TO_NAME: Dict[str, str] = {
        '#90EE90': 'green', '#90ee90': 'green',
        '#FF6B6B': 'red', '#ff6b6b': 'red',
        '#FFD700': 'yellow', '#ffd700': 'yellow',
        '#FFA500': 'orange', '#ffa500': 'orange',
        '#6B8CFF': 'blue', '#6b8cff': 'blue',
        '#DDA0DD': 'purple', '#dda0dd': 'purple',
        '#FFB6C1': 'pink', '#ffb6c1': 'pink',
        '#333333': 'black',
        '#D3D3D3': 'gray', '#d3d3d3': 'gray',
    }

    # Layout constants (mm) for A4 Landscape
    MARGIN = 10
    PAGE_WIDTH = 297
    PAGE_HEIGHT = 210

    COLUMN_WIDTHS = [70, 55, 30, 30, 30, 30]
    NAME_COL_WIDTH = 40

    HEADER_ROW_HEIGHT = 8
    DATA_ROW_HEIGHT = 7
    GRID_ROW_HEIGHT = 6

    THIN_LINE = 0.2

    def __init__(
        self,
        color_logic: Optional[ColorLogic] = None,
        custom_font_path: Optional[str] = None
    ):
        self._color_logic = color_logic or ColorLogic()
        self._custom_font_path = custom_font_path

    def _get_rgb(self, color_value: str) -> Optional[Tuple[int, int, int]]:
        """Get RGB tuple from color name or hex code."""
        if not color_value or color_value in ('none', 'transparent'):
            return None

        if color_value in self.COLORS:
            return self.COLORS[color_value]

        if color_value in self.HEX_TO_NAME:
            return self.COLORS[self.HEX_TO_NAME[color_value]]

        return None

    def _is_fill_dark(self, rgb: Tuple[int, int, int]) -> bool:
        """Check if RGB color is dark (needs white text)."""
        r, g, b = rgb
        luminance = (0.299 * r + 0.587 * g + 0.114 * b)
        return luminance < 128

    def _get_rate_color(self, tier: RateTier) -> Optional[Tuple[int, int, int]]:
        """Map RateTier to RGB color tuple."""
        if tier == RateTier.HIGH:
            return self._get_rgb(self._color_logic.high_rate_color)
        elif tier == RateTier.MEDIUM:
            return self._get_rgb(self._color_logic.medium_rate_color)
        else:
            return self._get_rgb(self._color_logic.low_rate_color)

    def create_report(
        self,
        summary: ReportSummary,
        year: int,
        month: int,
        output_path: Path,
        include_daily: bool = True
    ) -> None:
        """
        Create the PDF report.

        Args:
            summary: Structured report summary
            year: Report year
            month: Report month
            output_path: Destination file
            include_daily: Whether to append the day-by-day grid
        """
        pdf = AttendancePdf(
            title=summary.title,
            subtitle=summary.subtitle,
            custom_font_path=self._custom_font_path
        )
        pdf.alias_nb_pages()
        pdf.set_margins(self.MARGIN, self.MARGIN, self.MARGIN)
        pdf.set_auto_page_break(auto=False)

        pdf.add_page()
        self._draw_counters(pdf, summary)
        self._draw_summary_table(pdf, summary)

        if include_daily and summary.records:
            pdf.add_page()
            self._draw_daily_grid(pdf, summary, year, month)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        pdf.output(str(output_path))
        logger.info(f"PDF report saved: {output_path}")

    @staticmethod
    def counters_text(summary: ReportSummary) -> str:
        """Roll-up counters line, labelled with the summary's thresholds."""
        counters = summary.summary
        return (
            f"Employees: {counters.total_employees}    "
            f"Average attendance: {counters.average_attendance_text}    "
            f"High performers (>={summary.high_threshold:g}%): {counters.high_performers}    "
            f"Low performers (<{summary.low_threshold:g}%): {counters.low_performers}"
        )

    def _draw_counters(self, pdf: AttendancePdf, summary: ReportSummary) -> None:
        """Draw the roll-up counters as a single line."""
        text = self.counters_text(summary)
        pdf.set_font(pdf.font_family_name, '', 10)
        pdf.set_text_color(0, 0, 0)
        pdf.cell(0, 8, pdf.safe_text(text), align='L', new_x='LMARGIN', new_y='NEXT')
        pdf.ln(2)

    def _draw_table_header(self, pdf: AttendancePdf, headers: List[str], widths: List[float]) -> None:
        pdf.set_font(pdf.font_family_name, '', 9)
        pdf.set_fill_color(*self.COLORS['header'])
        pdf.set_text_color(255, 255, 255)
        pdf.set_line_width(self.THIN_LINE)
        for header, width in zip(headers, widths):
            pdf.cell(width, self.HEADER_ROW_HEIGHT, pdf.safe_text(header), border=1, align='C', fill=True)
        pdf.ln(self.HEADER_ROW_HEIGHT)
        pdf.set_text_color(0, 0, 0)

    def _needs_page_break(self, pdf: AttendancePdf, row_height: float) -> bool:
        return pdf.get_y() + row_height > self.PAGE_HEIGHT - 15

    def _draw_summary_table(self, pdf: AttendancePdf, summary: ReportSummary) -> None:
        """Draw the per-employee summary rows."""
        widths = self.COLUMN_WIDTHS
        self._draw_table_header(pdf, summary.headers, widths)

        for index, row in enumerate(summary.rows):
            if self._needs_page_break(pdf, self.DATA_ROW_HEIGHT):
                pdf.add_page()
                self._draw_table_header(pdf, summary.headers, widths)

            pdf.set_font(pdf.font_family_name, '', 9)
            last = len(row) - 1
            for col, (value, width) in enumerate(zip(row, widths)):
                fill_color = None
                if col == last and index < len(summary.records):
                    fill_color = self._get_rate_color(summary.records[index].rate_tier)
                if fill_color:
                    pdf.set_fill_color(*fill_color)
                    pdf.set_text_color(*((255, 255, 255) if self._is_fill_dark(fill_color) else (0, 0, 0)))
                else:
                    pdf.set_text_color(0, 0, 0)
                pdf.cell(
                    width, self.DATA_ROW_HEIGHT, pdf.safe_text(value),
                    border=1, align='L' if col < 2 else 'C', fill=bool(fill_color)
                )
            pdf.ln(self.DATA_ROW_HEIGHT)

    def _draw_daily_grid(
        self,
        pdf: AttendancePdf,
        summary: ReportSummary,
        year: int,
        month: int
    ) -> None:
        """Draw one row per employee with a P/A cell per day."""
        dates = month_dates(year, month)
        available_width = self.PAGE_WIDTH - 2 * self.MARGIN
        day_w = (available_width - self.NAME_COL_WIDTH) / len(dates)

        headers = ["Employee"] + [str(parse_date(d).day) for d in dates]
        widths = [self.NAME_COL_WIDTH] + [day_w] * len(dates)
        self._draw_table_header(pdf, headers, widths)

        present_rgb = self._get_rgb(self._color_logic.present_color)
        absent_rgb = self._get_rgb(self._color_logic.absent_color)

        for monthly in summary.records:
            if self._needs_page_break(pdf, self.GRID_ROW_HEIGHT):
                pdf.add_page()
                self._draw_table_header(pdf, headers, widths)

            pdf.set_font(pdf.font_family_name, '', 8)
            pdf.set_text_color(0, 0, 0)
            pdf.cell(self.NAME_COL_WIDTH, self.GRID_ROW_HEIGHT, pdf.safe_text(monthly.employee_name), border=1)

            for iso_date in dates:
                is_present = monthly.status_on(iso_date) == AttendanceStatus.PRESENT
                fill_color = present_rgb if is_present else absent_rgb
                if fill_color:
                    pdf.set_fill_color(*fill_color)
                    pdf.set_text_color(*((255, 255, 255) if self._is_fill_dark(fill_color) else (0, 0, 0)))
                else:
                    pdf.set_text_color(0, 0, 0)
                pdf.cell(
                    day_w, self.GRID_ROW_HEIGHT, "P" if is_present else "A",
                    border=1, align='C', fill=bool(fill_color)
                )
            pdf.ln(self.GRID_ROW_HEIGHT)


# ==============================================================================
# Utility Functions
# ==============================================================================
def format_filename(pattern: str, year: int, month: int) -> str:
    """Format filename pattern with placeholders."""
    return pattern.format(
        year=year,
        month=f"{month:02d}"
    )
