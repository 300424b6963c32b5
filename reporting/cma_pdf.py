"""
Comparative Market Analysis - PDF report

Generates a client-ready CMA document from a CMAReport.
Uses ReportLab in invariant mode for deterministic output (same report,
same bytes).

Output Structure:
1. Title block (subject address, generated date)
2. Subject Property
3. Estimated Value Range
4. Comparable Properties
5. Market Insights
6. Disclaimer
"""

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import List
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from core.cma import CMAReport
from utils.formatting import format_currency, format_percent, format_sqft


# Comparables listed in the table
MAX_COMPARABLE_ROWS = 10


@dataclass
class CMAReportSuccess:
    """Returned when the PDF was written to disk."""
    path: Path
    comparables_included: int


# =============================================================================
# Color Palette
# =============================================================================

class Palette:
    """Print-friendly palette: charcoal text, navy accent."""
    CHARCOAL = colors.Color(0.2, 0.2, 0.22)
    SLATE = colors.Color(0.35, 0.38, 0.42)
    GRAY = colors.Color(0.5, 0.5, 0.5)
    LIGHT_GRAY = colors.Color(0.85, 0.85, 0.85)
    PALE_GRAY = colors.Color(0.95, 0.95, 0.95)
    WHITE = colors.white
    ACCENT = colors.Color(0.15, 0.25, 0.4)
    ACCENT_LIGHT = colors.Color(0.92, 0.94, 0.97)


def get_report_styles():
    """Paragraph styles for the CMA document."""
    styles = getSampleStyleSheet()

    styles.add(ParagraphStyle(
        name='ReportTitle',
        parent=styles['Normal'],
        fontSize=20,
        leading=26,
        textColor=Palette.CHARCOAL,
        alignment=TA_LEFT,
        fontName='Helvetica-Bold',
        spaceAfter=4*mm,
    ))

    styles.add(ParagraphStyle(
        name='ReportSubtitle',
        parent=styles['Normal'],
        fontSize=10,
        leading=14,
        textColor=Palette.SLATE,
        fontName='Helvetica',
        spaceAfter=2*mm,
    ))

    styles.add(ParagraphStyle(
        name='SectionTitle',
        parent=styles['Normal'],
        fontSize=13,
        leading=17,
        textColor=Palette.CHARCOAL,
        fontName='Helvetica-Bold',
        spaceBefore=18,
        spaceAfter=10,
    ))

    styles['BodyText'].fontSize = 9.5
    styles['BodyText'].leading = 14.25
    styles['BodyText'].textColor = Palette.CHARCOAL
    styles['BodyText'].alignment = TA_JUSTIFY
    styles['BodyText'].fontName = 'Helvetica'

    styles.add(ParagraphStyle(
        name='MetricValue',
        parent=styles['Normal'],
        fontSize=16,
        leading=20,
        textColor=Palette.ACCENT,
        alignment=TA_CENTER,
        fontName='Helvetica-Bold',
    ))

    styles.add(ParagraphStyle(
        name='MetricLabel',
        parent=styles['Normal'],
        fontSize=8,
        leading=10,
        textColor=Palette.SLATE,
        alignment=TA_CENTER,
        fontName='Helvetica',
    ))

    styles.add(ParagraphStyle(
        name='Disclaimer',
        parent=styles['Normal'],
        fontSize=7.5,
        leading=11.25,
        textColor=Palette.GRAY,
        alignment=TA_JUSTIFY,
        fontName='Helvetica',
        spaceBefore=14,
    ))

    return styles


def confidence_note(report: CMAReport) -> str:
    """Confidence line under the value range; counts the whole comparable pool."""
    return (
        f"Confidence: <b>{report.valuation.confidence.value.title()}</b>, based on "
        f"{report.pool_size} comparable properties found. Base rate "
        f"{format_currency(int(report.base_rate_per_sqft))} per square foot."
    )


def report_filename(report: CMAReport) -> str:
    """CMA-<city>-<yyyymmddHHMMSS>.pdf"""
    city = "".join(ch for ch in report.subject.city if ch.isalnum()) or "subject"
    return f"CMA-{city}-{report.generated_at.strftime('%Y%m%d%H%M%S')}.pdf"


class CMAReportGenerator:
    """
    Renders CMA reports to PDF.

    Usage:
        generator = CMAReportGenerator()
        pdf_bytes = generator.generate_to_buffer(report)
    """

    MARGIN = 18*mm

    # Output directory
    OUTPUT_DIR = Path("reports")

    def __init__(self, output_dir: Path = None):
        self.styles = get_report_styles()
        self.output_dir = Path(output_dir) if output_dir else self.OUTPUT_DIR

    def generate_report(self, report: CMAReport) -> CMAReportSuccess:
        """Write the PDF into the output directory."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.output_dir / report_filename(report)
        output_path.write_bytes(self.generate_to_buffer(report))
        return CMAReportSuccess(
            path=output_path,
            comparables_included=min(len(report.comparables), MAX_COMPARABLE_ROWS),
        )

    def generate_to_buffer(self, report: CMAReport) -> bytes:
        """Generate PDF and return as bytes (for streaming)."""
        buffer = BytesIO()
        self._build_document(report, buffer)
        return buffer.getvalue()

    def _build_document(self, report: CMAReport, buffer: BytesIO):
        doc = SimpleDocTemplate(
            buffer,
            pagesize=LETTER,
            leftMargin=self.MARGIN,
            rightMargin=self.MARGIN,
            topMargin=self.MARGIN,
            bottomMargin=self.MARGIN + 4*mm,
            title=f"Comparative Market Analysis - {report.subject.address or report.subject.city}",
            author="Comparable Property Engine",
            subject="Comparative Market Analysis",
            invariant=1,
        )

        story = []
        story.extend(self._build_title(report))
        story.extend(self._build_subject(report))
        story.extend(self._build_valuation(report))
        story.extend(self._build_comparables(report))
        story.extend(self._build_market_insights(report))
        story.append(Paragraph(escape(report.disclaimer), self.styles['Disclaimer']))

        doc.build(story, onFirstPage=self._draw_footer, onLaterPages=self._draw_footer)

    def _draw_footer(self, canvas_obj: canvas.Canvas, doc):
        """Page number bottom right."""
        canvas_obj.saveState()
        canvas_obj.setFont('Helvetica', 7)
        canvas_obj.setFillColor(Palette.GRAY)
        canvas_obj.drawString(self.MARGIN, self.MARGIN - 6*mm, "COMPARATIVE MARKET ANALYSIS")
        canvas_obj.drawRightString(LETTER[0] - self.MARGIN, self.MARGIN - 6*mm, f"{doc.page}")
        canvas_obj.restoreState()

    # =========================================================================
    # Sections
    # =========================================================================

    def _build_title(self, report: CMAReport) -> list:
        subject = report.subject
        location = ", ".join(part for part in (subject.city, subject.state) if part)
        heading = subject.address or location

        return [
            Paragraph("Comparative Market Analysis", self.styles['ReportTitle']),
            Paragraph(escape(heading), self.styles['ReportSubtitle']),
            Paragraph(
                f"Generated {report.generated_at.strftime('%d %B %Y')}",
                self.styles['ReportSubtitle'],
            ),
        ]

    def _build_subject(self, report: CMAReport) -> list:
        subject = report.subject
        amenities = [name for name, present in (("Pool", subject.pool), ("Waterfront", subject.waterfront)) if present]

        rows = [
            ["City", ", ".join(part for part in (subject.city, subject.state) if part)],
            ["Bedrooms", str(subject.bedrooms)],
            ["Bathrooms", "-" if subject.bathrooms is None else f"{subject.bathrooms:g}"],
            ["Living area", format_sqft(subject.square_feet)],
            ["Year built", str(subject.year_built) if subject.year_built else "-"],
            ["Condition", subject.condition.value.title()],
            ["Amenities", ", ".join(amenities) or "None"],
        ]

        table = Table(rows, colWidths=[45*mm, 120*mm])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTNAME', (1, 0), (1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('TEXTCOLOR', (0, 0), (-1, -1), Palette.CHARCOAL),
            ('LINEBELOW', (0, 0), (-1, -1), 0.5, Palette.LIGHT_GRAY),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 2.5*mm),
            ('TOPPADDING', (0, 0), (-1, -1), 2.5*mm),
        ]))

        return [Paragraph("Subject Property", self.styles['SectionTitle']), table]

    def _build_valuation(self, report: CMAReport) -> list:
        valuation = report.valuation

        cells = [
            [
                Paragraph(format_currency(valuation.low), self.styles['MetricValue']),
                Paragraph(format_currency(valuation.mid), self.styles['MetricValue']),
                Paragraph(format_currency(valuation.high), self.styles['MetricValue']),
            ],
            [
                Paragraph("Low", self.styles['MetricLabel']),
                Paragraph("Estimated Value", self.styles['MetricLabel']),
                Paragraph("High", self.styles['MetricLabel']),
            ],
        ]
        table = Table(cells, colWidths=[55*mm, 55*mm, 55*mm])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, -1), Palette.ACCENT_LIGHT),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('TOPPADDING', (0, 0), (-1, 0), 4*mm),
            ('BOTTOMPADDING', (0, -1), (-1, -1), 4*mm),
        ]))

        return [
            Paragraph("Estimated Value Range", self.styles['SectionTitle']),
            table,
            Spacer(1, 8),
            Paragraph(confidence_note(report), self.styles['BodyText']),
        ]

    def _build_comparables(self, report: CMAReport) -> list:
        elements = [Paragraph("Comparable Properties", self.styles['SectionTitle'])]

        if not report.comparables:
            elements.append(Paragraph(
                "No comparable properties matched this subject.",
                self.styles['BodyText'],
            ))
            return elements

        headers = ["Address", "Status", "Beds", "Sqft", "Price", "$/Sqft", "Adjusted", "Score"]
        rows: List[list] = [headers]
        for comp in report.comparables[:MAX_COMPARABLE_ROWS]:
            prop = comp.property
            rows.append([
                (prop.address or prop.city)[:28],
                prop.status.value.replace("_", " ").title(),
                str(prop.bedrooms),
                f"{prop.square_feet:,}" if prop.square_feet else "-",
                format_currency(prop.price),
                format_currency(comp.price_per_sqft),
                format_currency(comp.adjusted_price),
                str(comp.similarity_score),
            ])

        col_widths = [50*mm, 16*mm, 10*mm, 15*mm, 22*mm, 15*mm, 22*mm, 12*mm]
        table = Table(rows, colWidths=col_widths, repeatRows=1)
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 7.5),
            ('BACKGROUND', (0, 0), (-1, 0), Palette.CHARCOAL),
            ('TEXTCOLOR', (0, 0), (-1, 0), Palette.WHITE),
            ('TEXTCOLOR', (0, 1), (-1, -1), Palette.CHARCOAL),
            ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('GRID', (0, 0), (-1, -1), 0.5, Palette.LIGHT_GRAY),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [Palette.WHITE, Palette.PALE_GRAY]),
        ]))
        elements.append(table)
        elements.append(Spacer(1, 6))
        elements.append(Paragraph(
            "Adjusted prices normalise each comparable to the subject's living area "
            "at $100 per square foot of difference.",
            self.styles['BodyText'],
        ))
        return elements

    def _build_market_insights(self, report: CMAReport) -> list:
        insights = report.market_insights
        rows = [
            ["Average days on market", str(insights.get("avg_days_on_market", "-"))],
            ["Price trend (12 months)", format_percent(float(insights.get("price_trend", 0.0)))],
            ["Inventory level", str(insights.get("inventory_level", "-"))],
            ["Buyer demand", str(insights.get("buyer_demand", "-"))],
        ]
        table = Table(rows, colWidths=[60*mm, 105*mm])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('TEXTCOLOR', (0, 0), (-1, -1), Palette.CHARCOAL),
            ('LINEBELOW', (0, 0), (-1, -1), 0.5, Palette.LIGHT_GRAY),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 2*mm),
            ('TOPPADDING', (0, 0), (-1, -1), 2*mm),
        ]))
        return [Paragraph("Market Insights", self.styles['SectionTitle']), table]


def generate_cma_pdf(report: CMAReport, output_dir: Path = None) -> CMAReportSuccess:
    """
    Write a CMA PDF for the report.

    This is the primary entry point for file-based report generation.
    """
    return CMAReportGenerator(output_dir=output_dir).generate_report(report)
