"""
PDF rendering of a ReportDocument with reportlab.

Layout: letterhead with a rule under it, centered title, summary table,
optional profit-sharing table, transaction table (header row repeated on
every page), signature block on the right.
"""

from io import BytesIO
from xml.sax.saxutils import escape

import structlog
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    HRFlowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from bookkeeping.reports.document import (
    PROFIT_SHARING_HEADER,
    SUMMARY_HEADER,
    TRANSACTION_HEADER,
    ReportDocument,
)


logger = structlog.get_logger(__name__)

HEADER_DARK = colors.HexColor("#1e293b")
HEADER_SLATE = colors.HexColor("#334155")
STRIPE = colors.HexColor("#f1f5f9")


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "org": ParagraphStyle("org", parent=base["Heading1"], fontSize=18, spaceAfter=2),
        "address": ParagraphStyle("address", parent=base["Normal"], fontSize=10),
        "title": ParagraphStyle("title", parent=base["Title"], fontSize=16, alignment=TA_CENTER),
        "section": ParagraphStyle("section", parent=base["Heading2"], fontSize=12),
        "cell": ParagraphStyle("cell", parent=base["Normal"], fontSize=9, leading=11),
        "signature": ParagraphStyle("signature", parent=base["Normal"], fontSize=11, alignment=TA_RIGHT),
    }


def _table(rows: list[list], col_widths: list[float], header_color, striped: bool = False) -> Table:
    table = Table(rows, colWidths=col_widths, hAlign="LEFT", repeatRows=1)
    commands = [
        ("BACKGROUND", (0, 0), (-1, 0), header_color),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("LEFTPADDING", (0, 0), (-1, -1), 6),
        ("RIGHTPADDING", (0, 0), (-1, -1), 6),
    ]
    if striped:
        commands.append(("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, STRIPE]))
    else:
        commands.append(("GRID", (0, 0), (-1, -1), 0.35, colors.grey))
    table.setStyle(TableStyle(commands))
    return table


def render_report_pdf(document: ReportDocument) -> bytes:
    """Render the document to PDF bytes (A4, paginated)."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=14 * mm,
        rightMargin=14 * mm,
        topMargin=16 * mm,
        bottomMargin=16 * mm,
        title=document.title,
        author=document.organization_name,
    )
    styles = _styles()
    width = doc.width

    story = [
        Paragraph(escape(document.organization_name), styles["org"]),
        Paragraph(escape(document.organization_address), styles["address"]),
        Spacer(1, 3 * mm),
        HRFlowable(width="100%", thickness=0.8, color=colors.black),
        Spacer(1, 6 * mm),
        Paragraph(escape(document.title), styles["title"]),
        Spacer(1, 4 * mm),
    ]

    story.append(_table(
        [SUMMARY_HEADER, *document.summary_rows],
        [width * 0.6, width * 0.4],
        HEADER_DARK,
    ))

    if document.has_profit_sharing:
        story.append(Spacer(1, 6 * mm))
        story.append(Paragraph("Profit Sharing Breakdown", styles["section"]))
        story.append(_table(
            [PROFIT_SHARING_HEADER, *document.profit_sharing_rows],
            [width * 0.6, width * 0.4],
            HEADER_SLATE,
            striped=True,
        ))

    story.append(Spacer(1, 6 * mm))
    story.append(Paragraph("Transaction Details", styles["section"]))
    # Wrap long descriptions inside their column
    transaction_rows = [
        [row[0], Paragraph(escape(row[1]), styles["cell"]), *row[2:]]
        for row in document.transaction_rows
    ]
    story.append(_table(
        [TRANSACTION_HEADER, *transaction_rows],
        [width * 0.13, width * 0.37, width * 0.14, width * 0.18, width * 0.18],
        HEADER_DARK,
    ))

    story.extend([
        Spacer(1, 12 * mm),
        Paragraph(escape(document.signature_place_date), styles["signature"]),
        Spacer(1, 4 * mm),
        Paragraph(escape(document.signatory_title), styles["signature"]),
        Spacer(1, 18 * mm),
        Paragraph(escape(document.signatory_name), styles["signature"]),
    ])

    doc.build(story)
    pdf = buffer.getvalue()
    logger.info(
        "report_pdf_rendered",
        period=document.period_key,
        transaction_rows=len(document.transaction_rows),
        size_bytes=len(pdf),
    )
    return pdf
