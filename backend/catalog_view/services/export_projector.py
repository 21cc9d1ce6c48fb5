"""Project visible catalog rows into spreadsheet and PDF exports."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from xml.sax.saxutils import escape

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from catalog_view.schemas.inventory import Product

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["ID", "Ürün Adı", "Marka", "Kategori", "Miktar", "Eklenme Tarihi"]
PLACEHOLDER = "-"
SHEET_NAME = "Products"
FILENAME_PREFIX = "products"
DEFAULT_DATE_FORMAT = "%d.%m.%Y"

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"

# Fonts known to cover Latin Extended (Turkish, Romanian, German, ...).
FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu-sans-fonts/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
    "/System/Library/Fonts/Supplemental/Arial Unicode.ttf",
    "C:\\Windows\\Fonts\\arial.ttf",
]


class ExportError(RuntimeError):
    """An export could not be produced."""


@dataclass(frozen=True)
class ExportPayload:
    content: bytes
    filename: str
    media_type: str


def export_filename(extension: str, generated_at: datetime | None = None) -> str:
    stamp = (generated_at or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{FILENAME_PREFIX}_{stamp}.{extension}"


def project_rows(
    rows: Iterable[Product], date_format: str = DEFAULT_DATE_FORMAT
) -> list[list]:
    """Map products to the export column set, in the given order."""
    projected = []
    for product in rows:
        projected.append(
            [
                product.id,
                product.name,
                product.brand_name or PLACEHOLDER,
                product.category_name or PLACEHOLDER,
                product.quantity,
                product.created_at.strftime(date_format) if product.created_at else PLACEHOLDER,
            ]
        )
    return projected


def to_spreadsheet(
    rows: Iterable[Product],
    *,
    date_format: str = DEFAULT_DATE_FORMAT,
    generated_at: datetime | None = None,
) -> ExportPayload:
    """Encode rows as a single-sheet xlsx workbook (header row always present)."""
    output = io.BytesIO()
    df = pd.DataFrame(project_rows(rows, date_format), columns=EXPORT_COLUMNS)
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=SHEET_NAME)

    logger.info(f"Exported {len(df)} rows to spreadsheet")
    return ExportPayload(
        content=output.getvalue(),
        filename=export_filename("xlsx", generated_at),
        media_type=XLSX_MEDIA_TYPE,
    )


def resolve_font_path(font_path: str | None = None) -> Path:
    """Find a TrueType font able to render the full source-locale charset."""
    if font_path:
        path = Path(font_path)
        if not path.is_file():
            raise ExportError(f"Configured export font not found: {font_path}")
        return path
    for candidate in FONT_CANDIDATES:
        path = Path(candidate)
        if path.is_file():
            return path
    raise ExportError(
        "No Unicode TrueType font found for PDF export; set EXPORT_FONT_PATH"
    )


def register_font(font_path: str | None = None) -> str:
    """Register the export font with reportlab once and return its name."""
    path = resolve_font_path(font_path)
    font_name = f"CatalogExport-{path.stem}"
    if font_name not in pdfmetrics.getRegisteredFontNames():
        try:
            pdfmetrics.registerFont(TTFont(font_name, str(path)))
        except TTFError as e:
            raise ExportError(f"Unusable export font {path}: {e}") from e
        logger.debug(f"Registered export font {font_name} from {path}")
    return font_name


def to_pdf_table(
    rows: Iterable[Product],
    *,
    title: str = "Ürün Listesi",
    font_path: str | None = None,
    date_format: str = DEFAULT_DATE_FORMAT,
    generated_at: datetime | None = None,
) -> ExportPayload:
    """Encode rows as a titled, page-paginated PDF table.

    The header row repeats on every page. Raises ``ExportError`` when no
    suitable font is available.
    """
    generated_at = generated_at or datetime.now()
    font_name = register_font(font_path)
    data = [EXPORT_COLUMNS] + [
        [str(cell) for cell in row] for row in project_rows(rows, date_format)
    ]

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ExportTitle", parent=styles["Title"], fontName=font_name
    )
    meta_style = ParagraphStyle(
        "ExportMeta", parent=styles["Normal"], fontName=font_name, fontSize=8
    )

    table = Table(data, repeatRows=1, hAlign="LEFT")
    table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, -1), font_name),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4481a0")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f1f5f9")]),
                ("ALIGN", (4, 1), (4, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )

    output = io.BytesIO()
    doc = SimpleDocTemplate(
        output,
        pagesize=landscape(A4),
        leftMargin=12 * mm,
        rightMargin=12 * mm,
        topMargin=12 * mm,
        bottomMargin=12 * mm,
        title=title,
    )
    doc.build(
        [
            Paragraph(escape(title), title_style),
            Paragraph(generated_at.strftime(f"{date_format} %H:%M"), meta_style),
            Spacer(1, 4 * mm),
            table,
        ]
    )

    logger.info(f"Exported {len(data) - 1} rows to PDF")
    return ExportPayload(
        content=output.getvalue(),
        filename=export_filename("pdf", generated_at),
        media_type=PDF_MEDIA_TYPE,
    )
