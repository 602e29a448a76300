"""
Study Plan Word Exporter
========================
Renders an imported ``PlanData`` as a DOCX study plan.

Features:
- Cover page with the guide's header fields and totals
- Optional Table of Contents field
- One section per subject (Heading 1), colored with the subject color
- Topic tree as nested bullets annotated with question counts
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import PlanData, Subject, Topic

logger = logging.getLogger(__name__)

# python-docx ships "List Bullet", "List Bullet 2" and "List Bullet 3"
_MAX_BULLET_LEVEL = 3


def export_plan_docx(
    plan: "PlanData",
    filepath: str,
    *,
    include_toc: bool = True,
) -> str:
    """
    Export a study plan to a Word document.

    Args:
        plan: Assembled plan
        filepath: Output .docx path
        include_toc: Whether to insert a TOC field

    Returns:
        Absolute path to the created file
    """
    from docx import Document
    from docx.shared import Pt
    from docx.enum.text import WD_ALIGN_PARAGRAPH
    from docx.enum.table import WD_TABLE_ALIGNMENT

    output_path = Path(filepath)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    doc = Document()

    # ── Configure base styles ──────────────────────────────────────
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(10)
    style.paragraph_format.space_after = Pt(4)

    # ── Cover Page ─────────────────────────────────────────────────
    title = doc.add_heading(plan.name or "Study Plan", level=0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER

    summary_items = [
        ("Role", plan.cargo or "N/A"),
        ("Notice", plan.edital or "N/A"),
        ("Board", plan.banca or "N/A"),
        ("Subjects", str(len(plan.subjects))),
        ("Topics", str(plan.total_topics)),
    ]

    summary_table = doc.add_table(rows=len(summary_items), cols=2)
    summary_table.alignment = WD_TABLE_ALIGNMENT.CENTER
    for i, (label, value) in enumerate(summary_items):
        row = summary_table.rows[i]
        _cell_text(row.cells[0], label, bold=True, size=Pt(10))
        _cell_text(row.cells[1], value, size=Pt(10))

    doc.add_page_break()

    # ── Table of Contents ──────────────────────────────────────────
    if include_toc:
        doc.add_heading("Table of Contents", level=1)
        _add_toc_field(doc)
        doc.add_page_break()

    # ── Per-Subject Sections ───────────────────────────────────────
    for idx, subject in enumerate(plan.subjects):
        _render_subject(doc, subject)
        if idx < len(plan.subjects) - 1:
            doc.add_page_break()

    # ── Save ───────────────────────────────────────────────────────
    doc.save(str(output_path))
    logger.info(f"Exported DOCX to {output_path.absolute()}")
    return str(output_path.absolute())


# ---------------------------------------------------------------------------
# Per-subject rendering
# ---------------------------------------------------------------------------

def _render_subject(doc, subject: "Subject") -> None:
    from docx.shared import Pt, RGBColor

    heading = doc.add_heading(subject.subject[:120], level=1)
    rgb = _hex_to_rgb(subject.color)
    if rgb:
        for run in heading.runs:
            run.font.color.rgb = RGBColor(*rgb)

    meta = doc.add_paragraph()
    meta_run = meta.add_run(f"{subject.total_topics_count} topics")
    meta_run.italic = True
    meta_run.font.size = Pt(9)

    if not subject.topics:
        doc.add_paragraph("[no topics listed]")
        return

    _render_topics(doc, subject.topics, level=1)


def _render_topics(doc, topics: List["Topic"], level: int) -> None:
    """Render topics as bullets; levels past the deepest bullet style stay flat."""
    from docx.shared import Pt

    style_level = min(level, _MAX_BULLET_LEVEL)
    style_name = "List Bullet" if style_level == 1 else f"List Bullet {style_level}"

    for topic in topics:
        p = doc.add_paragraph(style=style_name)
        text_run = p.add_run(topic.topic_text)
        if topic.is_grouping_topic:
            text_run.bold = True
        if topic.question_count:
            label = "question" if topic.question_count == 1 else "questions"
            count_run = p.add_run(f"  ({topic.question_count} {label})")
            count_run.font.size = Pt(8)
        if topic.sub_topics:
            _render_topics(doc, topic.sub_topics, level + 1)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _hex_to_rgb(color: str):
    value = (color or "").lstrip("#")
    if len(value) != 6:
        return None
    try:
        return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return None


def _cell_text(cell, text: str, bold: bool = False, size=None) -> None:
    """Set cell text with formatting."""
    cell.text = text
    for paragraph in cell.paragraphs:
        for run in paragraph.runs:
            run.bold = bold
            if size:
                run.font.size = size


def _add_toc_field(doc) -> None:
    """Insert a Word TOC field code (updates on open in Word)."""
    from docx.oxml.ns import qn
    from docx.oxml import OxmlElement

    paragraph = doc.add_paragraph()
    run = paragraph.add_run()

    fld_char_begin = OxmlElement("w:fldChar")
    fld_char_begin.set(qn("w:fldCharType"), "begin")
    run._element.append(fld_char_begin)

    instr_text = OxmlElement("w:instrText")
    instr_text.set(qn("xml:space"), "preserve")
    instr_text.text = ' TOC \\o "1-1" \\h \\z \\u '
    run._element.append(instr_text)

    fld_char_separate = OxmlElement("w:fldChar")
    fld_char_separate.set(qn("w:fldCharType"), "separate")
    run._element.append(fld_char_separate)

    placeholder_run = paragraph.add_run(
        "[Open in Microsoft Word and press F9 to update Table of Contents]"
    )
    placeholder_run.font.italic = True

    fld_char_end = OxmlElement("w:fldChar")
    fld_char_end.set(qn("w:fldCharType"), "end")
    run._element.append(fld_char_end)
