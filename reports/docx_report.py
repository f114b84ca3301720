import io
import os
import re
import logging
from datetime import datetime
from typing import Optional

from docx import Document
from docx.shared import Pt

from schemas import ScreeningResult

logger = logging.getLogger(__name__)

REPORT_TITLE = "Domain Resume Screening Report"


def _safe_stem(file_name: str) -> str:
    stem = os.path.basename(file_name or "resume")
    if stem.lower().endswith(".pdf"):
        stem = stem[:-4]
    return re.sub(r"[^A-Za-z0-9._-]", "_", stem) or "resume"


def report_filename(file_name: str, stamp: Optional[int] = None) -> str:
    """Report_<stamp>_<stem>.docx for the HTTP service, Domain_Report_<stem>.docx for the console."""
    stem = _safe_stem(file_name)
    if stamp is None:
        return f"Domain_Report_{stem}.docx"
    return f"Report_{stamp}_{stem}.docx"


def _heading(doc, text: str, size: Optional[int] = None):
    run = doc.add_paragraph().add_run(text)
    run.bold = True
    if size:
        run.font.size = Pt(size)


def _bullets(doc, items):
    for item in items:
        doc.add_paragraph(item, style="List Bullet")


def build_document(result: ScreeningResult, generated_at: Optional[datetime] = None):
    doc = Document()
    _heading(doc, REPORT_TITLE, size=16)
    doc.add_paragraph("")

    _heading(doc, f"File: {result.file_name}")
    _heading(doc, f"Domain: {result.domain}")
    _heading(doc, f"Match Score: {result.match_score}/100")
    _heading(doc, f"Selected: {'YES' if result.selected else 'NO'}")
    doc.add_paragraph("")

    _heading(doc, "Key Strengths")
    _bullets(doc, result.key_strengths)
    doc.add_paragraph("")

    _heading(doc, "Missing Skills")
    _bullets(doc, result.missing_skills)
    doc.add_paragraph("")

    _heading(doc, "Full Analysis")
    doc.add_paragraph(result.full_analysis)
    doc.add_paragraph("")

    stamp = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    footer = doc.add_paragraph().add_run(f"Generated: {stamp}")
    footer.italic = True
    footer.font.size = Pt(9)
    return doc


def render_report(result: ScreeningResult, generated_at: Optional[datetime] = None) -> bytes:
    buffer = io.BytesIO()
    build_document(result, generated_at).save(buffer)
    return buffer.getvalue()


def write_report(result: ScreeningResult, directory: str, stamp: Optional[int] = None) -> str:
    """Render a report into `directory` and return the written path."""
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, report_filename(result.file_name, stamp))
    with open(path, "wb") as f:
        f.write(render_report(result))
    logger.info(f"Report written to {path}")
    return path
