"""
Turns the LLM's free-text screening reply into a ScreeningVerdict.

The reply is expected in the short format requested by the prompt
(``Match Score: XX/100``, ``Selected: YES/NO``, ``Key Strengths:`` and
``Missing Skills:`` bullet lists) but nothing about it is guaranteed, so
``parse_response`` is total: every input, including an empty string,
resolves to a fully populated verdict.

Each line is classified into exactly one ``LineKind``; precedence is
score > selection > section header > bullet. Bullets are filed under the
most recent section header and dropped when no header has been seen yet.
"""

import re
import logging
from enum import Enum
from typing import List, Optional

from schemas import DEFAULT_MISSING, DEFAULT_STRENGTHS, ScreeningVerdict

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 50
# below the smallest int<->str conversion limit an interpreter accepts (640)
MAX_SCORE_DIGITS = 600

_DIGITS = re.compile(r"\d+")
# "-", "•" and friends, the cp1252-mangled "•", "* " and "1." / "1)" markers
_BULLET = re.compile(r"^(?:[-•▪‣·]|â€¢|\*(?=\s)|\d{1,2}[.)](?=\s))\s*")
_RULE = re.compile(r"^(?:-{3,}|\*{3,}|_{3,}|={3,})$")
_MOJIBAKE_MARKERS = ("â€", "Ã", "Â")


class Section(Enum):
    NONE = "none"
    STRENGTHS = "strengths"
    MISSING = "missing"


class LineKind(Enum):
    SCORE = "score"
    SELECTION = "selection"
    STRENGTHS_HEADER = "strengths_header"
    MISSING_HEADER = "missing_header"
    BULLET = "bullet"
    OTHER = "other"


def repair_encoding(line: str) -> str:
    """Undo UTF-8 text that was decoded as cp1252 ("â€¢" -> "•"), when possible."""
    if not any(marker in line for marker in _MOJIBAKE_MARKERS):
        return line
    try:
        return line.encode("cp1252").decode("utf-8")
    except UnicodeError:
        return line


def classify_line(line: str) -> LineKind:
    lowered = line.lower()
    if "match score" in lowered:
        return LineKind.SCORE
    if "selected" in lowered:
        return LineKind.SELECTION
    if "key strengths" in lowered:
        return LineKind.STRENGTHS_HEADER
    if "missing skills" in lowered:
        return LineKind.MISSING_HEADER
    if _BULLET.match(line) and not _RULE.match(line):
        return LineKind.BULLET
    return LineKind.OTHER


def extract_score(line: str) -> Optional[int]:
    m = _DIGITS.search(line)
    if not m:
        return None
    if len(m.group(0)) > MAX_SCORE_DIGITS:
        logger.warning(f"Ignoring match score with {len(m.group(0))} digits")
        return None
    return int(m.group(0))


def strip_bullet(line: str) -> str:
    return _BULLET.sub("", line, count=1).strip()


def _lines(text: str) -> List[str]:
    lines = (repair_encoding(raw).strip() for raw in (text or "").splitlines())
    return [line for line in lines if line]


def parse_response(response_text: str) -> ScreeningVerdict:
    score: Optional[int] = None
    selected = False
    strengths: List[str] = []
    missing: List[str] = []
    section = Section.NONE

    for line in _lines(response_text):
        kind = classify_line(line)
        if kind is LineKind.SCORE:
            found = extract_score(line)
            if found is not None:
                score = found
        elif kind is LineKind.SELECTION:
            selected = "yes" in line.lower()
        elif kind is LineKind.STRENGTHS_HEADER:
            section = Section.STRENGTHS
        elif kind is LineKind.MISSING_HEADER:
            section = Section.MISSING
        elif kind is LineKind.BULLET:
            item = strip_bullet(line)
            if not item:
                continue
            if section is Section.STRENGTHS:
                strengths.append(item)
            elif section is Section.MISSING:
                missing.append(item)

    if score is None:
        score = DEFAULT_SCORE
    elif not 0 <= score <= 100:
        # kept as-is; callers decide whether to clamp
        logger.warning(f"Match score {score} is outside 0-100")

    return ScreeningVerdict(
        match_score=score,
        selected=selected,
        key_strengths=tuple(strengths) or DEFAULT_STRENGTHS,
        missing_skills=tuple(missing) or DEFAULT_MISSING,
        raw_text=response_text or "",
    )

