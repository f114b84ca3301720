from datetime import datetime, timezone
from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


DEFAULT_STRENGTHS: Tuple[str, ...] = ("Technical background", "Professional experience")
DEFAULT_MISSING: Tuple[str, ...] = ("Advanced specialization", "Specific tools")
PROCESSING_ERROR = "Processing error"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# Parsed LLM reply for one (resume, domain) pair
class ScreeningVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    match_score: int = 50
    selected: bool = False
    key_strengths: Tuple[str, ...] = DEFAULT_STRENGTHS
    missing_skills: Tuple[str, ...] = DEFAULT_MISSING
    raw_text: str = ""


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# One analyzed file, as returned by /api/analyze and accepted by /api/generate-report
class ScreeningResult(_CamelModel):
    file_name: str
    domain: str
    match_score: int = 0
    selected: bool = False
    key_strengths: List[str] = Field(default_factory=list)
    missing_skills: List[str] = Field(default_factory=list)
    full_analysis: str = ""
    timestamp: str = Field(default_factory=utc_now_iso)
    # set only for files that could not be screened; never serialized
    error: Optional[str] = Field(None, exclude=True)

    @classmethod
    def from_verdict(cls, file_name: str, domain: str, verdict: ScreeningVerdict) -> "ScreeningResult":
        return cls(
            file_name=file_name,
            domain=domain,
            match_score=verdict.match_score,
            selected=verdict.selected,
            key_strengths=list(verdict.key_strengths),
            missing_skills=list(verdict.missing_skills),
            full_analysis=verdict.raw_text,
        )

    @classmethod
    def failed(cls, file_name: str, domain: str, error: BaseException) -> "ScreeningResult":
        return cls(
            file_name=file_name,
            domain=domain,
            match_score=0,
            selected=False,
            key_strengths=[],
            missing_skills=[PROCESSING_ERROR],
            full_analysis=f"Error: {error}",
            error=str(error) or error.__class__.__name__,
        )

    @property
    def is_error(self) -> bool:
        return self.error is not None


class AnalyzeResponse(BaseModel):
    success: bool = True
    message: str
    results: List[ScreeningResult]


class ReportResponse(_CamelModel):
    success: bool = True
    message: str
    file_path: str
    download_url: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
