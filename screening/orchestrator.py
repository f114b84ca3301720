import logging
from typing import Callable, Iterable, List, Optional, Tuple

from parsers.pdf import pdf_to_text
from schemas import ScreeningResult
from .errors import NoInputFilesError
from .llm_gateway import LLMGateway
from .prompts import build_domain_prompt
from .response_parser import parse_response
from .skills import SkillCatalog

logger = logging.getLogger(__name__)

# (display name, source handed to the extractor: path, bytes or file-like)
ResumeInput = Tuple[str, object]
Extractor = Callable[[object], str]
ResultCallback = Callable[[ScreeningResult], None]


def screen_resume(file_name: str, resume_text: str, domain: str,
                  catalog: SkillCatalog, gateway: LLMGateway) -> ScreeningResult:
    """Prompt -> LLM -> parse for one resume. Gateway errors propagate."""
    prompt = build_domain_prompt(catalog, domain, resume_text)
    response = gateway.generate(prompt)
    verdict = parse_response(response)
    return ScreeningResult.from_verdict(file_name, domain, verdict)


def screen_batch(files: Iterable[ResumeInput], domain: str, catalog: SkillCatalog,
                 gateway: LLMGateway, extract: Extractor = pdf_to_text,
                 on_result: Optional[ResultCallback] = None) -> List[ScreeningResult]:
    """
    Screen resumes one after another, in input order.

    Bad domain or an empty file list raise before any LLM call. After that a
    failure in one file only degrades that file's result.
    """
    # validates the domain up front
    catalog.skills_for(domain)
    domain = domain.strip().lower()
    files = list(files)
    if not files:
        raise NoInputFilesError("No files uploaded")

    logger.info(f"Screening {len(files)} resume(s) for {domain} domain")
    results: List[ScreeningResult] = []
    for name, source in files:
        logger.info(f"Screening {name} for {domain} domain...")
        try:
            text = extract(source)
            result = screen_resume(name, text, domain, catalog, gateway)
            logger.info(f"Completed: {name} (score {result.match_score}, selected={result.selected})")
        except Exception as e:
            logger.exception(f"Error processing file {name}: {e}")
            result = ScreeningResult.failed(name, domain, e)
        results.append(result)
        if on_result is not None:
            on_result(result)
    return results
