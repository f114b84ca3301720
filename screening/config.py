import os
import logging
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read once at start-up and passed around explicitly."""

    llm_provider: Optional[str] = None
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    groq_api_key: Optional[str] = None
    groq_model: str = "llama-3.3-70b-versatile"
    temperature: float = 0.4
    request_timeout: float = 60.0
    max_retries: int = 2
    retry_backoff: float = 1.0
    base_dir: str = "data"
    reports_dir: Optional[str] = None
    domain_skills_file: Optional[str] = None
    log_level: str = "INFO"
    api_url: str = "http://localhost:8000"

    @property
    def resolved_reports_dir(self) -> str:
        return self.reports_dir or os.path.join(self.base_dir, "reports")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, default))


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build Settings from the environment (and a .env file, if present)."""
    load_dotenv(env_file)
    is_hf = os.environ.get("SPACE_ID") is not None
    return Settings(
        llm_provider=(os.getenv("LLM_PROVIDER") or "").strip().lower() or None,
        gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        groq_api_key=os.getenv("GROQ_API_KEY"),
        groq_model=os.getenv("MODEL_NAME", "llama-3.3-70b-versatile"),
        temperature=_env_float("LLM_TEMPERATURE", 0.4),
        request_timeout=_env_float("LLM_TIMEOUT", 60.0),
        max_retries=_env_int("LLM_MAX_RETRIES", 2),
        retry_backoff=_env_float("LLM_RETRY_BACKOFF", 1.0),
        base_dir=os.getenv("BASE_DIR", "/tmp/data" if is_hf else "data"),
        reports_dir=os.getenv("REPORTS_DIR"),
        domain_skills_file=os.getenv("DOMAIN_SKILLS_FILE"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        api_url=os.getenv("API_URL", "http://localhost:8000"),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
