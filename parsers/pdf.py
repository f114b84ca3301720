import fitz  # PyMuPDF
import logging
from pathlib import Path
from typing import List

from screening.errors import PdfExtractionError

logger = logging.getLogger(__name__)


def pdf_to_text(source) -> str:
    """
    Extract text from a PDF.
    Works with file paths (str / Path), raw bytes and file-like objects (FastAPI / Streamlit uploads).
    """
    try:
        if isinstance(source, (str, Path)):
            doc = fitz.open(str(source))
        else:
            file_bytes = source if isinstance(source, (bytes, bytearray)) else source.read()
            if not file_bytes:
                raise PdfExtractionError("Empty PDF upload")
            doc = fitz.open(stream=bytes(file_bytes), filetype="pdf")

        with doc:
            text = "\n".join(page.get_text("text") for page in doc)
        return text.strip()

    except PdfExtractionError:
        raise
    except Exception as e:
        logger.warning(f"PDF extraction failed: {e}")
        raise PdfExtractionError(f"Could not read PDF: {e}") from e


def is_pdf_name(name: str) -> bool:
    return (name or "").lower().endswith(".pdf")


def list_pdf_files(folder) -> List[Path]:
    """PDF files directly inside a folder, sorted by name."""
    root = Path(folder)
    if not root.is_dir():
        raise NotADirectoryError(f"Not a folder: {folder}")
    return sorted((p for p in root.iterdir() if p.is_file() and is_pdf_name(p.name)), key=lambda p: p.name)
