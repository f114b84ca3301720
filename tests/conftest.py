from typing import List

import fitz  # PyMuPDF
import pytest

from screening.config import Settings
from screening.llm_gateway import LLMGateway
from screening.skills import SkillCatalog

SAMPLE_REPLY = """Match Score: 87/100

Selected: YES

Key Strengths:
- Strong React skills
- Built REST APIs with Express

Missing Skills:
- No MongoDB experience
"""


class FakeGateway(LLMGateway):
    """Returns canned replies in order (the last one repeats); strings starting with "!" raise."""

    name = "fake"

    def __init__(self, replies=None):
        super().__init__(max_retries=0)
        self.replies: List[str] = list(replies or [SAMPLE_REPLY])
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies[min(len(self.prompts), len(self.replies)) - 1]
        if reply.startswith("!"):
            raise RuntimeError(reply[1:])
        return reply


def make_pdf(text: str) -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def catalog():
    return SkillCatalog.default()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        gemini_api_key="test-key",
        max_retries=2,
        retry_backoff=0,
        base_dir=str(tmp_path / "data"),
    )
