from unittest import mock

import pytest
import requests

from screening.config import Settings
from screening.errors import GatewayError
from screening.llm_gateway import GeminiGateway, GroqGateway, build_gateway


def _response(status: int = 200, payload=None):
    resp = mock.MagicMock()
    resp.status_code = status
    resp.json.return_value = payload if payload is not None else {}
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


def _gemini_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def post():
    with mock.patch("screening.llm_gateway.requests.post") as post, \
            mock.patch("screening.llm_gateway.time.sleep"):
        yield post


def test_gemini_request_and_reply(post):
    post.return_value = _response(payload=_gemini_payload("Match Score: 70/100"))
    gateway = GeminiGateway("key-1", model="gemini-2.5-flash", temperature=0.2, timeout=5)

    assert gateway.generate("hello") == "Match Score: 70/100"
    url = post.call_args.args[0]
    kwargs = post.call_args.kwargs
    assert url.endswith("/models/gemini-2.5-flash:generateContent")
    assert kwargs["headers"]["x-goog-api-key"] == "key-1"
    assert kwargs["json"]["contents"][0]["parts"][0]["text"] == "hello"
    assert kwargs["json"]["generationConfig"] == {"temperature": 0.2}
    assert kwargs["timeout"] == 5


def test_gemini_blocked_prompt(post):
    post.return_value = _response(payload={"promptFeedback": {"blockReason": "SAFETY"}})
    with pytest.raises(GatewayError, match="SAFETY"):
        GeminiGateway("key").generate("hello")


def test_groq_request_and_reply(post):
    post.return_value = _response(payload={"choices": [{"message": {"content": "Selected: YES"}}]})
    gateway = GroqGateway("gsk", model="llama-3.3-70b-versatile")

    assert gateway.generate("prompt") == "Selected: YES"
    kwargs = post.call_args.kwargs
    assert post.call_args.args[0] == "https://api.groq.com/openai/v1/chat/completions"
    assert kwargs["headers"]["Authorization"] == "Bearer gsk"
    assert kwargs["json"]["messages"] == [{"role": "user", "content": "prompt"}]


def test_groq_empty_reply(post):
    post.return_value = _response(payload={"choices": [{"message": {"content": "  "}}]})
    with pytest.raises(GatewayError):
        GroqGateway("gsk").generate("prompt")


def test_retries_transient_errors_then_succeeds(post):
    post.side_effect = [
        requests.ConnectionError("reset"),
        _response(503),
        _response(payload=_gemini_payload("ok")),
    ]
    gateway = GeminiGateway("key", max_retries=2, retry_backoff=0)
    assert gateway.generate("p") == "ok"
    assert post.call_count == 3


def test_gives_up_after_max_retries(post):
    post.return_value = _response(429)
    gateway = GroqGateway("gsk", max_retries=1, retry_backoff=0)
    with pytest.raises(GatewayError):
        gateway.generate("p")
    assert post.call_count == 2


def test_timeout_on_last_attempt_raises(post):
    post.side_effect = requests.Timeout("slow")
    with pytest.raises(GatewayError, match="slow"):
        GroqGateway("gsk", max_retries=0).generate("p")
    assert post.call_count == 1


def test_client_errors_are_not_retried(post):
    post.return_value = _response(401)
    with pytest.raises(GatewayError, match="401"):
        GeminiGateway("bad", max_retries=3).generate("p")
    assert post.call_count == 1


def test_missing_keys():
    with pytest.raises(GatewayError):
        GeminiGateway(None)
    with pytest.raises(GatewayError):
        GroqGateway("")


def test_build_gateway_selection():
    assert isinstance(build_gateway(Settings(gemini_api_key="g", groq_api_key="q")), GeminiGateway)
    assert isinstance(build_gateway(Settings(groq_api_key="q")), GroqGateway)
    groq = build_gateway(Settings(llm_provider="groq", gemini_api_key="g", groq_api_key="q", max_retries=5))
    assert isinstance(groq, GroqGateway)
    assert groq.max_retries == 5


def test_build_gateway_errors():
    with pytest.raises(GatewayError, match="No LLM API key"):
        build_gateway(Settings())
    with pytest.raises(GatewayError, match="Unknown LLM_PROVIDER"):
        build_gateway(Settings(llm_provider="openai", gemini_api_key="g"))
