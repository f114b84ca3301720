import os

import pytest
from fastapi.testclient import TestClient

from app import create_app
from conftest import FakeGateway, make_pdf
from screening.config import Settings


@pytest.fixture
def fake():
    return FakeGateway()


@pytest.fixture
def client(settings, catalog, fake):
    app = create_app(settings=settings, catalog=catalog, gateway=fake)
    with TestClient(app) as c:
        yield c


def _pdf(name="jane.pdf", text="React and Node.js developer"):
    return ("files", (name, make_pdf(text), "application/pdf"))


def test_health(client):
    body = client.get("/api/health").json()
    assert body["status"] == "ok"
    assert body["timestamp"]


def test_domain_skills(client):
    body = client.get("/api/domain-skills").json()
    assert set(body) == {"fullstack", "networking", "iot", "datasci"}


def test_analyze(client, fake):
    resp = client.post("/api/analyze", data={"domain": "fullstack"}, files=[_pdf(), _pdf("bob.pdf")])
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Analyzed 2 resume(s)"
    first = body["results"][0]
    assert set(first) == {
        "fileName", "domain", "matchScore", "selected", "keyStrengths",
        "missingSkills", "fullAnalysis", "timestamp",
    }
    assert first["fileName"] == "jane.pdf"
    assert first["matchScore"] == 87
    assert first["selected"] is True
    assert first["missingSkills"] == ["No MongoDB experience"]
    assert [r["fileName"] for r in body["results"]] == ["jane.pdf", "bob.pdf"]
    assert "React and Node.js developer" in fake.prompts[0]


def test_analyze_isolates_per_file_errors(client):
    broken = ("files", ("broken.pdf", b"definitely not a pdf", "application/pdf"))
    body = client.post("/api/analyze", data={"domain": "iot"}, files=[broken, _pdf()]).json()
    assert body["success"] is True
    assert body["results"][0]["missingSkills"] == ["Processing error"]
    assert body["results"][0]["matchScore"] == 0
    assert body["results"][1]["matchScore"] == 87


@pytest.mark.parametrize("data, files, error", [
    ({"domain": "cooking"}, [_pdf()], "Invalid domain selected"),
    ({}, [_pdf()], "Invalid domain selected"),
    ({"domain": "iot"}, None, "No files uploaded"),
    ({"domain": "iot"}, [("files", ("notes.txt", b"hello", "text/plain"))], "Only PDF files are allowed"),
])
def test_analyze_validation(client, fake, data, files, error):
    resp = client.post("/api/analyze", data=data, files=files)
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert error in body["error"]
    assert fake.prompts == []


def test_analyze_without_llm_key(settings, catalog):
    app = create_app(settings=Settings(base_dir=settings.base_dir), catalog=catalog)
    with TestClient(app) as c:
        resp = c.post("/api/analyze", data={"domain": "iot"}, files=[_pdf()])
    assert resp.status_code == 503
    assert resp.json()["success"] is False


def test_generate_and_download_report(client, settings):
    payload = {
        "fileName": "jane.pdf",
        "domain": "fullstack",
        "matchScore": 87,
        "selected": True,
        "keyStrengths": ["Strong React skills"],
        "missingSkills": ["No MongoDB experience"],
        "fullAnalysis": "Match Score: 87/100",
    }
    resp = client.post("/api/generate-report", json=payload)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Report generated successfully"
    assert os.path.isfile(body["filePath"])
    assert os.path.basename(body["filePath"]).startswith("Report_")
    assert body["filePath"].endswith("_jane.docx")

    download = client.get(body["downloadUrl"])
    assert download.status_code == 200
    assert download.content[:2] == b"PK"


def test_generate_report_rejects_bad_body(client):
    resp = client.post("/api/generate-report", json={"domain": "iot"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_download_unknown_report(client):
    resp = client.get("/api/reports/missing.docx")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Report missing.docx not found."}


def test_index_fallback_and_file(client, settings):
    assert "Resume Screening API is running" in client.get("/").text
    with open(os.path.join(settings.base_dir, "index.html"), "w") as f:
        f.write("<html>dashboard</html>")
    assert "dashboard" in client.get("/").text
