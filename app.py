from __future__ import annotations
import os, time, logging
from typing import List, Optional
from contextlib import asynccontextmanager
from fastapi import FastAPI, File, Form, Request, UploadFile, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from schemas import AnalyzeResponse, ErrorResponse, ReportResponse, ScreeningResult, utc_now_iso
from parsers.pdf import is_pdf_name
from reports.docx_report import write_report
from screening.config import Settings, configure_logging, load_settings
from screening.errors import GatewayError, ScreeningError, UnknownDomainError, NoInputFilesError
from screening.llm_gateway import LLMGateway, build_gateway
from screening.orchestrator import screen_batch
from screening.skills import SkillCatalog, load_catalog

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def _gateway(app: FastAPI) -> LLMGateway:
    # built on first use so the API can start without an LLM key
    if app.state.gateway is None:
        app.state.gateway = build_gateway(app.state.settings)
    return app.state.gateway


def _is_pdf_upload(upload: UploadFile) -> bool:
    if upload.content_type == "application/pdf":
        return True
    return upload.content_type in (None, "", "application/octet-stream") and is_pdf_name(upload.filename)


def create_app(settings: Optional[Settings] = None, catalog: Optional[SkillCatalog] = None,
               gateway: Optional[LLMGateway] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    catalog = catalog or load_catalog(settings.domain_skills_file)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        os.makedirs(settings.base_dir, exist_ok=True)
        os.makedirs(settings.resolved_reports_dir, exist_ok=True)
        logger.info(f"Using base directory: {settings.base_dir}")
        logger.info(f"Domains: {', '.join(catalog.domains)}")
        yield
        logger.info("Application shutting down.")

    app = FastAPI(title="Domain Resume Screening API", lifespan=lifespan)
    app.state.settings = settings
    app.state.catalog = catalog
    app.state.gateway = gateway
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------
    # Error handlers: every failure answers {"success": false, "error": ...}
    # -------------------------------------------------------------------
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        where = ".".join(str(p) for p in first.get("loc", ()))
        return _error(400, f"Invalid request: {where} {first.get('msg', '')}".strip())

    @app.exception_handler(ScreeningError)
    async def screening_error(request: Request, exc: ScreeningError):
        status = 400 if isinstance(exc, (UnknownDomainError, NoInputFilesError)) else 503 if isinstance(exc, GatewayError) else 500
        logger.error(f"{request.url.path}: {exc}")
        return _error(status, str(exc))

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}")
        return _error(500, str(exc) or "Internal server error")

    # -------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------
    @app.get("/api/domain-skills", response_model=dict)
    def domain_skills():
        return catalog.as_dict()

    @app.post("/api/analyze", response_model=AnalyzeResponse)
    async def analyze(request: Request, domain: Optional[str] = Form(None),
                      files: Optional[List[UploadFile]] = File(None)):
        if not domain or domain not in catalog:
            raise HTTPException(status_code=400, detail="Invalid domain selected")
        if not files:
            raise HTTPException(status_code=400, detail="No files uploaded")
        rejected = [f.filename for f in files if not _is_pdf_upload(f)]
        if rejected:
            raise HTTPException(status_code=400, detail=f"Only PDF files are allowed: {', '.join(rejected)}")

        inputs = [(f.filename or "resume.pdf", await f.read()) for f in files]
        llm = _gateway(request.app)
        results = await run_in_threadpool(screen_batch, inputs, domain, catalog, llm)
        return AnalyzeResponse(message=f"Analyzed {len(results)} resume(s)", results=results)

    @app.post("/api/generate-report", response_model=ReportResponse)
    def generate_report(result: ScreeningResult):
        stamp = int(time.time() * 1000)
        path = write_report(result, settings.resolved_reports_dir, stamp=stamp)
        name = os.path.basename(path)
        return ReportResponse(
            message="Report generated successfully",
            file_path=os.path.abspath(path),
            download_url=f"/api/reports/{name}",
        )

    @app.get("/api/reports/{name}")
    def download_report(name: str):
        path = os.path.join(settings.resolved_reports_dir, name)
        if name != os.path.basename(name) or not name.endswith(".docx") or not os.path.isfile(path):
            raise HTTPException(status_code=404, detail=f"Report {name} not found.")
        return FileResponse(
            path,
            media_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            filename=name,
        )

    @app.get("/api/health")
    def health():
        return {"status": "ok", "timestamp": utc_now_iso()}

    @app.get("/")
    def index():
        index_path = os.path.join(settings.base_dir, "index.html")
        if os.path.isfile(index_path):
            return FileResponse(index_path)
        return PlainTextResponse(
            "Resume Screening API is running. Use /api endpoints or start the dashboard "
            "(streamlit run ui/dashboard.py)."
        )

    return app


app = create_app()
