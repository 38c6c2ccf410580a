"""
HTTP service for legal risk analysis.

Exposes the analyzer as a small JSON API with FastAPI:

- ``GET  /api/health``            liveness check
- ``POST /api/analyze-text``      ``{"text": "..."}`` -> analysis result
- ``POST /api/analyze-document``  multipart ``file`` upload -> analysis result

Client errors return 400 and pipeline failures 503, both with the body
``{"error": {"message": "..."}}``.

Run with::

    legal-risk-analyzer serve
    uvicorn --factory legal_risk_analyzer.api:create_app
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from . import __version__
from .analyzer import LegalAnalyzer
from .config import Settings, configure_logging
from .errors import DocumentValidationError
from .parsers import extract_text, validate_upload

logger = logging.getLogger(__name__)

SERVICE_NAME = "Legal Risk Analyzer API"
UNAVAILABLE_MESSAGE = "AI Analysis Service Unavailable"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": {"message": message}})


def create_app(
    settings: Settings | None = None,
    analyzer: LegalAnalyzer | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Service settings; read from the environment when omitted.
        analyzer: Analyzer to serve; built from *settings* when omitted.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    analyzer = analyzer or LegalAnalyzer(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting %s %s (LLM %s)",
            SERVICE_NAME,
            __version__,
            "enabled" if analyzer.llm_client is not None else "disabled",
        )
        yield
        logger.info("Shutting down %s", SERVICE_NAME)

    app = FastAPI(
        title=SERVICE_NAME,
        version=__version__,
        description="Legal document risk scoring with LLM analysis and heuristic fallback",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.analyzer = analyzer

    @app.get("/api/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for monitoring and load balancers."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": SERVICE_NAME,
        }

    @app.post("/api/analyze-text", tags=["Analysis"])
    async def analyze_text(request: Request):
        """Analyze pasted document text."""
        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _error(400, "Text is required")

        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str) or not text.strip():
            return _error(400, "Text is required")

        try:
            result = await analyzer.analyze(text)
        except Exception:
            logger.exception("Text analysis failed")
            return _error(503, UNAVAILABLE_MESSAGE)
        return result.to_dict()

    @app.post("/api/analyze-document", tags=["Analysis"])
    async def analyze_document(file: UploadFile | None = File(None)):
        """Analyze an uploaded document."""
        if file is None:
            return _error(400, "File is required")

        data = await file.read()
        try:
            validate_upload(file.filename, file.content_type, len(data), settings)
            text = await run_in_threadpool(
                extract_text, data, file.filename, file.content_type
            )
        except DocumentValidationError as exc:
            logger.info("Rejected upload %s: %s", file.filename, exc)
            return _error(400, str(exc))

        try:
            result = await analyzer.analyze(
                text,
                file.filename,
                file_type=file.content_type,
                file_size=len(data),
            )
        except Exception:
            logger.exception("Document analysis failed for %s", file.filename)
            return _error(503, UNAVAILABLE_MESSAGE)
        return result.to_dict()

    return app
