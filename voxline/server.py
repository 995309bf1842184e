"""
voxline.server - OpenAI-compatible transcription endpoint.

Serves POST /v1/audio/transcriptions (multipart/form-data) and its CORS
preflight. Inference runs in a worker thread so a long transcription
never stalls the event loop; the ResourceManager lets one run at a time.
"""

from __future__ import annotations

import functools
import logging
import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from voxline import __version__
from voxline.config import VoxlineConfig
from voxline.engine import load_engine
from voxline.exceptions import BadRequest, InternalError, VoxlineError
from voxline.io import upload_path
from voxline.languages import LanguageTag, from_code
from voxline.orchestrator import transcribe
from voxline.session import ResourceManager
from voxline.transcript import Transcript

logger = logging.getLogger(__name__)

TRANSCRIPTIONS_PATH = "/v1/audio/transcriptions"

JSON_FORMAT = "json"
TEXT_FORMAT = "text"
SRT_FORMAT = "srt"
VTT_FORMAT = "vtt"
PLAIN_FORMATS = {TEXT_FORMAT, SRT_FORMAT, VTT_FORMAT}

CONTENT_TYPE_JSON = "application/json; charset=utf-8"

ALLOW_ORIGIN = {"Access-Control-Allow-Origin": "*"}
PREFLIGHT_HEADERS = {
    **ALLOW_ORIGIN,
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

Transcriber = Callable[..., Transcript]


def multipart_boundary(content_type: str | None) -> str | None:
    """Return the boundary of a multipart/form-data content type, else None."""
    if not content_type:
        return None
    media_type, _, params = content_type.partition(";")
    if media_type.strip().lower() != "multipart/form-data":
        return None
    for param in params.split(";"):
        key, _, value = param.strip().partition("=")
        if key.strip().lower() == "boundary":
            value = value.strip().strip('"')
            return value or None
    return None


def render_response(transcript: Transcript, response_format: str | None) -> Response:
    """Build the success response for the requested format."""
    if response_format in PLAIN_FORMATS:
        return PlainTextResponse(transcript.render(response_format), headers=ALLOW_ORIGIN)
    return JSONResponse(
        {"text": transcript.as_text()},
        media_type=CONTENT_TYPE_JSON,
        headers=ALLOW_ORIGIN,
    )


def _error(status_code: int, label: str, error: Exception) -> PlainTextResponse:
    return PlainTextResponse(f"{label}: {error}", status_code=status_code, headers=ALLOW_ORIGIN)


def _parse_language(value: str | None) -> LanguageTag | None:
    if not value:
        return None
    try:
        return from_code(value)
    except ValueError as e:
        raise BadRequest(str(e)) from e


async def _read_form(request: Request) -> tuple[UploadFile, dict[str, str]]:
    """Parse the multipart body into the upload and the text fields.

    Raises:
        BadRequest: If the content type is wrong or ``file`` is missing
        InternalError: If the body cannot be parsed
    """
    if multipart_boundary(request.headers.get("content-type")) is None:
        raise BadRequest("Content-Type must be multipart/form-data with a boundary")

    try:
        form = await request.form()
    except Exception as e:
        raise InternalError(f"Could not read multipart body: {e}") from e

    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise BadRequest("Missing required 'file' part")

    fields = {key: value for key, value in form.items() if isinstance(value, str)}
    return upload, fields


def _persist(upload: UploadFile, destination: Path) -> int:
    upload.file.seek(0)
    with open(destination, "wb") as out:
        shutil.copyfileobj(upload.file, out)
    return destination.stat().st_size


def create_app(
    manager: ResourceManager,
    transcriber: Transcriber = transcribe,
    upload_dir: Path | None = None,
    default_language: LanguageTag | None = None,
) -> FastAPI:
    """Create the HTTP application around a loaded ResourceManager.

    Args:
        manager: Loaded model session guard shared by all requests
        transcriber: Orchestrator entry point
        upload_dir: Parent for per-request temp directories (system temp if None)
        default_language: Hint used when a request has no ``language`` field

    Returns:
        FastAPI application
    """
    app = FastAPI(title="Voxline", version=__version__)
    app.state.manager = manager

    @app.options(TRANSCRIPTIONS_PATH)
    async def transcription_preflight() -> Response:
        return Response(status_code=200, headers=PREFLIGHT_HEADERS)

    @app.post(TRANSCRIPTIONS_PATH)
    async def create_transcription(request: Request) -> Response:
        try:
            upload, fields = await _read_form(request)
            language = _parse_language(fields.get("language")) or default_language
        except BadRequest as e:
            logger.info("Rejected transcription request: %s", e)
            return _error(400, "BAD REQUEST", e)
        except InternalError as e:
            logger.error("%s", e)
            return _error(500, "INTERNAL SERVER ERROR", e)

        response_format = fields.get("response_format") or JSON_FORMAT
        prompt = fields.get("prompt") or None

        try:
            with tempfile.TemporaryDirectory(prefix="voxline-", dir=upload_dir) as tmp:
                audio_path = upload_path(Path(tmp), upload.filename)
                size = await run_in_threadpool(_persist, upload, audio_path)
                logger.info(
                    "Transcribing upload %r (%d bytes) as %s",
                    upload.filename,
                    size,
                    audio_path.name,
                )
                transcript = await run_in_threadpool(
                    transcriber,
                    manager,
                    audio_path,
                    prompt=prompt,
                    language=language,
                )
        except VoxlineError as e:
            logger.error("Transcription failed: %s", e)
            return _error(500, "INTERNAL SERVER ERROR", e)
        except OSError as e:
            logger.error("Upload handling failed: %s", e)
            return _error(500, "INTERNAL SERVER ERROR", InternalError(str(e)))
        except Exception as e:
            logger.exception("Unexpected failure handling transcription request")
            return _error(500, "INTERNAL SERVER ERROR", e)
        finally:
            await upload.close()

        logger.info(
            "Finished in %.2fs (format=%s)",
            transcript.processing_time.total_seconds(),
            response_format,
        )
        return render_response(transcript, response_format)

    return app


def build_manager(config: VoxlineConfig) -> ResourceManager:
    """Create the ResourceManager for the configured model (not yet loaded)."""
    loader = functools.partial(
        load_engine,
        device=config.device,
        compute_type=config.compute_type,
        cpu_threads=config.cpu_threads,
    )
    return ResourceManager(config.model_source, loader)


def serve(config: VoxlineConfig) -> None:
    """Load the model once and serve until interrupted.

    Raises:
        ModelLoadError: If the model cannot be loaded
    """
    import uvicorn

    if config.upload_dir:
        config.upload_dir.mkdir(parents=True, exist_ok=True)

    default_language = from_code(config.language) if config.language else None

    manager = build_manager(config).load()
    app = create_app(
        manager,
        upload_dir=config.upload_dir,
        default_language=default_language,
    )
    try:
        uvicorn.run(app, host=config.host, port=config.port, log_level="info")
    finally:
        manager.close()
