"""
speakerscribe.api.routes - Transcription, blob and health endpoints.

Every failure is answered as ``{"error": ..., "details": ...}`` so the
client can surface the most specific message.
"""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from speakerscribe.config import ACCEPTED_MIME_TYPES, ScribeConfig
from speakerscribe.exceptions import DependencyError, ScribeError, StorageError
from speakerscribe.models import segments_to_json
from speakerscribe.storage import DEFAULT_CONTENT_TYPE, BlobStore, fetch_blob
from speakerscribe.validation import check_api_key

logger = logging.getLogger(__name__)

router = APIRouter()


class UploadUrlRequest(BaseModel):
    pathname: str
    contentType: str = "audio/mp4"


def error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def too_large(config: ScribeConfig) -> JSONResponse:
    return error_response(
        413, f"File is too large. The maximum allowed size is {config.max_file_size_mb}MB."
    )


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}


@router.get("/ping")
async def ping():
    return PlainTextResponse("ok")


@router.post("/transcribe")
async def transcribe(request: Request):
    """Transcribe an uploaded file or a previously stored blob.

    Accepts multipart form data with a ``file`` field, or a JSON body
    ``{"blobUrl": ...}`` pointing at storage. Returns the segment array.
    """
    config: ScribeConfig = request.app.state.config
    store: BlobStore = request.app.state.store
    engine = request.app.state.engine

    try:
        check_api_key(config)
    except DependencyError:
        logger.error("API_KEY environment variable is not set")
        return error_response(500, "Server configuration error: API_KEY is missing.")

    started = time.monotonic()
    content_type = request.headers.get("content-type", "")

    try:
        if content_type.startswith("multipart/form-data"):
            form = await request.form()
            upload = form.get("file")
            if not isinstance(upload, UploadFile):
                logger.info("Bad request: no file in form data")
                return error_response(400, "A 'file' field is required in the form data.")
            audio = await upload.read()
            mime_type = upload.content_type or DEFAULT_CONTENT_TYPE
            source = upload.filename or "upload"
        else:
            try:
                body = await request.json()
            except ValueError:
                body = None
            blob_url = body.get("blobUrl") if isinstance(body, dict) else None
            if not blob_url:
                logger.info("Bad request: blobUrl is missing from the request body")
                return error_response(400, "blobUrl is required in the request body.")

            logger.info("Starting transcription for blob URL: %s", blob_url)
            audio, mime_type = await run_in_threadpool(
                fetch_blob, blob_url, store, None, config.request_timeout
            )
            source = blob_url

        if len(audio) > config.max_file_size_bytes:
            return too_large(config)

        logger.info(
            "Audio received from %s. Size: %d bytes, MIME type: %s", source, len(audio), mime_type
        )
        segments = await run_in_threadpool(engine.transcribe, audio, mime_type)

    except ScribeError as e:
        logger.error("Transcription failed after %.1fs: %s", time.monotonic() - started, e)
        return error_response(500, "Failed to transcribe audio.", str(e))

    logger.info(
        "Transcription returned %d segments in %.1fs", len(segments), time.monotonic() - started
    )
    return segments_to_json(segments)


@router.post("/upload-url")
async def create_upload_url(payload: UploadUrlRequest, request: Request):
    """Issue a signed write locator for a new blob."""
    store: BlobStore = request.app.state.store

    if payload.contentType.lower() not in ACCEPTED_MIME_TYPES:
        return error_response(
            400,
            f"Content type {payload.contentType!r} is not allowed.",
            f"Allowed types: {', '.join(ACCEPTED_MIME_TYPES)}",
        )

    try:
        return store.create_upload(payload.pathname, payload.contentType)
    except StorageError as e:
        return error_response(400, "Failed to handle upload", str(e))


@router.put("/blobs/{pathname}")
async def put_blob(pathname: str, request: Request, token: str | None = None):
    config: ScribeConfig = request.app.state.config
    store: BlobStore = request.app.state.store

    data = await request.body()
    if len(data) > config.max_file_size_bytes:
        return too_large(config)

    try:
        info = await run_in_threadpool(
            store.put, pathname, data, request.headers.get("content-type"), token
        )
    except StorageError as e:
        logger.warning("Rejected blob upload: %s", e)
        return error_response(403, "Upload rejected.", str(e))

    return {
        "pathname": info.pathname,
        "url": info.url,
        "size": info.size,
        "contentType": info.content_type,
    }


@router.get("/blobs/{pathname}")
async def get_blob(pathname: str, request: Request):
    store: BlobStore = request.app.state.store

    try:
        data, info = await run_in_threadpool(store.get, pathname)
    except StorageError as e:
        return error_response(404, "Blob not found.", str(e))

    return Response(content=data, media_type=info.content_type)
