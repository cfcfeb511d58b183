"""FastAPI application exposing the screenshot/text analysis surface.

The app wraps a single :class:`~scoutlens.pipeline.ScoutLensPipeline` handle.
Request bodies are validated against the schemas in :mod:`scoutlens.api_spec`
(400 on violation); pipeline outcomes, including failures, are returned with
status 200 and carry their own ``success`` flag.
"""
from __future__ import annotations

import base64
import binascii
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Union

from fastapi import FastAPI, HTTPException, Request
from jsonschema import Draft202012Validator, ValidationError

from ._version import __version__
from .api_spec import IMAGE_REQUEST_SCHEMA, TEXT_REQUEST_SCHEMA, get_api_schemas
from .config import PipelineConfig
from .errors import DecodeError
from .pipeline import ImageInput, ScoutLensPipeline
from .utils.log_utils import ROOT_LOGGER, configure_logging

__all__ = ["create_app"]

logger = logging.getLogger("scoutlens.api")


def _validate(schema: Dict[str, Any], payload: Any) -> None:
    try:
        Draft202012Validator(schema).validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc


def _image_bytes(data: str) -> Union[str, bytes]:
    data = data.strip()
    if data.startswith("data:"):
        return data
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=400, detail="image must be a data URL or base64 string") from exc


def create_app(
    pipeline: Optional[ScoutLensPipeline] = None,
    *,
    config: Optional[PipelineConfig] = None,
) -> FastAPI:
    """Return a FastAPI instance bound to ``pipeline``.

    When no pipeline is given one is built from ``config`` (or from the
    ``SCOUTLENS_*`` environment). ``SCOUTLENS_LOG_LEVEL`` and
    ``SCOUTLENS_LOG_FORMAT`` control request logging.
    """

    if pipeline is None:
        pipeline = ScoutLensPipeline.from_config(config or PipelineConfig.from_env())
        # standalone service; embedding callers keep their own logging setup
        if not logging.getLogger(ROOT_LOGGER).handlers:
            log_format = (os.environ.get("SCOUTLENS_LOG_FORMAT") or "json").strip().lower()
            log_level = (os.environ.get("SCOUTLENS_LOG_LEVEL") or "INFO").strip().upper()
            configure_logging(log_level, log_format)

    @asynccontextmanager
    async def _lifespan(_app: FastAPI):
        await pipeline.initialize()
        yield

    app = FastAPI(title="ScoutLens API", version=__version__, lifespan=_lifespan)
    app.state.pipeline = pipeline

    @app.middleware("http")
    async def _request_log(request: Request, call_next):
        t0 = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - t0) * 1000.0,
        )
        return response

    @app.get("/healthz")
    def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/schemas")
    def schemas() -> Dict[str, Dict[str, Any]]:
        return get_api_schemas()

    @app.get("/status")
    async def status() -> Dict[str, Any]:
        result = await pipeline.get_status()
        return result.model_dump(mode="json")

    @app.post("/initialize")
    async def initialize() -> Dict[str, Any]:
        summary = await pipeline.reinitialize()
        return summary.model_dump(mode="json")

    @app.post("/analyze/text")
    async def analyze_text(payload: Dict[str, Any]) -> Dict[str, Any]:
        _validate(TEXT_REQUEST_SCHEMA, payload)
        result = await pipeline.process_text(payload["text"])
        return result.model_dump(mode="json")

    @app.post("/analyze/image")
    async def analyze_image(payload: Dict[str, Any]) -> Dict[str, Any]:
        _validate(IMAGE_REQUEST_SCHEMA, payload)
        raw = _image_bytes(payload["image"])
        image: Union[ImageInput, str, bytes] = raw
        source = payload.get("source")
        if source:
            try:
                image = pipeline.loader.load(raw).model_copy(update={"source": source})
            except DecodeError:
                # the pipeline reports undecodable images as a fallback result
                image = raw
        result = await pipeline.process_image(image)
        return result.model_dump(mode="json")

    return app
