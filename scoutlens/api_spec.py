"""JSON contracts for the analysis backend and the ScoutLens HTTP surface.

The schemas follow Draft 2020-12. Backend responses are validated loosely
(extra keys are allowed because the backend attaches metadata), while the
request bodies accepted by :mod:`scoutlens.api_app` keep
``additionalProperties`` disabled to highlight the canonical shape.
"""
from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict

DEFAULT_BACKEND_URL = "http://localhost:3001/api/process"

__all__ = [
    "DEFAULT_BACKEND_URL",
    "BACKEND_REQUEST_SCHEMA",
    "BACKEND_RESPONSE_SCHEMA",
    "BACKEND_RESULT_SCHEMA",
    "TEXT_REQUEST_SCHEMA",
    "IMAGE_REQUEST_SCHEMA",
    "get_api_schemas",
]

BACKEND_REQUEST_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "BackendRequest",
    "type": "object",
    "required": ["message"],
    "properties": {
        "message": {"type": "string", "minLength": 1},
    },
}

BACKEND_RESULT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "BackendResult",
    "type": "object",
    "properties": {
        "detectedTokens": {"type": "array", "items": {"type": "string"}},
        "detectedContracts": {"type": "array", "items": {"type": "string"}},
        "detectedWallets": {"type": "array", "items": {"type": "string"}},
        "confidence": {"type": "number", "minimum": 0, "maximum": 1},
    },
}

BACKEND_RESPONSE_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "BackendResponse",
    "type": "object",
    "required": ["success"],
    "properties": {
        "success": {"type": "boolean"},
        "result": {
            "description": "Structured verdict; some graph runs return it JSON-encoded",
            "type": ["object", "string", "null"],
        },
        "error": {"type": ["string", "null"]},
        "message": {"type": ["string", "null"]},
    },
}

TEXT_REQUEST_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "AnalyzeTextRequest",
    "type": "object",
    "additionalProperties": False,
    "required": ["text"],
    "properties": {
        "text": {
            "type": "string",
            "minLength": 1,
            "description": "Free text captured from a social/web page",
        },
    },
}

IMAGE_REQUEST_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "AnalyzeImageRequest",
    "type": "object",
    "additionalProperties": False,
    "required": ["image"],
    "properties": {
        "image": {
            "type": "string",
            "minLength": 1,
            "description": "Screenshot as a data: URL or bare base64 string",
        },
        "source": {"type": "string", "description": "Optional page URL or label"},
    },
}


def get_api_schemas() -> Dict[str, Dict[str, Any]]:
    """Return deep copies of every schema keyed by title."""

    return {
        schema["title"]: deepcopy(schema)
        for schema in (
            BACKEND_REQUEST_SCHEMA,
            BACKEND_RESULT_SCHEMA,
            BACKEND_RESPONSE_SCHEMA,
            TEXT_REQUEST_SCHEMA,
            IMAGE_REQUEST_SCHEMA,
        )
    }
