"""Backend-assisted (tier 1) analysis over HTTP.

:class:`BackendClient` speaks the analysis service's ``POST {"message": ...}``
contract with a hard timeout on every call. :class:`BackendAssistedAnalyzer`
pairs it with a local text source so screenshots can be read locally and
interpreted remotely.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import httpx
from jsonschema import Draft202012Validator, ValidationError

from ..api_spec import BACKEND_RESPONSE_SCHEMA, BACKEND_RESULT_SCHEMA, DEFAULT_BACKEND_URL
from ..errors import BackendUnavailableError, DecodeError, ScoutLensError
from ..resources.lexicon import DEFAULT_BEARISH_WORDS, DEFAULT_BULLISH_WORDS
from .interfaces import BackendAnalyzer, TextSource
from .models import BackendVerdict, ImageInput, Signal
from .patterns import classify_sentiment, extract_prices

logger = logging.getLogger(__name__)


def _as_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item)]


def parse_verdict(body: Mapping[str, Any]) -> BackendVerdict:
    """Map a validated backend response body onto :class:`BackendVerdict`.

    ``result`` may arrive as a JSON-encoded string. Responses without a
    usable result are reported as unsuccessful verdicts, malformed results
    raise :class:`BackendUnavailableError`.
    """

    raw = dict(body)
    if not body.get("success"):
        error = body.get("error") or body.get("message") or "Backend reported an unsuccessful analysis"
        return BackendVerdict(success=False, error=str(error), raw=raw)

    result = body.get("result")
    if isinstance(result, str):
        try:
            result = json.loads(result)
        except ValueError as exc:
            raise BackendUnavailableError("Failed to parse backend result") from exc
    if not isinstance(result, dict):
        return BackendVerdict(success=False, error="Backend returned no structured result", raw=raw)

    try:
        Draft202012Validator(BACKEND_RESULT_SCHEMA).validate(result)
    except ValidationError as exc:
        raise BackendUnavailableError(f"Backend result violates contract: {exc.message}") from exc

    return BackendVerdict(
        success=True,
        detected_tokens=_as_str_list(result.get("detectedTokens")),
        detected_contracts=_as_str_list(result.get("detectedContracts")),
        detected_wallets=_as_str_list(result.get("detectedWallets")),
        confidence=float(result.get("confidence") or 0.0),
        raw=raw,
    )


class BackendClient:
    """Thin async client for the analysis endpoint.

    Args:
        url: Full URL of the ``/api/process`` endpoint.
        timeout: Seconds allowed for connect + read of each request.
        health_message: Payload used for the liveness check.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
        headers: Extra headers sent with every request.
    """

    def __init__(
        self,
        url: str = DEFAULT_BACKEND_URL,
        *,
        timeout: float = 5.0,
        health_message: str = "health check",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.url = url
        self.timeout = float(timeout)
        self.health_message = health_message
        self.transport = transport
        self.headers = {"Accept": "application/json", **(headers or {})}

    @classmethod
    def from_config(cls, config, transport: Optional[httpx.AsyncBaseTransport] = None) -> "BackendClient":
        return cls(
            config.backend_url,
            timeout=config.backend_timeout,
            health_message=config.health_message,
            transport=transport,
        )

    async def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self.transport,
                headers=self.headers,
            ) as client:
                response = await client.post(self.url, json=payload)
        except httpx.TimeoutException as exc:
            raise BackendUnavailableError(f"Backend timed out after {self.timeout:g}s") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise BackendUnavailableError(f"Backend request failed: {exc}") from exc

        if not response.is_success:
            raise BackendUnavailableError(
                f"Backend API error: {response.status_code} {response.reason_phrase}".strip()
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise BackendUnavailableError("Backend returned a non-JSON body") from exc
        try:
            Draft202012Validator(BACKEND_RESPONSE_SCHEMA).validate(body)
        except ValidationError as exc:
            raise BackendUnavailableError(f"Backend response violates contract: {exc.message}") from exc
        return body

    async def health_check(self) -> bool:
        """Return True when the backend answers the health message with ``success: true``."""

        try:
            body = await self._post({"message": self.health_message})
        except BackendUnavailableError as exc:
            logger.info("backend health check failed: %s", exc)
            return False
        return body.get("success") is True

    async def analyze(self, text: str) -> BackendVerdict:
        if not text or not text.strip():
            raise ValueError("text to analyze must not be empty")
        body = await self._post({"message": text})
        verdict = parse_verdict(body)
        logger.debug(
            "backend verdict success=%s tokens=%d contracts=%d",
            verdict.success,
            len(verdict.detected_tokens),
            len(verdict.detected_contracts),
        )
        return verdict


class BackendAssistedAnalyzer(BackendAnalyzer):
    """Tier 1: read the image locally, let the backend interpret the text."""

    def __init__(
        self,
        client: BackendClient,
        text_source: Optional[TextSource] = None,
        *,
        bullish_words: Sequence[str] = DEFAULT_BULLISH_WORDS,
        bearish_words: Sequence[str] = DEFAULT_BEARISH_WORDS,
    ) -> None:
        self.client = client
        self.text_source = text_source
        self.bullish_words = tuple(bullish_words)
        self.bearish_words = tuple(bearish_words)

    async def health_check(self) -> bool:
        return await self.client.health_check()

    async def process_image(self, image: ImageInput) -> Tuple[Signal, BackendVerdict, str]:
        if self.text_source is None:
            raise DecodeError("No text source configured for backend analysis")

        ocr = await self.text_source.process(image)
        if not ocr.success:
            raise ScoutLensError(ocr.error or "OCR text extraction failed")
        text = ocr.full_text.strip()
        if not text:
            raise DecodeError("No text extracted from image")

        verdict = await self.client.analyze(text)
        signal = Signal.from_verdict(verdict, sentiment=ocr.sentiment, prices=ocr.prices_detected)
        return signal, verdict, text

    async def analyze_text(self, text: str) -> Tuple[Signal, BackendVerdict]:
        verdict = await self.client.analyze(text)
        sentiment = classify_sentiment(text, self.bullish_words, self.bearish_words)
        signal = Signal.from_verdict(verdict, sentiment=sentiment.label, prices=extract_prices(text))
        return signal, verdict
