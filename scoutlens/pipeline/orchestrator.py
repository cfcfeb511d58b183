# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 ScoutLens contributors

"""Tiered screenshot/text analysis pipeline.

:class:`ScoutLensPipeline` is the caller-facing handle. Each image request
walks the tiers in order and stops at the first one that succeeds:

1. backend-assisted analysis (``ocr-backend``) when the backend answered the
   last health check,
2. the local heuristic OCR engine (``ocr-only``),
3. a fixed ``fallback`` result.

Escalation only moves downwards within a call. Every public coroutine
resolves to a result model; failures are reported through ``success`` and
``error`` instead of exceptions.
"""
from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from ..config import PipelineConfig
from ..errors import BackendUnavailableError, NoEngineAvailableError, ScoutLensError
from .backend import BackendAssistedAnalyzer, BackendClient
from .engine import LocalOcrEngine
from .input_handler import BasicImageLoader, ImageSource
from .interfaces import BackendAnalyzer, TextSource
from .models import (
    CapabilitySummary,
    ImageInput,
    OcrResult,
    PipelineMode,
    PipelineResult,
    PipelineStatus,
    Signal,
)
from .recommend import (
    manual_check_recommendation,
    manual_review_recommendation,
    synthesize,
    synthesize_local,
)

logger = logging.getLogger(__name__)

FALLBACK_TEXT = "OCR processing unavailable"


class ScoutLensPipeline:
    """Explicit pipeline handle; configuration and tiers are injected.

    Args:
        config: Thresholds and tuning shared by the tiers.
        analyzer: Tier 1 backend analyzer (the "processor"), optional.
        ocr_engine: Tier 2 local OCR engine (the "worker"), optional.
        loader: Converts caller-supplied images into :class:`ImageInput`.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        *,
        analyzer: Optional[BackendAnalyzer] = None,
        ocr_engine: Optional[TextSource] = None,
        loader: Optional[BasicImageLoader] = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self.analyzer = analyzer
        self.ocr_engine = ocr_engine
        self.loader = loader or BasicImageLoader()
        self.backend_available = False
        self._initialized = False

    @classmethod
    def from_config(
        cls,
        config: Optional[PipelineConfig] = None,
        *,
        offline: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ScoutLensPipeline":
        """Wire the default tiers: HTTP backend (unless ``offline``) plus local OCR."""

        config = config or PipelineConfig()
        engine = LocalOcrEngine.from_config(config)
        analyzer = None
        if not offline:
            analyzer = BackendAssistedAnalyzer(
                BackendClient.from_config(config, transport=transport),
                engine,
                bullish_words=config.bullish_words,
                bearish_words=config.bearish_words,
            )
        return cls(config, analyzer=analyzer, ocr_engine=engine)

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> CapabilitySummary:
        """Check the backend and report which tiers are usable."""

        try:
            backend = False
            if self.analyzer is not None:
                backend = bool(await self.analyzer.health_check())
        except Exception as exc:
            logger.exception("pipeline initialization failed")
            self.backend_available = False
            return CapabilitySummary(
                success=False,
                processor=self.analyzer is not None,
                worker=self.ocr_engine is not None,
                error=str(exc),
            )

        self.backend_available = backend
        self._initialized = True
        logger.info(
            "pipeline ready (processor=%s worker=%s backend=%s)",
            self.analyzer is not None,
            self.ocr_engine is not None,
            "available" if backend else "unavailable",
        )
        return CapabilitySummary(
            success=True,
            processor=self.analyzer is not None,
            worker=self.ocr_engine is not None,
            backend=backend,
        )

    async def reinitialize(self) -> CapabilitySummary:
        logger.info("reinitializing pipeline")
        self._initialized = False
        return await self.initialize()

    async def get_status(self) -> PipelineStatus:
        processor = self.analyzer is not None
        worker = self.ocr_engine is not None
        return PipelineStatus(
            initialized=self._initialized,
            processor=processor,
            worker=worker,
            backend=self.backend_available,
            ready=self._initialized and (processor or worker),
        )

    async def process_image(self, image: ImageSource) -> PipelineResult:
        if not self._initialized:
            await self.initialize()

        try:
            image_input = self.loader.load(image)
        except ScoutLensError as exc:
            logger.warning("could not load image: %s", exc)
            return self._fallback_result(str(exc))
        except Exception as exc:
            logger.exception("unexpected image loading failure")
            return self._fallback_result(f"Could not load image: {exc}")

        errors: List[str] = []
        if self.analyzer is not None and self.backend_available:
            try:
                return await self._backend_tier(image_input)
            except ScoutLensError as exc:
                logger.warning("backend tier failed, escalating to local OCR: %s", exc)
                errors.append(str(exc))
            except Exception as exc:
                logger.exception("unexpected backend tier failure")
                errors.append(f"Backend analysis failed: {exc}")

        if self.ocr_engine is not None:
            try:
                ocr = await self.ocr_engine.process(image_input)
            except Exception as exc:
                logger.exception("unexpected local OCR failure")
                ocr = OcrResult.failure(f"OCR processing failed: {exc}")
            if ocr.success:
                return self._local_result(ocr)
            logger.warning("local OCR tier failed: %s", ocr.error)
            errors.append(ocr.error or "Local OCR failed")

        if errors:
            return self._fallback_result(errors[-1])
        if self.analyzer is None and self.ocr_engine is None:
            error = NoEngineAvailableError("No OCR engine available")
        else:
            error = NoEngineAvailableError("Backend not available and no local OCR engine configured")
        logger.warning("%s", error)
        return self._fallback_result(str(error))

    async def process_text(self, text: str) -> PipelineResult:
        """Analyze free text with the backend; there is no local fallback."""

        if not self._initialized:
            await self.initialize()

        if self.analyzer is None or not self.backend_available:
            error = BackendUnavailableError("Backend not available for text processing")
            logger.warning("%s", error)
            return self._text_failure(str(error))

        try:
            signal, _verdict = await self.analyzer.analyze_text(text)
        except (ScoutLensError, ValueError) as exc:
            logger.warning("text processing failed: %s", exc)
            return self._text_failure(str(exc))
        except Exception as exc:
            logger.exception("unexpected text processing failure")
            return self._text_failure(f"Text processing failed: {exc}")

        return PipelineResult(
            success=True,
            mode=PipelineMode.TEXT_BACKEND,
            signal=signal,
            recommendation=synthesize(signal, high_priority_confidence=self.config.high_priority_confidence),
        )

    async def _backend_tier(self, image: ImageInput) -> PipelineResult:
        signal, verdict, text = await self.analyzer.process_image(image)  # type: ignore[union-attr]
        logger.info("backend tier answered (success=%s)", verdict.success)
        return PipelineResult(
            success=True,
            mode=PipelineMode.OCR_BACKEND,
            ocr_text=text,
            signal=signal,
            recommendation=synthesize(signal, high_priority_confidence=self.config.high_priority_confidence),
        )

    def _local_result(self, ocr: OcrResult) -> PipelineResult:
        signal = Signal.from_ocr(ocr)
        return PipelineResult(
            success=True,
            mode=PipelineMode.OCR_ONLY,
            ocr_text=ocr.full_text,
            signal=signal,
            recommendation=manual_review_recommendation(),
            advisory=synthesize_local(signal, low_confidence_threshold=self.config.low_confidence_threshold),
        )

    @staticmethod
    def _fallback_result(error: str) -> PipelineResult:
        return PipelineResult(
            success=False,
            mode=PipelineMode.FALLBACK,
            ocr_text=FALLBACK_TEXT,
            signal=Signal.empty(),
            recommendation=manual_check_recommendation(),
            error=error,
        )

    @staticmethod
    def _text_failure(error: str) -> PipelineResult:
        signal = Signal.empty()
        return PipelineResult(
            success=False,
            mode=PipelineMode.TEXT_BACKEND,
            signal=signal,
            recommendation=synthesize(signal),
            error=error,
        )
