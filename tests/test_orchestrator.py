import asyncio
import json

import httpx
import pytest

from scoutlens.config import PipelineConfig
from scoutlens.pipeline import (
    Action,
    BackendVerdict,
    Level,
    LocalOcrEngine,
    MockBackendAnalyzer,
    PipelineMode,
    ScoutLensPipeline,
    Sentiment,
)
from scoutlens.pipeline.orchestrator import FALLBACK_TEXT

from conftest import solid_image

CONFIG = PipelineConfig(confidence_jitter=0.0, seed=1)


def _screen():
    return solid_image((20, 200, 40), size=(400, 300))


def _pipeline(analyzer=None, engine=True):
    ocr_engine = LocalOcrEngine.from_config(CONFIG) if engine else None
    return ScoutLensPipeline(CONFIG, analyzer=analyzer, ocr_engine=ocr_engine)


def test_healthy_backend_serves_the_first_tier():
    analyzer = MockBackendAnalyzer()
    pipeline = _pipeline(analyzer)

    result = asyncio.run(pipeline.process_image(_screen()))

    assert result.success
    assert result.mode == PipelineMode.OCR_BACKEND
    assert result.signal.tokens == ["SOL"]
    assert result.recommendation.action == Action.REVIEW_TOKENS
    assert result.recommendation.priority == Level.HIGH
    assert len(analyzer.image_calls) == 1


def test_unhealthy_backend_falls_to_local_ocr():
    analyzer = MockBackendAnalyzer(healthy=False)
    pipeline = _pipeline(analyzer)

    result = asyncio.run(pipeline.process_image(_screen()))

    assert result.success
    assert result.mode == PipelineMode.OCR_ONLY
    assert analyzer.image_calls == []
    assert result.signal.tokens == ["SOL", "JUP", "BONK"]
    assert result.recommendation.action == Action.MANUAL_REVIEW
    assert result.recommendation.priority == Level.MEDIUM
    assert result.advisory.action == Action.CONSIDER_BUY
    assert result.advisory.risk == Level.MEDIUM


def test_backend_failure_mid_call_escalates():
    analyzer = MockBackendAnalyzer(fail=True)
    pipeline = _pipeline(analyzer)

    result = asyncio.run(pipeline.process_image(_screen()))

    assert result.mode == PipelineMode.OCR_ONLY
    assert len(analyzer.image_calls) == 1


def test_unsuccessful_verdict_stays_on_backend_tier():
    analyzer = MockBackendAnalyzer(verdict=BackendVerdict(success=False, error="rate limited"))
    pipeline = _pipeline(analyzer)

    result = asyncio.run(pipeline.process_image(_screen()))

    assert result.mode == PipelineMode.OCR_BACKEND
    assert result.recommendation.action == Action.RETRY


@pytest.mark.parametrize("healthy", [True, False])
def test_backend_mode_only_when_backend_available(healthy):
    pipeline = _pipeline(MockBackendAnalyzer(healthy=healthy))

    result = asyncio.run(pipeline.process_image(_screen()))

    assert (result.mode == PipelineMode.OCR_BACKEND) is healthy


def test_fallback_without_any_engine():
    pipeline = _pipeline(engine=False)

    result = asyncio.run(pipeline.process_image(_screen()))

    assert not result.success
    assert result.mode == PipelineMode.FALLBACK
    assert result.ocr_text == FALLBACK_TEXT
    assert result.error == "No OCR engine available"
    assert result.recommendation.action == Action.MANUAL_CHECK
    assert result.recommendation.priority == Level.LOW
    assert not result.signal.complete


def test_fallback_when_backend_down_and_no_local_tier():
    pipeline = _pipeline(MockBackendAnalyzer(healthy=False), engine=False)

    result = asyncio.run(pipeline.process_image(_screen()))

    assert result.mode == PipelineMode.FALLBACK
    assert result.error.startswith("Backend not available")


def test_fallback_carries_last_tier_error():
    class _BrokenEngine:
        async def process(self, image):
            raise RuntimeError("boom")

    pipeline = ScoutLensPipeline(CONFIG, analyzer=MockBackendAnalyzer(fail=True), ocr_engine=_BrokenEngine())

    result = asyncio.run(pipeline.process_image(_screen()))

    assert not result.success
    assert result.mode == PipelineMode.FALLBACK
    assert "boom" in result.error


def test_undecodable_image_degrades_to_fallback():
    pipeline = _pipeline(MockBackendAnalyzer())

    result = asyncio.run(pipeline.process_image(b"not an image"))

    assert not result.success
    assert result.mode == PipelineMode.FALLBACK
    assert "decode" in result.error


def test_process_text_without_backend():
    pipeline = _pipeline(MockBackendAnalyzer(healthy=False))

    result = asyncio.run(pipeline.process_text("$SOL to the moon"))

    assert not result.success
    assert result.mode == PipelineMode.TEXT_BACKEND
    assert result.error.startswith("Backend not available")


def test_process_text_with_backend():
    analyzer = MockBackendAnalyzer()
    pipeline = _pipeline(analyzer)

    result = asyncio.run(pipeline.process_text("$SOL to the moon"))

    assert result.success
    assert result.mode == PipelineMode.TEXT_BACKEND
    assert result.signal.sentiment == Sentiment.BULLISH
    assert analyzer.text_calls == ["$SOL to the moon"]


def test_process_text_backend_failure_is_a_value():
    pipeline = _pipeline(MockBackendAnalyzer(fail=True))

    result = asyncio.run(pipeline.process_text("$SOL"))

    assert not result.success
    assert result.error == "mock backend unavailable"
    assert result.recommendation.action == Action.RETRY


def test_status_before_and_after_initialize():
    analyzer = MockBackendAnalyzer()
    pipeline = _pipeline(analyzer)

    before = asyncio.run(pipeline.get_status())
    summary = asyncio.run(pipeline.initialize())
    after = asyncio.run(pipeline.get_status())

    assert not before.initialized and not before.ready
    assert summary.success and summary.processor and summary.worker and summary.backend
    assert after.initialized and after.ready and after.backend
    assert asyncio.run(pipeline.get_status()) == after
    assert analyzer.health_calls == 1


def test_requests_initialize_lazily_once():
    analyzer = MockBackendAnalyzer()
    pipeline = _pipeline(analyzer)

    async def _twice():
        await pipeline.process_image(_screen())
        await pipeline.process_text("$SOL")

    asyncio.run(_twice())

    assert pipeline.initialized
    assert analyzer.health_calls == 1


def test_reinitialize_picks_up_recovered_backend():
    analyzer = MockBackendAnalyzer(healthy=False)
    pipeline = _pipeline(analyzer)

    assert not asyncio.run(pipeline.initialize()).backend
    analyzer.healthy = True
    summary = asyncio.run(pipeline.reinitialize())

    assert summary.backend
    assert asyncio.run(pipeline.process_image(_screen())).mode == PipelineMode.OCR_BACKEND


def test_initialize_failure_is_reported_not_raised():
    class _Exploding(MockBackendAnalyzer):
        async def health_check(self):
            raise RuntimeError("health check exploded")

    pipeline = _pipeline(_Exploding())

    summary = asyncio.run(pipeline.initialize())

    assert not summary.success
    assert summary.error == "health check exploded"
    assert not pipeline.initialized


def _backend(healthy=True):
    def handler(request):
        message = json.loads(request.content)["message"]
        if message == "health check":
            return httpx.Response(200, json={"success": healthy})
        return httpx.Response(
            200,
            json={
                "success": True,
                "result": {"detectedTokens": ["SOL", "JUP"], "detectedContracts": [], "confidence": 0.92},
            },
        )

    return httpx.MockTransport(handler)


def test_http_backend_end_to_end():
    pipeline = ScoutLensPipeline.from_config(CONFIG, transport=_backend())

    result = asyncio.run(pipeline.process_image(_screen()))

    assert result.mode == PipelineMode.OCR_BACKEND
    assert result.signal.tokens == ["SOL", "JUP"]
    assert result.signal.prices == ["$98.45", "$1.84"]
    assert result.recommendation.priority == Level.HIGH
    assert "SOL" in result.ocr_text


def test_http_health_failure_uses_local_tier():
    pipeline = ScoutLensPipeline.from_config(CONFIG, transport=_backend(healthy=False))

    result = asyncio.run(pipeline.process_image(_screen()))

    assert result.mode == PipelineMode.OCR_ONLY


def test_offline_pipeline_has_no_processor():
    pipeline = ScoutLensPipeline.from_config(CONFIG, offline=True)

    summary = asyncio.run(pipeline.initialize())

    assert summary.success
    assert not summary.processor
    assert summary.worker
    assert asyncio.run(pipeline.process_image(_screen())).mode == PipelineMode.OCR_ONLY


def test_concurrent_images_degrade_while_engine_is_busy():
    config = PipelineConfig(ocr_latency=0.01, confidence_jitter=0.0, seed=1)
    pipeline = ScoutLensPipeline.from_config(config, offline=True)

    async def run_both():
        return await asyncio.gather(pipeline.process_image(_screen()), pipeline.process_image(_screen()))

    first, second = asyncio.run(run_both())

    assert first.success
    assert first.mode == PipelineMode.OCR_ONLY
    assert not second.success
    assert second.mode == PipelineMode.FALLBACK
    assert "busy" in second.error
