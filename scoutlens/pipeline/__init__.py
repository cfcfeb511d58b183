"""Screenshot/text signal pipeline."""

from .backend import BackendAssistedAnalyzer, BackendClient, parse_verdict
from .classifier import SCENARIO_PROFILES, SCENARIO_SENTIMENT, PixelStatsClassifier
from .engine import LocalOcrEngine
from .input_handler import BasicImageLoader, load_image
from .interfaces import BackendAnalyzer, ImageClassifier, TextSource
from .mocks import MockBackendAnalyzer, MockImageClassifier, MockTextSource
from .models import (
    Action,
    AddressMatch,
    BackendVerdict,
    CapabilitySummary,
    Chain,
    ImageInput,
    Level,
    NormalizedRect,
    OcrResult,
    PipelineMode,
    PipelineResult,
    PipelineStatus,
    Recommendation,
    Scenario,
    ScenarioProfile,
    ScenarioResult,
    SegmentKind,
    Sentiment,
    SentimentScore,
    Signal,
    TextAnalysis,
    TextSegment,
    TokenMention,
)
from .orchestrator import ScoutLensPipeline
from .patterns import (
    analyze_text,
    classify_sentiment,
    describe_token,
    extract_addresses,
    extract_prices,
    extract_tokens,
    extract_typed_addresses,
    extraction_confidence,
    token_confidence,
)
from .recommend import (
    manual_check_recommendation,
    manual_review_recommendation,
    synthesize,
    synthesize_local,
)

__all__ = [
    "Action",
    "AddressMatch",
    "BackendAnalyzer",
    "BackendAssistedAnalyzer",
    "BackendClient",
    "BackendVerdict",
    "BasicImageLoader",
    "CapabilitySummary",
    "Chain",
    "ImageClassifier",
    "ImageInput",
    "Level",
    "LocalOcrEngine",
    "MockBackendAnalyzer",
    "MockImageClassifier",
    "MockTextSource",
    "NormalizedRect",
    "OcrResult",
    "PipelineMode",
    "PipelineResult",
    "PipelineStatus",
    "PixelStatsClassifier",
    "Recommendation",
    "SCENARIO_PROFILES",
    "SCENARIO_SENTIMENT",
    "Scenario",
    "ScenarioProfile",
    "ScenarioResult",
    "ScoutLensPipeline",
    "SegmentKind",
    "Sentiment",
    "SentimentScore",
    "Signal",
    "TextAnalysis",
    "TextSegment",
    "TextSource",
    "TokenMention",
    "analyze_text",
    "classify_sentiment",
    "describe_token",
    "extract_addresses",
    "extract_prices",
    "extract_tokens",
    "extract_typed_addresses",
    "extraction_confidence",
    "load_image",
    "manual_check_recommendation",
    "manual_review_recommendation",
    "parse_verdict",
    "synthesize",
    "synthesize_local",
    "token_confidence",
]
