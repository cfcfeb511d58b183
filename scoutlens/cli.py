# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 ScoutLens contributors

"""Command line entry point for the screenshot/text signal pipeline.

Subcommands mirror the pipeline coroutines and print JSON to stdout (or to
``--out``). Logs go to stderr so the JSON stays machine-readable.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import PipelineConfig
from .pipeline import (
    LocalOcrEngine,
    MockBackendAnalyzer,
    MockImageClassifier,
    PipelineResult,
    ScoutLensPipeline,
)
from .utils.log_utils import LOG_FORMATS, configure_logging


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--backend-url", help="Backend analysis endpoint")
    parser.add_argument("--timeout", type=float, help="Backend timeout in seconds")
    parser.add_argument("--offline", action="store_true", help="Skip the backend tier entirely")
    parser.add_argument(
        "--use-mocks",
        action="store_true",
        help="Use in-process mock tiers instead of the HTTP backend",
    )
    parser.add_argument("--out", help="Write the JSON result to this file instead of stdout")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--log-format", choices=LOG_FORMATS, default="text")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scoutlens", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    image = sub.add_parser("image", help="Analyze a screenshot file")
    image.add_argument("path", help="Image file path")
    _add_common(image)

    text = sub.add_parser("text", help="Analyze free text through the backend")
    text.add_argument("text", help="Text to analyze")
    _add_common(text)

    status = sub.add_parser("status", help="Check the tiers and print pipeline status")
    _add_common(status)

    return parser


def build_config(args: argparse.Namespace) -> PipelineConfig:
    config = PipelineConfig.from_env()
    overrides: Dict[str, Any] = {}
    if args.backend_url:
        overrides["backend_url"] = args.backend_url
    if args.timeout is not None and args.timeout > 0:
        overrides["backend_timeout"] = args.timeout
    return config.with_overrides(**overrides) if overrides else config


def build_pipeline(args: argparse.Namespace, config: Optional[PipelineConfig] = None) -> ScoutLensPipeline:
    config = config or build_config(args)
    if args.use_mocks:
        engine = LocalOcrEngine.from_config(config, classifier=MockImageClassifier())
        analyzer = None if args.offline else MockBackendAnalyzer()
        return ScoutLensPipeline(config, analyzer=analyzer, ocr_engine=engine)
    return ScoutLensPipeline.from_config(config, offline=args.offline)


def _emit(payload: Dict[str, Any], out: Optional[str]) -> None:
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if out:
        Path(out).write_text(text + "\n", encoding="utf-8")
        return
    sys.stdout.write(text)
    sys.stdout.write("\n")


async def _run(args: argparse.Namespace, pipeline: ScoutLensPipeline) -> Dict[str, Any]:
    if args.command == "image":
        result: PipelineResult = await pipeline.process_image(Path(args.path))
        return result.model_dump(mode="json")
    if args.command == "text":
        result = await pipeline.process_text(args.text)
        return result.model_dump(mode="json")
    capabilities = await pipeline.initialize()
    status = await pipeline.get_status()
    return {
        "capabilities": capabilities.model_dump(mode="json"),
        "status": status.model_dump(mode="json"),
        "config": pipeline.config.to_dict(),
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = _parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_format, stream=sys.stderr)

    pipeline = build_pipeline(args)
    payload = asyncio.run(_run(args, pipeline))
    _emit(payload, args.out)

    if args.command == "status":
        return 0
    return 0 if payload.get("success") else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
