from __future__ import annotations

import argparse
from pathlib import Path

from loguru import logger

from core.config import PipelineConfig
from core.services.interfaces import ManifestLoadError, SourceDirectoryMissingError
from core.services.manifest_builder import ManifestBuilder
from core.services.reconcile_service import OrphanReconciler
from infrastructure.delete_service import DeleteService
from infrastructure.image_service import ImageService
from infrastructure.json_repository import JsonManifestRepository
from infrastructure.logging import init_logging
from infrastructure.settings import JsonSettings
from infrastructure.source_scanner import SourceScanner
from infrastructure.utils import read_exif_tags

DEFAULT_SETTINGS = "settings.json"

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_CONFIG = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portfolio-assets",
        description="Generate photo variants and the site manifest, or clean orphaned assets.",
    )
    parser.add_argument(
        "--settings",
        help=f"JSON settings file (default: ./{DEFAULT_SETTINGS} when present)",
    )
    parser.add_argument("--log-dir", help="Also write rotating logs to this directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Build variants and write the manifest")
    gen.add_argument("--source", help="Source directory of original images")
    gen.add_argument("--manifest", help="Manifest output path")
    gen.add_argument(
        "--policy", choices=["freshness", "existence"], help="Variant cache policy"
    )
    gen.add_argument("--workers", type=int, help="Number of parallel workers")

    rec = sub.add_parser("reconcile", help="Find generated files not referenced by the manifest")
    rec.add_argument("--manifest", help="Manifest path")
    rec.add_argument(
        "--delete", action="store_true", help="Delete orphans (default: report only)"
    )
    return parser


def _load_config(args: argparse.Namespace) -> PipelineConfig:
    settings_path = args.settings
    if settings_path is None and Path(DEFAULT_SETTINGS).exists():
        settings_path = DEFAULT_SETTINGS
    settings = JsonSettings(settings_path)
    return PipelineConfig.from_settings(
        settings,
        source_dir=getattr(args, "source", None),
        manifest_path=getattr(args, "manifest", None),
        cache_policy=getattr(args, "policy", None),
        workers=getattr(args, "workers", None),
    )


def run_generate(config: PipelineConfig) -> int:
    """Run the manifest builder; only a missing source directory is fatal."""
    builder = ManifestBuilder(
        config,
        image_service=ImageService(),
        repo=JsonManifestRepository(),
        exif_reader=read_exif_tags,
        scanner=SourceScanner(config.source_dir, config.extensions),
    )
    try:
        builder.run()
    except SourceDirectoryMissingError as ex:
        logger.error("{}", ex)
        return EXIT_FATAL
    return EXIT_OK


def run_reconcile(config: PipelineConfig, delete: bool) -> int:
    """Run the orphan reconciler in report-only or delete mode."""
    reconciler = OrphanReconciler(config, JsonManifestRepository(), DeleteService())
    try:
        reconciler.run(delete=delete)
    except ManifestLoadError as ex:
        logger.error("Cannot reconcile without a manifest: {}", ex)
        return EXIT_FATAL
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    init_logging(args.log_dir, level="DEBUG" if args.verbose else "INFO")

    try:
        config = _load_config(args)
    except (OSError, ValueError, TypeError) as ex:
        logger.error("Invalid configuration: {}", ex)
        return EXIT_CONFIG

    if args.command == "generate":
        return run_generate(config)
    return run_reconcile(config, delete=args.delete)


if __name__ == "__main__":
    raise SystemExit(main())
