from __future__ import annotations
import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from refsense.config.settings import (
    EnvSettingsProvider,
    Settings,
    SettingsProvider,
    config_from_settings,
    validate_settings,
)
from refsense.domain.models import LocalConfig
from refsense.infrastructure.llm.exceptions import RefSenseError, ValidationError
from refsense.services.connection_service import ConnectionService
from refsense.services.metadata_service import MetadataExtractionService

logger = logging.getLogger("refsense")


class CliSettingsProvider:
    """Command-line options first, then whatever the fallback provider has."""

    def __init__(self, args: argparse.Namespace, fallback: SettingsProvider):
        self.args = args
        self.fallback = fallback

    def get_backend_kind(self) -> str:
        return self.args.backend or self.fallback.get_backend_kind()

    def get_credential(self) -> Optional[str]:
        return self.args.api_key or self.fallback.get_credential()

    def get_model_name(self) -> Optional[str]:
        return self.args.model or self.fallback.get_model_name()

    def get_host(self) -> Optional[str]:
        return self.args.host or self.fallback.get_host()


def _add_backend_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--backend", choices=["cloud", "local", "openai", "ollama"], default=None)
    ap.add_argument("--model", default=None)
    ap.add_argument("--api-key", default=None)
    ap.add_argument("--host", default=None, help="Ollama host, e.g. http://localhost:11434")


async def _run(args: argparse.Namespace) -> int:
    settings = Settings()
    provider = CliSettingsProvider(args, EnvSettingsProvider(settings=settings))
    validation = validate_settings(provider)
    for w in validation.warnings:
        logger.info(w)
    if not validation.valid:
        raise ValidationError("; ".join(validation.errors))
    config = config_from_settings(provider, settings)

    if args.command == "extract":
        with open(args.text_file, "r", encoding="utf-8", errors="ignore") as f:
            text = f.read()
        svc = MetadataExtractionService(settings)
        record = await svc.extract(text, config, timeout=args.timeout)
        print(json.dumps(record.to_dict(), ensure_ascii=False, indent=2))
        return 0

    conn = ConnectionService(settings)
    if args.command == "check":
        ok = await conn.test(config)
        print(f"{config.kind.value}: {'OK' if ok else 'unreachable'}")
        return 0 if ok else 1

    if not isinstance(config, LocalConfig):
        print("error: model listing is only available for the local backend", file=sys.stderr)
        return 2
    models = await conn.list_models(config)
    if not models:
        print(f"No models found at {config.host}", file=sys.stderr)
        return 1
    for m in models:
        print(m.name)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="refsense")
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="command", required=True)

    p_extract = sub.add_parser("extract", help="Extract metadata from a text file")
    p_extract.add_argument("--text-file", required=True)
    p_extract.add_argument("--timeout", type=float, default=None)
    _add_backend_args(p_extract)

    p_check = sub.add_parser("check", help="Check backend connectivity / API key")
    _add_backend_args(p_check)

    p_models = sub.add_parser("models", help="List models on a local Ollama host")
    _add_backend_args(p_models)
    p_models.set_defaults(backend="local")

    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return asyncio.run(_run(args))
    except RefSenseError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
