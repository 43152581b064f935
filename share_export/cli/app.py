from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from share_export.cli import output as out
from share_export.cli.config import (
    Config,
    config_exists,
    config_path_display,
    config_to_dict,
    load_config,
    save_config,
)

logger = logging.getLogger(__name__)

DESCRIPTION = """\
share-export: save shared AI chats as documents

Turn a public ChatGPT, Claude, Gemini or Perplexity share link into a
PDF, Markdown, JSON, CSV or plain-text file.

Quick start: share-export export https://chatgpt.com/share/<id>"""

_FORMATS = ["pdf", "markdown", "json", "csv", "text"]


# ── Infrastructure helpers ──────────────────────────────────────────


def _build_exporter(cfg: Config):
    from share_export import ShareExport

    return ShareExport.from_config(config_to_dict(cfg))


def _platforms() -> list[str]:
    from share_export import Platform

    return [p.value for p in Platform]


def _mask(key: str) -> str:
    return key[:7] + "..." + key[-4:] if len(key) > 12 else "***"


def _report_url_error(exc: Exception) -> None:
    from share_export import InvalidUrlError, UnsupportedPlatformError

    if isinstance(exc, InvalidUrlError):
        out.error(exc.message)
        for suggestion in exc.suggestions:
            out.info(out.dim(f"- {suggestion}"))
    elif isinstance(exc, UnsupportedPlatformError):
        out.error(f"Not a supported share link: {exc.url}")
        out.info(f"Supported platforms: {', '.join(exc.supported)}")


async def _refresh_rules(exporter, cfg: Config) -> None:
    if not cfg.rules_url:
        return
    import httpx

    try:
        accepted = await exporter.refresh_rules()
    except (httpx.HTTPError, ValueError) as exc:
        out.warn(f"Could not refresh rules from {cfg.rules_url}: {exc}")
        return
    logger.info("Merged %d published rules", accepted)


def _resolve_output(arg: str | None, cfg: Config, filename: str) -> Path:
    if arg:
        path = Path(arg).expanduser()
        if path.is_dir() or arg.endswith(("/", "\\")):
            return path / filename
        return path
    cfg.ensure_dirs()
    return cfg.output_path / filename


# ── export ──────────────────────────────────────────────────────────


async def cmd_export(args: argparse.Namespace) -> None:
    from share_export import (
        AllStrategiesFailedError,
        ExportFailedException,
        ExportOptions,
        InvalidUrlError,
        UnsupportedPlatformError,
    )

    if args.out == "-":
        out.use_stderr()

    cfg = load_config()
    exporter = _build_exporter(cfg)

    try:
        match = exporter.detect(args.url)
    except (InvalidUrlError, UnsupportedPlatformError) as exc:
        _report_url_error(exc)
        sys.exit(1)

    html = None
    if args.html_file:
        html = Path(args.html_file).expanduser().read_text(encoding="utf-8")

    try:
        options = ExportOptions(
            include_metadata=not args.no_metadata,
            include_timestamps=not args.no_timestamps,
            include_artifacts=not args.no_artifacts,
            page_size=args.page_size,
            font_size=args.font_size,
        )
    except ValidationError as exc:
        out.error(f"Invalid export options: {exc.errors()[0]['msg']}")
        sys.exit(1)

    out.header(f"Exporting {match.config.display_name} conversation")
    out.kv("Share id", match.share_id)
    out.kv("Format", args.format)
    if not cfg.semantic_enabled:
        out.info(out.dim("Semantic fallback disabled (no OpenAI API key)."))
    out.blank()

    await _refresh_rules(exporter, cfg)

    try:
        result = await exporter.export(args.url, args.format, options, html=html)
    except AllStrategiesFailedError as exc:
        out.error(exc.user_message)
        if args.verbose:
            for name, reason in exc.failures:
                out.attempt(name, False, reason)
        sys.exit(1)
    except ExportFailedException as exc:
        out.error(exc.message)
        sys.exit(1)

    if args.out == "-":
        sys.stdout.buffer.write(result.content)
        return

    path = _resolve_output(args.out, cfg, result.filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(result.content)

    out.success(f"Saved {path}")
    out.kv("Title", result.conversation.title)
    out.kv("Messages", result.message_count)
    out.kv("Size", out.human_size(result.size))
    out.kv("Time", f"{result.processing_time:.2f}s")
    out.blank()


# ── detect ──────────────────────────────────────────────────────────


async def cmd_detect(args: argparse.Namespace) -> None:
    from share_export import InvalidUrlError, UnsupportedPlatformError

    exporter = _build_exporter(load_config())
    try:
        match = exporter.detect(args.url)
    except (InvalidUrlError, UnsupportedPlatformError) as exc:
        _report_url_error(exc)
        sys.exit(1)

    out.header(match.config.display_name)
    out.kv("Platform", match.platform.value)
    out.kv("Share id", match.share_id)
    out.kv("Strategies", ", ".join(exporter.plan(match.platform)))
    out.blank()


# ── rules ───────────────────────────────────────────────────────────


async def cmd_rules_list(args: argparse.Namespace) -> None:
    from share_export import Platform

    cfg = load_config()
    exporter = _build_exporter(cfg)
    await _refresh_rules(exporter, cfg)

    platform = Platform(args.platform) if args.platform else None
    rules = exporter.rules(platform)
    if not rules:
        out.warn("No verified rules.")
        return

    out.header(f"Parsing rules ({len(rules)})")
    out.blank()
    for rule in sorted(rules, key=lambda r: (r.platform.value, -r.confidence)):
        print(
            f"  {out.bold(rule.id)} v{rule.version}"
            f"  {out.dim(rule.platform.value)}"
            f"  confidence={rule.confidence:.2f}"
            f"  {out.dim(rule.last_updated.strftime('%Y-%m-%d'))}"
        )
        print(f"    {out.dim(rule.selectors.messages)}")
    out.blank()


async def cmd_rules_refresh(args: argparse.Namespace) -> None:
    cfg = load_config()
    if not cfg.rules_url:
        out.error("No rule feed configured. Set SHARE_EXPORT_RULES_URL or [rules] url.")
        sys.exit(1)

    exporter = _build_exporter(cfg)
    accepted = await exporter.refresh_rules()
    out.success(f"Accepted {accepted} rules from {cfg.rules_url}")


# ── config ──────────────────────────────────────────────────────────


async def cmd_config_show(args: argparse.Namespace) -> None:
    cfg = load_config()

    out.header("Settings")
    out.kv("File", config_path_display())
    out.kv(
        "Semantic fallback",
        f"on ({cfg.llm_model}, key {_mask(cfg.openai_api_key)})"
        if cfg.semantic_enabled
        else out.dim("off (no OpenAI API key)"),
    )
    out.kv("Rule feed", cfg.rules_url or out.dim("seed rules only"))
    out.kv("Output directory", cfg.output_dir)
    out.kv("Fetch timeout", f"{cfg.fetch_timeout:g}s")
    out.kv("Strategies", ", ".join(cfg.strategies) or "all")
    out.blank()
    out.next_step("share-export config set-key", "store an OpenAI API key")
    out.next_step("share-export config path", "print the settings file location")
    out.blank()


async def cmd_config_set_key(args: argparse.Namespace) -> None:
    """Prompt for an OpenAI API key and store it in the settings file."""
    cfg = load_config() if config_exists() else Config()
    if cfg.openai_api_key:
        out.kv("Stored key", _mask(cfg.openai_api_key))
    out.info("Keys are issued at https://platform.openai.com/api-keys")

    entered = input("  OpenAI API key (blank to keep): ").strip()
    if not entered:
        out.warn("Nothing entered; settings unchanged.")
        return

    cfg.openai_api_key = entered
    out.success(f"Semantic fallback enabled; key written to {save_config(cfg)}")


async def cmd_config_path(args: argparse.Namespace) -> None:
    print(config_path_display())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="share-export",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Export:\n"
            "  share-export export URL                      "
            "Save as PDF in ./exports\n"
            "  share-export export URL -f markdown -o -     "
            "Print Markdown to stdout\n"
            "  share-export export URL --html-file page.html  "
            "Use markup saved from the browser\n"
            "\n"
            "Inspect:\n"
            "  share-export detect URL                      "
            "Show platform and strategy order\n"
            "  share-export rules list                      "
            "Show parsing rules\n"
            "\n"
            "Settings:\n"
            "  share-export config show                     "
            "Print the effective settings\n"
            "  share-export config set-key                  "
            "Enable the semantic fallback\n"
            "  share-export config path                     "
            "Print the settings file location\n"
        ),
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log strategy attempts and rule refreshes"
    )
    sub = parser.add_subparsers(dest="command", title="commands")

    # export
    p_export = sub.add_parser("export", help="Export a shared conversation")
    p_export.add_argument("url", help="Public share link")
    p_export.add_argument(
        "-f",
        "--format",
        choices=_FORMATS,
        default="pdf",
        help="Output format (default: pdf)",
    )
    p_export.add_argument(
        "-o",
        "--out",
        metavar="PATH",
        help="Output file or directory; '-' writes to stdout",
    )
    p_export.add_argument(
        "--html-file",
        metavar="PATH",
        help="Parse this saved page instead of downloading it",
    )
    p_export.add_argument(
        "--no-metadata", action="store_true", help="Omit the metadata block"
    )
    p_export.add_argument(
        "--no-timestamps", action="store_true", help="Omit message timestamps"
    )
    p_export.add_argument(
        "--no-artifacts", action="store_true", help="Omit code blocks"
    )
    p_export.add_argument(
        "--page-size", choices=["A4", "Letter"], default="A4", help="PDF page size"
    )
    p_export.add_argument(
        "--font-size", type=int, default=12, help="Base PDF font size (6-32)"
    )

    # detect
    p_detect = sub.add_parser("detect", help="Identify the platform of a share link")
    p_detect.add_argument("url", help="Public share link")

    # rules
    p_rules = sub.add_parser("rules", help="Inspect parsing rules")
    rules_sub = p_rules.add_subparsers(dest="rules_command")
    p_rules_list = rules_sub.add_parser("list", help="List verified rules")
    p_rules_list.add_argument(
        "--platform", choices=_platforms(), help="Only this platform"
    )
    rules_sub.add_parser("refresh", help="Pull rules from the configured feed")

    # config
    p_cfg = sub.add_parser("config", help="Inspect or edit the settings file")
    cfg_sub = p_cfg.add_subparsers(dest="config_command")
    cfg_sub.add_parser("show", help="Print the effective settings")
    cfg_sub.add_parser("set-key", help="Store an OpenAI API key")
    cfg_sub.add_parser("path", help="Print the settings file location")

    return parser


# ── Dispatch ────────────────────────────────────────────────────────

_CommandHandler = Callable[[argparse.Namespace], Coroutine[Any, Any, None]]

# command -> handler, or (sub-command attribute, {sub-command: handler})
_COMMANDS: dict[str, _CommandHandler | tuple[str, dict[str, _CommandHandler]]] = {
    "export": cmd_export,
    "detect": cmd_detect,
    "rules": (
        "rules_command",
        {"list": cmd_rules_list, "refresh": cmd_rules_refresh},
    ),
    "config": (
        "config_command",
        {"show": cmd_config_show, "set-key": cmd_config_set_key, "path": cmd_config_path},
    ),
}


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.INFO, format="  %(name)s: %(message)s")
    for name, level in (
        ("LiteLLM", logging.CRITICAL),
        ("litellm", logging.CRITICAL),
        ("httpx", logging.WARNING),
        ("playwright", logging.WARNING),
    ):
        logging.getLogger(name).setLevel(level)


def _resolve_handler(
    parser: argparse.ArgumentParser, args: argparse.Namespace
) -> _CommandHandler | None:
    entry = _COMMANDS.get(args.command or "")
    if entry is None:
        parser.print_help()
        return None
    if not isinstance(entry, tuple):
        return entry

    attr, handlers = entry
    handler = handlers.get(getattr(args, attr) or "")
    if handler is None:
        parser.parse_args([args.command, "--help"])
    return handler


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    _configure_logging(args.verbose)

    handler = _resolve_handler(parser, args)
    if handler is None:
        return
    try:
        asyncio.run(handler(args))
    except KeyboardInterrupt:
        out.blank()
        sys.exit(130)
