#!/usr/bin/env python3
"""
Social Copilot reply CLI: generate reply suggestions and inspect the orchestrator.

Usage:
  python -m social_copilot.scripts.reply_cli

Settings: ~/.social-copilot.json when present (same shape as
OrchestratorSettings.from_dict), otherwise COPILOT_* env variables.
"""
from __future__ import annotations

import asyncio
import json
import os
import sys
import time
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from social_copilot.clients.llm.registry import default_registry
from social_copilot.config import OrchestratorSettings
from social_copilot.core.exceptions import ConfigurationError, CopilotError
from social_copilot.core.logger import LoggerConfig, configure, get_logger
from social_copilot.orchestrator import Orchestrator, OrchestratorEvents
from social_copilot.replies.types import (
    ContactKey,
    ConversationContext,
    LLMInput,
    Message,
    MessageDirection,
    ReplyStyle,
)
from social_copilot.services.reply_service import build_orchestrator, check_connections

SETTINGS_PATH = Path.home() / ".social-copilot.json"

DEFAULT_STYLES = [ReplyStyle.CASUAL, ReplyStyle.CARING, ReplyStyle.HUMOROUS]

# Swappable for tests
_input_fn = input
_print_fn = print
_default_input_fn = input
_default_print_fn = print


def _set_io(input_fn=None, print_fn=None) -> None:
    """Inject I/O for tests. None = leave unchanged."""
    global _input_fn, _print_fn
    if input_fn is not None:
        _input_fn = input_fn
    if print_fn is not None:
        _print_fn = print_fn


def _reset_io() -> None:
    global _input_fn, _print_fn
    _input_fn = _default_input_fn
    _print_fn = _default_print_fn


def _input(prompt: str, default: str = "") -> str:
    s = _input_fn(prompt).strip()
    return s if s else default


def _out(msg: str = "") -> None:
    _print_fn(msg)


def _load_settings_file(path: Path = SETTINGS_PATH) -> Optional[Dict[str, Any]]:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read settings file {path}: {e}", cause=e) from e


def _load_settings(path: Path = SETTINGS_PATH) -> OrchestratorSettings:
    raw = _load_settings_file(path)
    if raw is None:
        return OrchestratorSettings.from_env()
    return OrchestratorSettings.from_dict(raw)


# Fixed width so test output is stable
MENU_WIDTH = 44


def _show_menu(title: str, items: List[str]) -> str:
    top = "╭" + "─" * (MENU_WIDTH - 2) + "╮"
    bot = "╰" + "─" * (MENU_WIDTH - 2) + "╯"
    sep = "├" + "─" * (MENU_WIDTH - 2) + "┤"
    _out()
    _out(top)
    _out("│ " + title.center(MENU_WIDTH - 4) + " │")
    _out(sep)
    for item in items:
        _out("│ " + item.ljust(MENU_WIDTH - 4) + " │")
    _out(bot)
    return _input_fn("  Choice: ").strip()


def _parse_styles(raw: str) -> List[ReplyStyle]:
    styles: List[ReplyStyle] = []
    for part in raw.split(","):
        name = part.strip().lower()
        if not name:
            continue
        try:
            style = ReplyStyle(name)
        except ValueError:
            _out(f"  Unknown style skipped: {name}")
            continue
        if style not in styles:
            styles.append(style)
    return styles or list(DEFAULT_STYLES)


def _build_input(
    text: str,
    styles: List[ReplyStyle],
    *,
    sender: str = "Friend",
    language: str = "auto",
    hint: Optional[str] = None,
) -> LLMInput:
    key = ContactKey(platform="cli", app="cli", conversation_id="cli", peer_id=sender)
    message = Message(
        id=uuid.uuid4().hex,
        contact_key=key,
        direction=MessageDirection.INCOMING,
        sender_name=sender,
        text=text,
        timestamp=time.time(),
    )
    return LLMInput(
        context=ConversationContext(contact_key=key, recent_messages=[], current_message=message),
        styles=styles,
        language=language,
        thought_hint=hint or None,
    )


def _cli_events() -> OrchestratorEvents:
    return OrchestratorEvents(
        on_fallback=lambda src, dst, err: _out(f"  ! {src} failed ({err}); trying {dst}"),
        on_recovery=lambda name: _out(f"  ✓ {name} recovered"),
        on_all_failed=lambda errors: _out(f"  ✗ all providers failed ({len(errors)} attempt(s))"),
    )


# ─── Handlers ───────────────────────────────────────────────────

async def generate_menu(orch: Orchestrator) -> None:
    text = _input("  Incoming message: ")
    if not text:
        _out("  Message is required.")
        return
    sender = _input("  Sender name [Friend]: ", "Friend")
    styles = _parse_styles(_input("  Styles (comma separated) [casual,caring,humorous]: "))
    language = _input("  Language (auto | zh | en) [auto]: ", "auto").lower()
    hint = _input("  Reply direction (optional): ")

    llm_input = _build_input(text, styles, sender=sender, language=language, hint=hint)
    output = await orch.generate_reply(llm_input)
    _out()
    _out(f"  model={output.model}  latency={output.latency_ms:.0f}ms")
    for i, cand in enumerate(output.candidates, 1):
        _out(f"  {i}) [{cand.style.value}] {cand.text}")


async def stats_menu(orch: Orchestrator) -> None:
    stats = orch.get_cache_stats()
    cache = orch.cache
    _out(f"  hits={stats.hits}  misses={stats.misses}  hit_rate={stats.hit_rate:.0%}")
    if cache is None:
        _out("  cache: disabled")
    else:
        _out(f"  cache: {cache.size}/{cache.capacity} entries, ttl={cache.ttl_seconds:g}s")


async def clear_cache_menu(orch: Orchestrator) -> None:
    orch.clear_cache()
    _out("  Cache cleared.")


async def reset_primary_menu(orch: Orchestrator) -> None:
    orch.reset_primary_state()
    _out("  Primary state reset.")


async def provider_menu(orch: Orchestrator) -> None:
    fallback = "configured" if orch.has_fallback() else "none"
    _out(f"  active={orch.get_active_provider()}  fallback={fallback}")


async def connection_menu(orch: Orchestrator) -> None:
    results = await check_connections(orch.settings, registry=default_registry)
    for role, provider, ok in results:
        _out(f"  {role}: {provider} ... {'OK' if ok else 'FAILED'}")


MAIN_ITEMS = [
    "1) Generate replies",
    "2) Cache stats",
    "3) Clear cache",
    "4) Reset primary state",
    "5) Active provider",
    "6) Check provider connection",
    "0) Exit",
]

MAIN_HANDLERS: Dict[str, Any] = {
    "1": generate_menu,
    "2": stats_menu,
    "3": clear_cache_menu,
    "4": reset_primary_menu,
    "5": provider_menu,
    "6": connection_menu,
}


def _setup_logging() -> Optional[str]:
    """Console logging at WARNING unless LOG_LEVEL says otherwise; file log when LOG_DIR is set."""
    config = LoggerConfig.from_env()
    if "LOG_LEVEL" not in os.environ:
        config = config.with_overrides(level="WARNING")
    log_path: Optional[str] = None
    if config.log_dir:
        try:
            os.makedirs(config.log_dir, exist_ok=True)
            log_path = str(Path(config.log_dir) / f"{config.log_file_basename}.log")
        except OSError as e:
            _print_fn(f"  Warning: cannot create log dir {config.log_dir} ({e})")
            config = config.with_overrides(file_rotating=False)
    configure(config)
    get_logger(__name__).info("CLI started; log file: %s", log_path)
    return log_path


async def run(orch: Orchestrator) -> None:
    """Main menu loop."""
    while True:
        choice = _show_menu("Social Copilot", MAIN_ITEMS)
        if choice == "0":
            break
        handler = MAIN_HANDLERS.get(choice)
        if handler is None:
            _out("  Invalid choice.")
            continue
        try:
            await handler(orch)
        except CopilotError as e:
            _out(f"  Error: {e}")
    _out("\nBye.")


async def main() -> None:
    log_path = _setup_logging()
    if log_path:
        _out(f"  Log file: {log_path}")

    try:
        settings = _load_settings()
        orch = build_orchestrator(settings, events=_cli_events())
    except ConfigurationError as e:
        _out(f"Config error: {e}")
        _out("Set COPILOT_PRIMARY_PROVIDER / COPILOT_PRIMARY_API_KEY or write ~/.social-copilot.json")
        sys.exit(1)

    _out(f"  ▸ primary={settings.primary.provider}  fallback="
         f"{settings.fallback.provider if settings.fallback else '-'}")
    await run(orch)


def cli() -> None:
    """Console-script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    cli()
