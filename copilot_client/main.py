"""
Command-line entrypoint: `copilot-client` or `python -m copilot_client.main`.

  copilot-client models
  copilot-client agents
  copilot-client chat "How do I send an HTTP request in Python?" --model gpt-4o
  copilot-client embed "first text" "second text"
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Sequence

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .client import CopilotClient
from .config.loader import get_settings
from .errors import CopilotError, error_messages
from .schemas import Message

console = Console()
err_console = Console(stderr=True)

DEFAULT_SYSTEM_PROMPT = "You are a highly skilled assistant."
EMBED_PREVIEW = 4


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose or os.environ.get("DEBUG") else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s: %(message)s")
    if level == logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.DEBUG)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="copilot-client", description="GitHub Copilot API client")
    parser.add_argument("--config", help="YAML settings file (default: $COPILOT_CLIENT_CONFIG)")
    parser.add_argument("--editor-version", help="Editor-Version header, e.g. Neovim/0.9.0")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("models", help="list available models")
    sub.add_parser("agents", help="list available agents")

    chat = sub.add_parser("chat", help="send one chat completion")
    chat.add_argument("prompt")
    chat.add_argument("--model", required=True, help="model id (see `models`)")
    chat.add_argument("--system", default=DEFAULT_SYSTEM_PROMPT, help="system prompt")

    embed = sub.add_parser("embed", help="embed one or more texts")
    embed.add_argument("texts", nargs="+")
    return parser


# ── Commands ────────────────────────────────────────────────────────────────

async def cmd_models(client: CopilotClient, args: argparse.Namespace) -> None:
    table = Table("id", "name", "version", "max input", "max output")
    for m in await client.get_models():
        table.add_row(
            m.id,
            m.name,
            m.version or "",
            str(m.max_input_tokens or ""),
            str(m.max_output_tokens or ""),
        )
    console.print(table)


async def cmd_agents(client: CopilotClient, args: argparse.Namespace) -> None:
    table = Table("id", "name", "description")
    for a in await client.get_agents():
        table.add_row(a.id, a.name, a.description or "")
    console.print(table)


async def cmd_chat(client: CopilotClient, args: argparse.Namespace) -> None:
    messages = [Message("system", args.system), Message("user", args.prompt)]
    response = await client.chat_completion(messages, args.model)
    for choice in response.choices:
        console.print(choice.message.content, markup=False)
        if choice.finish_reason:
            console.print(f"[dim]finish reason: {choice.finish_reason}[/dim]")


async def cmd_embed(client: CopilotClient, args: argparse.Namespace) -> None:
    for text, e in zip(args.texts, await client.get_embeddings(args.texts)):
        preview = ", ".join(f"{v:.4f}" for v in e.embedding[:EMBED_PREVIEW])
        console.print(f"[{e.index}] {text!r}: dim={len(e.embedding)} [{preview}, ...]", markup=False)


COMMANDS = {
    "models": cmd_models,
    "agents": cmd_agents,
    "chat": cmd_chat,
    "embed": cmd_embed,
}


async def run(args: argparse.Namespace) -> None:
    settings = get_settings(args.config)
    if args.command == "chat":
        client = await CopilotClient.from_env_with_models(args.editor_version, settings=settings)
    else:
        client = await CopilotClient.from_env(args.editor_version, settings=settings)
    async with client:
        await COMMANDS[args.command](client, args)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv()
    setup_logging(args.verbose)
    try:
        asyncio.run(run(args))
    except CopilotError as e:
        message, code = error_messages(e)
        err_console.print(message, markup=False)
        return code
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
