"""Command-line entry point.

Usage:
  uigen serve
  uigen generate "A pricing card" --framework html-css-js --out ./build
  uigen generate "A login form" --print --open
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from client.api import DEFAULT_SERVER_URL, GenerationApiClient
from client.notifications import LoggingNotifier
from client.orchestrator import EntryOutcome, GenerationEntry, GenerationOrchestrator
from client.progress import ProgressState
from client.surface import CodeSurface
from schemas.generation import DEFAULT_FRAMEWORK_OPTION, FRAMEWORK_OPTIONS


logger = logging.getLogger("uigen")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="uigen", description="Generate UI components from natural language"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Run the generation server (HOST/PORT from env)")

    gen = sub.add_parser("generate", help="Generate a component through the server")
    gen.add_argument("prompt", help="Natural-language description of the component")
    gen.add_argument(
        "--framework",
        default=DEFAULT_FRAMEWORK_OPTION,
        choices=sorted(FRAMEWORK_OPTIONS),
        help="Framework identifier (default: %(default)s)",
    )
    gen.add_argument(
        "--server", default=DEFAULT_SERVER_URL, help="Server base URL (%(default)s)"
    )
    gen.add_argument(
        "--out", type=Path, default=Path("."), help="Directory for the download"
    )
    gen.add_argument(
        "--print", dest="print_code", action="store_true", help="Print the code"
    )
    gen.add_argument(
        "--open", dest="open_tab", action="store_true", help="Open in a browser tab"
    )
    return parser


def _log_progress(state: ProgressState) -> None:
    if state.step:
        logger.info("%3d%% %s", state.percent, state.step)


async def run_generate(args: argparse.Namespace) -> int:
    async with GenerationApiClient(args.server) as api:
        notifier = LoggingNotifier()
        async with GenerationOrchestrator(api, notifier) as orchestrator:
            orchestrator.progress.subscribe(_log_progress)
            outcome = await orchestrator.enter(
                GenerationEntry(prompt=args.prompt, framework=args.framework)
            )
            if outcome is EntryOutcome.REDIRECTED:
                logger.error("A non-empty prompt is required")
                return 2
            if orchestrator.last_error is not None:
                return 1

            surface = CodeSurface(
                orchestrator.code, notifier, locked=lambda: orchestrator.loading
            )
            if args.print_code:
                sys.stdout.write(surface.text + "\n")
            saved = surface.download(args.out)
            if args.open_tab:
                surface.open_in_new_tab()
            return 0 if saved is not None else 1


def run_server() -> int:
    import uvicorn

    from core.config import get_settings

    settings = get_settings()
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        return run_server()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    return asyncio.run(run_generate(args))


if __name__ == "__main__":
    sys.exit(main())
