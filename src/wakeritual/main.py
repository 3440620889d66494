"""
Main entry point for the wake ritual.

Runs the interactive ritual, manages blooms, or serves the HTTP API.
"""

import argparse
import logging
import sys
from typing import Optional, List

from .config import RitualConfig
from .errors import NonInteractiveInputError, WakeRitualError
from .kernel.bloom import Bloom
from .ritual.display import resonance_bar
from .ritual.engage import run_engage_ritual
from .ritual.input_source import TerminalInputSource
from .ritual.selector import BloomSelector
from .storage.bloom_store import BloomStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_INTERACTIVE = 2

CLEAR_WAKE_ORDER = "-"


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def wake_order_value(value: str):
    """argparse type for --wake-order on update: an integer, or '-' to clear."""
    if value == CLEAR_WAKE_ORDER:
        return value
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid wake order '{value}' (use a number or '-' to clear)"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wakeritual",
        description="Wake Ritual - recall ritual over a personal knowledge store",
    )
    parser.add_argument(
        "--storage-dir",
        default=None,
        help="Directory for storing blooms (default: WAKE_STORAGE_DIR or ./data)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    wake = subparsers.add_parser("wake", help="Wake blooms, optionally through the engage ritual")
    wake.add_argument("-l", "--limit", type=positive_int, default=None, help="Number of blooms to wake")
    wake.add_argument("--no-activate", action="store_true", help="Don't update activation counts")
    wake.add_argument(
        "-e", "--engage", action="store_true",
        help="Interactive engage mode - verify wake phrases (requires a terminal)",
    )
    wake.add_argument(
        "-s", "--set-missing", action="store_true",
        help="Prompt to set missing wake phrases during engage mode",
    )

    add = subparsers.add_parser("add", help="Add a bloom")
    add.add_argument("--title", required=True)
    add.add_argument("--body", default=None)
    add.add_argument("--resonance", type=float, default=0.5)
    add.add_argument("--resonance-type", default=None)
    add.add_argument("--phrase", action="append", default=[], help="Wake phrase (repeatable)")
    add.add_argument("--wake-order", type=int, default=None, help="Lower = earlier in the ritual")

    update = subparsers.add_parser("update", help="Edit an existing bloom")
    update.add_argument("bloom_id")
    update.add_argument("--title", default=None)
    update.add_argument("--body", default=None)
    update.add_argument("--resonance", type=float, default=None)
    update.add_argument("--resonance-type", default=None)
    update.add_argument("--phrase", default=None, help="Wake phrase to add")
    update.add_argument("--remove-phrase", default=None, help="Wake phrase to remove")
    update.add_argument(
        "--wake-order", type=wake_order_value, default=None,
        help="New ritual position, or '-' to clear it",
    )

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    return parser


def run_wake(args: argparse.Namespace, config: RitualConfig, store: BloomStore) -> int:
    if args.set_missing and not args.engage:
        print("--set-missing requires --engage", file=sys.stderr)
        return EXIT_ERROR

    config.set_missing = args.set_missing
    if args.limit is not None:
        config.limit = args.limit
    if args.no_activate:
        config.activate = False

    input_source = TerminalInputSource()
    if args.engage and not input_source.is_interactive():
        # Fail before the store is touched
        print("Error: engage mode requires an interactive terminal", file=sys.stderr)
        return EXIT_NOT_INTERACTIVE

    blooms = store.fetch_candidates(config.limit, activate=config.activate)

    if not args.engage:
        for position, bloom in enumerate(BloomSelector().order(blooms), start=1):
            print(f"  [{position}] {bloom.title}  {resonance_bar(bloom.resonance, bloom.resonance_type)}")
        return EXIT_OK

    try:
        run_engage_ritual(blooms, store, input_source, config)
    except NonInteractiveInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_NOT_INTERACTIVE
    return EXIT_OK


def run_add(args: argparse.Namespace, store: BloomStore) -> int:
    try:
        bloom = Bloom(
            title=args.title,
            body=args.body,
            resonance=args.resonance,
            resonance_type=args.resonance_type,
            wake_phrases=args.phrase,
            wake_order=args.wake_order,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if not store.store(bloom):
        print("Error: failed to store bloom", file=sys.stderr)
        return EXIT_ERROR
    print(f"Added bloom: {bloom.id}")
    return EXIT_OK


def run_update(args: argparse.Namespace, store: BloomStore) -> int:
    changes = {
        name: getattr(args, name)
        for name in ("title", "body", "resonance", "resonance_type")
        if getattr(args, name) is not None
    }
    if args.wake_order is not None:
        changes["wake_order"] = None if args.wake_order == CLEAR_WAKE_ORDER else args.wake_order
    if args.phrase is not None:
        changes["add_phrase"] = args.phrase
    if args.remove_phrase is not None:
        changes["remove_phrase"] = args.remove_phrase

    if not changes:
        print("Error: nothing to update", file=sys.stderr)
        return EXIT_ERROR

    try:
        bloom = store.update(args.bloom_id, **changes)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if bloom is None:
        print(f"Error: bloom {args.bloom_id} not found", file=sys.stderr)
        return EXIT_ERROR
    print(f"Updated bloom: {bloom.id}")
    return EXIT_OK


def run_server(config: RitualConfig) -> None:
    """Run the API server with the provided configuration."""
    import uvicorn

    from .api import api as api_module

    api_module.config = config
    uvicorn.run(
        api_module.app,
        host=config.api_host,
        port=config.api_port,
        log_level=config.log_level,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point when run as a script."""
    args = build_parser().parse_args(argv)
    config = RitualConfig.from_env()
    if args.storage_dir:
        config.storage_dir = args.storage_dir

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        if args.host:
            config.api_host = args.host
        if args.port:
            config.api_port = args.port
        run_server(config)
        return EXIT_OK

    store = BloomStore(config.storage_dir)
    try:
        if args.command == "add":
            return run_add(args, store)
        if args.command == "update":
            return run_update(args, store)
        return run_wake(args, config, store)
    except WakeRitualError as e:
        logger.error("Ritual failed: %s", e)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
