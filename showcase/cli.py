"""CLI entrypoints for showcase commands."""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

from .config import ConfigError, load_settings
from .logging import configure_logging
from .orchestrator import Orchestrator
from .stores.manifest import PersistenceFailure


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="showcase",
        description="Generate visual showcase pages for GitHub repositories.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write detailed logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate pages for up to five owner/repo references.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "repos",
        nargs="+",
        metavar="owner/repo",
        help="Repositories to showcase.",
    )
    generate_parser.add_argument(
        "--no-push",
        action="store_true",
        help="Write pages and the manifest without committing or pushing.",
    )
    generate_parser.add_argument(
        "--no-clone",
        action="store_true",
        help="Reuse existing checkouts without fetching upstream changes.",
    )
    generate_parser.add_argument(
        "--iterations",
        type=_positive_int,
        default=None,
        help="Number of model rounds per page (defaults to the configured value).",
    )
    generate_parser.add_argument(
        "--root",
        default=".",
        help="Workspace root holding repos/ and .showcase.yml (defaults to current directory).",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP job service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=3000, help="Port to listen on.")
    serve_parser.add_argument(
        "--root",
        default=".",
        help="Workspace root holding repos/ and .showcase.yml (defaults to current directory).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for showcase commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        settings = load_settings(args.root)
    except ConfigError as exc:
        parser.exit(1, f"showcase: {exc}\n")

    if args.command == "generate":
        generation = settings.generation
        options = dataclasses.replace(
            generation,
            iterations=args.iterations or generation.iterations,
            skip_refresh=generation.skip_refresh or bool(args.no_clone),
            skip_push=generation.skip_push or bool(args.no_push),
        )
        try:
            generated = Orchestrator(settings).run(args.repos, options)
        except (ValueError, ConfigError) as exc:
            parser.exit(1, f"showcase generate failed: {exc}\n")
        except PersistenceFailure as exc:
            parser.exit(1, f"showcase generate failed: {exc}\nRun with --verbose for more details.\n")
        if not generated:
            parser.exit(1)
        print(f"Generated {len(generated)} page(s)")
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port, settings=settings)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
