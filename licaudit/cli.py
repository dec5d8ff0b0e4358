"""CLI entrypoints for licaudit commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import ConfigError, load_config
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator
from .report import EXIT_USAGE, write_report
from .repo_scanner import resolve_root


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
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="licaudit",
        description="Classify the license of every file in a repository and check it against the manifest.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        help="Audit a repository and exit non-zero on undocumented licenses.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    check_parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Repository root (defaults to the enclosing git repository).",
    )
    check_parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only list files that fail the audit.",
    )
    check_parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Number of files classified in parallel.",
    )
    check_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Report format written to stdout.",
    )
    check_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .licaudit.yml (defaults to the one at the repository root).",
    )
    check_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug logs to this file.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP audit service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for licaudit commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "check":
        configure_logging(
            verbose=bool(args.verbose),
            quiet=bool(args.quiet) or args.format == "json",
            log_file=args.log_file,
        )
        root = resolve_root(args.path)
        get_logger("cli").info("Using directory: %s", root)
        try:
            config = load_config(args.config or root)
            report = Orchestrator().run_audit(root, workers=args.workers, config=config)
        except ConfigError as exc:
            parser.exit(EXIT_USAGE, f"licaudit: invalid configuration: {exc}\n")
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(EXIT_USAGE, f"{exc}\n")
        except ValueError as exc:
            parser.exit(EXIT_USAGE, f"licaudit check failed: {exc}\n")
        status = write_report(report, sys.stdout, fmt=args.format, quiet=bool(args.quiet))
        sys.stdout.flush()
        parser.exit(status)
    elif args.command == "serve":
        configure_logging(verbose=bool(args.verbose))
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(EXIT_USAGE, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
