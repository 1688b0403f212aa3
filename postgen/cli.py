from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from .builder import build
from .config import DEFAULT_INDEX_NAME, DEFAULT_METADATA_NAME, BuildConfig, load_config
from .errors import (
    BuildFailedError,
    ConfigError,
    DuplicateIdentityError,
    NameValidationError,
    PostgenError,
)
from .utils import parse_bool, parse_int


def err_begin(msg: str, file: str = "") -> None:
    print(f"{msg} {file}".rstrip(), file=sys.stderr)


def err_body(msg: str) -> None:
    print(msg, file=sys.stderr)


def report_failure(exc: Exception) -> None:
    if isinstance(exc, NameValidationError):
        err_begin("The following file names are not valid")
        for path in exc.paths:
            err_body(f" - {path}")
    elif isinstance(exc, DuplicateIdentityError):
        err_begin("The following files have duplicated name")
        for name, paths in sorted(exc.duplicates.items()):
            err_body(f"{name}:")
            err_body("\n".join(f" - {path}" for path in paths))
    elif isinstance(exc, BuildFailedError):
        for path, error in exc.errors:
            err_begin("An error has found on", path)
            err_body(str(error))
    else:
        err_begin(str(exc))


def build_parser(argv: Optional[list[str]] = None) -> argparse.ArgumentParser:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", default="postgen.toml")
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))

    def cfg_str(key: str, default: str) -> str:
        value = config.get(key)
        return default if value is None else str(value)

    def cfg_bool(key: str, default: bool) -> bool:
        value = config.get(key)
        return default if value is None else parse_bool(value)

    def cfg_int(key: str, default: int) -> int:
        return parse_int(config.get(key), default)

    parser = argparse.ArgumentParser(
        prog="postgen",
        description="Render markdown posts to JSON, rebuilding only what changed.",
    )
    parser.add_argument("input_dir", metavar="input-dir", help="Directory searched for *.md posts.")
    parser.add_argument("output_dir", metavar="out-dir", help="Directory receiving the JSON outputs.")
    parser.add_argument(
        "--config",
        default=pre_args.config,
        help="Project config file (TOML/YAML/JSON) providing defaults for these options.",
    )
    parser.add_argument(
        "--posts",
        default=cfg_str("posts", DEFAULT_INDEX_NAME),
        help="Specify the file name of posts collection.",
    )
    parser.add_argument(
        "--force",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("force", False),
        help="Render every post even if its output is up to date.",
    )
    parser.add_argument(
        "--metadata",
        default=cfg_str("metadata", ""),
        help="Global metadata file declaring series and categories.",
    )
    parser.add_argument(
        "--metadata-name",
        default=cfg_str("metadata_name", DEFAULT_METADATA_NAME),
        help="File name of the metadata copy written to the output directory.",
    )
    parser.add_argument(
        "--workers",
        default=cfg_int("workers", 0),
        type=int,
        help="Number of worker threads (0 = auto).",
    )
    parser.add_argument("--quiet", action="store_true", help="Do not print the summary line.")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    try:
        parser = build_parser(argv)
    except ConfigError as exc:
        report_failure(exc)
        return 1
    args = parser.parse_args(argv)

    config = BuildConfig(
        input_dir=Path(args.input_dir),
        output_dir=Path(args.output_dir),
        index_name=args.posts,
        force=args.force,
        metadata_path=Path(args.metadata) if args.metadata else None,
        metadata_name=args.metadata_name,
        workers=args.workers,
    )
    if not config.input_dir.is_dir():
        err_begin("Input directory not found:", str(config.input_dir))
        return 1

    try:
        report = build(config)
    except PostgenError as exc:
        report_failure(exc)
        return 1
    except OSError as exc:
        err_begin(f"I/O error: {exc}")
        return 1

    for warning in report.warnings:
        err_body(f"Warning: {warning}")
    if not args.quiet:
        print(f"Processed {report.processed} markdowns in {report.elapsed * 1000:.2f}ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())
