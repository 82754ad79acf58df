"""Command-line interface for forward-ref-codemod."""

import argparse
import asyncio
import glob
import logging
import sys
from pathlib import Path

from forward_ref_codemod.formatter import FormatterError, NullFormatter, PrettierFormatter
from forward_ref_codemod.syntax import SourceParseError
from forward_ref_codemod.transform import TransformResult, transform_file

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "./src/**/*.tsx"
DEFAULT_JOBS = 4


def setup_logging(verbose: bool = False):
    """Configure logging to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="forward-ref-codemod",
        description="Rewrite React.forwardRef components to take ref as a prop",
    )
    parser.add_argument(
        "patterns",
        nargs="*",
        default=[DEFAULT_PATTERN],
        metavar="PATTERN",
        help=f"Glob of files to transform (default: {DEFAULT_PATTERN})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print transformed files to stdout instead of writing them",
    )
    parser.add_argument(
        "--no-format",
        action="store_true",
        help="Do not run prettier on transformed files",
    )
    parser.add_argument(
        "--prettier",
        default="prettier",
        help="Prettier command (default: prettier)",
    )
    parser.add_argument(
        "--jobs",
        "-j",
        type=int,
        default=DEFAULT_JOBS,
        help=f"Files to transform concurrently (default: {DEFAULT_JOBS})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def expand_patterns(patterns: list[str]) -> list[Path]:
    """Expand glob patterns to a sorted list of unique files."""
    files = set()
    for pattern in patterns:
        for match in glob.glob(pattern, recursive=True):
            path = Path(match)
            if path.is_file() and "node_modules" not in path.parts:
                files.add(path)
    return sorted(files)


async def _run_one(path: Path, formatter, write: bool, semaphore: asyncio.Semaphore):
    async with semaphore:
        try:
            return await transform_file(path, formatter, write=write)
        except (SourceParseError, FormatterError, OSError, UnicodeDecodeError) as e:
            print(f"Error: {path}: {e}", file=sys.stderr)
            return None


async def run_transform(
    files: list[Path], formatter, dry_run: bool = False, jobs: int = DEFAULT_JOBS
) -> int:
    """Transform files concurrently.

    Args:
        files: Files to transform
        formatter: Formatter applied to rewritten files
        dry_run: Print changed files to stdout instead of writing them
        jobs: Maximum number of files in flight

    Returns:
        Exit code (0 if every file succeeded, 1 otherwise)
    """
    semaphore = asyncio.Semaphore(max(jobs, 1))
    results: list[TransformResult | None] = await asyncio.gather(
        *(_run_one(path, formatter, not dry_run, semaphore) for path in files)
    )

    changed = 0
    failed = 0
    for result in results:
        if result is None:
            failed += 1
            continue
        if result.changed:
            changed += 1
            if dry_run:
                print(f"// {result.path}")
                print(result.output, end="" if result.output.endswith("\n") else "\n")

    print(
        f"{changed} changed, {len(files) - changed - failed} unchanged, {failed} failed",
        file=sys.stderr,
    )
    return 1 if failed else 0


async def run_cli(args: list[str]) -> int:
    """Run the CLI with the given arguments.

    Args:
        args: Command-line arguments (without program name)

    Returns:
        Exit code (0 for success, 1 if any file failed, 2 for usage errors)
    """
    try:
        parsed = create_parser().parse_args(args)
    except SystemExit as e:
        return e.code if e.code else 0

    setup_logging(parsed.verbose)

    files = expand_patterns(parsed.patterns)
    if not files:
        print(f"No files match: {' '.join(parsed.patterns)}", file=sys.stderr)
        return 0
    logger.info(f"Transforming {len(files)} files")

    formatter = NullFormatter() if parsed.no_format else PrettierFormatter(parsed.prettier)
    return await run_transform(files, formatter, dry_run=parsed.dry_run, jobs=parsed.jobs)


def main():
    """Entry point for the CLI."""
    exit_code = asyncio.run(run_cli(sys.argv[1:]))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
