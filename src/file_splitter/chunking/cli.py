"""CLI command for splitting files and merging them back."""

import logging
import argparse
from pathlib import Path
import sys
from typing import Callable, Optional

from .config import FileSplitterConfig
from .merger import ChunkMerger
from .progress import ProgressTracker
from .sizes import count_chunks, format_size, parse_chunk_size
from .splitter import FileSplitter
from .summary import summary_path_for
from .summary_store import load_summary, store_summary
from file_splitter.common import ConfigLoader, FileSplitterError, LogContext, OutputExistsError, setup_logging

APP_NAME = "file-splitter"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_MISSING_FILE = 2

YES_ANSWERS = ("true", "yes", "y")


def console_confirm(prompt: str) -> bool:
    """Ask a yes/no question on the console.

    Args:
        prompt: Question to show

    Returns:
        True if the user answered true/yes/y
    """
    print(f"{prompt} [y/N] ", end="", file=sys.stderr, flush=True)
    answer = sys.stdin.readline()
    return answer.strip().lower() in YES_ANSWERS


def _accept_all(prompt: str) -> bool:
    return True


def split_command(
    config: 'FileSplitterConfig',
    source_path: Path,
    output_dir_override: Optional[Path] = None,
    chunk_size_override: Optional[str] = None,
    assume_yes: bool = False,
    confirm: Callable[[str], bool] = console_confirm
) -> int:
    """Split a file into chunks and write its summary.

    Args:
        config: Configuration object
        source_path: File to split
        output_dir_override: Optional override for the output directory
        chunk_size_override: Optional chunk size text (e.g. "25MB")
        assume_yes: Skip the start confirmation
        confirm: Confirmation collaborator

    Returns:
        Exit code (0 for success or cancellation)
    """
    # Use __package__ to avoid __main__ when run as module
    logger_name = __package__ or __name__
    logger = logging.getLogger(logger_name)

    try:
        if chunk_size_override:
            chunk_size = parse_chunk_size(chunk_size_override)
        else:
            chunk_size = config.split.chunk_size_bytes

        if output_dir_override:
            output_dir = output_dir_override
        elif config.split.output_dir:
            output_dir = Path(config.split.output_dir)
        else:
            output_dir = source_path.parent

        splitter = FileSplitter(output_dir, chunk_size, buffer_size=config.split.buffer_size)

        total_size = source_path.stat().st_size
        summary_file = summary_path_for(output_dir, source_path.name)
        if summary_file.exists():
            raise OutputExistsError(f"Summary file already exists: {summary_file}", path=str(summary_file))

        plan = (
            f"Recognized input path as {source_path}, output path as {output_dir}, "
            f"chunk size as {chunk_size} bytes ({format_size(chunk_size)}), "
            f"making {count_chunks(total_size, chunk_size)} total chunk(s)"
        )
        logger.info(plan)
        if not assume_yes and not confirm(f"{plan}. Continue?"):
            logger.info("Cancelling execution")
            return EXIT_OK

        tracker = ProgressTracker(total_size, operation="Split")
        with LogContext(logger, operation="split", file=source_path.name):
            record = splitter.split(
                source_path,
                progress_callback=lambda done, total, name: tracker.update(done, name)
            )
            store_summary(record, summary_file)

        tracker.log_final_summary()
        logger.info(f"Summary written to {summary_file}")
        return EXIT_OK

    except FileNotFoundError as e:
        logger.error(f"Unable to find file: {e.filename}")
        return EXIT_MISSING_FILE
    except FileSplitterError as e:
        logger.error(f"Split failed: {e.message}")
        return EXIT_ERROR
    except Exception as e:
        logger.exception(f"Split failed: {e}")
        return EXIT_ERROR


def merge_command(
    config: 'FileSplitterConfig',
    summary_path: Path,
    output_dir_override: Optional[Path] = None,
    assume_yes: bool = False,
    confirm: Callable[[str], bool] = console_confirm
) -> int:
    """Merge the chunks described by a summary file.

    Chunks are read from the summary file's directory. The summary is
    checked for consistency before any chunk is opened.

    Args:
        config: Configuration object
        summary_path: Path to the ``.sum`` file
        output_dir_override: Optional override for the output directory
        assume_yes: Skip the start confirmation and accept every mismatch
        confirm: Confirmation collaborator

    Returns:
        Exit code (0 for success or cancellation)
    """
    logger_name = __package__ or __name__
    logger = logging.getLogger(logger_name)

    try:
        summary = load_summary(summary_path)
        chunk_dir = summary_path.parent

        if output_dir_override:
            output_dir = output_dir_override
        elif config.merge.output_dir:
            output_dir = Path(config.merge.output_dir)
        else:
            output_dir = chunk_dir

        summary.check_for_errors(chunk_dir)

        plan = (
            f"Recognized input path as {summary_path}, output path as {output_dir}; "
            f"output file will be {summary.filename} ({summary.total_size} bytes "
            f"in {summary.chunk_count} chunk(s) of {summary.chunk_size} bytes)"
        )
        logger.info(plan)
        if not assume_yes and not confirm(f"{plan}. Continue?"):
            logger.info("Cancelling execution")
            return EXIT_OK

        accept_mismatches = assume_yes or config.merge.assume_yes
        merger = ChunkMerger(
            summary,
            chunk_dir,
            output_dir,
            confirm_on_mismatch=_accept_all if accept_mismatches else confirm,
            buffer_size=config.merge.buffer_size
        )

        tracker = ProgressTracker(summary.total_size, operation="Merge")
        with LogContext(logger, operation="merge", file=summary.filename):
            report = merger.merge(
                progress_callback=lambda done, total, name: tracker.update(done, name)
            )

        if report.aborted:
            logger.info(f"Cancelling execution at chunk #{report.aborted_at}")
            return EXIT_OK

        tracker.log_final_summary()
        if not report.whole_file_match:
            logger.error(f"Merged file {report.output_path} does not match the original checksum")
            return EXIT_ERROR

        logger.info(f"Merged file written to {report.output_path}")
        return EXIT_OK

    except FileNotFoundError as e:
        logger.error(f"Unable to find file: {e.filename}")
        return EXIT_MISSING_FILE
    except FileSplitterError as e:
        logger.error(f"Merge failed: {e.message}")
        return EXIT_ERROR
    except Exception as e:
        logger.exception(f"Merge failed: {e}")
        return EXIT_ERROR


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Split a file into checksummed chunks, or merge chunks back"
    )
    parser.add_argument(
        "-p", "--path",
        type=Path,
        required=True,
        help="File to split, or its .sum summary file when merging"
    )
    parser.add_argument(
        "-e", "--export",
        type=Path,
        help="Directory to write the chunks or merged file to (defaults to the input's directory)"
    )
    parser.add_argument(
        "-s", "--size",
        nargs="+",
        metavar="SIZE",
        help="Chunk size and unit, e.g. '10MB', '10 MB' or '10:MB' (KB, MB, GB; default 10 MB)"
    )
    parser.add_argument(
        "-m", "--merge",
        action="store_true",
        help="Merge chunks instead of splitting into them"
    )
    parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Do not ask for confirmation; continue past mismatches"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Console logging until the configured level and format are known
    setup_logging()
    logger = logging.getLogger(__package__ or __name__)

    loader = ConfigLoader(app_name=APP_NAME, config_class=FileSplitterConfig)
    try:
        config = loader.load(defaults_path=args.config)
    except FileSplitterError as e:
        logger.error(e.message)
        return EXIT_ERROR

    setup_logging(
        level=config.logging.level,
        format=config.logging.format,
        log_file=Path(config.logging.file) if config.logging.file else None
    )

    if args.merge:
        return merge_command(
            config=config,
            summary_path=args.path,
            output_dir_override=args.export,
            assume_yes=args.yes
        )

    return split_command(
        config=config,
        source_path=args.path,
        output_dir_override=args.export,
        chunk_size_override=" ".join(args.size) if args.size else None,
        assume_yes=args.yes
    )


if __name__ == "__main__":
    sys.exit(main())
