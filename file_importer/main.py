import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import config
from .core import FileImporterApp
from .exceptions import SourceDirectoryError
from .models import ImportOptions
from .reporting import ReportGenerator


def setup_logging(verbose: bool, log_file: Optional[Path] = None):
    """Sets up logging to the console and, optionally, a file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def date_key_arg(value: str) -> int:
    """argparse type for YYYYMMDD bounds."""
    try:
        key = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYYMMDD")
    if not config.MIN_DATE_KEY <= key <= config.MAX_DATE_KEY:
        raise argparse.ArgumentTypeError(f"date {value!r} out of range, expected YYYYMMDD")
    return key


def positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number {value!r}")
    if n < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return n


def parse_args(argv: Optional[List[str]] = None) -> ImportOptions:
    p = argparse.ArgumentParser(
        prog="file-importer",
        description="Copy files into date-stamped folders using their EXIF capture date "
                    "(or modification time when there is none).",
    )

    p.add_argument("--from", dest="src", type=Path, required=True, help="Source directory")
    p.add_argument("--to", dest="dest", type=Path, required=True, help="Destination directory")
    p.add_argument("--filter", dest="extension_filter", default=None,
                   help="Only import files with this extension (case-sensitive, e.g. 'jpg')")
    p.add_argument("--start", type=date_key_arg, default=config.MIN_DATE_KEY,
                   help="Start date YYYYMMDD (inclusive)")
    p.add_argument("--end", type=date_key_arg, default=config.MAX_DATE_KEY,
                   help="End date YYYYMMDD (inclusive)")
    p.add_argument("--workers", type=positive_int, default=config.DEFAULT_MAX_WORKERS,
                   help=f"Number of files processed in parallel (default: {config.DEFAULT_MAX_WORKERS})")
    p.add_argument("--dry-run", action="store_true", help="Resolve dates and plan copies without touching disk")
    p.add_argument("--report-csv", type=Path, default=None, help="Write a per-file report to this CSV")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    p.add_argument("--strict", action="store_true", help="Exit with status 1 if any file failed")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = p.parse_args(argv)

    return ImportOptions(
        source=args.src.resolve(),
        dest=args.dest.resolve(),
        extension_filter=args.extension_filter,
        start_date=args.start,
        end_date=args.end,
        max_workers=args.workers,
        dry_run=args.dry_run,
        report_csv=args.report_csv,
        log_file=args.log_file,
        strict=args.strict,
        verbose=args.verbose,
    )


def main(argv: Optional[List[str]] = None):
    opts = parse_args(argv)

    setup_logging(opts.verbose, opts.log_file)

    logging.info("=== File Importer Started ===")
    logging.info(f"Source: {opts.source}")
    logging.info(f"Dest:   {opts.dest}")
    if opts.extension_filter or opts.start_date != config.MIN_DATE_KEY or opts.end_date != config.MAX_DATE_KEY:
        logging.info(f"Filter: ext={opts.extension_filter or '*'} dates=[{opts.start_date}, {opts.end_date}]")

    app = FileImporterApp(max_workers=opts.max_workers)

    try:
        outcomes = app.run(
            src_root=opts.source,
            dest_root=opts.dest,
            extension_filter=opts.extension_filter,
            start_date=opts.start_date,
            end_date=opts.end_date,
            dry_run=opts.dry_run,
        )
    except SourceDirectoryError as e:
        logging.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        sys.exit(1)

    reporter = ReportGenerator(outcomes)
    reporter.log_summary()
    if opts.report_csv:
        reporter.write_csv(opts.report_csv)

    if opts.strict and reporter.failures():
        sys.exit(1)


if __name__ == "__main__":
    main()
