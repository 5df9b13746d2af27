import logging
import stat
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional

from tqdm import tqdm

from . import config
from .exceptions import FileImporterError, NonRegularSourceError
from .metadata.resolve import TimestampResolver, mtime_timestamp
from .models import CopyOutcome, FileCandidate, OutcomeStatus
from .organization.copier import copy_file
from .organization.rules import DestinationPlanner, date_key, ensure_folder, in_range
from .scanning.filesystem import DirectoryScanner


class FileImporterApp:
    def __init__(self,
                 max_workers: int = config.DEFAULT_MAX_WORKERS,
                 resolver: Optional[TimestampResolver] = None,
                 scanner: Optional[DirectoryScanner] = None):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers
        self.resolver = resolver or TimestampResolver()
        self.scanner = scanner or DirectoryScanner()

    def run(self,
            src_root: Path,
            dest_root: Path,
            extension_filter: Optional[str] = None,
            start_date: int = config.MIN_DATE_KEY,
            end_date: int = config.MAX_DATE_KEY,
            dry_run: bool = False) -> List[CopyOutcome]:
        """
        Executes the import pipeline.
        1. Scan & Filter (single-threaded, builds the full candidate list)
        2. Resolve, Plan & Copy (one worker per file, bounded pool)

        Returns exactly one CopyOutcome per candidate, in completion order.

        Raises:
            SourceDirectoryError: src_root cannot be enumerated.
        """
        src_root = Path(src_root)
        dest_root = Path(dest_root)

        # --- Step 1: Scanning ---
        logging.info(f"Importing files from {src_root} -> {dest_root}")
        candidates = self.scanner.scan(src_root, extension_filter)
        if not candidates:
            logging.info("No files to import.")
            return []

        # --- Step 2: Dispatch ---
        planner = DestinationPlanner(dest_root)
        slots = threading.BoundedSemaphore(self.max_workers)
        outcomes: List[CopyOutcome] = []

        logging.info(f"Processing {len(candidates)} files with {self.max_workers} workers (DryRun={dry_run})...")

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_candidate: Dict[Future, FileCandidate] = {}
            for candidate in candidates:
                # Blocks while every slot is busy
                slots.acquire()
                try:
                    future = executor.submit(
                        self._process_candidate, candidate, planner,
                        start_date, end_date, dry_run, slots
                    )
                except BaseException:
                    slots.release()
                    raise
                future_to_candidate[future] = candidate

            for future in tqdm(as_completed(future_to_candidate), total=len(future_to_candidate), desc="Importing"):
                candidate = future_to_candidate[future]
                try:
                    outcomes.append(future.result())
                except Exception as e:
                    logging.error(f"Unexpected failure importing {candidate.name}: {e}")
                    outcomes.append(CopyOutcome(candidate, OutcomeStatus.FAILED, error=str(e)))

        return outcomes

    def _process_candidate(self,
                           candidate: FileCandidate,
                           planner: DestinationPlanner,
                           start_date: int,
                           end_date: int,
                           dry_run: bool,
                           slots: threading.BoundedSemaphore) -> CopyOutcome:
        """Open -> resolve -> filter -> mkdir -> copy, for a single file."""
        try:
            return self._import_one(candidate, planner, start_date, end_date, dry_run)
        finally:
            slots.release()

    def _import_one(self,
                    candidate: FileCandidate,
                    planner: DestinationPlanner,
                    start_date: int,
                    end_date: int,
                    dry_run: bool) -> CopyOutcome:
        if not candidate.is_regular:
            # Opening a FIFO or device would block or read forever
            err = NonRegularSourceError(
                f"Non-regular source file {candidate.name} ({stat.filemode(candidate.mode)})")
            logging.error(f"Copy file failed for {candidate.name}: {err}")
            return CopyOutcome(candidate, OutcomeStatus.FAILED,
                               timestamp=mtime_timestamp(candidate.mtime), error=str(err))

        ts = self.resolver.resolve_path(candidate.path, candidate.mtime)

        key = date_key(ts.instant)
        if not in_range(key, start_date, end_date):
            logging.debug(f"Skipping {candidate.name}: {key} outside [{start_date}, {end_date}]")
            return CopyOutcome(candidate, OutcomeStatus.SKIPPED, timestamp=ts, reason="outside date range")

        folder = planner.folder_for(candidate, ts.instant)
        dest = folder / candidate.name

        if dry_run:
            logging.info(f"[DRY RUN] Copy {candidate.path} -> {dest} ({ts.instant}, {ts.provenance.value})")
            return CopyOutcome(candidate, OutcomeStatus.SKIPPED, destination=dest, timestamp=ts, reason="dry run")

        try:
            if not folder.is_dir():
                logging.info(f"Creating folder: {folder}")
            ensure_folder(folder)

            logging.info(f"Copying {candidate.path} -> {dest} ({ts.instant}, {ts.provenance.value})")
            copy_file(candidate.path, dest, ts.instant)
        except (FileImporterError, OSError) as e:
            logging.error(f"Copy file failed for {candidate.name}: {e}")
            return CopyOutcome(candidate, OutcomeStatus.FAILED, destination=dest, timestamp=ts, error=str(e))

        return CopyOutcome(candidate, OutcomeStatus.COPIED, destination=dest, timestamp=ts)
