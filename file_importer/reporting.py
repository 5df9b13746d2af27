import csv
import logging
from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, List

from .models import CopyOutcome, OutcomeStatus


class ReportGenerator:
    def __init__(self, outcomes: Iterable[CopyOutcome]):
        self.outcomes: List[CopyOutcome] = list(outcomes)

    def summary(self) -> Dict[str, int]:
        """Counts per status and, for resolved files, per timestamp provenance."""
        counts: Counter = Counter()
        for outcome in self.outcomes:
            counts[outcome.status.value] += 1
            if outcome.timestamp is not None:
                counts[outcome.timestamp.provenance.value] += 1
        counts["total"] = len(self.outcomes)
        return dict(counts)

    def failures(self) -> List[CopyOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.FAILED]

    def log_summary(self):
        counts = self.summary()
        logging.info(
            f"Import complete: {counts.get('copied', 0)} copied, "
            f"{counts.get('skipped', 0)} skipped, {counts.get('failed', 0)} failed "
            f"(of {counts['total']} files)."
        )
        for outcome in self.failures():
            logging.error(f"Failed: {outcome.candidate.name}: {outcome.error}")

    def write_csv(self, output_csv: Path):
        """
        Writes one row per outcome.
        """
        headers = [
            "Source Path",
            "Status",
            "Destination Path",
            "Timestamp",
            "Provenance",
            "Notes",
        ]

        with open(output_csv, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(headers)
            for outcome in self.outcomes:
                ts = outcome.timestamp
                notes = [n for n in (outcome.error, outcome.reason, ts.note if ts else None) if n]
                writer.writerow([
                    str(outcome.candidate.path),
                    outcome.status.value,
                    str(outcome.destination) if outcome.destination else "",
                    ts.instant.isoformat() if ts else "",
                    ts.provenance.value if ts else "",
                    "; ".join(notes),
                ])

        logging.info(f"Report written: {output_csv}")
