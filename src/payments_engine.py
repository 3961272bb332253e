import csv
import logging
import sys
from typing import Dict, Iterable, Iterator, Optional

from models import ClientAccount, ProcessingStats
from record_normalizer import normalize
from transaction_engine import TransactionEngine

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Reads transaction rows from CSV, normalizes them and feeds the accepted
    operations to a TransactionEngine strictly in input order.
    """

    def __init__(self, engine: Optional[TransactionEngine] = None):
        self._engine = engine if engine is not None else TransactionEngine()
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        with open(filepath, "r", encoding="utf-8-sig", newline="") as f:
            return self.process_stream(f)

    def process_stream(self, lines: Iterable[str]) -> Dict[int, ClientAccount]:
        logger.info("Starting processing")

        for row in self._read_rows(lines):
            operation = normalize(row)
            if operation is None:
                self._stats.record_malformed()
                continue

            if self._engine.apply(operation):
                self._stats.record_applied()
            else:
                self._stats.record_rejected()

        logger.info("Processing complete")

        # Print final processing report to stderr
        print(self._stats, file=sys.stderr)

        return {account.client_id: account for account in self._engine.clients()}

    @staticmethod
    def _read_rows(lines: Iterable[str]) -> Iterator[Dict[Optional[str], Optional[str]]]:
        """Yield CSV rows with header names and values whitespace-trimmed."""
        reader = csv.DictReader(lines)
        if reader.fieldnames is not None:
            reader.fieldnames = [name.strip().lower() for name in reader.fieldnames]
        for row in reader:
            yield {
                key: value.strip() if isinstance(value, str) else value
                for key, value in row.items()
            }
