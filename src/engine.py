import logging
import sys
from typing import Dict

from ledger import Ledger
from models import AccountSnapshot
from transaction_reader import IngestionError, read_rows, parse_row

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays a CSV file of transactions, in file order, against a single Ledger.
    Records that fail to parse are logged and skipped; the run continues.
    """

    def __init__(self, report_stats: bool = False):
        self._ledger = Ledger()
        self._report_stats = report_stats

    def process_file(self, filepath: str) -> Dict[int, AccountSnapshot]:
        """Process CSV file and return final account states keyed by client id."""
        logger.info(f"Processing {filepath}")

        for line_number, fields in read_rows(filepath):
            try:
                transaction = parse_row(fields)
            except IngestionError as e:
                logger.error(f"Line {line_number}: unable to create transaction from record {fields}: {e}")
                self._ledger.stats.record_ingestion_error()
                continue
            self._ledger.apply(transaction)

        stats = self._ledger.stats
        logger.info(f"Processing of {filepath} complete")

        if self._report_stats:
            print(
                f"Processed: {stats.applied}, "
                f"Rejected: {stats.rejected}, "
                f"Ingestion errors: {stats.ingestion_errors}",
                file=sys.stderr
            )

        return {snapshot.client_id: snapshot for snapshot in self._ledger.snapshot()}
