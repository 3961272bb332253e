import csv
import sys
import logging
from typing import Iterable, TextIO

from amounts import format_amount
from models import ClientAccount
from payments_engine import PaymentsEngine

HEADER = ["client", "available", "held", "total", "locked"]


def write_accounts(out: TextIO, accounts: Iterable[ClientAccount]) -> None:
    """Write the client table as CSV, one row per account in the given order."""
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(HEADER)
    for account in accounts:
        writer.writerow([
            account.client_id,
            format_amount(account.available),
            format_amount(account.held),
            format_amount(account.total),
            str(account.locked).lower(),
        ])


def main():
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(sys.argv) != 2:
        print("Usage: payments-ledger <input.csv>", file=sys.stderr)
        sys.exit(1)

    filepath = sys.argv[1]
    engine = PaymentsEngine()
    accounts = engine.process_file(filepath)

    write_accounts(sys.stdout, (accounts[client_id] for client_id in sorted(accounts.keys())))


if __name__ == "__main__":
    main()
