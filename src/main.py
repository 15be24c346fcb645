import sys
import logging
from typing import List, Optional

from engine import PaymentsEngine
from settings import Settings, get_settings
from transaction_reader import InputError


def configure_logging(settings: Settings) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=settings.log_level,
        format=settings.log_format,
        handlers=handlers,
        force=True,
    )


def format_row(snapshot) -> str:
    return (
        f"{snapshot.client_id},"
        f"{snapshot.available},"
        f"{snapshot.held},"
        f"{snapshot.total},"
        f"{str(snapshot.locked).lower()}"
    )


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: tx-ledger <input.csv>", file=sys.stderr)
        return 1

    settings = get_settings()
    configure_logging(settings)

    filepath = argv[0]
    engine = PaymentsEngine(report_stats=settings.report_stats)
    try:
        accounts = engine.process_file(filepath)
    except (InputError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("client,available,held,total,locked")
    for client_id in sorted(accounts.keys()):
        print(format_row(accounts[client_id]))
    return 0


if __name__ == "__main__":
    sys.exit(main())
