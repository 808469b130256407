import logging
import os
import sys

from csv_io import write_accounts
from errors import PaymentsEngineError
from payments_engine import PaymentsEngine

EXIT_FAILURE = 1
EXIT_USAGE = 64

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level = logging.getLevelName(os.environ.get("LOG_LEVEL", "WARNING").upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print(f"Unexpected number of arguments: {len(args)}. Provide exactly 1 argument", file=sys.stderr)
        print("Usage: python main.py <transactions.csv> > accounts.csv", file=sys.stderr)
        return EXIT_USAGE

    filepath = args[0]
    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(filepath)
    except (PaymentsEngineError, OSError) as e:
        logger.debug("Aborting batch", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    write_accounts(accounts, sys.stdout)
    sys.stdout.flush()

    print(
        f"Processed: {engine.stats.processed}, "
        f"Rejected: {engine.stats.rejected}",
        file=sys.stderr
    )
    return 0


def cli() -> None:
    configure_logging()
    sys.exit(main())


if __name__ == "__main__":
    cli()
