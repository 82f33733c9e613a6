import argparse
import logging
import sys
from typing import List, Optional

from errors import LedgerError
from ledger_engine import LedgerEngine
from report import write_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledger-replay",
        description="Replay transaction CSV files and print final account balances.",
    )
    parser.add_argument("inputs", nargs="+", metavar="INPUT", help="Transaction CSV file(s), processed in order")
    parser.add_argument("-w", "--workers", type=int, default=0, help="Shard clients across N worker threads (default: sequential)")
    parser.add_argument("--skip-invalid", action="store_true", dest="skip_invalid", help="Skip the rest of a malformed file instead of failing")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log progress (-v) or every ignored transaction (-vv)")
    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    engine = LedgerEngine(num_workers=args.workers)
    try:
        ledger = engine.process_files(args.inputs, skip_invalid=args.skip_invalid)
    except (LedgerError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    write_report(ledger.accounts(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
