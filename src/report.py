import csv
from decimal import Decimal
from typing import Iterable, TextIO

from models import AccountSnapshot

REPORT_HEADER = ("client", "available", "held", "total", "locked")


def format_decimal(value: Decimal) -> str:
    """Format decimal in plain notation, removing trailing zeros."""
    normalized = value.normalize()
    return f"{normalized:f}"


def write_report(snapshots: Iterable[AccountSnapshot], stream: TextIO) -> None:
    """Write one CSV row per account, ordered by client id."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(REPORT_HEADER)
    for snapshot in sorted(snapshots, key=lambda s: s.client_id):
        writer.writerow((
            snapshot.client_id,
            format_decimal(snapshot.available),
            format_decimal(snapshot.held),
            format_decimal(snapshot.total),
            str(snapshot.locked).lower(),
        ))
