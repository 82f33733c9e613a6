import csv
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, List, Optional, TextIO

from errors import InvalidHeaderError, TransactionParseError
from models import Transaction, TransactionType

REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_COLUMN = "amount"

# Client and transaction ids are unsigned 32-bit values.
MAX_ID = 2**32 - 1

# Amounts are fixed-point with at most 28 significant digits.
MAX_AMOUNT_DIGITS = 28


def read_transactions(stream: TextIO, source: str = "<stream>") -> Iterator[Transaction]:
    """
    Lazily parse transactions from CSV text with a `type, client, tx, amount` header.
    Raises TransactionParseError on the first malformed row; rows before it have already been yielded.
    """
    reader = csv.DictReader(stream)
    try:
        header = reader.fieldnames
    except (csv.Error, UnicodeDecodeError) as e:
        raise InvalidHeaderError(f"unreadable header: {e}", source=source, line_number=1) from e
    if header is None:
        return

    fieldnames = [name.strip() for name in header]
    _validate_header(fieldnames, source)
    reader.fieldnames = fieldnames

    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except (csv.Error, UnicodeDecodeError) as e:
            raise TransactionParseError(f"unreadable row: {e}", source=source, line_number=reader.line_num) from e

        if _is_blank(row):
            continue
        yield parse_row(row, source=source, line_number=reader.line_num)


def parse_row(row: Dict[Optional[str], str], source: str = "<stream>", line_number: Optional[int] = None) -> Transaction:
    """Parse one CSV row (as produced by csv.DictReader) into a Transaction."""

    def fail(reason: str) -> TransactionParseError:
        return TransactionParseError(reason, source=source, line_number=line_number)

    # DictReader files surplus values under the None key and fills missing ones with None.
    if None in row:
        raise fail(f"expected {len(row) - 1} fields, got {len(row) - 1 + len(row[None])}")
    if any(value is None for value in row.values()):
        present = sum(1 for value in row.values() if value is not None)
        raise fail(f"expected {len(row)} fields, got {present}")

    normalized = {k: v.strip() for k, v in row.items()}

    type_token = normalized["type"]
    try:
        transaction_type = TransactionType(type_token)
    except ValueError:
        raise fail(f"unknown transaction type {type_token!r}") from None

    client_id = _parse_id(normalized["client"], "client", fail)
    transaction_id = _parse_id(normalized["tx"], "tx", fail)
    amount = _parse_amount(normalized.get(AMOUNT_COLUMN, ""), fail)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _validate_header(fieldnames: List[str], source: str) -> None:
    missing = [column for column in REQUIRED_COLUMNS if column not in fieldnames]
    if missing:
        raise InvalidHeaderError(f"header is missing column(s) {', '.join(missing)}", source=source, line_number=1)

    duplicates = sorted({name for name in fieldnames if fieldnames.count(name) > 1})
    if duplicates:
        raise InvalidHeaderError(f"header repeats column(s) {', '.join(duplicates)}", source=source, line_number=1)


def _parse_id(text: str, field: str, fail) -> int:
    if not (text.isascii() and text.isdigit()):
        raise fail(f"{field} must be an unsigned integer, got {text!r}")

    value = int(text)
    if value > MAX_ID:
        raise fail(f"{field} {value} is out of range")
    return value


def _parse_amount(text: str, fail) -> Optional[Decimal]:
    if not text:
        return None

    # Plain decimal notation only; exponents could describe values no account can hold.
    if "e" in text.lower():
        raise fail(f"invalid amount {text!r}")

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise fail(f"invalid amount {text!r}") from None

    if not amount.is_finite():
        raise fail(f"invalid amount {text!r}")

    digits = amount.as_tuple()
    if len(digits.digits) > MAX_AMOUNT_DIGITS or digits.exponent < -MAX_AMOUNT_DIGITS:
        raise fail(f"amount {text!r} exceeds {MAX_AMOUNT_DIGITS} digits of precision")
    return amount


def _is_blank(row: Dict[Optional[str], str]) -> bool:
    values = [value for key, value in row.items() if key is not None]
    values.extend(row.get(None, []))
    return all(not value or not value.strip() for value in values)
