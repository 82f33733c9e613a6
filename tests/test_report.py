import sys
import os
import io
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import AccountSnapshot
from report import format_decimal, write_report


def snapshot(client_id: int, available: str, held: str, locked: bool = False) -> AccountSnapshot:
    available, held = Decimal(available), Decimal(held)
    return AccountSnapshot(client_id, available, held, available + held, locked)


class TestFormatDecimal:
    def test_trailing_zeros_removed(self):
        assert format_decimal(Decimal("1.5000")) == "1.5"
        assert format_decimal(Decimal("9.5")) == "9.5"

    def test_integral_values_without_exponent(self):
        assert format_decimal(Decimal("100")) == "100"
        assert format_decimal(Decimal("100.0")) == "100"
        assert format_decimal(Decimal("1E+3")) == "1000"

    def test_zero(self):
        assert format_decimal(Decimal("0")) == "0"
        assert format_decimal(Decimal("0.0000")) == "0"

    def test_small_values_without_exponent(self):
        assert format_decimal(Decimal("0.0001")) == "0.0001"

    def test_negative(self):
        assert format_decimal(Decimal("-30.0")) == "-30"


class TestWriteReport:
    def test_header_and_rows(self):
        output = io.StringIO()
        write_report([snapshot(1, "9.5", "0")], output)

        assert output.getvalue() == "client,available,held,total,locked\n1,9.5,0,9.5,false\n"

    def test_sorted_by_client(self):
        output = io.StringIO()
        write_report([
            snapshot(10, "1", "0"),
            snapshot(2, "0", "1000.5"),
            snapshot(1, "0", "0", locked=True),
        ], output)

        assert output.getvalue().splitlines() == [
            "client,available,held,total,locked",
            "1,0,0,0,true",
            "2,0,1000.5,1000.5,false",
            "10,1,0,1,false",
        ]

    def test_no_accounts(self):
        output = io.StringIO()
        write_report([], output)

        assert output.getvalue() == "client,available,held,total,locked\n"
