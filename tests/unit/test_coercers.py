from __future__ import annotations

from datetime import date, datetime

import pandas as pd
import pytest

from clinic_import.excel.coercers import (
    CoercedDate,
    coerce_amount,
    coerce_date,
    coerce_list,
    coerce_text,
)

FALLBACK = "2000-01-01"


@pytest.mark.parametrize("iso", ["2024-03-15", "1999-12-31", "2024-02-29", "1970-01-01"])
def test_iso_date_round_trip(iso):
    assert coerce_date(iso, FALLBACK) == CoercedDate(iso, True)


def test_iso_prefix_keeps_first_ten_chars():
    assert coerce_date("2024-03-15T08:30:00", FALLBACK) == CoercedDate("2024-03-15", True)


def test_serial_date():
    # 45000 - 25569 = 19431 days after 1970-01-01
    assert coerce_date(45000, FALLBACK) == CoercedDate("2023-03-15", True)
    assert coerce_date(25569, FALLBACK) == CoercedDate("1970-01-01", True)
    assert coerce_date(45000.75, FALLBACK) == CoercedDate("2023-03-15", True)


def test_serial_date_out_of_range_falls_back():
    assert coerce_date(1e12, FALLBACK) == CoercedDate(FALLBACK, False)


def test_date_cells():
    assert coerce_date(datetime(2024, 3, 15, 10, 30), FALLBACK) == CoercedDate("2024-03-15", True)
    assert coerce_date(date(2024, 3, 15), FALLBACK) == CoercedDate("2024-03-15", True)
    assert coerce_date(pd.Timestamp("2024-03-15"), FALLBACK) == CoercedDate("2024-03-15", True)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("15/03/2024", "2024-03-15"),
        ("5/3/2024", "2024-03-05"),
        ("15-03-2024", "2024-03-15"),
        ("15.03.2024", "2024-03-15"),
        ("2024/3/5", "2024-03-05"),
        (" 01/12/2023 ", "2023-12-01"),
    ],
)
def test_day_month_year_variants(raw, expected):
    assert coerce_date(raw, FALLBACK) == CoercedDate(expected, True)


@pytest.mark.parametrize(
    "raw",
    ["31/02/2024", "15/13/2024", "15/03/24", "hier", "15 mars 2024", "1/2", "a/b/c", "", None, True],
)
def test_unparsable_dates_fall_back(raw):
    assert coerce_date(raw, FALLBACK) == CoercedDate(FALLBACK, False)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1 234,56 MAD", 1234.56),
        ("150,00", 150.0),
        ("150.5 DH", 150.5),
        ("€ 80", 80.0),
        ("-50", -50.0),
        ("0", 0.0),
        (300, 300.0),
        (99.9, 99.9),
        ("", 0.0),
        (None, 0.0),
        ("gratuit", 0.0),
        (float("nan"), 0.0),
    ],
)
def test_coerce_amount(raw, expected):
    assert coerce_amount(raw) == expected


def test_coerce_list():
    assert coerce_list("Diabète; HTA, asthme / migraine | ulcère\nanémie") == (
        "Diabète", "HTA", "asthme", "migraine", "ulcère", "anémie",
    )
    assert coerce_list(" ; ,, ") == ()
    assert coerce_list("") == ()
    assert coerce_list(None) == ()
    assert coerce_list("Pénicilline") == ("Pénicilline",)


def test_coerce_text():
    assert coerce_text(None) == ""
    assert coerce_text("  Rabat ") == "Rabat"
    assert coerce_text(612345678.0) == "612345678"
    assert coerce_text(12.5) == "12.5"
    assert coerce_text(datetime(2024, 3, 15)) == "2024-03-15"
