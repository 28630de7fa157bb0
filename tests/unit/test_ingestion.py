"""Unit tests for catalog CSV and holdings feed ingestion"""

from pathlib import Path

import pandas as pd
import pytest
from safebank_router.domain.catalog import CatalogIndex
from safebank_router.domain.coverage import aggregate_coverage
from safebank_router.domain.exceptions import CatalogSourceError, InvalidRecordError
from safebank_router.ingestion.catalog_csv import catalog_from_frame, load_catalog_csv
from safebank_router.ingestion.holdings import parse_holding, parse_holdings


def test_load_catalog_csv_with_bom(tmp_path):
    """Test KDIC export with BOM, quoted commas and blank rows"""
    path = tmp_path / "kdic.csv"
    path.write_text(
        "\ufeff금융회사명,금융상품명,상품판매중단일자,등록일\n"
        '국민은행,"KB Star, 정기예금",,20200803\n'
        "신한은행,,,20200803\n"
        " 하나은행 , 하나의정기예금 ,20231231,20200803\n",
        encoding="utf-8",
    )

    entries = load_catalog_csv(path)

    assert [(e.institution, e.product_name) for e in entries] == [
        ("국민은행", "KB Star, 정기예금"),
        ("하나은행", "하나의정기예금"),
    ]
    assert entries[0].sale_end_date is None
    assert entries[1].sale_end_date == "20231231"
    assert entries[1].registered_date == "20200803"


def test_load_catalog_csv_missing_file(tmp_path):
    with pytest.raises(CatalogSourceError):
        load_catalog_csv(tmp_path / "missing.csv")


def test_load_catalog_csv_missing_columns(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("name,value\na,b\n", encoding="utf-8")

    with pytest.raises(CatalogSourceError):
        load_catalog_csv(path)


def test_header_only_catalog_is_empty(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("금융회사명,금융상품명\n", encoding="utf-8")

    assert load_catalog_csv(path) == []


def test_catalog_from_frame_english_headers():
    frame = pd.DataFrame({"institution": ["국민은행"], "product_name": ["KB Star 정기예금"]})

    entries = catalog_from_frame(frame)

    assert entries[0].institution == "국민은행"
    assert entries[0].registered_date is None


def test_bundled_catalog_loads():
    entries = load_catalog_csv(Path(__file__).resolve().parents[2] / "data" / "kdic_products.csv")
    assert len(entries) > 0
    assert all(e.institution and e.product_name for e in entries)


def test_parse_holding_explicit_fields():
    holding = parse_holding(
        {
            "id": "P1",
            "institution": "농협은행",
            "license": "농협은행 라이선스",
            "type": "fx_deposit",
            "currency": "usd",
            "balance": 1200,
            "fxRate": 1350,
            "product_name": "NH 외화보통예금(USD)",
        }
    )

    assert holding.category == "fx_deposit"
    assert holding.currency == "USD"
    assert holding.fx_rate == 1350
    assert holding.term_months is None


def test_parse_holding_infers_missing_tags():
    """Test category/currency/license fallbacks for untagged rows"""
    holding = parse_holding({"id": 7, "institution": "국민은행", "balance": "3,000,000", "term": 12, "product_name": "KB Star 정기예금"})

    assert holding.holding_id == "7"
    assert holding.category == "term"
    assert holding.currency == "KRW"
    assert holding.license == "국민은행 라이선스"
    assert holding.balance == 3_000_000
    assert holding.term_months == 12


def test_parse_holding_unknown_type_falls_back_to_inference():
    holding = parse_holding({"id": "X", "institution": "국민은행", "type": "mystery", "product_name": "달러 예금"})

    assert holding.category == "fx_deposit"
    assert holding.currency == "USD"


@pytest.mark.parametrize("balance", [None, "abc", -500, float("nan")])
def test_parse_holding_malformed_balance_is_zero(balance):
    holding = parse_holding({"id": "X", "institution": "국민은행", "balance": balance})
    assert holding.balance == 0


@pytest.mark.parametrize("fx_rate", [-1400, 0, "abc", None])
def test_parse_holding_non_positive_fx_rate_is_missing(fx_rate):
    holding = parse_holding(
        {"id": "X", "institution": "농협은행", "type": "fx_deposit", "currency": "USD", "balance": 1000, "fxRate": fx_rate}
    )

    assert holding.fx_rate is None


def test_negative_fx_rate_row_keeps_exposure_non_negative():
    """Test a bad feed rate degrades to the demo rate instead of a negative amount"""
    catalog = CatalogIndex.from_pairs([("농협은행", "NH 외화보통예금")])
    holding = parse_holding(
        {
            "id": "F1",
            "institution": "농협은행",
            "type": "fx_deposit",
            "currency": "USD",
            "balance": 1000,
            "fxRate": -1400,
            "product_name": "NH 외화보통예금",
        }
    )

    totals = aggregate_coverage(catalog, [holding], 50_000_000).totals

    assert totals.eligible == 1_400_000
    assert totals.protected == 1_400_000


def test_parse_holdings_keeps_rows_with_numeric_text_fields():
    rows = [
        {"id": "P1", "institution": "국민은행", "type": "demand", "balance": 5_000_000, "product_name": 12345},
        {"id": "P2", "institution": "국민은행", "license": 7, "currency": 840, "balance": 1_000_000},
    ]

    holdings = parse_holdings(rows)

    assert [h.holding_id for h in holdings] == ["P1", "P2"]
    assert holdings[0].product_name == "12345"
    assert holdings[1].license == "7"
    assert holdings[1].currency == "840"


@pytest.mark.parametrize(
    "row",
    [
        {"institution": "국민은행"},
        {"id": "X"},
        {"id": "  ", "institution": "국민은행"},
        {"id": "X", "institution": None},
        "not a row",
    ],
)
def test_parse_holding_rejects_missing_identity(row):
    with pytest.raises(InvalidRecordError):
        parse_holding(row)


def test_parse_holdings_skips_invalid_rows():
    """Test a bad row is skipped without aborting the batch"""
    rows = [
        {"id": "A", "institution": "국민은행", "balance": 100},
        {"institution": "신한은행", "balance": 200},
        {"id": "C", "institution": "신한은행", "balance": 300},
    ]

    holdings = parse_holdings(rows)

    assert [h.holding_id for h in holdings] == ["A", "C"]
