from datetime import date, datetime

import pytest

from wealth_mcp.portfolio.data_loader import (
    parse_asset,
    parse_assets,
    parse_cash_flows,
    parse_date,
    parse_goal,
    parse_target_allocations,
    parse_transactions,
)
from wealth_mcp.portfolio.models import AssetCategory


def test_parse_date_keeps_calendar_dates() -> None:
    assert parse_date("2024-03-15") == date(2024, 3, 15)
    assert parse_date("2024-03-15T10:30:00") == datetime(2024, 3, 15, 10, 30)
    assert parse_date("2024-03-15T10:30:00+05:30") == datetime(2024, 3, 15, 5, 0)
    assert parse_date(date(2020, 1, 2)) == date(2020, 1, 2)


def test_parse_date_rejects_garbage() -> None:
    with pytest.raises(ValueError, match="as_of"):
        parse_date("not-a-date", "as_of")
    with pytest.raises(ValueError):
        parse_date("", "as_of")


def test_parse_cash_flows_from_json_text() -> None:
    flows = parse_cash_flows('[{"date": "2023-01-01", "amount": -100}, {"date": "2024-01-01", "amount": "110"}]')
    assert [(flow.date, flow.amount) for flow in flows] == [(date(2023, 1, 1), -100.0), (date(2024, 1, 1), 110.0)]


def test_parse_cash_flows_labels_bad_rows() -> None:
    with pytest.raises(ValueError, match=r"cash_flows\[1\]\.amount"):
        parse_cash_flows([{"date": "2023-01-01", "amount": 1}, {"date": "2023-02-01", "amount": "abc"}])


def test_parse_asset_accepts_camel_case_keys() -> None:
    asset = parse_asset(
        {
            "category": "Mutual_Funds",
            "currentValue": 5200,
            "purchaseValue": 5000,
            "purchaseDate": "2023-04-01",
            "name": "Index Fund",
            "sipTransactions": [{"date": "2023-04-01", "amount": 5000, "units": 50}],
        }
    )
    assert asset.category is AssetCategory.MUTUAL_FUNDS
    assert asset.current_value == 5200.0
    assert asset.purchase_value == 5000.0
    assert asset.purchase_date == date(2023, 4, 1)
    assert asset.sip_contributions[0].units == 50.0
    assert asset.symbol is None


def test_parse_assets_rejects_unknown_category() -> None:
    with pytest.raises(ValueError, match=r"assets\[0\]\.category"):
        parse_assets([{"category": "crypto", "current_value": 10}])


def test_parse_transactions_validates_type() -> None:
    parsed = parse_transactions([{"date": "2024-01-01", "amount": 10, "description": "Buy"}])
    assert parsed[0].type == "investment"
    with pytest.raises(ValueError, match="type"):
        parse_transactions([{"date": "2024-01-01", "amount": 10, "type": "gift"}])


def test_parse_target_allocations() -> None:
    targets = parse_target_allocations('{"stocks": 60, "cash": "40"}')
    assert targets == {AssetCategory.STOCKS: 60.0, AssetCategory.CASH: 40.0}


def test_parse_goal_defaults_and_date() -> None:
    goal = parse_goal({"targetAmount": 50000, "targetDate": "2030-06-01T12:00:00", "isInflationAdjusted": True})
    assert goal.target_date == date(2030, 6, 1)
    assert goal.current_amount == 0.0
    assert goal.monthly_contribution == 0.0
    assert goal.is_inflation_adjusted is True
    with pytest.raises(ValueError, match="goal.target_amount"):
        parse_goal({"target_date": "2030-01-01"})


def test_parse_date_rejects_bare_numbers() -> None:
    with pytest.raises(ValueError, match="ISO date"):
        parse_date(20240101, "cash_flows[0].date")
    with pytest.raises(ValueError, match=r"cash_flows\[0\]\.date"):
        parse_cash_flows([{"date": 1704067200, "amount": -100}])


def test_parse_goal_reads_inflation_flag_strings() -> None:
    base = {"target_amount": 1000, "target_date": "2030-01-01"}
    assert parse_goal({**base, "is_inflation_adjusted": "false"}).is_inflation_adjusted is False
    assert parse_goal({**base, "is_inflation_adjusted": "No"}).is_inflation_adjusted is False
    assert parse_goal({**base, "isInflationAdjusted": "true"}).is_inflation_adjusted is True
    assert parse_goal({**base, "is_inflation_adjusted": 1}).is_inflation_adjusted is True
    with pytest.raises(ValueError, match="goal.is_inflation_adjusted"):
        parse_goal({**base, "is_inflation_adjusted": "sometimes"})
