from datetime import date, datetime

from wealth_mcp.portfolio.cashflows import build_asset_cash_flows, build_portfolio_cash_flows, build_sip_cash_flows
from wealth_mcp.portfolio.models import Asset, AssetCategory, SipContribution, Transaction

AS_OF = date(2025, 1, 1)


def test_asset_flows_match_transactions_by_name_or_symbol() -> None:
    asset = Asset(category=AssetCategory.STOCKS, current_value=1500.0, name="Infosys", symbol="INFY")
    transactions = [
        Transaction(date=date(2023, 6, 1), amount=500.0, description="Bought INFOSYS shares"),
        Transaction(date=date(2023, 1, 1), amount=700.0, description="infy top-up"),
        Transaction(date=date(2023, 2, 1), amount=900.0, description="Bought TCS"),
        Transaction(date=date(2023, 3, 1), amount=50.0, type="expense", description="Infosys brokerage"),
    ]
    flows = build_asset_cash_flows(asset, transactions, AS_OF)
    assert [flow.amount for flow in flows] == [-700.0, -500.0, 1500.0]
    assert flows[-1].date == AS_OF


def test_asset_flows_include_sip_contributions() -> None:
    asset = Asset(
        category=AssetCategory.MUTUAL_FUNDS,
        current_value=3300.0,
        name="Index Fund",
        sip_contributions=(
            SipContribution(date=date(2024, 3, 1), amount=1000.0, units=10.0),
            SipContribution(date=date(2024, 1, 1), amount=1000.0, units=11.0),
            SipContribution(date=date(2024, 2, 1), amount=1000.0, units=10.5),
        ),
    )
    flows = build_asset_cash_flows(asset, [], AS_OF)
    assert [flow.date for flow in flows] == [date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1), AS_OF]
    assert sum(flow.amount for flow in flows) == 300.0


def test_asset_flows_fall_back_to_purchase_pair() -> None:
    asset = Asset(
        category=AssetCategory.GOLD,
        current_value=120.0,
        purchase_value=100.0,
        purchase_date=date(2023, 1, 1),
        name="Gold ETF",
    )
    flows = build_asset_cash_flows(asset, [], AS_OF)
    assert [(flow.date, flow.amount) for flow in flows] == [(date(2023, 1, 1), -100.0), (AS_OF, 120.0)]


def test_asset_without_history_yields_single_flow() -> None:
    asset = Asset(category=AssetCategory.CASH, current_value=50.0, name="Wallet")
    flows = build_asset_cash_flows(asset, [], AS_OF)
    assert len(flows) == 1


def test_sip_flows_append_current_value() -> None:
    sips = [SipContribution(date=date(2024, 1, 5), amount=500.0), SipContribution(date=date(2024, 2, 5), amount=500.0)]
    flows = build_sip_cash_flows(sips, 1100.0, AS_OF)
    assert [flow.amount for flow in flows] == [-500.0, -500.0, 1100.0]


def test_portfolio_flows_merge_investments_and_sum_current_values() -> None:
    assets = [
        Asset(category=AssetCategory.STOCKS, current_value=1000.0, name="A"),
        Asset(category=AssetCategory.GOLD, current_value=500.0, name="B"),
    ]
    transactions = [
        Transaction(date=date(2023, 5, 1), amount=600.0, description="A"),
        Transaction(date=date(2023, 2, 1), amount=700.0, description="B"),
        Transaction(date=date(2023, 3, 1), amount=9999.0, type="income", description="salary"),
    ]
    flows = build_portfolio_cash_flows(assets, transactions, AS_OF)
    assert [flow.amount for flow in flows] == [-700.0, -600.0, 1500.0]


def test_portfolio_flows_fall_back_to_asset_history() -> None:
    assets = [
        Asset(category=AssetCategory.STOCKS, current_value=1100.0, purchase_value=1000.0, purchase_date=date(2024, 1, 1)),
        Asset(
            category=AssetCategory.MUTUAL_FUNDS,
            current_value=210.0,
            sip_contributions=(SipContribution(date=date(2024, 6, 1), amount=200.0),),
        ),
    ]
    flows = build_portfolio_cash_flows(assets, [], AS_OF)
    assert [flow.amount for flow in flows] == [-1000.0, -200.0, 1310.0]


def test_flows_sort_mixed_dates_and_datetimes() -> None:
    asset = Asset(category=AssetCategory.STOCKS, current_value=10.0, name="X")
    transactions = [
        Transaction(date=datetime(2024, 3, 1, 15, 30), amount=4.0, description="x"),
        Transaction(date=date(2024, 1, 1), amount=4.0, description="x"),
    ]
    flows = build_asset_cash_flows(asset, transactions, datetime(2024, 12, 31, 9, 0))
    assert flows[0].date == date(2024, 1, 1)
    assert flows[-1].amount == 10.0
