"""Cash-flow projection over asset and transaction snapshots.

Capital going into an asset (a purchase, an investment transaction, a SIP
installment) is a negative flow at its own date. The value still held is a
single positive flow dated at the evaluation date, as if the position were
sold that day.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from wealth_mcp.portfolio.models import Asset, CashFlow, DateLike, SipContribution, Transaction, as_datetime


def _sorted_flows(flows: Iterable[CashFlow]) -> list[CashFlow]:
    kept = [flow for flow in flows if flow.amount != 0]
    return sorted(kept, key=lambda flow: as_datetime(flow.date))


def _matches_asset(transaction: Transaction, asset: Asset) -> bool:
    description = transaction.description.lower()
    if asset.name and asset.name.lower() in description:
        return True
    return bool(asset.symbol) and asset.symbol.lower() in description


def _investment_outflows(transactions: Iterable[Transaction]) -> list[CashFlow]:
    return [
        CashFlow(date=transaction.date, amount=-transaction.amount)
        for transaction in transactions
        if transaction.type == "investment"
    ]


def _sip_outflows(sip_contributions: Iterable[SipContribution]) -> list[CashFlow]:
    return [CashFlow(date=sip.date, amount=-sip.amount) for sip in sip_contributions]


def _purchase_outflow(asset: Asset) -> list[CashFlow]:
    if asset.purchase_value and asset.purchase_date is not None:
        return [CashFlow(date=asset.purchase_date, amount=-asset.purchase_value)]
    return []


def _asset_outflows(asset: Asset, transactions: Iterable[Transaction]) -> list[CashFlow]:
    outflows = _investment_outflows(t for t in transactions if _matches_asset(t, asset))
    outflows.extend(_sip_outflows(asset.sip_contributions))
    if not outflows:
        outflows = _purchase_outflow(asset)
    return outflows


def build_asset_cash_flows(asset: Asset, transactions: Sequence[Transaction], as_of: DateLike) -> list[CashFlow]:
    """Project one asset's history into a date-ordered flow sequence.

    Investment transactions are attributed to the asset when their
    description mentions its name or symbol. When an asset has neither
    matched transactions nor SIP installments, its purchase value/date pair
    stands in as the single outflow.
    """
    flows = _asset_outflows(asset, transactions)
    flows.append(CashFlow(date=as_of, amount=asset.current_value))
    return _sorted_flows(flows)


def build_sip_cash_flows(
    sip_contributions: Sequence[SipContribution],
    current_value: float,
    as_of: DateLike,
) -> list[CashFlow]:
    flows = _sip_outflows(sip_contributions)
    flows.append(CashFlow(date=as_of, amount=current_value))
    return _sorted_flows(flows)


def build_portfolio_cash_flows(
    assets: Sequence[Asset],
    transactions: Sequence[Transaction],
    as_of: DateLike,
) -> list[CashFlow]:
    """Merge every investment into one portfolio-level flow sequence.

    The final inflow is the summed current value of all assets.
    """
    flows = _investment_outflows(transactions)
    if not flows:
        for asset in assets:
            flows.extend(_sip_outflows(asset.sip_contributions) or _purchase_outflow(asset))
    total_value = sum(asset.current_value for asset in assets)
    flows.append(CashFlow(date=as_of, amount=total_value))
    return _sorted_flows(flows)
