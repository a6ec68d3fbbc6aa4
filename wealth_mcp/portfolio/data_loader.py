"""Payload parsing into portfolio models.

Records arrive as JSON objects from the dashboard and may use either
snake_case or the dashboard's camelCase keys.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

import pandas as pd

from wealth_mcp.portfolio.models import (
    Asset,
    AssetCategory,
    CashFlow,
    DateLike,
    Goal,
    SipContribution,
    Transaction,
)

VALID_TRANSACTION_TYPES = {"income", "expense", "investment", "insurance"}
TRUE_FLAGS = {"1", "true", "yes", "on"}
FALSE_FLAGS = {"0", "false", "no", "off"}


def load_json_payload(raw: Any) -> Any:
    if isinstance(raw, (str, bytes)):
        return json.loads(raw)
    return raw


def _get(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return default


def _require_mapping(record: Any, label: str) -> Mapping[str, Any]:
    if not isinstance(record, Mapping):
        raise ValueError(f"{label}: expected an object.")
    return record


def _require_list(records: Any, label: str) -> list[Any]:
    records = load_json_payload(records)
    if records is None:
        return []
    if not isinstance(records, list):
        raise ValueError(f"{label}: expected a list.")
    return records


def parse_date(value: Any, label: str = "date") -> DateLike:
    if isinstance(value, date):
        return value
    if value is None or value == "":
        raise ValueError(f"{label}: a date is required.")
    if not isinstance(value, str):
        raise ValueError(f"{label}: expected an ISO date string, received {value!r}.")
    try:
        stamp = pd.Timestamp(value)
    except (ValueError, TypeError) as error:
        raise ValueError(f"{label}: invalid date {value!r}.") from error
    if pd.isna(stamp):
        raise ValueError(f"{label}: invalid date {value!r}.")
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert("UTC").tz_localize(None)
    if stamp == stamp.normalize():
        return stamp.date()
    return stamp.to_pydatetime()


def parse_number(value: Any, label: str, default: float | None = None) -> float:
    if value is None or value == "":
        if default is None:
            raise ValueError(f"{label}: a number is required.")
        return default
    if isinstance(value, bool):
        raise ValueError(f"{label}: expected a number.")
    try:
        return float(value)
    except (TypeError, ValueError) as error:
        raise ValueError(f"{label}: expected a number, received {value!r}.") from error


def parse_flag(value: Any, label: str, default: bool = False) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        flag = value.strip().lower()
        if flag in TRUE_FLAGS:
            return True
        if flag in FALSE_FLAGS:
            return False
    raise ValueError(f"{label}: expected true or false, received {value!r}.")


def parse_category(value: Any, label: str = "category") -> AssetCategory:
    try:
        return AssetCategory(str(value).strip().lower())
    except ValueError as error:
        valid = sorted(category.value for category in AssetCategory)
        raise ValueError(f"{label}: category must be one of {valid}.") from error


def parse_cash_flows(records: Any) -> list[CashFlow]:
    flows: list[CashFlow] = []
    for idx, record in enumerate(_require_list(records, "cash_flows")):
        label = f"cash_flows[{idx}]"
        record = _require_mapping(record, label)
        flows.append(
            CashFlow(
                date=parse_date(_get(record, "date"), f"{label}.date"),
                amount=parse_number(_get(record, "amount"), f"{label}.amount"),
            )
        )
    return flows


def parse_sip_contributions(records: Any, label: str = "sip_contributions") -> tuple[SipContribution, ...]:
    contributions: list[SipContribution] = []
    for idx, record in enumerate(_require_list(records, label)):
        item_label = f"{label}[{idx}]"
        record = _require_mapping(record, item_label)
        contributions.append(
            SipContribution(
                date=parse_date(_get(record, "date"), f"{item_label}.date"),
                amount=parse_number(_get(record, "amount"), f"{item_label}.amount"),
                units=parse_number(_get(record, "units"), f"{item_label}.units", default=0.0),
            )
        )
    return tuple(contributions)


def parse_transactions(records: Any) -> list[Transaction]:
    transactions: list[Transaction] = []
    for idx, record in enumerate(_require_list(records, "transactions")):
        label = f"transactions[{idx}]"
        record = _require_mapping(record, label)
        kind = str(_get(record, "type", default="investment")).strip().lower()
        if kind not in VALID_TRANSACTION_TYPES:
            raise ValueError(f"{label}.type: must be one of {sorted(VALID_TRANSACTION_TYPES)}.")
        transactions.append(
            Transaction(
                date=parse_date(_get(record, "date"), f"{label}.date"),
                amount=parse_number(_get(record, "amount"), f"{label}.amount"),
                type=kind,  # type: ignore[arg-type]
                description=str(_get(record, "description", default="")),
                category=str(_get(record, "category", default="")),
                id=_get(record, "id"),
            )
        )
    return transactions


def parse_asset(record: Any, label: str = "asset") -> Asset:
    record = _require_mapping(load_json_payload(record), label)
    purchase_value = _get(record, "purchase_value", "purchaseValue")
    purchase_date = _get(record, "purchase_date", "purchaseDate")
    symbol = _get(record, "symbol")
    return Asset(
        category=parse_category(_get(record, "category"), f"{label}.category"),
        current_value=parse_number(_get(record, "current_value", "currentValue"), f"{label}.current_value"),
        purchase_value=(
            parse_number(purchase_value, f"{label}.purchase_value") if purchase_value not in (None, "") else None
        ),
        purchase_date=parse_date(purchase_date, f"{label}.purchase_date") if purchase_date not in (None, "") else None,
        sip_contributions=parse_sip_contributions(
            _get(record, "sip_contributions", "sipContributions", "sipTransactions", default=[]),
            f"{label}.sip_contributions",
        ),
        name=str(_get(record, "name", default="")),
        symbol=str(symbol) if symbol else None,
        id=_get(record, "id"),
    )


def parse_assets(records: Any) -> list[Asset]:
    return [parse_asset(record, f"assets[{idx}]") for idx, record in enumerate(_require_list(records, "assets"))]


def parse_target_allocations(raw: Any) -> dict[AssetCategory, float]:
    mapping = _require_mapping(load_json_payload(raw), "target_allocations")
    return {
        parse_category(category, f"target_allocations.{category}"): parse_number(
            percentage, f"target_allocations.{category}"
        )
        for category, percentage in mapping.items()
    }


def parse_goal(raw: Any) -> Goal:
    record = _require_mapping(load_json_payload(raw), "goal")
    target_date = parse_date(_get(record, "target_date", "targetDate"), "goal.target_date")
    if isinstance(target_date, datetime):
        target_date = target_date.date()
    return Goal(
        target_amount=parse_number(_get(record, "target_amount", "targetAmount"), "goal.target_amount"),
        current_amount=parse_number(_get(record, "current_amount", "currentAmount"), "goal.current_amount", default=0.0),
        target_date=target_date,
        monthly_contribution=parse_number(
            _get(record, "monthly_contribution", "monthlyContribution"), "goal.monthly_contribution", default=0.0
        ),
        expected_return_rate=parse_number(
            _get(record, "expected_return_rate", "expectedReturnRate"), "goal.expected_return_rate", default=0.0
        ),
        is_inflation_adjusted=parse_flag(
            _get(record, "is_inflation_adjusted", "isInflationAdjusted"), "goal.is_inflation_adjusted"
        ),
        name=str(_get(record, "name", default="")),
        id=_get(record, "id"),
    )
