"""Portfolio analytics domain package."""

from wealth_mcp.portfolio.models import Asset, AssetCategory, CashFlow, Goal, SipContribution, Transaction
from wealth_mcp.portfolio.portfolio_service import PortfolioService

__all__ = ["Asset", "AssetCategory", "CashFlow", "Goal", "PortfolioService", "SipContribution", "Transaction"]
