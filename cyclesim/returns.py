"""Blended annual portfolio return."""

from __future__ import annotations

from .schema import PortfolioConfig


def blended_return_pct(stock_return_pct: float, bond_return_pct: float, portfolio: PortfolioConfig) -> float:
    return (
        stock_return_pct * portfolio.stock_allocation_pct / 100
        + bond_return_pct * portfolio.bond_allocation_pct / 100
    )


def apply_return(balance: float, return_pct: float) -> float:
    """Grow a balance by one year at ``return_pct`` percent."""
    return balance * (1 + return_pct / 100)
