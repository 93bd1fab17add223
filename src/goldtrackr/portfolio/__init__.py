"""User holdings and valuation."""

from goldtrackr.portfolio.book import PORTFOLIO_ASSETS, PortfolioBook


__all__ = ["PORTFOLIO_ASSETS", "PortfolioBook"]
