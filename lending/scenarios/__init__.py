"""Sample-data scenarios."""

from lending.scenarios.portfolio import SamplePortfolioScenario

__all__ = ["SamplePortfolioScenario"]
