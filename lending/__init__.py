"""lending-core: loan financial engine for a small-lender back office."""

__version__ = "0.1.0"
