"""TaxSaver: capital-gains tax engine for Indian multi-asset portfolios."""

__version__ = "0.1.0"
