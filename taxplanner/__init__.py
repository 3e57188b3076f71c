"""taxplanner — personal income-tax computation engine and API."""

__version__ = "0.1.0"
