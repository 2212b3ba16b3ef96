"""ledgerview: read models and credential checks for the invoicing dashboard."""

__version__ = "0.1.0"
