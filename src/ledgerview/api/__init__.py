"""API layer: canonical read-model surface for pages and exports.

Key rules:

1. No SQLAlchemy imports at runtime - only call repo functions
2. Every backend failure is logged and surfaced as a DashboardError
3. Return Pydantic models only
4. Cents become dollars or display strings here and nowhere else
"""
