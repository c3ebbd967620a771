"""Bank Rate Advisor — ranks banks by estimated investment return."""

__version__ = "0.3.0"
