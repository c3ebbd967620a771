"""
Persistence collaborators.

Modules
-------
history : HistoryStore port + CsvHistoryStore (flat CSV of past records).
"""
