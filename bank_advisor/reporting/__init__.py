"""
bank_advisor.reporting — Recommendation report formatting and export.

Modules:
  formatters — Pure ASCII summary/detail report renderers.
  export     — Plain-text recommendations file writer.
"""
