"""
End-to-end orchestration used by the CLI.

Modules
-------
advise : gather_records() + build_advice() — sources → ranking → reports,
         with the deposit-rate fallback.
"""
