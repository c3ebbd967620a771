"""
Domain models shared by every layer.

Modules
-------
bank : BankRecord — one bank's rate snapshot plus a return estimate and term.
"""
