"""
fintrack - Personal Finance Tracker

A local-first personal finance tracker: register, log in, record
income and expenses, and read dashboard and planning summaries.

DESIGN PRINCIPLES:
1. Everything lives on the device (no server, no sync)
2. Stored data is validated at the boundary, never trusted blindly
3. Corrupt data degrades to an empty ledger, never a crash
4. Every user action is logged as a structured audit event
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "fintrack Team"
