"""
hisab - Shared Group Expense Ledger

Tracks shared group expenses, computes who owes whom, and records
settlements between participants.

DESIGN PRINCIPLES:
1. All money math happens in integer cents
2. Splits always reconcile to the expense total, to the cent
3. Balances are derived on demand, never stored
4. Fail loudly on bad references (no silent skips)
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "hisab Team"
