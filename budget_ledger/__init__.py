"""
Budget Ledger - Source Package

Account and transaction aggregate engine for personal finance.
Accounts embed their transactions; balances and spend summaries
are always derived from that ledger.

DESIGN PRINCIPLES:
1. Balance is always the sum of the ledger
2. Fail early, fail visibly
3. The persisted write is the only commit point
4. Every mutation is logged
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Budget Ledger Team"
