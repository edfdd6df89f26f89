"""
AI Expense Tracker - Source Package

A personal expense tracker for a single local user, with budgets,
custom categories and Gemini-powered insights.

DESIGN PRINCIPLES:
1. The state manager is the only write path for ledger data
2. Every mutation is mirrored to storage immediately
3. Aggregates are derived, never stored
4. AI output is displayed, never written back into the ledger
5. Storage and AI backends are swappable
"""

__version__ = "1.0.0"
__author__ = "AI Expense Tracker Team"
