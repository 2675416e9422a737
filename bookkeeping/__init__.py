"""
ISP Bookkeeping - Source Package

A small bookkeeping application for a local internet-service provider:
income/expense transactions, subscriber records, user accounts and a
monthly financial report with profit sharing between partners.

DESIGN PRINCIPLES:
1. Every mutation is written through to storage immediately
2. Reports are pure functions of the stored transactions
3. Broken stored data degrades to an empty view, never a crash
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "ISP Bookkeeping Team"
