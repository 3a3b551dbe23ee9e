"""
Payments package - Paylink checkout, callback reconciliation and status polling.

This package integrates with:
- Paylink.sa: hosted invoices, 3-D Secure callbacks and status lookups

Confirmed payments activate subscriptions owned by packages.subscriptions.
"""
