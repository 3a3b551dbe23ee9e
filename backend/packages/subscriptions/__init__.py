"""
Subscriptions package - plans, promo codes and the subscriptions that grant access.

Subscriptions are only written by the payments package once a payment is
confirmed; this package owns the read paths and the catalog.
"""
