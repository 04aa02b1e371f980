"""
Domain layer for order reconciliation.

Contains the immutable order snapshots, merchant policy and the
records produced by a reconciliation attempt.
"""
