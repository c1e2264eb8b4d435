"""
Cadence - recurring obligation projection and reconciliation engine.

Local-only library for turning recurring-payment templates into per-month
projected transactions, materializing them into durable records, and
reconciling expected against actual spending.
"""

__version__ = "0.1.0"
