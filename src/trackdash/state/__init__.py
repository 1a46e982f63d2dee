"""State/store layer.

This package is the single place where live label updates, whatever
transport delivered them, are merged into the per-label state shown on
the dashboard.
"""
