"""State/store layer.

This package is the single source of truth for how reading states and
fiscal-note statuses are derived, and for the session-scoped collections
that completed validations are written to.
"""
