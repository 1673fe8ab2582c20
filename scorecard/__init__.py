"""Politician scorecard - evidence collection, scoring and bias checks."""

__version__ = "0.1.0"
