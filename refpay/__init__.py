"""Referee identity resolution and payroll computation."""

__version__ = "0.1.0"
