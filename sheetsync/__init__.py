"""Spreadsheet <-> Translation Management Service string synchronizer."""

__version__ = "0.1.0"
