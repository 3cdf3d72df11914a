"""Spreadsheet import for the clinic record store (patients, expenses, revenues)."""

__version__ = "0.3.0"
