# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Shift slot assignment reconciliation service."""

__version__ = "1.0.0"
