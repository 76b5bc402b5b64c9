"""
Tover turnover core.

CSV import/validation pipeline and critical-stock forecasting for
marketplace turnover tracking.
"""

__version__ = "0.3.0"
