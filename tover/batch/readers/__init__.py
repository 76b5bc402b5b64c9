"""
Upload readers.
"""

from .csv_reader import CSVReader, read_csv

__all__ = ["CSVReader", "read_csv"]
