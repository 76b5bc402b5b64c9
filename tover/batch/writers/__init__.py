"""
Writers that persist validated records.
"""

from .record_writer import RecordWriter, WriteOutcome

__all__ = ["RecordWriter", "WriteOutcome"]
