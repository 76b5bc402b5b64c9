"""
CSV import pipeline: readers, writers and orchestration.
"""

from .pipeline import DryRunResult, ImportPipeline, dry_run, final_status

__all__ = ["ImportPipeline", "DryRunResult", "dry_run", "final_status"]
