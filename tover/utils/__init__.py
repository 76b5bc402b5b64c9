"""
Utility modules for tover.
"""
