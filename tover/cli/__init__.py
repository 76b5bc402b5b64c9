"""
Command-line entry points: tover-import and tover-admin.
"""
