"""
Core domain layer: models, field validators and per-kind rule sets.
"""
