"""
PostgreSQL persistence: connection pool, schema, and the Store.
"""

from .store import Store

__all__ = ["Store"]
