"""
Idempotent upsert operations for turnover tables.

Implements INSERT ... ON CONFLICT DO UPDATE on each kind's natural key so
re-importing a file updates rows in place instead of duplicating them.
RETURNING (xmax = 0) tells freshly inserted rows from updated ones.
"""

from typing import Any, Sequence

from psycopg import Cursor, sql
from pydantic import BaseModel

from tover.core.models import UpsertResult


def record_columns(model: type[BaseModel]) -> list[str]:
    """Persisted columns of a record model, in field order."""
    return [
        name
        for name, info in model.model_fields.items()
        if not info.exclude
    ]


def build_upsert_sql(
    table: str,
    columns: Sequence[str],
    conflict_columns: Sequence[str],
) -> sql.Composed:
    """
    Build the upsert statement for one table.

    Args:
        table: Target table
        columns: Inserted columns (workspace_id first)
        conflict_columns: Natural key columns

    Returns:
        Composed statement returning one boolean "created" per row
    """
    update_columns = [c for c in columns if c not in conflict_columns]
    assignments = [
        sql.SQL("{col} = EXCLUDED.{col}").format(col=sql.Identifier(c))
        for c in update_columns
    ]
    assignments.append(sql.SQL("updated_at = now()"))

    return sql.SQL(
        "INSERT INTO {table} ({columns}) VALUES ({values}) "
        "ON CONFLICT ({conflict}) DO UPDATE SET {assignments} "
        "RETURNING (xmax = 0) AS created"
    ).format(
        table=sql.Identifier(table),
        columns=sql.SQL(", ").join(map(sql.Identifier, columns)),
        values=sql.SQL(", ").join(sql.Placeholder() * len(columns)),
        conflict=sql.SQL(", ").join(map(sql.Identifier, conflict_columns)),
        assignments=sql.SQL(", ").join(assignments),
    )


def record_params(workspace_id: str, record: BaseModel, columns: Sequence[str]) -> tuple[Any, ...]:
    values = record.model_dump()
    values["workspace_id"] = workspace_id
    return tuple(values[c] for c in columns)


def upsert_batch(
    cur: Cursor,
    table: str,
    conflict_columns: Sequence[str],
    workspace_id: str,
    records: Sequence[BaseModel],
) -> UpsertResult:
    """
    Upsert a batch of records through an open cursor.

    The caller owns the transaction. Rows are sent with executemany so a
    natural key repeated inside one batch updates the earlier row instead
    of failing the whole statement.

    Returns:
        Created vs. updated counts
    """
    if not records:
        return UpsertResult()

    columns = ["workspace_id", *record_columns(type(records[0]))]
    query = build_upsert_sql(table, columns, conflict_columns)
    params = [record_params(workspace_id, r, columns) for r in records]

    cur.executemany(query, params, returning=True)

    created = updated = 0
    while True:
        row = cur.fetchone()
        if row is not None:
            if row["created"]:
                created += 1
            else:
                updated += 1
        if not cur.nextset():
            break

    return UpsertResult(created=created, updated=updated)
