"""
Schema management operations for the tover database.

Holds the DDL for the import log and the turnover tables, and creates or
clears them. Natural keys are enforced with unique constraints so upserts
can target them with ON CONFLICT.
"""

from .connection import DatabaseConnectionPool

# Creation order; dropped and truncated in reverse
TABLES = (
    "imports",
    "import_errors",
    "orders",
    "order_lines",
    "inventory_snapshots",
    "payments",
)

DDL = """
CREATE TABLE IF NOT EXISTS imports (
    id            UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    workspace_id  TEXT NOT NULL,
    file_path     TEXT,
    import_type   TEXT NOT NULL,
    status        TEXT NOT NULL DEFAULT 'processing'
                  CHECK (status IN ('processing', 'completed', 'failed')),
    summary       JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT now(),
    completed_at  TIMESTAMPTZ
);
CREATE INDEX IF NOT EXISTS idx_imports_workspace_created
    ON imports (workspace_id, created_at DESC);

CREATE TABLE IF NOT EXISTS import_errors (
    id            BIGSERIAL PRIMARY KEY,
    import_id     UUID NOT NULL REFERENCES imports (id) ON DELETE CASCADE,
    row_number    INTEGER NOT NULL CHECK (row_number >= 0),
    error_code    TEXT NOT NULL,
    error_detail  TEXT NOT NULL,
    raw_row       JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS idx_import_errors_import_row
    ON import_errors (import_id, row_number);

CREATE TABLE IF NOT EXISTS orders (
    id                 UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    workspace_id       TEXT NOT NULL,
    source             TEXT NOT NULL,
    external_order_id  TEXT NOT NULL,
    ordered_at         TIMESTAMPTZ NOT NULL,
    currency           CHAR(3) NOT NULL,
    status             TEXT NOT NULL DEFAULT 'created',
    created_at         TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at         TIMESTAMPTZ NOT NULL DEFAULT now(),
    CONSTRAINT uq_orders_natural_key UNIQUE (workspace_id, source, external_order_id)
);
CREATE INDEX IF NOT EXISTS idx_orders_workspace_ordered
    ON orders (workspace_id, ordered_at DESC);

CREATE TABLE IF NOT EXISTS order_lines (
    id                UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    order_id          UUID NOT NULL REFERENCES orders (id) ON DELETE CASCADE,
    sku               TEXT NOT NULL,
    quantity          INTEGER NOT NULL CHECK (quantity > 0),
    unit_price_gross  NUMERIC(14, 4) NOT NULL CHECK (unit_price_gross >= 0),
    discount_amount   NUMERIC(14, 4) NOT NULL DEFAULT 0 CHECK (discount_amount >= 0),
    tax_amount        NUMERIC(14, 4) NOT NULL DEFAULT 0 CHECK (tax_amount >= 0),
    created_at        TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS idx_order_lines_order ON order_lines (order_id);

CREATE TABLE IF NOT EXISTS inventory_snapshots (
    id             UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    workspace_id   TEXT NOT NULL,
    snapshot_date  DATE NOT NULL,
    sku            TEXT NOT NULL,
    on_hand_qty    NUMERIC(14, 4) NOT NULL CHECK (on_hand_qty >= 0),
    unit_cost      NUMERIC(14, 4) NOT NULL CHECK (unit_cost >= 0),
    created_at     TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at     TIMESTAMPTZ NOT NULL DEFAULT now(),
    CONSTRAINT uq_inventory_natural_key UNIQUE (workspace_id, snapshot_date, sku)
);
CREATE INDEX IF NOT EXISTS idx_inventory_workspace_date
    ON inventory_snapshots (workspace_id, snapshot_date DESC);

CREATE TABLE IF NOT EXISTS payments (
    id                   UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    workspace_id         TEXT NOT NULL,
    source               TEXT NOT NULL,
    external_payment_id  TEXT NOT NULL,
    amount               NUMERIC(14, 4) NOT NULL,
    fee_amount           NUMERIC(14, 4) NOT NULL DEFAULT 0,
    currency             CHAR(3) NOT NULL,
    paid_at              TIMESTAMPTZ,
    status               TEXT NOT NULL DEFAULT 'pending',
    created_at           TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at           TIMESTAMPTZ NOT NULL DEFAULT now(),
    CONSTRAINT uq_payments_natural_key UNIQUE (workspace_id, source, external_payment_id)
);
"""


class SchemaManager:
    """
    Creates and clears the tover tables.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize schema manager.

        Args:
            pool: Database connection pool
        """
        self.pool = pool

    def create_tables(self) -> None:
        """Create all tables and indexes (idempotent)."""
        with self.pool.get_connection() as conn:
            conn.execute(DDL)

    def existing_tables(self) -> list[str]:
        """
        List which tover tables exist in the current schema.

        Returns:
            Table names, in creation order
        """
        rows = self.pool.execute_query(
            """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = current_schema() AND table_name = ANY(%s)
            """,
            (list(TABLES),),
        )
        present = {row["table_name"] for row in rows}
        return [t for t in TABLES if t in present]

    def truncate_all(self) -> None:
        """Remove every row from every table."""
        with self.pool.get_connection() as conn:
            conn.execute(f"TRUNCATE TABLE {', '.join(reversed(TABLES))} CASCADE")

    def drop_tables(self) -> None:
        with self.pool.get_connection() as conn:
            for table in reversed(TABLES):
                conn.execute(f"DROP TABLE IF EXISTS {table} CASCADE")
