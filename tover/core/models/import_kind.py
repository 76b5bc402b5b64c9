"""
ImportKind enum: the closed set of record kinds an upload may declare.
"""

from enum import Enum

from tover.core.errors import UnknownImportTypeError


class ImportKind(str, Enum):
    """Import type tags accepted by the import trigger."""

    ORDERS = "orders_csv"
    ORDER_LINES = "order_lines_csv"
    INVENTORY = "inventory_csv"
    PAYMENTS = "payments_csv"

    @classmethod
    def values(cls) -> list[str]:
        return [kind.value for kind in cls]

    @classmethod
    def parse(cls, tag: "str | ImportKind") -> "ImportKind":
        """
        Resolve an import type tag.

        Raises:
            UnknownImportTypeError: If the tag is not a supported kind
        """
        if isinstance(tag, ImportKind):
            return tag
        try:
            return cls((tag or "").strip().lower())
        except ValueError:
            raise UnknownImportTypeError(str(tag), cls.values()) from None
