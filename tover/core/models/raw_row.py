"""
RawRow model representing one parsed line of an uploaded CSV (ephemeral).
"""

from pydantic import BaseModel, Field


class RawRow(BaseModel):
    """
    One data line of an uploaded file, as text.

    Attributes:
        row_number: 1-based position in the file; the header is row 1,
                    so the first data row is 2
        data: Lower-cased header name -> raw cell text
    """

    row_number: int = Field(..., ge=2)
    data: dict[str, str] = Field(default_factory=dict)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "row_number": 2,
                "data": {
                    "source": "allegro",
                    "external_order_id": "A-1001",
                    "ordered_at": "2025-03-01T10:15:00Z",
                    "currency": "pln",
                },
            }
        }
