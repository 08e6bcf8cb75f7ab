from __future__ import annotations

from dataclasses import asdict, dataclass

"""ValidationError value object.

Produced fresh on every validation pass and handed back wholesale, so the user
sees every missing field in one go. Serialized shape is fixed:
``{"row": int, "field": str, "message": str}``.
"""

__all__ = [
    "ValidationError",
]


@dataclass(frozen=True)
class ValidationError:
    row: int  # 1-based row position; 0 for document-level problems
    field: str  # canonical field name
    message: str

    def to_dict(self) -> dict[str, object]:
        return asdict(self)
