'''
    File Name: category.py
    Version: 1.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''
from dataclasses import dataclass, replace

from models.transaction import now_iso


@dataclass(frozen=True)
class Category:
    """A spending/income category. `description` is the display name."""
    id: str
    description: str
    info: str = ""
    created_at: str = ""
    updated_at: str = ""

    def touched(self) -> "Category":
        return replace(self, updated_at=now_iso())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "info": self.info,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        # older records stored the display name under "name"
        return cls(
            id=str(data.get("id", "")),
            description=data.get("description") or data.get("name") or "",
            info=data.get("info") or "",
            created_at=data.get("createdAt") or "",
            updated_at=data.get("updatedAt") or "",
        )
