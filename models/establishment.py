'''
    File Name: establishment.py
    Version: 1.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''
from dataclasses import dataclass, replace

from models.transaction import now_iso


@dataclass(frozen=True)
class Establishment:
    """A place where money is spent (shop, restaurant, ...)."""
    id: str
    name: str
    category: str = ""
    address: str = ""
    phone: str = ""
    created_at: str = ""
    updated_at: str = ""

    def touched(self) -> "Establishment":
        return replace(self, updated_at=now_iso())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "address": self.address,
            "phone": self.phone,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Establishment":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name") or "",
            category=data.get("category") or "",
            address=data.get("address") or "",
            phone=data.get("phone") or "",
            created_at=data.get("createdAt") or "",
            updated_at=data.get("updatedAt") or "",
        )
