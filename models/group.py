'''
    File Name: group.py
    Version: 1.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
    Description: Groups belong to a category, subgroups belong to a group.
'''
from dataclasses import dataclass, replace
from typing import Optional

from models.transaction import now_iso


@dataclass(frozen=True)
class Group:
    id: str
    name: str
    category_id: Optional[str] = None
    description: str = ""
    created_at: str = ""
    updated_at: str = ""

    def touched(self) -> "Group":
        return replace(self, updated_at=now_iso())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "categoryId": self.category_id or "",
            "description": self.description,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Group":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name") or "",
            category_id=data.get("categoryId") or None,
            description=data.get("description") or "",
            created_at=data.get("createdAt") or "",
            updated_at=data.get("updatedAt") or "",
        )


@dataclass(frozen=True)
class Subgroup:
    id: str
    name: str
    group_id: Optional[str] = None
    description: str = ""
    created_at: str = ""
    updated_at: str = ""

    def touched(self) -> "Subgroup":
        return replace(self, updated_at=now_iso())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "groupId": self.group_id or "",
            "description": self.description,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Subgroup":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name") or "",
            group_id=data.get("groupId") or None,
            description=data.get("description") or "",
            created_at=data.get("createdAt") or "",
            updated_at=data.get("updatedAt") or "",
        )
