from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    AREA_MANAGER = "area_manager"

    @classmethod
    def parse(cls, value: object) -> Role | None:
        normalized = str(value or "").strip().lower()
        if normalized == "admin":
            return cls.ADMIN
        if normalized in {"asm", "area_manager", "area_sales_manager"}:
            return cls.AREA_MANAGER
        return None


@dataclass(frozen=True)
class Identity:
    id: str
    role: Role
    name: str | None = None
    email: str | None = None
    phone: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
