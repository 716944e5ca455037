"""
Admin accounts and permission checks.

Admins authenticate against the admin API. Each admin carries a role and an
explicit list of permission strings; super admins implicitly hold every
permission.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from statusmaker.core.database import Base


class AdminRole(str, enum.Enum):
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class AdminPermission(str, enum.Enum):
    """Known permission strings"""
    MANAGE_TEMPLATES = "manage_templates"
    MANAGE_CATEGORIES = "manage_categories"
    MANAGE_ASSETS = "manage_assets"
    MANAGE_USERS = "manage_users"
    VIEW_ANALYTICS = "view_analytics"
    SYSTEM_SETTINGS = "system_settings"


def _has_permission(role: str, granted: Iterable[str], permission) -> bool:
    if role == AdminRole.SUPER_ADMIN.value:
        return True
    if isinstance(permission, enum.Enum):
        permission = permission.value
    return permission in set(granted or [])


class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)

    role = Column(String(20), nullable=False, default=AdminRole.ADMIN.value)
    is_active = Column(Boolean, nullable=False, default=True)
    permissions = Column(JSON, nullable=False, default=list)

    last_login_at = Column(DateTime, nullable=True)
    last_login_ip = Column(String(45), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Templates are removed with their author (FK ondelete=CASCADE)
    templates = relationship("Template", back_populates="creator", passive_deletes=True)

    def __repr__(self):
        return f"<Admin(id={self.id}, email='{self.email}', role='{self.role}')>"

    @property
    def is_super_admin(self) -> bool:
        return self.role == AdminRole.SUPER_ADMIN.value

    def has_permission(self, permission: str) -> bool:
        return _has_permission(self.role, self.permissions, permission)

    def has_any_permission(self, permissions: List[str]) -> bool:
        return any(self.has_permission(p) for p in permissions)

    def has_all_permissions(self, permissions: List[str]) -> bool:
        return all(self.has_permission(p) for p in permissions)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "is_active": self.is_active,
            "permissions": list(self.permissions or []),
            "last_login_at": self.last_login_at.isoformat() if self.last_login_at else None,
            "last_login_ip": self.last_login_ip,
        }


@dataclass(frozen=True)
class AdminContext:
    """
    Identity of the admin performing a request.

    Resolved once per request by the auth dependency and passed explicitly
    into service calls, so services never reach for ambient auth state.
    """
    id: int
    name: str
    email: str
    role: str
    permissions: tuple = field(default_factory=tuple)

    @classmethod
    def from_admin(cls, admin: Admin) -> "AdminContext":
        return cls(
            id=admin.id,
            name=admin.name,
            email=admin.email,
            role=admin.role,
            permissions=tuple(admin.permissions or []),
        )

    @property
    def is_super_admin(self) -> bool:
        return self.role == AdminRole.SUPER_ADMIN.value

    def has_permission(self, permission: str) -> bool:
        return _has_permission(self.role, self.permissions, permission)

    def has_any_permission(self, permissions: List[str]) -> bool:
        return any(self.has_permission(p) for p in permissions)

    def has_all_permissions(self, permissions: List[str]) -> bool:
        return all(self.has_permission(p) for p in permissions)
