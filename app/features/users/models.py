"""
User model with ULID primary keys.
"""
from sqlalchemy import JSON, String, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, TimestampMixin, generate_ulid
from app.features.permissions.constants import Role


class User(Base, TimestampMixin):
    """
    A caller of the API.

    `role` names an entry of the role permission table. `permissions` holds
    explicit grants on top of the role; NULL means none.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(String(50), nullable=False, default=Role.USER.value, index=True)

    # Stored as a JSON list of permission identifiers
    permissions: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, role={self.role})>"
