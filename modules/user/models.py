"""
User Module - Unified User Model
===================================
Single users table for customers and administrators.
Credentials live with the identity provider; only profile and role flags are stored here.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Index
from sqlalchemy.sql import func
from config.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    # === Profile ===
    name = Column(String(50), nullable=False)
    email = Column(String, unique=True, nullable=True, index=True)
    phone = Column(String(16), unique=True, nullable=True, index=True)

    # === Default delivery address ===
    street = Column(String, nullable=True)
    city = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)

    # === Role Flags ===
    is_admin = Column(Boolean, default=False, server_default="false", nullable=False, index=True)
    is_active = Column(Boolean, default=True, server_default="true", nullable=False, index=True)

    # === Audit ===
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index("ix_users_created", "created_at"),
    )

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.phone or "Unknown User"

    def __repr__(self):
        role = "admin" if self.is_admin else "customer"
        return f"<User {self.id} {self.display_name} ({role})>"
