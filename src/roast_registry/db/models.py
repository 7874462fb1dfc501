# SPDX-License-Identifier: MIT
"""SQLAlchemy database models for the Roast registry."""

from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


class Package(Base):
    """Package metadata model."""

    __tablename__ = "packages"

    name: Mapped[str] = mapped_column(String(100), primary_key=True)
    description: Mapped[str] = mapped_column(Text, default="")
    authors: Mapped[list] = mapped_column(JSON, default=list)
    license: Mapped[str] = mapped_column(String(50), default="MIT")
    repository: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    homepage: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    keywords: Mapped[list] = mapped_column(JSON, default=list)
    downloads: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)

    versions: Mapped[list["Version"]] = relationship(
        "Version",
        back_populates="package",
        cascade="all, delete-orphan",
        order_by="Version.id",
    )

    def __repr__(self) -> str:
        return f"<Package(name={self.name!r})>"


class Version(Base):
    """Package version model."""

    __tablename__ = "versions"
    __table_args__ = (UniqueConstraint("package_name", "version", name="uq_package_version"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    package_name: Mapped[str] = mapped_column(
        String(100), ForeignKey("packages.name", ondelete="CASCADE")
    )
    version: Mapped[str] = mapped_column(String(100))
    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)
    yanked: Mapped[bool] = mapped_column(Boolean, default=False)
    checksum: Mapped[str] = mapped_column(String(64))
    size: Mapped[int] = mapped_column(Integer)
    signature: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    publisher_fingerprint: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    package: Mapped["Package"] = relationship("Package", back_populates="versions")

    def __repr__(self) -> str:
        return f"<Version(package={self.package_name!r}, version={self.version!r})>"


class Owner(Base):
    """Ownership relation between an identity and a package name."""

    __tablename__ = "owners"
    __table_args__ = (UniqueConstraint("owner_id", "package_name", name="uq_owner_package"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(64), index=True)
    package_name: Mapped[str] = mapped_column(String(100), index=True)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)

    def __repr__(self) -> str:
        return f"<Owner(owner_id={self.owner_id!r}, package={self.package_name!r})>"


class User(Base):
    """Registered identity."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True)
    name: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(20), default="owner")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)

    tokens: Mapped[list["APIToken"]] = relationship(
        "APIToken", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, email={self.email!r})>"


class APIToken(Base):
    """API token for authentication. Only the SHA256 hash is stored."""

    __tablename__ = "api_tokens"

    token_hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id", ondelete="CASCADE"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)

    user: Mapped["User"] = relationship("User", back_populates="tokens")

    def __repr__(self) -> str:
        return f"<APIToken(user_id={self.user_id!r}, hash={self.token_hash[:8]}...)>"
