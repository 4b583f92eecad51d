"""SQLAlchemy tables backing the record store.

Two related tables:

- ``principals``: one row per user, unique username.
- ``records``: files and folders, each owned by exactly one principal and
  optionally placed under a parent record.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import DatabaseConfig


class Base(DeclarativeBase):
    pass


class Principal(Base):
    __tablename__ = "principals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)


class RecordRow(Base):
    __tablename__ = "records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(ForeignKey("principals.id"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, default="", nullable=False)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    # Plain column, not a foreign key: deleting a folder leaves its children
    # pointing at the missing parent.
    parent_id: Mapped[Optional[int]] = mapped_column(Integer, index=True, nullable=True)


def build_engine(config: DatabaseConfig) -> Engine:
    dsn = config.dsn
    if dsn.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if dsn in ("sqlite://", "sqlite:///:memory:"):
            # A single shared connection keeps the in-memory database alive.
            kwargs["poolclass"] = StaticPool
        return create_engine(dsn, echo=config.echo_sql, **kwargs)
    return create_engine(dsn, echo=config.echo_sql, pool_size=config.pool_size)


def build_session_factory(engine: Engine) -> sessionmaker:
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
