"""Persistence layer for the record store."""

from .database import Base, Principal, RecordRow, build_engine, build_session_factory  # noqa: F401
