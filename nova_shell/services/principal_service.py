"""Registration and sign-in for desktop users."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..exceptions import AuthFailure
from ..models import User
from ..storage.database import Principal
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass
class PrincipalService(BaseService):

    def register(self, username: str, password: str) -> User:
        if not username or not password:
            raise AuthFailure("Username and password are required")
        try:
            with self.session_factory.begin() as session:
                principal = Principal(username=username, password=self._hash_password(password))
                session.add(principal)
                session.flush()
                user = User(id=principal.id, username=principal.username)
        except IntegrityError as exc:
            logger.info("Registration rejected for %s: username taken", username)
            raise AuthFailure("Username already exists") from exc
        self.emit_event("principal_registered", user_id=str(user.id))
        return user

    def authenticate(self, username: str, password: str) -> User:
        with self.session_factory() as session:
            principal = session.scalar(
                select(Principal).where(
                    Principal.username == username,
                    Principal.password == self._hash_password(password),
                )
            )
        if principal is None:
            raise AuthFailure("Invalid credentials")
        self.emit_event("principal_authenticated", user_id=str(principal.id))
        return User(id=principal.id, username=principal.username)

    @staticmethod
    def _hash_password(password: str) -> str:
        digest = hashlib.sha256(password.encode("utf-8")).hexdigest()
        return f"sha256:{digest}"
