"""Credential store and signed-in session, kept in the same key-value store
as the ledger. The ledger never sees credentials; callers pass it
``SessionStore.is_signed_in`` as the authentication signal.
"""
import logging
from typing import List, Optional
from uuid import uuid4

import bcrypt

from finai.domain import User
from finai.errors import AuthenticationError
from finai.storage import JsonStore

logger = logging.getLogger(__name__)

USERS_KEY = "finai-users"
AUTH_KEY = "finai-auth"


class SessionStore:
    def __init__(self, store: JsonStore, users_key: str = USERS_KEY, auth_key: str = AUTH_KEY):
        self._store = store
        self._users_key = users_key
        self._auth_key = auth_key

    def _users(self) -> List[dict]:
        return list(self._store.get(self._users_key, []))

    def _start_session(self, record: dict) -> User:
        user = User(id=record["id"], name=record["name"], email=record["email"])
        self._store.set(self._auth_key, {
            "is_signed_in": True,
            "user": {"id": user.id, "name": user.name, "email": user.email},
        })
        return user

    def sign_up(self, name: str, email: str, password: str) -> User:
        email = email.strip().lower()
        if not name or not email or not password:
            raise AuthenticationError("Name, email and password are required.")
        users = self._users()
        if any(u["email"] == email for u in users):
            logger.warning("Sign up rejected: %s already registered", email)
            raise AuthenticationError(
                "Email already registered. Please use a different email.", email=email
            )

        record = {
            "id": f"user-{uuid4().hex}",
            "name": name,
            "email": email,
            "password_hash": bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8"),
        }
        users.append(record)
        self._store.set(self._users_key, users)
        logger.info("Registered user %s", record["id"])
        return self._start_session(record)

    def sign_in(self, email: str, password: str) -> User:
        email = email.strip().lower()
        users = self._users()
        if not users:
            raise AuthenticationError("No registered users found. Please sign up first.")

        for record in users:
            if record["email"] == email and bcrypt.checkpw(
                password.encode("utf-8"), record["password_hash"].encode("utf-8")
            ):
                logger.info("User %s signed in", record["id"])
                return self._start_session(record)

        logger.warning("Sign in failed for %s", email)
        raise AuthenticationError("Invalid email or password. Please try again.", email=email)

    def sign_out(self) -> None:
        self._store.set(self._auth_key, {"is_signed_in": False, "user": None})

    def is_signed_in(self) -> bool:
        auth = self._store.get(self._auth_key) or {}
        return bool(auth.get("is_signed_in"))

    def current_user(self) -> Optional[User]:
        auth = self._store.get(self._auth_key) or {}
        if not auth.get("is_signed_in") or not auth.get("user"):
            return None
        return User(**auth["user"])
