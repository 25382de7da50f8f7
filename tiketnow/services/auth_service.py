#!/usr/bin/env python3
"""
Admin sign-in against the configured credential table
The session mapping (Flask's session in the app) holds the signed-in user
"""

import hmac
import logging
from abc import ABC, abstractmethod
from typing import Dict, MutableMapping, Optional, Tuple

from tiketnow.models import User, UserRole

logger = logging.getLogger(__name__)

SESSION_KEY = 'tiket-admin-session'


class AuthService(ABC):

    @abstractmethod
    def login(self, session: MutableMapping, username: str, password: str) -> Optional[User]:
        ...

    @abstractmethod
    def logout(self, session: MutableMapping) -> None:
        ...

    @abstractmethod
    def get_current_user(self, session: MutableMapping) -> Optional[User]:
        ...

    def is_authenticated(self, session: MutableMapping) -> bool:
        return self.get_current_user(session) is not None


class CredentialTableAuthService(AuthService):
    """Checks username/password against a table injected from configuration"""

    def __init__(self, users: Dict[str, Tuple[str, str]]):
        self._users = dict(users)

    def login(self, session: MutableMapping, username: str, password: str) -> Optional[User]:
        if not isinstance(username, str) or not isinstance(password, str):
            logger.warning("Rejected sign-in with non-text credentials")
            return None
        entry = self._users.get(username or '')
        if entry is None or not hmac.compare_digest(entry[0].encode(), (password or '').encode()):
            logger.warning(f"Failed login for user: {username}")
            return None

        try:
            role = UserRole(entry[1])
        except ValueError:
            logger.warning(f"Unknown role {entry[1]!r} for {username}, using admin")
            role = UserRole.ADMIN

        user = User(username=username, role=role)
        session[SESSION_KEY] = user.to_dict()
        logger.info(f"User signed in: {username}")
        return user

    def logout(self, session: MutableMapping) -> None:
        session.pop(SESSION_KEY, None)

    def get_current_user(self, session: MutableMapping) -> Optional[User]:
        stored = session.get(SESSION_KEY)
        if not stored:
            return None
        try:
            return User(username=stored['username'], role=UserRole(stored['role']))
        except (KeyError, TypeError, ValueError):
            logger.warning("Discarding unreadable session marker")
            session.pop(SESSION_KEY, None)
            return None
