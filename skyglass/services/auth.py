"""Client side of the username/password authentication flow.

Password hashing and token issuance happen on the server; this module only
talks to the ``/api/auth`` endpoints and keeps the bearer token around.
"""
from __future__ import annotations

import json
import logging
from typing import Dict, Optional

import pydantic
import requests
from pydantic import BaseModel, ConfigDict
from requests import RequestException

from ..storage import TOKEN_KEY, USER_KEY, KeyValueStore


logger = logging.getLogger(__name__)

TOKEN_HEADER = "x-auth-token"


class CredentialError(RuntimeError):
    """Base class for authentication failures; the message is user facing."""


class ValidationError(CredentialError):
    """The submitted fields are incomplete or malformed."""


class Conflict(CredentialError):
    """An account with this email already exists."""


class InvalidCredentials(CredentialError):
    """Unknown email or wrong password."""


class UserRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    name: str
    email: str


class AuthResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    token: str
    user: UserRecord


class CredentialClient:
    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self._log = logging.getLogger(self.__class__.__name__)

    def register(self, name: str, email: str, password: str) -> AuthResult:
        if not name or not email or not password:
            raise ValidationError("Please enter all fields")
        return self._post("register", {"name": name, "email": email, "password": password}, email)

    def login(self, email: str, password: str) -> AuthResult:
        if not email or not password:
            raise ValidationError("Please enter all fields")
        return self._post("login", {"email": email, "password": password}, email)

    def _post(self, action: str, payload: Dict[str, str], email: str) -> AuthResult:
        url = f"{self.base_url}/api/auth/{action}"
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except RequestException as exc:
            self._log.error("Auth %s for %s failed: %s", action, email, exc)
            raise CredentialError(f"{action.capitalize()} failed") from exc

        if response.status_code >= 400:
            message = _error_message(response) or f"{action.capitalize()} failed"
            self._log.info("Auth %s for %s rejected with %s", action, email, response.status_code)
            raise _classify(action, response.status_code, message)

        try:
            return AuthResult.model_validate(response.json())
        except (ValueError, pydantic.ValidationError) as exc:
            self._log.error("Unexpected auth %s response", action, exc_info=exc)
            raise CredentialError(f"{action.capitalize()} failed") from exc


def _error_message(response: requests.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return None


def _classify(action: str, status: int, message: str) -> CredentialError:
    if status == 409 or (action == "register" and "exists" in message.lower()):
        return Conflict(message)
    if action == "login" and status in (400, 401):
        return InvalidCredentials(message)
    if status in (400, 422):
        return ValidationError(message)
    return CredentialError(message)


class AuthSession:
    """Holds the signed-in user and persists the token across restarts."""

    def __init__(self, client: CredentialClient, store: KeyValueStore) -> None:
        self._client = client
        self._store = store
        self.token: Optional[str] = None
        self.user: Optional[UserRecord] = None
        self.error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token and self.user)

    def restore(self) -> bool:
        token = self._store.get(TOKEN_KEY)
        raw_user = self._store.get(USER_KEY)
        if not token or not raw_user:
            return False
        try:
            self.user = UserRecord.model_validate(json.loads(raw_user))
        except (ValueError, pydantic.ValidationError):
            logger.warning("Failed to parse stored user, discarding it")
            self._store.remove(USER_KEY)
            return False
        self.token = token
        return True

    def register(self, name: str, email: str, password: str) -> bool:
        self.error = None
        try:
            result = self._client.register(name, email, password)
        except CredentialError as exc:
            self.error = str(exc) or "Registration failed"
            return False
        self._sign_in(result)
        return True

    def login(self, email: str, password: str) -> bool:
        self.error = None
        try:
            result = self._client.login(email, password)
        except CredentialError as exc:
            self.error = str(exc) or "Login failed"
            return False
        self._sign_in(result)
        return True

    def logout(self) -> None:
        self._store.remove(TOKEN_KEY)
        self._store.remove(USER_KEY)
        self.token = None
        self.user = None

    def auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {TOKEN_HEADER: self.token}

    def _sign_in(self, result: AuthResult) -> None:
        self.token = result.token
        self.user = result.user
        self._store.set(TOKEN_KEY, result.token)
        self._store.set(USER_KEY, result.user.model_dump_json())


__all__ = [
    "AuthResult",
    "AuthSession",
    "Conflict",
    "CredentialClient",
    "CredentialError",
    "InvalidCredentials",
    "TOKEN_HEADER",
    "UserRecord",
    "ValidationError",
]
