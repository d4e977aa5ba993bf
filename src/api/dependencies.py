"""
Request dependencies: identity, converter and file store.

Authentication happens in an external identity provider; the gateway in
front of this service forwards the authenticated username in the
`X-User` header.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from src.common.logging_config import set_username
from src.convert.converter import JsonConverter
from src.storage.adapter import FileStore
from src.storage.factory import get_file_store


@dataclass(frozen=True)
class Identity:
    username: str


def get_current_user(x_user: Optional[str] = Header(None)) -> Optional[Identity]:
    """Identity of the caller, or None when anonymous."""
    if x_user is None or not x_user.strip():
        return None
    identity = Identity(username=x_user.strip())
    set_username(identity.username)
    return identity


def require_user(identity: Optional[Identity] = Depends(get_current_user)) -> Identity:
    """Reject anonymous callers with 401."""
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required: missing X-User header",
        )
    return identity


@lru_cache()
def get_converter() -> JsonConverter:
    return JsonConverter()


def get_store() -> FileStore:
    return get_file_store()
