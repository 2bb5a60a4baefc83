"""Request correlation ids.

The id lives in a ContextVar so log records emitted anywhere during a request
carry it. Client-supplied ids are accepted only when they look like opaque
tokens; anything else is replaced by a fresh UUID.
"""

import re
import uuid
from contextvars import ContextVar, Token
from typing import Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def generate_request_id() -> str:
    return str(uuid.uuid4())


def resolve_request_id(header_value: Optional[str]) -> str:
    """Reuse a well-formed X-Request-ID from the client, else generate one."""
    if header_value and _CLIENT_ID_PATTERN.match(header_value):
        return header_value
    return generate_request_id()


def get_request_id() -> str:
    return request_id_var.get() or "no-request-id"


def bind_request_id(request_id: str) -> Token:
    """Bind the id to the current context; pass the token to reset_request_id."""
    return request_id_var.set(request_id)


def reset_request_id(token: Token) -> None:
    request_id_var.reset(token)
