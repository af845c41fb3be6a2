from __future__ import annotations

import base64
import binascii
import logging
import secrets
from typing import Optional, Tuple

from fastapi import HTTPException, Request, status
from fastapi.security.utils import get_authorization_scheme_param

logger = logging.getLogger("gitconfig_server.auth")

REALM = "SecureConfigServer"


def _matches(given: str, expected: str) -> bool:
    return secrets.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def basic_credentials(request: Request) -> Optional[Tuple[str, str]]:
    """
    (username, password) from a Basic `Authorization` header, or None.

    Credentials are decoded as UTF-8 (invalid bytes replaced) so non-ASCII
    passwords work; a malformed header is treated as no credentials.
    """
    scheme, param = get_authorization_scheme_param(request.headers.get("Authorization"))
    if not param or scheme.lower() != "basic":
        return None
    try:
        decoded = base64.b64decode(param, validate=True).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


async def require_basic_auth(request: Request) -> None:
    """No-op unless AUTH_USERNAME and AUTH_PASSWORD were both configured."""
    auth = request.app.state.gitconfig.auth
    if not auth.required:
        return
    credentials = basic_credentials(request)
    if credentials is not None:
        user_ok = _matches(credentials[0], auth.username)
        pass_ok = _matches(credentials[1], auth.password)
        if user_ok and pass_ok:
            return
    logger.info("Rejected unauthenticated request to %s", request.url.path)
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": f'Basic realm="{REALM}"'},
    )
