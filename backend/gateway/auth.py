"""
Admin Gate

HTTP Basic check against the configured admin credentials.
Runs as a route dependency, so a failed check returns 401 before any
pipeline component is touched.
"""

import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .config import GatewayConfig

logger = logging.getLogger(__name__)

basic_auth = HTTPBasic(auto_error=False, realm="admin")


def check_credentials(
    config: GatewayConfig,
    credentials: Optional[HTTPBasicCredentials],
) -> bool:
    """Constant-time comparison; unset admin credentials never match."""
    if credentials is None:
        return False
    if not config.admin_username or not config.admin_password:
        return False

    username_ok = secrets.compare_digest(
        credentials.username.encode("utf-8"), config.admin_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"), config.admin_password.encode("utf-8")
    )
    return username_ok and password_ok


async def require_admin(
    request: Request,
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
) -> str:
    """FastAPI dependency guarding upload and admin routes."""
    config: GatewayConfig = request.app.state.config
    if not check_credentials(config, credentials):
        logger.warning(f"[AdminGate] Rejected {request.method} {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": 'Basic realm="admin"'},
        )
    return credentials.username
