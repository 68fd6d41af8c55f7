from __future__ import annotations

import structlog
from fastapi import HTTPException, Request

from app.core.config import get_settings
from app.services.internal_auth import (
    ACTING_USER_HEADER,
    extract_client_ip,
    is_client_ip_allowed,
    is_internal_request_authenticated,
    parse_acting_user_id,
)

logger = structlog.get_logger(__name__)


def assert_internal_access(request: Request) -> None:
    settings = get_settings()
    client_ip = extract_client_ip(
        request,
        trusted_proxies=settings.internal_api_trusted_proxies,
    )

    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("internal_auth_failed", reason="ip_not_allowed", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})

    if not is_internal_request_authenticated(
        request,
        expected_token=settings.internal_api_token,
    ):
        logger.warning("internal_auth_failed", reason="invalid_credentials", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})


def require_acting_user_id(request: Request) -> int:
    user_id = parse_acting_user_id(request.headers.get(ACTING_USER_HEADER))
    if user_id is None:
        raise HTTPException(status_code=401, detail={"code": "E_ACTING_USER_REQUIRED"})
    return user_id
