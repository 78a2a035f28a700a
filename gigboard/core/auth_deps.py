from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from gigboard.core.security import read_token
from gigboard.policies.ownership import Principal

bearer = HTTPBearer(auto_error=True)
optional_bearer = HTTPBearer(auto_error=False)


def get_current_principal(
    request: Request,
    creds: HTTPAuthorizationCredentials = Depends(bearer),
) -> Principal:
    """
    Canonical authentication dependency.

    The identity in a valid token is trusted as given; services only use it
    for ownership checks.
    """
    principal = read_token(creds.credentials)
    if principal is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token.")

    # Make principal available to downstream middleware / handlers
    request.state.principal = principal
    return principal


def get_optional_principal(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer),
) -> Optional[Principal]:
    """Public routes: a bad or missing token just means anonymous."""
    if creds is None:
        return None
    principal = read_token(creds.credentials)
    if principal is not None:
        request.state.principal = principal
    return principal
