import uuid
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from worldnotes.core.security import verify_token
from worldnotes.domains.notes.entities import Principal, Role

bearer_scheme = HTTPBearer(auto_error=False)


def role_for_campaign(payload: dict, campaign_id: uuid.UUID) -> Role:
    """Read the caller's role in a campaign from the ``roles`` claim"""
    roles = payload.get("roles") or {}
    name = roles.get(str(campaign_id))
    if not isinstance(name, str):
        return Role.NONE
    return Role.__members__.get(name.upper(), Role.NONE)


async def get_principal(
    campaign_id: uuid.UUID,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    payload = verify_token(credentials.credentials)
    if payload is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    role = role_for_campaign(payload, campaign_id)
    if role == Role.NONE:
        # Non-members get the same answer as a missing campaign
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Campaign not found")

    return Principal(
        user_id=user_id,
        name=payload.get("name") or "Unknown",
        campaign_id=campaign_id,
        role=role,
    )
