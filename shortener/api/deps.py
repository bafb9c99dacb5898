"""
Request Dependencies

Resolves who a request acts for and which rules apply to it.

Owner resolution:
- X-API-Key header: verified against stored key digests; owner is api_<key id>
- X-Owner-Id header: opaque client-generated identifier, taken as-is
- neither (public API only): a fresh identifier is minted and returned
  in the X-Owner-Id response header
"""

import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import DatabaseError, UnauthorizedError
from shortener.core.setting import settings
from shortener.core.validators import sanitize_owner_id
from shortener.db.session import get_session
from shortener.services.api_key_service import ApiKeyService
from shortener.services.policy import AliasPolicy

OWNER_HEADER = "X-Owner-Id"

# Reserved for owners derived from API keys
API_OWNER_PREFIX = "api_"


def get_policy() -> AliasPolicy:
    """Alias rules for this request, built from the current settings."""
    return AliasPolicy.from_settings(settings)


def _client_owner_id(raw_owner_id: Optional[str]) -> Optional[str]:
    owner_id = sanitize_owner_id(raw_owner_id)
    if owner_id is None or owner_id.startswith(API_OWNER_PREFIX):
        return None
    return owner_id


async def get_owner_id(
    x_owner_id: Optional[str] = Header(None, alias=OWNER_HEADER)
) -> str:
    """
    Owner of a first-party management request.

    Raises:
        HTTPException 400: If the X-Owner-Id header is missing or malformed
    """
    owner_id = _client_owner_id(x_owner_id)
    if owner_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing or invalid {OWNER_HEADER} header"
        )
    return owner_id


async def get_shorten_owner(
    response: Response,
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    x_owner_id: Optional[str] = Header(None, alias=OWNER_HEADER),
    session: AsyncSession = Depends(get_session)
) -> str:
    """
    Owner of a public POST /shorten request.

    A presented API key is always verified, even when keys are optional.

    Raises:
        HTTPException 401: If the key is invalid, or missing while REQUIRE_API_KEY is set
        HTTPException 400: If X-Owner-Id is present but malformed
    """
    if x_api_key or settings.REQUIRE_API_KEY:
        api_key_service = ApiKeyService(session)
        try:
            api_key = await api_key_service.verify(x_api_key)
        except UnauthorizedError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(e)
            )
        except DatabaseError:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal server error"
            )
        return api_key_service.owner_id_for(api_key)

    if x_owner_id is not None:
        owner_id = _client_owner_id(x_owner_id)
        if owner_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid {OWNER_HEADER} header"
            )
        return owner_id

    owner_id = str(uuid.uuid4())
    response.headers[OWNER_HEADER] = owner_id
    return owner_id
