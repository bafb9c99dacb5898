"""
FastAPI Endpoints for URL Shortener Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request validation (Pydantic models)
- Owner resolution (dependencies)
- Error handling and HTTP responses
- Delegating to service layer

Routes:
- POST /shorten: public allocation API (widget and first-party form)
- POST /links, GET /links, DELETE /links/{id}: first-party management
- GET /{short_code}: redirect path, registered last as a catch-all
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.api.deps import get_owner_id, get_policy, get_shorten_owner
from shortener.api.schemas import (
    ErrorResponse,
    LinkListResponse,
    LinkResponse,
    ShortenRequest,
    ShortenResponse,
)
from shortener.core.exceptions import (
    AliasNotFoundError,
    CodeTakenError,
    InvalidCodeError,
    InvalidURLError,
    QuotaExceededError,
    ShortenerException,
    UnauthorizedError,
)
from shortener.core.setting import settings
from shortener.core.validators import sanitize_short_code
from shortener.db.models import AliasRecord
from shortener.db.session import get_session
from shortener.services.allocation_service import AllocationService
from shortener.services.owner_links_service import OwnerLinksService
from shortener.services.policy import AliasPolicy
from shortener.services.redirect_service import RedirectService

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_STATUS = {
    InvalidURLError: status.HTTP_400_BAD_REQUEST,
    InvalidCodeError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    QuotaExceededError: status.HTTP_403_FORBIDDEN,
    AliasNotFoundError: status.HTTP_404_NOT_FOUND,
    CodeTakenError: status.HTTP_409_CONFLICT,
}

ERROR_RESPONSES = {
    code: {"model": ErrorResponse}
    for code in (400, 401, 403, 404, 409, 500)
}


def to_http_exception(error: ShortenerException) -> HTTPException:
    """
    Map a service error to an HTTP error with a short message.

    DatabaseError and anything unmapped become a 500 without internals.
    """
    status_code = ERROR_STATUS.get(type(error))
    if status_code is None:
        logger.error(f"Request failed: {error}", exc_info=error)
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

    if isinstance(error, (InvalidURLError, InvalidCodeError)):
        detail = error.reason
    else:
        detail = str(error)
    return HTTPException(status_code=status_code, detail=detail)


def build_short_url(short_code: str) -> str:
    return f"{settings.BASE_URL.rstrip('/')}/{short_code}"


def to_link_response(record: AliasRecord) -> LinkResponse:
    return LinkResponse(
        id=record.id,
        short_code=record.short_code,
        short_url=build_short_url(record.short_code),
        original_url=record.target_url,
        created_at=record.created_at,
        expires_at=record.expires_at
    )


async def _allocate(
    body: ShortenRequest,
    owner_id: str,
    session: AsyncSession,
    policy: AliasPolicy
) -> AliasRecord:
    allocation_service = AllocationService(session, policy=policy)
    try:
        return await allocation_service.allocate(body.url, body.custom_code, owner_id)
    except ShortenerException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to create short URL: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create shortened URL"
        )


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_200_OK,
    responses=ERROR_RESPONSES,
    summary="Create a short URL",
    description="Takes a long URL (and optionally a custom code) and returns its alias"
)
async def create_short_url(
    body: ShortenRequest,
    owner_id: str = Depends(get_shorten_owner),
    session: AsyncSession = Depends(get_session),
    policy: AliasPolicy = Depends(get_policy)
) -> ShortenResponse:
    """
    Public allocation API, called cross-origin by the embeddable widget.

    Returns:
        ShortenResponse with shortUrl, shortCode, originalUrl and expiresAt
    """
    record = await _allocate(body, owner_id, session, policy)

    return ShortenResponse(
        short_url=build_short_url(record.short_code),
        short_code=record.short_code,
        original_url=record.target_url,
        expires_at=record.expires_at
    )


@router.post(
    "/links",
    response_model=LinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create a link for the calling owner"
)
async def create_link(
    body: ShortenRequest,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
    policy: AliasPolicy = Depends(get_policy)
) -> LinkResponse:
    record = await _allocate(body, owner_id, session, policy)
    return to_link_response(record)


@router.get(
    "/links",
    response_model=LinkListResponse,
    responses=ERROR_RESPONSES,
    summary="List the calling owner's links",
    description="Live links only, newest first, capped at the per-owner quota"
)
async def list_links(
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
    policy: AliasPolicy = Depends(get_policy)
) -> LinkListResponse:
    owner_links = OwnerLinksService(session, policy=policy)
    try:
        links = await owner_links.list_links(owner_id)
    except ShortenerException as e:
        raise to_http_exception(e)

    quota = owner_links.quota_for(links)
    return LinkListResponse(
        links=[to_link_response(link) for link in links],
        count=quota.count,
        limit=quota.limit,
        remaining=quota.remaining,
        has_custom_code=quota.has_custom_code
    )


@router.delete(
    "/links/{link_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
    summary="Delete one of the calling owner's links"
)
async def delete_link(
    link_id: int,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
    policy: AliasPolicy = Depends(get_policy)
) -> Response:
    owner_links = OwnerLinksService(session, policy=policy)
    try:
        await owner_links.delete_link(owner_id, link_id)
    except AliasNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Link {link_id} not found"
        )
    except ShortenerException as e:
        raise to_http_exception(e)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{short_code}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Redirects to the target of a live short code, or to the home page otherwise"
)
async def redirect_to_url(
    short_code: str,
    session: AsyncSession = Depends(get_session)
) -> RedirectResponse:
    """
    Redirect to the original URL for a given short code.

    Never surfaces an error: unknown, expired or malformed codes and
    internal failures all redirect to HOME_URL.
    """
    home = RedirectResponse(url=settings.HOME_URL, status_code=status.HTTP_302_FOUND)

    sanitized_code = sanitize_short_code(short_code)
    if not sanitized_code:
        return home

    redirect_service = RedirectService(session)
    try:
        target = await redirect_service.resolve(sanitized_code)
    except AliasNotFoundError:
        return home
    except Exception as e:
        logger.error(f"Failed to resolve '{sanitized_code}': {str(e)}", exc_info=True)
        return home

    return RedirectResponse(
        url=target.target_url,
        status_code=status.HTTP_302_FOUND
    )
