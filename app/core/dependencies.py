"""
FastAPI dependencies.

Database sessions, bearer-token authentication and the configuration-backed
reference tables shared by the routers.
"""
import logging
from dataclasses import dataclass
from typing import AsyncGenerator, Optional
from uuid import UUID

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.database.repositories import OrganizationMemberRepository
from app.database.session_manager.db_session import Database
from app.pydantic_models.reference_tables import EngineSettings, ReferenceTables

logger = logging.getLogger(__name__)

# Missing credentials are reported as 401 by get_current_user, not 403
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    user_id: UUID
    organization_id: Optional[UUID] = None
    email: Optional[str] = None

    def require_organization(self) -> UUID:
        """Active organization carried by the token."""
        if self.organization_id is None:
            raise AuthorizationError("No active organization for this user")
        return self.organization_id


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """One unit of work per request."""
    async with Database() as session:
        yield session


def _parse_uuid(value, claim: str) -> Optional[UUID]:
    if value is None:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        raise AuthenticationError(f"Invalid '{claim}' claim in token") from None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """
    Get the authenticated user from the bearer JWT.

    Raises:
        AuthenticationError: If the header is missing, or the token is invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing authorization header")

    auth_config = request.app.state.config.section("auth")
    try:
        payload = jwt.decode(
            credentials.credentials,
            auth_config["jwt_secret"],
            algorithms=[auth_config.get("jwt_algorithm", "HS256")],
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid token: {e}")
        raise AuthenticationError("Invalid authentication token") from None

    user_id = _parse_uuid(payload.get("sub"), "sub")
    if user_id is None:
        raise AuthenticationError("Invalid token payload")

    user = CurrentUser(
        user_id=user_id,
        organization_id=_parse_uuid(payload.get("organization_id"), "organization_id"),
        email=payload.get("email"),
    )
    logger.debug(f"Authenticated user: {user.user_id}")
    return user


async def ensure_membership(session: AsyncSession, organization_id: UUID, user: CurrentUser):
    """
    Raises:
        AuthorizationError: If the user is not a member of the organization
    """
    if not await OrganizationMemberRepository(session).is_member(organization_id, user.user_id):
        logger.warning(f"User {user.user_id} denied access to organization {organization_id}")
        raise AuthorizationError("User is not a member of this organization")


def get_reference_tables(request: Request) -> ReferenceTables:
    return request.app.state.reference_tables


def get_engine_settings(request: Request) -> EngineSettings:
    return request.app.state.engine_settings
