"""Authentication API endpoints.

Provides registration, login and current-user lookup.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from catalog_api.api.dependencies import CurrentIdentity, get_credential_service
from catalog_api.api.schemas import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    UserSchema,
)
from catalog_api.auth.service import AuthResult, CredentialService

router = APIRouter(prefix="/api/auth", tags=["Auth"])

Credentials = Annotated[CredentialService, Depends(get_credential_service)]


def auth_to_response(result: AuthResult) -> AuthResponse:
    """Convert AuthResult to response schema."""
    return AuthResponse(user=UserSchema.from_entity(result.user), token=result.token)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Register",
    description="Create a user account and return a bearer token.",
)
async def register(body: RegisterRequest, service: Credentials) -> AuthResponse:
    """Register a new user with the default role."""
    result = await service.register(body.email, body.password, body.name)
    return auth_to_response(result)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Log in",
    description="Exchange email and password for a bearer token.",
)
async def login(body: LoginRequest, service: Credentials) -> AuthResponse:
    """Log a user in."""
    result = await service.login(body.email, body.password)
    return auth_to_response(result)


@router.get(
    "/me",
    response_model=UserSchema,
    responses={401: {"model": ErrorResponse}},
    summary="Current user",
)
async def me(identity: CurrentIdentity, service: Credentials) -> UserSchema:
    """Get the authenticated user."""
    user = await service.get_user(identity.id)
    return UserSchema.from_entity(user)
