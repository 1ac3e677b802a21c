from typing import Optional

from fastapi import APIRouter, Depends, status

from perks.core.database import AsyncDBSession
from perks.core.responses import ApiResponse
from perks.dependencies import get_current_user, get_token_service
from perks.models.users import User
from perks.schemas.auth import (
    AuthPayload,
    LoginRequest,
    ProfilePayload,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
)
from perks.services.token_service import TokenService
from perks.services.user_service import UserService

# Router instance
router = APIRouter()


@router.post("/register", response_model=ApiResponse[AuthPayload], status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: RegisterRequest,
    session: AsyncDBSession,
    token_service: TokenService = Depends(get_token_service),
):
    user_service = UserService(session, token_service)
    payload = await user_service.register_user(user_data)
    return ApiResponse(message="Registration successful", data=payload)


@router.post("/login", response_model=ApiResponse[AuthPayload])
async def login_user(
    login_data: LoginRequest,
    session: AsyncDBSession,
    token_service: TokenService = Depends(get_token_service),
):
    user_service = UserService(session, token_service)
    payload = await user_service.login_user(login_data)
    return ApiResponse(message="Login successful", data=payload)


@router.post("/refresh", response_model=ApiResponse[TokenPair])
async def refresh_tokens(
    session: AsyncDBSession,
    payload: Optional[RefreshRequest] = None,
    token_service: TokenService = Depends(get_token_service),
):
    user_service = UserService(session, token_service)
    tokens = await user_service.refresh_session(payload.refresh_token if payload else None)
    return ApiResponse(message="Token refreshed successfully", data=tokens)


@router.get("/profile", response_model=ApiResponse[ProfilePayload])
async def get_profile(current_user: User = Depends(get_current_user)):
    return ApiResponse(
        message="Profile retrieved successfully",
        data=ProfilePayload(user=UserService.profile(current_user)),
    )


@router.post("/logout", response_model=ApiResponse)
async def logout_user(
    session: AsyncDBSession,
    current_user: User = Depends(get_current_user),
):
    await UserService(session).logout_user(current_user)
    return ApiResponse(message="Logout successful", data=None)
