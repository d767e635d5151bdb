"""
Auth Routes - registration, login and the caller's own profile.
"""
from fastapi import APIRouter, Depends
from auth import get_current_user
from models import ApiResponse, RegisterRequest, LoginRequest, SocialLoginRequest
from models_orm import UserORM
from service_modules.auth_service import AuthService, get_auth_service

router = APIRouter()


@router.post("/api/auth/register", response_model=ApiResponse)
async def register(
    payload: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new member account."""
    user = service.register(payload.email, payload.password, payload.name, payload.photo_url)
    return ApiResponse(message="User registered successfully", data=user)


@router.post("/api/auth/login", response_model=ApiResponse)
async def login(
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    return ApiResponse(message="Login successful", data=service.login(payload.email, payload.password))


@router.post("/api/auth/social", response_model=ApiResponse)
async def social_login(
    payload: SocialLoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Log in with an identity already verified by a social provider."""
    token = service.social_login(payload.email, payload.name, payload.photo_url, payload.provider)
    return ApiResponse(message="Login successful", data=token)


@router.get("/api/users/me", response_model=ApiResponse)
async def get_me(
    user: UserORM = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    return ApiResponse(message="Profile loaded", data=service.get_profile(user.email))
