"""
marketplace/api/auth.py

Purpose: Authentication endpoints

- Register / login / logout
- Refresh token rotation
- Profile and password updates, password reset
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from marketplace.api.common import clear_auth_cookies, ok, presented_refresh_token, token_response
from marketplace.core.dependencies import get_current_user
from marketplace.core.rate_limit import limit_auth_attempts
from marketplace.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdatePasswordRequest,
    UpdateProfileRequest,
)
from marketplace.services import auth_service, user_service
from marketplace.utils.serialization import public_document

router = APIRouter()


@router.post("/register", status_code=201, dependencies=[Depends(limit_auth_attempts)])
async def register(body: RegisterRequest):
    user, access_token, refresh_token = await auth_service.register_user(
        body.name, body.email, body.password, body.role
    )
    return token_response(user, access_token, refresh_token, status_code=201)


@router.post("/login", dependencies=[Depends(limit_auth_attempts)])
async def login(body: LoginRequest):
    user, access_token, refresh_token = await auth_service.login_user(body.email, body.password)
    return token_response(user, access_token, refresh_token)


@router.post("/refresh", dependencies=[Depends(limit_auth_attempts)])
async def refresh(request: Request, body: Optional[RefreshRequest] = None):
    """
    Exchanges a refresh token (body `refreshToken` or cookie) for a new pair.
    The presented token is consumed.
    """
    token = presented_refresh_token(body.refresh_token if body else None, request.cookies)
    _, access_token, refresh_token = await auth_service.refresh_session(token)
    return {"success": True, "accessToken": access_token, "refreshToken": refresh_token}


@router.post("/logout")
async def logout(request: Request, body: Optional[RefreshRequest] = None, user: dict = Depends(get_current_user)):
    token = presented_refresh_token(body.refresh_token if body else None, request.cookies)
    await auth_service.logout_user(user, token)
    response = JSONResponse(content={"success": True, "message": "Logged out successfully"})
    clear_auth_cookies(response)
    return response


@router.get("/me")
async def me(user: dict = Depends(get_current_user)):
    return {"success": True, "data": public_document(await auth_service.get_me(user))}


@router.put("/update-profile")
async def update_profile(body: UpdateProfileRequest, user: dict = Depends(get_current_user)):
    updated = await user_service.update_profile(user, body.model_dump(exclude_unset=True))
    return {"success": True, "data": public_document(updated)}


@router.put("/update-password")
async def update_password(body: UpdatePasswordRequest, user: dict = Depends(get_current_user)):
    fresh, access_token, refresh_token = await auth_service.update_password(
        user, body.current_password, body.new_password
    )
    return token_response(fresh, access_token, refresh_token)


@router.post("/forgot-password", dependencies=[Depends(limit_auth_attempts)])
async def forgot_password(body: ForgotPasswordRequest):
    # No mail delivery: the raw token goes back to the caller
    reset_token = await auth_service.forgot_password(body.email)
    return ok(message="Password reset token generated", resetToken=reset_token)


@router.put("/reset-password/{token}")
async def reset_password(token: str, body: ResetPasswordRequest):
    user, access_token, refresh_token = await auth_service.reset_password(token, body.password)
    return token_response(user, access_token, refresh_token)
