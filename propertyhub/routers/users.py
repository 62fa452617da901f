"""
User endpoints: sign-up, login, password reset and back-office user management.
"""

from fastapi import APIRouter, Depends, status
from typing import Optional, Dict, Any

from propertyhub.config import settings
from propertyhub.models.user import User
from propertyhub.schemas.common import AdminListParams, AdminPagination
from propertyhub.schemas.user import (
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    RoleUpdate,
    UserCreate,
    UserUpdate
)
from propertyhub.services.auth import AuthService
from propertyhub.utils.dependencies import (
    admin_list_params,
    get_auth_service,
    get_current_active_user,
    get_current_admin_user,
    get_optional_current_user
)
from propertyhub.utils.rate_limit import RateLimit


router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "/login",
    summary="User login",
    description="Authenticate with email and password and receive a JWT",
    dependencies=[Depends(RateLimit("login", 5, message="Too many login attempts. Please try again later."))]
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """
    Raises:
        InvalidCredentialsError: If the account is unknown, inactive or the password is wrong
        RateLimitExceededError: After five attempts in the window
    """
    user = await auth_service.login(login_data.email, login_data.password)
    return {"success": True, "message": "Login successful", "user": user}


@router.post("/forgot-password", summary="Request a password reset")
async def forgot_password(
    request_data: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """
    Always answers success so the response does not reveal whether the account exists.
    """
    reset = await auth_service.forgot_password(request_data.email)

    response: Dict[str, Any] = {
        "success": True,
        "message": "If an account with that email exists, a password reset link has been sent.",
    }
    if reset and settings.is_development:
        response.update(reset)
    return response


@router.post("/reset-password/{token}", summary="Reset password with a token")
async def reset_password(
    token: str,
    request_data: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    await auth_service.reset_password(token, request_data.password)
    return {"success": True, "message": "Password has been reset successfully"}


@router.get("/me", summary="Current user profile")
async def get_me(
    current_user: User = Depends(get_current_active_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    return {"success": True, "data": auth_service.present(current_user)}


@router.get("", summary="List users")
async def list_users(
    role: Optional[str] = None,
    params: AdminListParams = Depends(admin_list_params),
    current_user: User = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    data, total = await auth_service.list_users(params, role=role)
    return {
        "success": True,
        "data": data,
        "pagination": AdminPagination.build(params.page, params.limit, total),
    }


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create user")
async def create_user(
    user_data: UserCreate,
    current_user: Optional[User] = Depends(get_optional_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """
    Sign-up. Agent and admin accounts require an admin token.

    Raises:
        InsufficientPermissionsError: If a non-admin asks for an elevated role
        DuplicateResourceError: If the email is registered
        ValidationError: If the password is too short
    """
    created = await auth_service.create_user(user_data, current_user)
    response: Dict[str, Any] = {
        "success": True,
        "message": "User created successfully",
        "data": created["user"],
    }
    if "token" in created:
        response["token"] = created["token"]
    return response


@router.get("/{user_id}", summary="User detail")
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    return {"success": True, "data": auth_service.present(await auth_service.get_user(user_id))}


@router.put("/{user_id}", summary="Update user")
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    current_user: User = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    user = await auth_service.update_user(user_id, user_data)
    return {"success": True, "data": user, "message": "User updated successfully"}


@router.patch("/{user_id}/role", summary="Change user role")
async def update_user_role(
    user_id: int,
    role_data: RoleUpdate,
    current_user: User = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    user = await auth_service.update_role(user_id, role_data.role)
    return {"success": True, "data": user, "message": f"User role updated to {role_data.role.value}"}


@router.delete("/{user_id}", summary="Delete user")
async def delete_user(
    user_id: int,
    current_user: User = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """
    Raises:
        RelatedRecordsError: If properties, posts or inquiries still reference the user
    """
    await auth_service.delete_user(user_id)
    return {"success": True, "message": "User deleted successfully"}
