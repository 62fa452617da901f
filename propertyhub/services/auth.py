"""
Authentication service for sign-up, login, password resets and user administration.
Handles JWT verification for the request dependencies and role checks for user creation.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from jose import ExpiredSignatureError, JWTError
from propertyhub.config import settings
from propertyhub.repositories.user import UserRepository
from propertyhub.models.user import User, UserRole
from propertyhub.schemas.common import AdminListParams
from propertyhub.schemas.user import LoginUser, UserCreate, UserResponse, UserUpdate, split_name
from propertyhub.utils.auth import create_access_token, generate_reset_token, hash_password, verify_token
from propertyhub.utils.exceptions import (
    BadRequestError,
    DuplicateResourceError,
    InactiveUserError,
    InsufficientPermissionsError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    RelatedRecordsError,
    TokenExpiredError,
    ValidationError,
)
import logging

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "email", "phone")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without a zone
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class AuthService:
    """
    Authentication service for managing users, credentials and tokens.
    """

    def __init__(self, db_session: AsyncSession, session_factory: Optional[async_sessionmaker] = None):
        self.db = db_session
        self.user_repo = UserRepository(db_session, session_factory)

    def create_token(self, user: User) -> str:
        return create_access_token(user_id=user.id, email=user.email, role=user.role)

    def login_payload(self, user: User) -> Dict[str, Any]:
        """User block returned by login and sign-up, token included."""
        first_name, last_name = split_name(user.name)
        return LoginUser(
            id=user.id,
            first_name=first_name,
            last_name=last_name,
            email=user.email,
            role=user.role.value,
            phone=user.phone,
            token=self.create_token(user),
        ).to_response()

    async def create_user(self, user_data: UserCreate, current_user: Optional[User] = None) -> Dict[str, Any]:
        """
        Register a user.

        Agent and admin accounts can only be created by an admin. Plain users get a
        login token in the response.

        Args:
            user_data: Validated sign-up data
            current_user: Caller, when a bearer token was sent

        Returns:
            Dictionary with `user` and, for plain users, `token`

        Raises:
            InsufficientPermissionsError: If a non-admin asks for an elevated role
            DuplicateResourceError: If the email is registered
            ValidationError: If the password is too short
        """
        if user_data.role != UserRole.USER and not (current_user and current_user.is_admin):
            raise InsufficientPermissionsError(f"create {user_data.role.value} accounts")

        if await self.user_repo.get_by_email(user_data.email):
            raise DuplicateResourceError("User", "email")

        hashed = self._hash(user_data.password)
        user = await self.user_repo.create({
            "name": user_data.name,
            "email": user_data.email,
            "hashed_password": hashed,
            "role": user_data.role,
            "phone": user_data.phone,
            "is_active": True,
        })

        logger.info(f"User created: {user.email} (ID: {user.id})", extra={"role": user.role.value})
        result: Dict[str, Any] = {"user": self.present(user)}
        if user.role == UserRole.USER:
            result["token"] = self.create_token(user)
        return result

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Authenticate with email and password.

        Unknown, inactive and wrong-password accounts answer the same way.

        Raises:
            InvalidCredentialsError: If the credentials are not accepted
        """
        user = await self.user_repo.get_by_email(email)
        if not user or not user.is_active or not user.verify_password(password):
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        user = await self.user_repo.update(user.id, {"last_login": datetime.now(timezone.utc)})
        logger.info(f"User authenticated successfully: {user.email}")
        return self.login_payload(user)

    async def forgot_password(self, email: str) -> Optional[Dict[str, str]]:
        """
        Issue a password reset token.

        Returns:
            `resetToken` and `resetLink` when the account exists, None otherwise
        """
        user = await self.user_repo.get_by_email(email)
        if not user:
            logger.info(f"Password reset requested for unknown email: {email}")
            return None

        token = generate_reset_token()
        expiry = datetime.now(timezone.utc) + timedelta(minutes=settings.password_reset_expire_minutes)
        await self.user_repo.update(user.id, {"reset_token": token, "reset_token_expiry": expiry})

        reset_link = f"{settings.frontend_url.rstrip('/')}/reset-password/{token}"
        logger.info(f"Password reset link for {user.email}: {reset_link}")
        return {"resetToken": token, "resetLink": reset_link}

    async def reset_password(self, token: str, password: str) -> None:
        """
        Raises:
            BadRequestError: If the token is unknown or expired
            ValidationError: If the password is too short
        """
        user = await self.user_repo.get_by_reset_token(token)
        if (
            not user
            or not user.reset_token_expiry
            or _as_utc(user.reset_token_expiry) <= datetime.now(timezone.utc)
        ):
            raise BadRequestError("Invalid or expired reset token")

        await self.user_repo.update(user.id, {
            "hashed_password": self._hash(password),
            "reset_token": None,
            "reset_token_expiry": None,
        })
        logger.info(f"Password reset for user {user.id}")

    async def get_current_user(self, token: str) -> User:
        """
        Resolve the user behind an access token.

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token is invalid or its user is gone
            InactiveUserError: If the account is inactive
        """
        try:
            payload = verify_token(token)
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            raise InvalidTokenError(str(e))

        user = await self.user_repo.get_by_id(payload.user_id)
        if not user:
            raise InvalidTokenError("User no longer exists")
        if not user.is_active:
            raise InactiveUserError()
        return user

    def present(self, user: User) -> Dict[str, Any]:
        return UserResponse.model_validate(user.to_dict()).to_response()

    async def list_users(
        self,
        params: AdminListParams,
        role: Optional[str] = None
    ) -> Tuple[List[Dict[str, Any]], int]:
        users, total = await self.user_repo.admin_page(
            params.page,
            params.limit,
            search=params.search,
            search_fields=SEARCH_FIELDS,
            filters={"role": self._role_filter(role)},
        )
        return [self.present(user) for user in users], total

    async def get_user(self, user_id: int) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def update_user(self, user_id: int, user_data: UserUpdate) -> Dict[str, Any]:
        """
        Partially update a profile. A new password is re-hashed.

        Raises:
            NotFoundError: If user doesn't exist
            BadRequestError: If nothing was submitted
            DuplicateResourceError: If the new email belongs to another account
        """
        user = await self.get_user(user_id)

        update_data = user_data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            raise BadRequestError("No valid fields to update")

        if "email" in update_data and update_data["email"] != user.email:
            if await self.user_repo.get_by_email(update_data["email"]):
                raise DuplicateResourceError("User", "email")
        if "password" in update_data:
            update_data["hashed_password"] = self._hash(update_data.pop("password"))

        user = await self.user_repo.update(user_id, update_data)
        logger.info(f"User updated: {user_id}", extra={"fields": sorted(update_data)})
        return self.present(user)

    async def update_role(self, user_id: int, role: UserRole) -> Dict[str, Any]:
        await self.get_user(user_id)
        user = await self.user_repo.update(user_id, {"role": role})
        logger.info(f"User role updated: {user_id} -> {role.value}")
        return self.present(user)

    async def delete_user(self, user_id: int) -> None:
        """
        Raises:
            NotFoundError: If user doesn't exist
            RelatedRecordsError: If properties, posts or inquiries still reference the user
        """
        await self.get_user(user_id)

        references = await self.user_repo.count_references(user_id)
        if references:
            raise RelatedRecordsError("User", ", ".join(sorted(references)))

        await self.user_repo.delete(user_id)
        logger.info(f"User deleted: {user_id}")

    @staticmethod
    def _hash(password: str) -> str:
        try:
            return hash_password(password)
        except ValueError as e:
            raise ValidationError(str(e))

    @staticmethod
    def _role_filter(role: Optional[str]) -> Optional[UserRole]:
        if not role:
            return None
        try:
            return UserRole(role.strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid role '{role}'. Must be one of: user, agent, admin")
