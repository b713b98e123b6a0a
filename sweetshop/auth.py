import logging
from typing import Tuple

from .core import LoginIn, RegisterIn
from .database import UserStore
from .errors import Forbidden, InvalidCredentials, NotAuthenticated, UserNotFound
from .models import Role, User
from .security import create_access_token, decode_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """Registration, login and token checks on top of a UserStore."""

    def __init__(self, users: UserStore):
        self.users = users

    def register(self, payload: RegisterIn) -> Tuple[User, str]:
        email = payload.email.lower()
        user = self.users.create(
            name=payload.name,
            email=email,
            hashed_password=get_password_hash(payload.password),
        )
        logger.info("user registered id=%s", user.id)
        return user.public(), create_access_token(user.id, user.role.value)

    def login(self, payload: LoginIn) -> Tuple[User, str]:
        user = self.users.get_by_email(payload.email.strip().lower())
        # Same answer for unknown email and wrong password.
        if user is None or not verify_password(payload.password, user.hashed_password):
            raise InvalidCredentials()
        return user.public(), create_access_token(user.id, user.role.value)

    def authenticate(self, token: str) -> User:
        payload = decode_token(token)
        user = self.users.get(payload["id"])
        if user is None:
            raise NotAuthenticated("User not found. Token may be invalid.")
        return user.public()

    def promote(self, email: str) -> User:
        user = self.users.set_role(email.strip().lower(), Role.ADMIN)
        if user is None:
            raise UserNotFound()
        logger.info("user promoted to admin id=%s", user.id)
        return user.public()


def require_admin(user: User) -> User:
    if not user.is_admin:
        raise Forbidden(
            f"User role '{user.role.value}' is not authorized to access this route. Admin access required."
        )
    return user
