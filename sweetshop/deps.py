from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .auth import AuthService, require_admin
from .errors import NotAuthenticated
from .models import User
from .services import CatalogService, InventoryDecrementService

# auto_error=False so a missing header goes through our own 401 body.
bearer = HTTPBearer(auto_error=False)


def get_inventory_service(request: Request) -> InventoryDecrementService:
    return request.app.state.inventory_service


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    if credentials is None or not credentials.credentials:
        raise NotAuthenticated()
    return auth.authenticate(credentials.credentials)


def get_admin_user(current_user: User = Depends(get_current_user)) -> User:
    return require_admin(current_user)
