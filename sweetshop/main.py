# sweetshop/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth import AuthService
from .config import CORS_ORIGINS, STORE_BACKEND
from .core import LoginIn, PurchaseIn, RegisterIn, SweetIn, SweetUpdate
from .database import InventoryStore, UserStore, build_stores
from .deps import (
    get_admin_user, get_auth_service, get_catalog_service,
    get_current_user, get_inventory_service,
)
from .errors import SweetShopError
from .logging_config import setup_logging
from .models import Category, User
from .services import CatalogService, InventoryDecrementService

logger = logging.getLogger(__name__)


# ---------------------------
# Auth endpoints
# ---------------------------
auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


@auth_router.post("/register", status_code=201)
def register(payload: RegisterIn, auth: AuthService = Depends(get_auth_service)):
    user, token = auth.register(payload)
    return {"success": True, "message": "User registered successfully", "token": token, "user": user}


@auth_router.post("/login")
def login(payload: LoginIn, auth: AuthService = Depends(get_auth_service)):
    user, token = auth.login(payload)
    return {"success": True, "message": "Login successful", "token": token, "user": user}


@auth_router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": current_user}


# ---------------------------
# Sweets endpoints
# ---------------------------
sweets_router = APIRouter(prefix="/api/sweets", tags=["sweets"])


@sweets_router.get("")
def list_sweets(
    category: Optional[Category] = None,
    in_stock: Optional[bool] = Query(None, alias="inStock"),
    catalog: CatalogService = Depends(get_catalog_service),
):
    sweets = catalog.list_sweets(category=category, in_stock=in_stock)
    return {"success": True, "count": len(sweets), "data": sweets}


@sweets_router.get("/search")
def search_sweets(name: str = Query(..., min_length=1), catalog: CatalogService = Depends(get_catalog_service)):
    sweets = catalog.search_sweets(name)
    return {"success": True, "count": len(sweets), "data": sweets}


@sweets_router.get("/{sweet_id}")
def get_sweet(sweet_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    return {"success": True, "data": catalog.get_sweet(sweet_id)}


@sweets_router.post("", status_code=201)
def create_sweet(
    payload: SweetIn,
    _: User = Depends(get_admin_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    sweet = catalog.create_sweet(payload)
    return {"success": True, "message": "Sweet created successfully", "data": sweet}


@sweets_router.put("/{sweet_id}")
def update_sweet(
    sweet_id: str,
    payload: SweetUpdate,
    _: User = Depends(get_admin_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    sweet = catalog.update_sweet(sweet_id, payload)
    return {"success": True, "message": "Sweet updated successfully", "data": sweet}


@sweets_router.delete("/{sweet_id}")
def delete_sweet(
    sweet_id: str,
    _: User = Depends(get_admin_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    catalog.delete_sweet(sweet_id)
    return {"success": True, "message": "Sweet deleted successfully", "data": {}}


# Public on purpose: anyone may buy.
@sweets_router.post("/{sweet_id}/purchase")
def purchase_sweet(
    sweet_id: str,
    payload: Optional[PurchaseIn] = None,
    inventory: InventoryDecrementService = Depends(get_inventory_service),
):
    amount = payload.quantity if payload is not None else None
    sweet = inventory.purchase(sweet_id, amount)
    return {"success": True, "message": "Purchase successful", "data": sweet}


# ---------------------------
# Error rendering
# ---------------------------
async def sweetshop_error_handler(request: Request, exc: SweetShopError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        field = err["loc"][-1] if err.get("loc") else "body"
        messages.append(f"{field}: {err['msg']}")
    return JSONResponse(status_code=400, content={"success": False, "message": ", ".join(messages)})


# ---------------------------
# App factory
# ---------------------------
def create_app(
    inventory_store: Optional[InventoryStore] = None,
    user_store: Optional[UserStore] = None,
) -> FastAPI:
    """Build the API around the given stores, or the configured backend's.

    Pass both stores or neither.
    """
    client = None
    backend = "custom"
    if (inventory_store is None) != (user_store is None):
        raise ValueError("create_app needs both inventory_store and user_store, or neither")
    if inventory_store is None:
        inventory_store, user_store, client = build_stores()
        backend = STORE_BACKEND

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("sweetshop starting (store=%s)", backend)
        yield
        if client is not None:
            client.close()
        logger.info("sweetshop stopped")

    app = FastAPI(title="Sweet Shop API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.inventory_service = InventoryDecrementService(inventory_store)
    app.state.catalog_service = CatalogService(inventory_store)
    app.state.auth_service = AuthService(user_store)

    app.add_exception_handler(SweetShopError, sweetshop_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(auth_router)
    app.include_router(sweets_router)

    @app.get("/health")
    def health():
        return {"status": "ok", "store": backend}

    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    uvicorn.run("sweetshop.main:app", host="0.0.0.0", port=8085, reload=True)
