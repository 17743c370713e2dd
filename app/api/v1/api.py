from fastapi import APIRouter

from app.api.v1.routers import order_hours as order_hours_router
from app.api.v1.routers import magazine as magazine_router
from app.api.v1.routers import admin_auth as admin_auth_router
from app.api.v1.routers import admin_order_hours as admin_order_hours_router
from app.api.v1.routers import admin_expiry as admin_expiry_router

router = APIRouter()

# public routes
router.include_router(order_hours_router.router)
router.include_router(magazine_router.router)

# admin routes
router.include_router(admin_auth_router.router)
router.include_router(admin_order_hours_router.router)
router.include_router(admin_expiry_router.router)
