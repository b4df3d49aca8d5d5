"""
API v1 router aggregator.

All v1 routes are registered here.
"""

from fastapi import APIRouter

from authsvc.features.auth.router import router as auth_router
from authsvc.features.brands.router import router as brands_router
from authsvc.features.internal.router import router as internal_router
from authsvc.features.permissions.router import router as permissions_router
from authsvc.features.role_permissions.router import router as role_permissions_router
from authsvc.features.roles.router import router as roles_router
from authsvc.features.tenants.router import router as tenants_router
from authsvc.features.users.router import router as users_router

# V1 API router
v1_router = APIRouter(prefix="/v1")

v1_router.include_router(auth_router)
v1_router.include_router(tenants_router)
v1_router.include_router(users_router)
v1_router.include_router(roles_router)
v1_router.include_router(permissions_router)
v1_router.include_router(role_permissions_router)
v1_router.include_router(brands_router)
v1_router.include_router(internal_router)
