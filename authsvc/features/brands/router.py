"""
Brand endpoints.

Brands have no privacy policy; every route scopes them to the caller's
tenant. The code is derived from the name on create and kept on rename.
"""

from fastapi import APIRouter, Query, status

from authsvc.core.authz import AuthContext
from authsvc.core.exceptions import not_found
from authsvc.features.auth.dependencies import CurrentContext, DbClients
from authsvc.models.brand import Brand
from authsvc.mutations.client import Clients
from authsvc.schemas.brand import BrandCreate, BrandRead, BrandUpdate
from authsvc.schemas.common import PaginatedResponse

router = APIRouter(prefix="/brands", tags=["Brands"])


async def _get_own_brand(db_clients: Clients, ctx: AuthContext, brand_id: int) -> Brand:
    brand = await db_clients.brand.get(ctx, brand_id)
    if brand.tenant_id != ctx.tenant_id:
        raise not_found("Brand not found")
    return brand


@router.get("/", response_model=PaginatedResponse[BrandRead])
async def list_brands(
    ctx: CurrentContext,
    db_clients: DbClients,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
) -> PaginatedResponse[BrandRead]:
    own = Brand.tenant_id == ctx.tenant_id
    brands = await db_clients.brand.list(ctx, own, skip=skip, limit=limit)
    total = await db_clients.brand.count(ctx, own)
    return PaginatedResponse[BrandRead](
        items=[BrandRead.model_validate(b) for b in brands],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("/", response_model=BrandRead, status_code=status.HTTP_201_CREATED)
async def create_brand(
    payload: BrandCreate,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> Brand:
    """Create a brand; a second brand with the same code in the tenant returns 409."""
    return await db_clients.brand.create(ctx, **payload.model_dump())


@router.get("/{brand_id}", response_model=BrandRead)
async def get_brand(
    brand_id: int,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> Brand:
    return await _get_own_brand(db_clients, ctx, brand_id)


@router.patch("/{brand_id}", response_model=BrandRead)
async def update_brand(
    brand_id: int,
    payload: BrandUpdate,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> Brand:
    await _get_own_brand(db_clients, ctx, brand_id)
    return await db_clients.brand.update_one(
        ctx, brand_id, **payload.model_dump(exclude_unset=True)
    )


@router.delete("/{brand_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_brand(
    brand_id: int,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> None:
    await _get_own_brand(db_clients, ctx, brand_id)
    await db_clients.brand.delete_one(ctx, brand_id)
