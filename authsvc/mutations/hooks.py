"""
Mutation hooks for tenant backfill and code generation.

One factory, entity_hooks(), builds the create/update/delete hooks for an
entity from its EntityCapabilities. The create hook:

1. Fills tenant_id from AuthContext.tenant_id when the mutation leaves it
   unset; raises MissingTenantContext when the context has none.
2. For code-bearing entities with a name, sets
   code = generate_code(tenant_id, name). Entities with require_name=True
   raise MissingNameForCodeGeneration when the name is absent.
3. Delegates to the next stage and returns its result unchanged.

Update and delete hooks forward unchanged; code is never regenerated.
"""

from dataclasses import dataclass
from typing import Any

import structlog

from authsvc.core.authz import AuthContext
from authsvc.core.exceptions import (
    MissingNameForCodeGeneration,
    MissingTenantContext,
    MissingTenantForCodeGeneration,
)
from authsvc.models.mixins import generate_code
from authsvc.mutations.mutation import Hook, Mutation, Mutator, Op, on

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class EntityCapabilities:
    """Field accessors the generic hooks need for one entity."""

    entity: str
    tenant_field: str = "tenant_id"
    name_field: str | None = "name"
    code_field: str | None = None
    require_name: bool = False

    @property
    def code_bearing(self) -> bool:
        return self.code_field is not None

    def has_tenant_id(self, m: Mutation) -> bool:
        return m.has(self.tenant_field)

    def get_tenant_id(self, m: Mutation) -> int | None:
        return m.get(self.tenant_field)

    def set_tenant_id(self, m: Mutation, tenant_id: int) -> None:
        m.set(self.tenant_field, tenant_id)

    def get_name(self, m: Mutation) -> str | None:
        if self.name_field is None:
            return None
        return m.get(self.name_field)

    def set_code(self, m: Mutation, code: str) -> None:
        m.set(self.code_field, code)


def _create_hook(caps: EntityCapabilities) -> Hook:
    def hook(next_: Mutator) -> Mutator:
        async def mutate(ctx: AuthContext, m: Mutation) -> Any:
            if m.entity != caps.entity:
                return await next_(ctx, m)

            if not caps.has_tenant_id(m):
                if ctx.tenant_id is None:
                    logger.error(
                        "Failed to get tenant ID from context",
                        entity=caps.entity,
                        operation="create",
                    )
                    raise MissingTenantContext(caps.entity)
                caps.set_tenant_id(m, ctx.tenant_id)

            if caps.code_bearing:
                name = caps.get_name(m)
                if name is not None:
                    tenant_id = caps.get_tenant_id(m)
                    if tenant_id is None:
                        logger.error(
                            "Tenant ID is required for code generation",
                            entity=caps.entity,
                            operation="create",
                        )
                        raise MissingTenantForCodeGeneration(caps.entity)
                    caps.set_code(m, generate_code(tenant_id, name))
                elif caps.require_name:
                    logger.error(
                        "Name is required for code generation",
                        entity=caps.entity,
                        operation="create",
                    )
                    raise MissingNameForCodeGeneration(caps.entity)

            return await next_(ctx, m)

        return mutate

    return hook


def _passthrough_hook(caps: EntityCapabilities, operation: str) -> Hook:
    def hook(next_: Mutator) -> Mutator:
        async def mutate(ctx: AuthContext, m: Mutation) -> Any:
            if m.entity == caps.entity:
                logger.debug(
                    "Forwarding mutation",
                    entity=caps.entity,
                    operation=operation,
                    mutation_id=m.id,
                )
            return await next_(ctx, m)

        return mutate

    return hook


def entity_hooks(caps: EntityCapabilities) -> list[Hook]:
    """Build the create, update, update_one, delete and delete_one hooks for an entity."""
    return [
        on(_create_hook(caps), Op.CREATE),
        on(_passthrough_hook(caps, "update"), Op.UPDATE),
        on(_passthrough_hook(caps, "update_one"), Op.UPDATE_ONE),
        on(_passthrough_hook(caps, "delete"), Op.DELETE),
        on(_passthrough_hook(caps, "delete_one"), Op.DELETE_ONE),
    ]


def audit_hook(next_: Mutator) -> Mutator:
    """Stamp created_by / owned_by with the acting user on create."""

    async def mutate(ctx: AuthContext, m: Mutation) -> Any:
        if m.op is Op.CREATE and ctx.user_id is not None:
            for field in ("created_by", "owned_by"):
                if m.get(field) is None:
                    m.set(field, ctx.user_id)
        return await next_(ctx, m)

    return mutate


BRAND = EntityCapabilities("Brand", code_field="code", require_name=True)
ROLE = EntityCapabilities("Role", code_field="code")
ROLE_PERMISSION = EntityCapabilities("RolePermission", name_field=None)
USER = EntityCapabilities("User", name_field=None)

BRAND_HOOKS = entity_hooks(BRAND)
ROLE_HOOKS = entity_hooks(ROLE)
ROLE_PERMISSION_HOOKS = entity_hooks(ROLE_PERMISSION)
USER_HOOKS = entity_hooks(USER)
