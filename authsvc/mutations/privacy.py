"""
Privacy policies for queries and mutations.

A policy is an ordered list of rules evaluated short-circuit:
- ALLOW admits the operation and stops evaluation
- DENY raises PrivacyDenied and stops evaluation
- SKIP moves on to the next rule

When every rule skips, the operation is admitted.

The mutation policy is installed as the outermost hook of an entity's
pipeline, so it sees the mutation before tenant backfill and code generation.
Query rules may narrow the query (e.g. add a tenant filter) before it runs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Sequence

import structlog
from sqlalchemy import Select

from authsvc.core.authz import (
    ADMIN_ROLE,
    CAN_CREATE,
    CAN_DELETE,
    CAN_READ,
    CAN_UPDATE,
    AuthContext,
    BypassStatus,
    check_bypass,
    has_any_role,
    has_permission,
)
from authsvc.core.exceptions import PrivacyDenied
from authsvc.core.metrics import privacy_decisions_total
from authsvc.mutations.mutation import DELETE_OPS, UPDATE_OPS, Hook, Mutation, Mutator, Op

logger = structlog.get_logger(__name__)


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    SKIP = "skip"


@dataclass
class Query:
    """A pending SELECT on one entity that query rules may narrow."""

    entity: str
    model: type
    statement: Select

    def where(self, *clauses: Any) -> None:
        self.statement = self.statement.where(*clauses)


QueryRule = Callable[[AuthContext, Query], Decision]
MutationRule = Callable[[AuthContext, Mutation], Decision]


def _rule_name(rule: Callable) -> str:
    return getattr(rule, "__name__", type(rule).__name__)


def _evaluate(
    entity: str,
    kind: str,
    rules: Sequence[Callable[[AuthContext, Any], Decision]],
    ctx: AuthContext,
    target: Any,
) -> None:
    for rule in rules:
        decision = rule(ctx, target)
        if decision is Decision.SKIP:
            continue

        privacy_decisions_total.labels(
            entity=entity, kind=kind, decision=decision.value
        ).inc()
        if decision is Decision.ALLOW:
            return

        rule_name = _rule_name(rule)
        logger.warning(
            "Privacy rule denied access",
            entity=entity,
            kind=kind,
            rule=rule_name,
            user_id=ctx.user_id,
            tenant_id=ctx.tenant_id,
        )
        raise PrivacyDenied(entity, rule_name, f"{kind} denied by {rule_name}")

    privacy_decisions_total.labels(
        entity=entity, kind=kind, decision=Decision.ALLOW.value
    ).inc()


@dataclass
class QueryPolicy:
    entity: str
    rules: list[QueryRule] = field(default_factory=list)

    def evaluate(self, ctx: AuthContext, query: Query) -> None:
        """Run the rules; raises PrivacyDenied on the first DENY."""
        _evaluate(self.entity, "query", self.rules, ctx, query)


@dataclass
class MutationPolicy:
    entity: str
    rules: list[MutationRule] = field(default_factory=list)

    def evaluate(self, ctx: AuthContext, m: Mutation) -> None:
        """Run the rules; raises PrivacyDenied on the first DENY."""
        _evaluate(self.entity, "mutation", self.rules, ctx, m)

    def hook(self) -> Hook:
        """Wrap the pipeline so the policy is checked before any other hook."""

        def wrapper(next_: Mutator) -> Mutator:
            async def mutate(ctx: AuthContext, m: Mutation) -> Any:
                if m.entity == self.entity:
                    self.evaluate(ctx, m)
                return await next_(ctx, m)

            return mutate

        return wrapper


@dataclass
class Policy:
    query: QueryPolicy | None = None
    mutation: MutationPolicy | None = None


# Rules

def allow_if_bypass(ctx: AuthContext, target: Any) -> Decision:
    """Honor an explicit bypass status on the context."""
    status = check_bypass(ctx)
    if status is BypassStatus.ALLOW:
        return Decision.ALLOW
    if status is BypassStatus.DENY:
        logger.warning("Bypass explicitly denied", rule="bypass", user_id=ctx.user_id)
        return Decision.DENY
    return Decision.SKIP


def has_role_or_permission(resource: str) -> QueryRule:
    """Readers need the admin role or can_read on `resource`."""

    def has_role_or_permission(ctx: AuthContext, query: Query) -> Decision:
        if not ctx.is_authenticated:
            logger.warning("No user in context", entity=query.entity, rule="role_permission")
            return Decision.DENY
        if has_any_role(ctx, [ADMIN_ROLE]) or has_permission(ctx, resource, CAN_READ):
            return Decision.SKIP
        return Decision.DENY

    return has_role_or_permission


def filter_by_tenant(tenant_field: str | None = "tenant_id") -> QueryRule:
    """Restrict results to the context tenant; skipped when tenant_field is None."""

    def filter_by_tenant(ctx: AuthContext, query: Query) -> Decision:
        if tenant_field is None:
            return Decision.SKIP
        if ctx.tenant_id is None:
            logger.error("No tenant ID in context", entity=query.entity, filter="tenant")
            return Decision.DENY
        query.where(getattr(query.model, tenant_field) == ctx.tenant_id)
        logger.debug(
            "Applied tenant filter",
            entity=query.entity,
            filter="tenant",
            tenant_id=ctx.tenant_id,
        )
        return Decision.ALLOW

    return filter_by_tenant


_OP_ACTIONS: tuple[tuple[Op, str], ...] = (
    (Op.CREATE, CAN_CREATE),
    (UPDATE_OPS, CAN_UPDATE),
    (DELETE_OPS, CAN_DELETE),
)


def has_role_or_permission_mutation(resource: str, validate_tenant: bool = False) -> MutationRule:
    """
    Writers need the admin role or the action flag on `resource`.

    With validate_tenant, updates and deletes are denied when the context
    has no tenant or the target row belongs to a different tenant.
    """

    def has_role_or_permission_mutation(ctx: AuthContext, m: Mutation) -> Decision:
        if not ctx.is_authenticated:
            logger.warning("No user in context", entity=m.entity, rule="role_permission_mutation")
            return Decision.DENY

        if validate_tenant and m.op & (UPDATE_OPS | DELETE_OPS):
            if ctx.tenant_id is None:
                logger.error(
                    "No tenant ID in context",
                    entity=m.entity,
                    rule="tenant_validation",
                    operation=m.op.label(),
                )
                return Decision.DENY
            record_tenant_id = m.effective("tenant_id")
            if record_tenant_id is not None and record_tenant_id != ctx.tenant_id:
                logger.warning(
                    "Tenant ID mismatch",
                    entity=m.entity,
                    rule="tenant_validation",
                    operation=m.op.label(),
                    context_tenant_id=ctx.tenant_id,
                    record_tenant_id=record_tenant_id,
                )
                return Decision.DENY

        for ops, action in _OP_ACTIONS:
            if m.op & ops:
                if has_any_role(ctx, [ADMIN_ROLE]) or has_permission(ctx, resource, action):
                    return Decision.ALLOW
                break
        return Decision.DENY

    return has_role_or_permission_mutation


def entity_policy(entity: str, resource: str, tenant_filtered: bool) -> Policy:
    """Standard policy: bypass, role/permission check, tenant isolation."""
    return Policy(
        query=QueryPolicy(entity, [
            allow_if_bypass,
            has_role_or_permission(resource),
            filter_by_tenant("tenant_id" if tenant_filtered else None),
        ]),
        mutation=MutationPolicy(entity, [
            allow_if_bypass,
            has_role_or_permission_mutation(resource, validate_tenant=tenant_filtered),
        ]),
    )


ROLE_POLICY = entity_policy("Role", "roles", tenant_filtered=False)
ROLE_PERMISSION_POLICY = entity_policy("RolePermission", "roles", tenant_filtered=True)
USER_POLICY = entity_policy("User", "users", tenant_filtered=True)
