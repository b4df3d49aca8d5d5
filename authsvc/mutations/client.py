"""
Entity clients: the write pipeline and policy-checked reads for each model.

    db_clients = clients(db)
    brand = await db_clients.brand.create(ctx, name="My Brand")
    roles = await db_clients.role.list(ctx, Role.is_active.is_(True))

Every write builds a Mutation and runs it through
privacy policy -> audit hook -> entity hooks -> persistence.
"""

import time
from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from authsvc.core.authz import AuthContext
from authsvc.core.exceptions import (
    AuthorizationError,
    AuthServiceException,
    ConflictError,
    ImmutableFieldError,
    ResourceNotFoundError,
    ValidationError,
)
from authsvc.core.metrics import mutation_duration_seconds, mutations_total
from authsvc.models import Brand, Permission, Role, RolePermission, Tenant, User
from authsvc.models.base import BaseModel
from authsvc.mutations.hooks import (
    BRAND_HOOKS,
    ROLE_HOOKS,
    ROLE_PERMISSION_HOOKS,
    USER_HOOKS,
    audit_hook,
)
from authsvc.mutations.mutation import UPDATE_OPS, Hook, Mutation, Op, chain
from authsvc.mutations.privacy import (
    ROLE_PERMISSION_POLICY,
    ROLE_POLICY,
    USER_POLICY,
    Policy,
    Query,
)

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

UNIQUE_VIOLATION = "23505"


def _is_unique_violation(error: IntegrityError) -> bool:
    """PostgreSQL reports SQLSTATE 23505; SQLite only says so in the message."""
    sqlstate = getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION
    return "unique" in str(error.orig).lower()


class EntityClient(Generic[ModelT]):
    """CRUD access to one model through its hook pipeline and privacy policy."""

    def __init__(
        self,
        db: AsyncSession,
        model: type[ModelT],
        entity: str | None = None,
        hooks: Sequence[Hook] = (),
        policy: Policy | None = None,
    ):
        self.db = db
        self.model = model
        self.entity = entity or model.__name__
        self.policy = policy or Policy()

        pipeline: list[Hook] = []
        if self.policy.mutation is not None:
            pipeline.append(self.policy.mutation.hook())
        pipeline.append(audit_hook)
        pipeline.extend(hooks)
        self._mutate = chain(pipeline)(self._persist)

        self._fields = {
            attr.key for attr in model.__mapper__.column_attrs
        } - model.__system_fields__

    # Writes

    async def create(self, ctx: AuthContext, **fields: Any) -> ModelT:
        return await self._run(ctx, Mutation(self.entity, self.model, Op.CREATE, fields))

    async def update_one(self, ctx: AuthContext, id: int, **fields: Any) -> ModelT:
        old = await self._load(id)
        return await self._run(
            ctx, Mutation(self.entity, self.model, Op.UPDATE_ONE, fields, id=id, old=old)
        )

    async def update(self, ctx: AuthContext, *where: Any, **fields: Any) -> int:
        """Bulk update; returns the number of affected rows."""
        return await self._run(
            ctx, Mutation(self.entity, self.model, Op.UPDATE, fields, predicates=where)
        )

    async def delete_one(self, ctx: AuthContext, id: int) -> None:
        old = await self._load(id)
        await self._run(ctx, Mutation(self.entity, self.model, Op.DELETE_ONE, id=id, old=old))

    async def delete(self, ctx: AuthContext, *where: Any) -> int:
        """Bulk delete; returns the number of affected rows."""
        return await self._run(
            ctx, Mutation(self.entity, self.model, Op.DELETE, predicates=where)
        )

    # Reads

    def query(self, ctx: AuthContext):
        """SELECT for this entity with the query policy applied."""
        q = Query(self.entity, self.model, select(self.model))
        if self.policy.query is not None:
            self.policy.query.evaluate(ctx, q)
        return q.statement

    async def get(self, ctx: AuthContext, id: int) -> ModelT:
        result = await self.db.execute(self.query(ctx).where(self.model.id == id))
        instance = result.scalar_one_or_none()
        if instance is None:
            raise ResourceNotFoundError(f"{self.entity} {id} not found")
        return instance

    async def get_many(self, ctx: AuthContext, ids: Sequence[int]) -> Sequence[ModelT]:
        if not ids:
            return []
        result = await self.db.execute(
            self.query(ctx).where(self.model.id.in_(ids)).order_by(self.model.id)
        )
        return result.scalars().all()

    async def count(self, ctx: AuthContext, *where: Any) -> int:
        subquery = self.query(ctx).where(*where).subquery()
        result = await self.db.execute(select(func.count()).select_from(subquery))
        return result.scalar_one()

    async def list(
        self,
        ctx: AuthContext,
        *where: Any,
        skip: int = 0,
        limit: int = 100,
    ) -> Sequence[ModelT]:
        stmt = (
            self.query(ctx)
            .where(*where)
            .order_by(self.model.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    # Pipeline

    async def _load(self, id: int) -> ModelT:
        instance = await self.db.get(self.model, id)
        if instance is None:
            raise ResourceNotFoundError(f"{self.entity} {id} not found")
        return instance

    async def _run(self, ctx: AuthContext, m: Mutation) -> Any:
        operation = m.op.label()
        start = time.perf_counter()
        outcome = "success"
        try:
            return await self._mutate(ctx, m)
        except AuthorizationError:
            outcome = "denied"
            raise
        except AuthServiceException as e:
            outcome = "error"
            logger.warning(
                "Mutation failed",
                entity=self.entity,
                operation=operation,
                error=e.message,
            )
            raise
        finally:
            mutations_total.labels(
                entity=self.entity, operation=operation, outcome=outcome
            ).inc()
            mutation_duration_seconds.labels(
                entity=self.entity, operation=operation
            ).observe(time.perf_counter() - start)

    def _validate(self, m: Mutation) -> dict[str, Any]:
        fields = m.fields()
        unknown = set(fields) - self._fields
        if unknown:
            raise ValidationError(
                f"Unknown field(s) for {self.entity}: {', '.join(sorted(unknown))}",
                details={"entity": self.entity, "fields": sorted(unknown)},
            )
        if m.op & UPDATE_OPS:
            immutable = sorted(set(fields) & self.model.__immutable_fields__)
            if immutable:
                raise ImmutableFieldError(self.entity, immutable[0])
        return fields

    async def _persist(self, ctx: AuthContext, m: Mutation) -> Any:
        """Final stage: validate fields and write through the session."""
        fields = self._validate(m)
        try:
            if m.op is Op.CREATE:
                instance = self.model(**fields)
                self.db.add(instance)
                await self.db.flush()
                await self.db.refresh(instance)
                return instance

            if m.op is Op.UPDATE_ONE:
                instance = m.old
                for key, value in fields.items():
                    setattr(instance, key, value)
                await self.db.flush()
                await self.db.refresh(instance)
                return instance

            if m.op is Op.UPDATE:
                if not fields:
                    raise ValidationError(f"No fields to update for {self.entity}")
                stmt = (
                    update(self.model)
                    .where(*m.predicates)
                    .values(**fields)
                    .execution_options(synchronize_session=False)
                )
                result = await self.db.execute(stmt)
                return result.rowcount

            if m.op is Op.DELETE_ONE:
                await self.db.delete(m.old)
                await self.db.flush()
                return None

            stmt = (
                delete(self.model)
                .where(*m.predicates)
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)
            return result.rowcount

        except IntegrityError as e:
            logger.warning(
                "Integrity violation",
                entity=self.entity,
                operation=m.op.label(),
                error=str(e.orig),
            )
            if _is_unique_violation(e):
                raise ConflictError(
                    f"{self.entity} conflicts with an existing record",
                    details={"entity": self.entity},
                ) from e
            raise ValidationError(
                f"{self.entity} violates a required field or reference",
                details={"entity": self.entity},
            ) from e


@dataclass
class Clients:
    db: AsyncSession
    tenant: EntityClient[Tenant]
    user: EntityClient[User]
    role: EntityClient[Role]
    permission: EntityClient[Permission]
    role_permission: EntityClient[RolePermission]
    brand: EntityClient[Brand]

    async def commit(self) -> None:
        """Commit now so work after the write (cache invalidation) sees committed rows."""
        await self.db.commit()


def clients(db: AsyncSession) -> Clients:
    """Build one client per entity with its hooks and privacy policy."""
    return Clients(
        db=db,
        tenant=EntityClient(db, Tenant),
        user=EntityClient(db, User, hooks=USER_HOOKS, policy=USER_POLICY),
        role=EntityClient(db, Role, hooks=ROLE_HOOKS, policy=ROLE_POLICY),
        permission=EntityClient(db, Permission),
        role_permission=EntityClient(
            db, RolePermission, hooks=ROLE_PERMISSION_HOOKS, policy=ROLE_PERMISSION_POLICY
        ),
        brand=EntityClient(db, Brand, hooks=BRAND_HOOKS),
    )
