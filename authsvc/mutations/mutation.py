"""
Pending mutation and the hook chain it flows through.

A Mutation carries the entity name, the operation kind and the pending
field values. Hooks wrap a Mutator (the next stage) and return a new
Mutator, so a chain of hooks composes into a single callable that ends in
the persistence stage:

    pipeline = chain([privacy_hook, audit_hook, *entity_hooks])(persist)
    result = await pipeline(ctx, mutation)
"""

from enum import Flag, auto
from typing import Any, Awaitable, Callable, Iterable, Sequence

from authsvc.core.authz import AuthContext


class Op(Flag):
    """Mutation operation kinds."""

    CREATE = auto()
    UPDATE_ONE = auto()
    UPDATE = auto()
    DELETE_ONE = auto()
    DELETE = auto()

    def label(self) -> str:
        """Lower-case name used in logs and metric labels."""
        return "|".join(sorted(op.name.lower() for op in Op if op in self))


UPDATE_OPS = Op.UPDATE | Op.UPDATE_ONE
DELETE_OPS = Op.DELETE | Op.DELETE_ONE


class Mutation:
    """
    A pending create/update/delete on one entity.

    Attributes:
        entity: Entity name ("Brand", "Role", ...)
        model: SQLAlchemy model class the mutation targets
        op: Operation kind
        id: Row ID for UPDATE_ONE / DELETE_ONE
        old: Stored row for UPDATE_ONE / DELETE_ONE, loaded before the hooks run
        predicates: WHERE clauses for bulk UPDATE / DELETE
    """

    def __init__(
        self,
        entity: str,
        model: type,
        op: Op,
        fields: dict[str, Any] | None = None,
        *,
        id: int | None = None,
        old: Any = None,
        predicates: Iterable[Any] = (),
    ):
        self.entity = entity
        self.model = model
        self.op = op
        self.id = id
        self.old = old
        self.predicates = list(predicates)
        self._fields: dict[str, Any] = dict(fields or {})

    def get(self, field: str, default: Any = None) -> Any:
        return self._fields.get(field, default)

    def has(self, field: str) -> bool:
        return field in self._fields

    def set(self, field: str, value: Any) -> None:
        self._fields[field] = value

    def clear(self, field: str) -> None:
        self._fields.pop(field, None)

    def fields(self) -> dict[str, Any]:
        """Copy of the pending field values."""
        return dict(self._fields)

    def old_value(self, field: str) -> Any:
        """Stored value of a field, or None when no row is loaded."""
        if self.old is None:
            return None
        return getattr(self.old, field, None)

    def effective(self, field: str) -> Any:
        """Pending value if set, otherwise the stored one."""
        if field in self._fields:
            return self._fields[field]
        return self.old_value(field)

    @property
    def tenant_id(self) -> int | None:
        return self._fields.get("tenant_id")

    @property
    def name(self) -> str | None:
        return self._fields.get("name")

    def __repr__(self) -> str:
        return f"<Mutation({self.entity}, {self.op.label()}, fields={sorted(self._fields)})>"


Mutator = Callable[[AuthContext, Mutation], Awaitable[Any]]
Hook = Callable[[Mutator], Mutator]


def on(hook: Hook, ops: Op) -> Hook:
    """Restrict a hook to the given operation kinds; other mutations skip it."""

    def wrapper(next_: Mutator) -> Mutator:
        hooked = hook(next_)

        async def mutate(ctx: AuthContext, m: Mutation) -> Any:
            if m.op & ops:
                return await hooked(ctx, m)
            return await next_(ctx, m)

        return mutate

    return wrapper


def chain(hooks: Sequence[Hook]) -> Callable[[Mutator], Mutator]:
    """Compose hooks; the first hook in the list runs outermost."""

    def build(final: Mutator) -> Mutator:
        mutator = final
        for hook in reversed(hooks):
            mutator = hook(mutator)
        return mutator

    return build
