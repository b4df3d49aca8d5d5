"""
Unit tests for the mutation hook chain.

The persistence stage is replaced by a spy that records what reached it.
"""

import pytest

from authsvc.core.authz import AuthContext
from authsvc.core.exceptions import (
    MissingNameForCodeGeneration,
    MissingTenantContext,
    MissingTenantForCodeGeneration,
)
from authsvc.models import Brand, Role, RolePermission, User
from authsvc.mutations.hooks import (
    BRAND_HOOKS,
    ROLE_HOOKS,
    ROLE_PERMISSION_HOOKS,
    USER_HOOKS,
    audit_hook,
)
from authsvc.mutations.mutation import Mutation, Op, chain, on


class Spy:
    """Terminal mutator that records the mutations it receives."""

    def __init__(self, result="persisted"):
        self.calls: list[Mutation] = []
        self.result = result

    async def __call__(self, ctx, m):
        self.calls.append(m)
        return self.result


def pipeline(hooks, spy):
    return chain(hooks)(spy)


@pytest.mark.unit
class TestCreateHook:
    """Tenant backfill and code generation on create."""

    async def test_explicit_tenant_and_name_sets_code(self):
        spy = Spy()
        m = Mutation("Brand", Brand, Op.CREATE, {"tenant_id": 1, "name": "My Brand"})

        result = await pipeline(BRAND_HOOKS, spy)(AuthContext(), m)

        assert result == "persisted"
        assert spy.calls == [m]
        assert m.get("code") == "tenant:1:code:my_brand"

    async def test_tenant_backfilled_from_context(self):
        spy = Spy()
        m = Mutation("Brand", Brand, Op.CREATE, {"name": "  Multi   Space  "})

        await pipeline(BRAND_HOOKS, spy)(AuthContext(tenant_id=5), m)

        assert m.get("tenant_id") == 5
        assert m.get("code") == "tenant:5:code:multi_space"

    async def test_mutation_tenant_wins_over_context(self):
        spy = Spy()
        m = Mutation("Role", Role, Op.CREATE, {"tenant_id": 3, "name": "Editor"})

        await pipeline(ROLE_HOOKS, spy)(AuthContext(tenant_id=8), m)

        assert m.get("tenant_id") == 3
        assert m.get("code") == "tenant:3:code:editor"

    async def test_missing_tenant_everywhere_raises(self):
        spy = Spy()
        m = Mutation("Brand", Brand, Op.CREATE, {"name": "X"})

        with pytest.raises(MissingTenantContext):
            await pipeline(BRAND_HOOKS, spy)(AuthContext(), m)

        assert spy.calls == []

    async def test_explicit_none_tenant_with_name_raises(self):
        """A tenant_id explicitly set to None is not backfilled."""
        spy = Spy()
        m = Mutation("Role", Role, Op.CREATE, {"tenant_id": None, "name": "Editor"})

        with pytest.raises(MissingTenantForCodeGeneration):
            await pipeline(ROLE_HOOKS, spy)(AuthContext(tenant_id=1), m)

        assert spy.calls == []

    async def test_brand_requires_name(self):
        spy = Spy()
        m = Mutation("Brand", Brand, Op.CREATE, {"tenant_id": 1})

        with pytest.raises(MissingNameForCodeGeneration):
            await pipeline(BRAND_HOOKS, spy)(AuthContext(), m)

        assert spy.calls == []

    async def test_role_without_name_has_no_code(self):
        spy = Spy()
        m = Mutation("Role", Role, Op.CREATE, {"tenant_id": 1})

        await pipeline(ROLE_HOOKS, spy)(AuthContext(), m)

        assert spy.calls == [m]
        assert not m.has("code")

    async def test_name_with_only_invalid_characters(self):
        spy = Spy()
        m = Mutation("Brand", Brand, Op.CREATE, {"tenant_id": 4, "name": "!!!"})

        await pipeline(BRAND_HOOKS, spy)(AuthContext(), m)

        assert m.get("code") == "tenant:4:code:"

    @pytest.mark.parametrize(
        "entity,model,hooks",
        [
            ("RolePermission", RolePermission, ROLE_PERMISSION_HOOKS),
            ("User", User, USER_HOOKS),
        ],
    )
    async def test_non_code_entities_get_tenant_only(self, entity, model, hooks):
        spy = Spy()
        m = Mutation(entity, model, Op.CREATE, {"name": "ignored"})

        await pipeline(hooks, spy)(AuthContext(tenant_id=2), m)

        assert m.get("tenant_id") == 2
        assert not m.has("code")

    async def test_other_entity_passes_through(self):
        spy = Spy()
        m = Mutation("Role", Role, Op.CREATE, {"name": "Editor"})

        await pipeline(BRAND_HOOKS, spy)(AuthContext(), m)

        assert spy.calls == [m]
        assert m.fields() == {"name": "Editor"}


@pytest.mark.unit
class TestUpdateDeleteHooks:
    """Update and delete mutations pass through unchanged."""

    @pytest.mark.parametrize("op", [Op.UPDATE_ONE, Op.UPDATE])
    async def test_rename_does_not_regenerate_code(self, op):
        spy = Spy()
        m = Mutation("Brand", Brand, op, {"name": "Renamed"}, id=1)

        await pipeline(BRAND_HOOKS, spy)(AuthContext(), m)

        assert spy.calls == [m]
        assert m.fields() == {"name": "Renamed"}

    @pytest.mark.parametrize("op", [Op.DELETE_ONE, Op.DELETE])
    async def test_delete_without_tenant_context(self, op):
        spy = Spy(result=None)
        m = Mutation("Role", Role, op, id=1)

        assert await pipeline(ROLE_HOOKS, spy)(AuthContext(), m) is None
        assert spy.calls == [m]


@pytest.mark.unit
class TestAuditHook:
    async def test_stamps_acting_user_on_create(self):
        spy = Spy()
        m = Mutation("Brand", Brand, Op.CREATE, {"tenant_id": 1, "name": "A"})

        await pipeline([audit_hook], spy)(AuthContext(user_id=10), m)

        assert m.get("created_by") == 10
        assert m.get("owned_by") == 10

    async def test_keeps_explicit_owner(self):
        spy = Spy()
        m = Mutation("Brand", Brand, Op.CREATE, {"owned_by": 3})

        await pipeline([audit_hook], spy)(AuthContext(user_id=10), m)

        assert m.get("created_by") == 10
        assert m.get("owned_by") == 3

    async def test_skipped_without_user_or_on_update(self):
        spy = Spy()
        create = Mutation("Brand", Brand, Op.CREATE, {})
        update = Mutation("Brand", Brand, Op.UPDATE_ONE, {"name": "B"}, id=1)

        await pipeline([audit_hook], spy)(AuthContext(), create)
        await pipeline([audit_hook], spy)(AuthContext(user_id=10), update)

        assert create.fields() == {}
        assert update.fields() == {"name": "B"}


@pytest.mark.unit
class TestChain:
    async def test_first_hook_runs_outermost(self):
        order = []

        def tracer(label):
            def hook(next_):
                async def mutate(ctx, m):
                    order.append(f"{label}:before")
                    result = await next_(ctx, m)
                    order.append(f"{label}:after")
                    return result
                return mutate
            return hook

        async def final(ctx, m):
            order.append("persist")
            return "done"

        m = Mutation("Role", Role, Op.CREATE)
        result = await chain([tracer("a"), tracer("b")])(final)(AuthContext(), m)

        assert result == "done"
        assert order == ["a:before", "b:before", "persist", "b:after", "a:after"]

    async def test_on_filters_operations(self):
        seen = []

        def recorder(next_):
            async def mutate(ctx, m):
                seen.append(m.op)
                return await next_(ctx, m)
            return mutate

        run = chain([on(recorder, Op.UPDATE | Op.UPDATE_ONE)])(Spy())
        for op in Op.CREATE, Op.UPDATE, Op.UPDATE_ONE, Op.DELETE:
            await run(AuthContext(), Mutation("Role", Role, op))

        assert seen == [Op.UPDATE, Op.UPDATE_ONE]

    def test_op_label(self):
        assert Op.CREATE.label() == "create"
        assert Op.UPDATE_ONE.label() == "update_one"
