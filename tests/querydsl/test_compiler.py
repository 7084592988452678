"""Tests for the filter compiler."""

import pytest

from crossrepo.constants import Direction
from crossrepo.exceptions import FilterFieldNotAllowed, InvalidFilterValue, InvalidOrderDirection
from crossrepo.querydsl.compiler import FilterCompiler, compile_contract, parse_direction
from crossrepo.querydsl.plan import OrderClause, QueryPlan
from crossrepo.querydsl.predicates import Condition, Predicate
from crossrepo.querydsl.whitelist import WhitelistGuard
from crossrepo.schema import FilterContract

CONTRACT = {
    "where": {"name": "%ana%", "age": "18->30"},
    "orderBy": {"createdAt": "DESC"},
    "includes": [
        {"relation": "owner", "where": {"status": "active,pending"}, "includes": [{"relation": "company"}]},
        {"relation": "tags"},
    ],
}


class TestCompile:
    def test_empty_options(self):
        plan = compile_contract(None)
        assert plan == QueryPlan(alias="root")

    def test_root_scope(self):
        plan = compile_contract(CONTRACT)
        assert plan.conditions == (
            Condition("name", Predicate.contains("ana")),
            Condition("age", Predicate.range("18", "30")),
        )
        assert plan.ordering == (OrderClause("createdAt", Direction.DESC),)
        assert [include.relation for include in plan.includes] == ["owner", "tags"]

    def test_nested_scope(self):
        owner = compile_contract(CONTRACT).includes[0]
        assert owner.path == ("owner",)
        assert owner.conditions == (Condition("status", Predicate.in_(["active", "pending"])),)
        company = owner.includes[0]
        assert company.path == ("owner", "company")
        assert company.dotted_path == "owner.company"

    def test_accepts_contract_instance(self):
        assert compile_contract(FilterContract.model_validate(CONTRACT)) == compile_contract(CONTRACT)

    def test_string_includes_shorthand(self):
        plan = compile_contract({"includes": ["owner"]})
        assert plan.includes[0].relation == "owner"

    def test_snake_case_keys(self):
        plan = compile_contract({"order_by": {"name": "asc"}})
        assert plan.ordering == (OrderClause("name", Direction.ASC),)

    def test_invalid_where_value(self):
        with pytest.raises(InvalidFilterValue):
            compile_contract({"where": {"name": ""}})

    def test_contract_not_mutated(self):
        contract = FilterContract.model_validate(CONTRACT)
        before = contract.model_dump()
        compile_contract(contract)
        assert contract.model_dump() == before


class TestAliases:
    def test_deterministic(self):
        assert compile_contract(CONTRACT) == compile_contract(CONTRACT)

    def test_siblings_distinct(self):
        plan = compile_contract({"includes": [{"relation": "owner"}, {"relation": "owner"}]})
        assert plan.includes[0].alias != plan.includes[1].alias

    def test_alias_format(self):
        owner = compile_contract(CONTRACT).includes[0]
        assert owner.alias.startswith("OWNER_")
        assert len(owner.alias) == len("OWNER_") + 8

    def test_alias_depends_on_parent(self):
        compiler = FilterCompiler()
        assert compiler.make_alias("root", 0, "owner") != compiler.make_alias("posts", 0, "owner")

    def test_shape_ignores_alias(self):
        compiler = FilterCompiler(digest_length=4, uppercase=False)
        a = compiler.compile(CONTRACT, alias="posts")
        b = compile_contract(CONTRACT)
        assert a != b
        assert a.shape() == b.shape()


class TestGuardIntegration:
    def test_internal_skips_guard(self):
        guard = WhitelistGuard(wheres=[], relations=[])
        plan = compile_contract({"where": {"secret": "1"}}, guard=guard)
        assert plan.conditions[0].field == "secret"

    def test_external_runs_guard(self):
        guard = WhitelistGuard(wheres=["name"], relations=[])
        with pytest.raises(FilterFieldNotAllowed):
            compile_contract({"where": {"age": "5"}, "isInternalRequest": False}, guard=guard)

    def test_guard_runs_before_grammar(self):
        guard = WhitelistGuard(wheres=["name"])
        # Malformed value on a forbidden field reports the access error
        with pytest.raises(FilterFieldNotAllowed):
            compile_contract({"where": {"age": ""}, "isInternalRequest": False}, guard=guard)


class TestParseDirection:
    @pytest.mark.parametrize("value,expected", [("asc", Direction.ASC), ("DESC", Direction.DESC), (" Asc ", Direction.ASC)])
    def test_valid(self, value, expected):
        assert parse_direction(value) == expected

    @pytest.mark.parametrize("value", ["up", "", None, 1])
    def test_invalid(self, value):
        with pytest.raises(InvalidOrderDirection):
            parse_direction(value, field="createdAt")

    def test_invalid_direction_is_filter_error(self):
        with pytest.raises(InvalidFilterValue):
            compile_contract({"orderBy": {"name": "sideways"}})


class TestPlanHelpers:
    def test_prepend(self):
        plan = compile_contract({"where": {"name": "ana"}})
        prepended = plan.prepend(Condition("id", Predicate.eq(1)))
        assert [c.field for c in prepended.conditions] == ["id", "name"]
        assert [c.field for c in plan.conditions] == ["name"]

    def test_walk(self):
        paths = [scope.path for scope in compile_contract(CONTRACT).walk()]
        assert paths == [(), ("owner",), ("owner", "company"), ("tags",)]
