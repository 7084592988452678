"""Tests for the whitelist guard."""

import pytest

from crossrepo.exceptions import AccessError, FilterFieldNotAllowed, IncludeNotAllowed
from crossrepo.querydsl.whitelist import WhitelistGuard
from crossrepo.schema import FilterContract


@pytest.fixture
def guard():
    return WhitelistGuard(wheres=["name"], relations=["owner", "company"])


def contract(**kwargs):
    return FilterContract.model_validate({"isInternalRequest": False, **kwargs})


class TestWhitelistGuard:
    def test_allows_listed(self, guard):
        guard.validate(
            contract(
                where={"name": "ana"},
                includes=[{"relation": "owner", "where": {"name": "bob"}, "includes": ["company"]}],
            )
        )

    def test_rejects_field(self, guard):
        with pytest.raises(FilterFieldNotAllowed) as exc:
            guard.validate(contract(where={"age": "5"}))
        assert exc.value.field == "age"
        assert str(exc.value).startswith("It is not possible to filter by age")

    def test_rejects_relation(self, guard):
        with pytest.raises(IncludeNotAllowed) as exc:
            guard.validate(contract(includes=["tags"]))
        assert exc.value.relation == "tags"

    def test_nested_relation_matched_by_name(self):
        guard = WhitelistGuard(wheres=[], relations=["owner", "company"])
        guard.validate(contract(includes=[{"relation": "owner", "includes": ["company"]}]))

    def test_nested_field_rejected_by_name(self, guard):
        with pytest.raises(FilterFieldNotAllowed) as exc:
            guard.validate(contract(includes=[{"relation": "owner", "where": {"age": "1"}}]))
        assert exc.value.field == "age"

    def test_nested_relation_rejected_by_name(self, guard):
        with pytest.raises(IncludeNotAllowed) as exc:
            guard.validate(contract(includes=[{"relation": "owner", "includes": ["posts"]}]))
        assert exc.value.relation == "posts"

    def test_deep_nesting_fails_closed(self, guard):
        nested = {"relation": "owner", "includes": [{"relation": "company", "includes": [{"relation": "secrets"}]}]}
        with pytest.raises(IncludeNotAllowed) as exc:
            guard.validate(contract(includes=[nested]))
        assert exc.value.relation == "secrets"

    def test_order_by_not_checked(self, guard):
        guard.validate(contract(orderBy={"secret": "asc"}))

    def test_errors_share_base(self, guard):
        with pytest.raises(AccessError):
            guard.validate(contract(where={"age": "5"}))

    def test_empty_lists_reject_everything(self):
        with pytest.raises(FilterFieldNotAllowed):
            WhitelistGuard().validate(contract(where={"name": "a"}))
