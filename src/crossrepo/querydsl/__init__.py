"""Query DSL module.

Exports the encoded value parser, the filter compiler and the whitelist
guard. Backend-specific emitters live in the `compilers` subpackage.
"""

from .compiler import FilterCompiler, compile_contract, parse_direction
from .parser import parse_value
from .plan import OrderClause, QueryPlan
from .predicates import Condition, Op, Predicate
from .relations import Relation
from .whitelist import WhitelistGuard

__all__ = (
    "Condition",
    "FilterCompiler",
    "Op",
    "OrderClause",
    "Predicate",
    "QueryPlan",
    "Relation",
    "WhitelistGuard",
    "compile_contract",
    "parse_direction",
    "parse_value",
)
