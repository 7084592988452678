"""
This __init__.py file makes crossrepo a Python package and exposes the
repository base, the filter contract schemas and the service helpers.

Backend repositories are imported from `crossrepo.dbs.<backend>` so that only
the drivers actually used need to be installed.
"""

from .abc import RepositoryAdapter
from .querydsl.relations import Relation
from .resource import Resource
from .schema import FilterContract, IncludeSpec, ListResult, PaginatedResult, PaginationSpec
from .seeding import Factory, Seeder
from .service import CrudService
from .types import ModelId, Options, Payload

__version__ = "0.1.0"

__all__ = [
    "RepositoryAdapter",
    "CrudService",
    "Resource",
    "Relation",
    "Seeder",
    "Factory",
    "FilterContract",
    "IncludeSpec",
    "PaginationSpec",
    "PaginatedResult",
    "ListResult",
    "ModelId",
    "Options",
    "Payload",
]
