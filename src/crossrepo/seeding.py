"""Test-data seeding through repositories.

`Seeder` stores payloads with `store_one`; `Factory` is an immutable builder
producing payloads from a blueprint callable.

Example:
    >>> factory = Factory(Seeder(users), lambda: {"name": "ana"})
    >>> await factory.count(3).deleted().create()
"""

import asyncio
import inspect
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Mapping, Union

from .abc import RepositoryAdapter
from .logger import Logger
from .types import Payload
from .utils import utcnow

Blueprint = Callable[[], Any]


class Seeder:
    """Stores seed payloads through a repository."""

    def __init__(self, repository: RepositoryAdapter) -> None:
        self.repository = repository
        self.logger = Logger(self.__class__.__name__)

    async def seed(self, params: Payload) -> Any:
        return await self.repository.store_one(dict(params))

    async def seed_many(self, number: int, params: Payload) -> List[Any]:
        """Store `number` copies of `params` concurrently.

        Fails on the first error; models already stored are kept.
        """
        self.logger.message("Seeding %d models.", number)
        return list(await asyncio.gather(*(self.seed(params) for _ in range(number))))


@dataclass(frozen=True)
class Factory:
    """Immutable payload builder.

    `count`, `deleted` and `extra_params` return new factories, so a base
    factory can be shared between tests.

    Attributes:
        seeder: Seeder used by `create`
        blueprint: Callable returning one payload; may be async for `create`
        amount: Number of payloads to build
        extras: Fields overriding the blueprint's output
    """

    seeder: Seeder
    blueprint: Blueprint
    amount: int = 1
    extras: Mapping[str, Any] = field(default_factory=dict)

    def count(self, number: int = 1) -> "Factory":
        if number < 1:
            raise ValueError("count must be at least 1")
        return replace(self, amount=number)

    def deleted(self) -> "Factory":
        return self.extra_params(**{self.seeder.repository.soft_delete_field: utcnow()})

    def extra_params(self, **params: Any) -> "Factory":
        return replace(self, extras={**self.extras, **params})

    def _merge(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        return {**values, **self.extras}

    def make(self) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        """Build payloads without storing them; a list when `amount` > 1.

        Raises:
            TypeError: If the blueprint is async
        """
        if inspect.iscoroutinefunction(self.blueprint):
            raise TypeError("make() needs a synchronous blueprint; use create()")
        payloads = [self._merge(self.blueprint()) for _ in range(self.amount)]
        return payloads if self.amount > 1 else payloads[0]

    async def _payload(self) -> Dict[str, Any]:
        values = self.blueprint()
        if inspect.isawaitable(values):
            values = await values
        return self._merge(values)

    async def create(self) -> Union[Any, List[Any]]:
        """Store built payloads; models are stored concurrently when `amount` > 1."""
        payloads = [await self._payload() for _ in range(self.amount)]
        models = await asyncio.gather(*(self.seeder.seed(payload) for payload in payloads))
        return list(models) if self.amount > 1 else models[0]
