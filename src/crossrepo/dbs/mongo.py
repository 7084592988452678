"""Concrete repository for MongoDB via motor.

Documents are plain dicts. Includes are resolved after the main query: for
each `Populate` directive the related collection is queried once with `$in`
over the keys collected from the parent documents, and the matches are
attached under the relation name.
"""

from typing import Any, Dict, List, Mapping, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient

from crossrepo.abc import RepositoryAdapter
from crossrepo.exceptions import InvalidIdentifierFormat, MissingConfigError, UnknownRelationError
from crossrepo.querydsl.compilers.mongo import MongoEmitter, MongoQuery, Populate, mongo_emitter
from crossrepo.querydsl.plan import QueryPlan
from crossrepo.querydsl.relations import Relation
from crossrepo.schema import PaginationSpec
from crossrepo.settings import settings as api_settings
from crossrepo.types import Payload
from crossrepo.utils import is_identifier


class MongoRepository(RepositoryAdapter):
    """Repository over one MongoDB collection.

    Attributes:
        model: Collection name or a motor collection
        joins: Populate metadata for each includable relation
    """

    primary_key: str = "_id"
    emitter: MongoEmitter = mongo_emitter
    joins: Mapping[str, Relation] = {}

    def __init__(
        self,
        model: Any = None,
        *,
        joins: Optional[Mapping[str, Relation]] = None,
        database: Any = None,
        **kwargs: Any,
    ) -> None:
        self._database = database
        self._client: Any = None
        super().__init__(model, **kwargs)
        if joins is not None:
            self.joins = dict(joins)

    @property
    def database(self) -> Any:
        """Lazily initialize and return the motor database.

        Raises:
            MissingConfigError: If MONGO_DATABASE is not set
        """
        if self._database is None:
            name = api_settings.MONGO_DATABASE
            if not name:
                raise MissingConfigError(
                    "MONGO_DATABASE is not set",
                    config_key="MONGO_DATABASE",
                    adapter="MongoDB",
                    hint="Add MONGO_DATABASE to your .env or pass database=",
                )
            self._client = AsyncIOMotorClient(api_settings.MONGO_URL)
            self._database = self._client[name]
            self.logger.message("MongoDB client created (db=%s).", name)
        return self._database

    @property
    def collection(self) -> Any:
        return self.get_collection(self.model)

    def get_collection(self, name_or_collection: Any) -> Any:
        if isinstance(name_or_collection, str):
            return self.database[name_or_collection]
        return name_or_collection

    # ------------------------------------------------------------------
    # Identifiers
    # ------------------------------------------------------------------

    def is_id(self, value: Any) -> bool:
        return isinstance(value, ObjectId) or is_identifier(value)

    def validate_id(self, model_id: Any) -> ObjectId:
        """Return `model_id` as an ObjectId.

        Raises:
            InvalidIdentifierFormat: If the id is not a valid ObjectId
        """
        if isinstance(model_id, ObjectId):
            return model_id
        if isinstance(model_id, str) and ObjectId.is_valid(model_id):
            return ObjectId(model_id)
        raise InvalidIdentifierFormat("NOT_VALID_OBJECT_ID", model_id=model_id)

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    async def _find(self, collection: Any, query: MongoQuery, skip: int = 0, limit: int = 0) -> List[Dict[str, Any]]:
        cursor = collection.find(query.filter)
        if query.sort:
            cursor = cursor.sort(query.sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=limit or None)

    async def populate(
        self,
        documents: List[Dict[str, Any]],
        directives: List[Populate],
        joins: Mapping[str, Relation],
    ) -> List[Dict[str, Any]]:
        """Attach related documents to `documents` in place.

        Related documents failing the directive's filter are left out; a
        to-one relation without a match becomes None.

        Raises:
            UnknownRelationError: If a directive has no populate metadata
        """
        for directive in directives:
            relation = joins.get(directive.relation)
            if relation is None:
                raise UnknownRelationError(
                    "Relation is not configured", relation=directive.relation, collection=str(self.model)
                )
            keys = self._collect_keys(documents, relation.local_key)
            related: List[Dict[str, Any]] = []
            if keys:
                match = {relation.foreign_key: {"$in": keys}}
                query = MongoQuery(
                    filter={"$and": [match, directive.query.filter]} if directive.query.filter else match,
                    sort=directive.query.sort,
                )
                related = await self._find(self.get_collection(relation.target), query)
                await self.populate(related, directive.query.populate, relation.relations)
            for document in documents:
                document[directive.relation] = self._pick(document.get(relation.local_key), related, relation)
        return documents

    @staticmethod
    def _collect_keys(documents: List[Dict[str, Any]], local_key: str) -> List[Any]:
        keys: List[Any] = []
        for document in documents:
            value = document.get(local_key)
            for key in value if isinstance(value, list) else [value]:
                if key is not None and key not in keys:
                    keys.append(key)
        return keys

    @staticmethod
    def _pick(value: Any, related: List[Dict[str, Any]], relation: Relation) -> Any:
        wanted = value if isinstance(value, list) else [value]
        matches = [item for item in related if item.get(relation.foreign_key) in wanted]
        if relation.many:
            return matches
        return matches[0] if matches else None

    # ------------------------------------------------------------------
    # Storage primitives
    # ------------------------------------------------------------------

    async def _fetch_one(self, plan: QueryPlan) -> Optional[Dict[str, Any]]:
        query = self.emitter.emit(plan)
        documents = await self._find(self.collection, query, limit=1)
        if not documents:
            return None
        await self.populate(documents, query.populate, self.joins)
        return documents[0]

    async def _fetch_many(self, plan: QueryPlan, pagination: Optional[PaginationSpec]) -> List[Dict[str, Any]]:
        query = self.emitter.emit(plan)
        if pagination is None:
            documents = await self._find(self.collection, query)
        else:
            documents = await self._find(self.collection, query, skip=pagination.offset, limit=pagination.limit)
        return await self.populate(documents, query.populate, self.joins)

    async def _count(self, plan: QueryPlan) -> int:
        query = self.emitter.emit(plan.without_includes())
        return await self.collection.count_documents(query.filter)

    async def _insert(self, payload: Payload) -> Dict[str, Any]:
        result = await self.collection.insert_one(payload)
        payload[self.primary_key] = result.inserted_id
        return payload

    async def _save(self, model: Dict[str, Any], payload: Payload) -> Dict[str, Any]:
        if payload:
            await self.collection.update_one({self.primary_key: model[self.primary_key]}, {"$set": payload})
        return self._apply(model, payload)

    async def _remove(self, model: Dict[str, Any]) -> None:
        await self.collection.delete_one({self.primary_key: model[self.primary_key]})
