"""Pytest configuration and fixtures for repository tests."""

import re
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _coerce(sample: Any, bound: Any) -> Any:
    # Encoded bounds arrive as strings; compare them in the column's type
    if isinstance(sample, (int, float)) and not isinstance(sample, bool) and isinstance(bound, str):
        return type(sample)(bound)
    return bound


def _unlike(pattern: str) -> str:
    inner = pattern[1:-1] if pattern.startswith("%") and pattern.endswith("%") else pattern
    return re.sub(r"\\(.)", r"\1", inner)


# ----------------------------------------------------------------------
# Active-record fake
# ----------------------------------------------------------------------


class FakeQuery:
    """In-memory chainable builder mirroring a Lucid/Eloquent query."""

    def __init__(self, model: type) -> None:
        self.model = model
        self.filters: List[Any] = []
        self.orders: List[tuple] = []
        self.preloads: List[tuple] = []
        self.skip = 0
        self.take: Optional[int] = None

    def _add(self, check) -> "FakeQuery":
        self.filters.append(check)
        return self

    def where(self, field, value):
        return self._add(lambda r: getattr(r, field, None) == value)

    def where_not(self, field, value):
        return self._add(lambda r: getattr(r, field, None) != value)

    def where_in(self, field, values):
        return self._add(lambda r: getattr(r, field, None) in values)

    def where_not_in(self, field, values):
        return self._add(lambda r: getattr(r, field, None) not in values)

    def where_between(self, field, bounds):
        def check(r):
            value = getattr(r, field, None)
            if value is None:
                return False
            return _coerce(value, bounds[0]) <= value <= _coerce(value, bounds[1])

        return self._add(check)

    def where_null(self, field):
        return self._add(lambda r: getattr(r, field, None) is None)

    def where_not_null(self, field):
        return self._add(lambda r: getattr(r, field, None) is not None)

    def where_ilike(self, field, pattern):
        needle = _unlike(pattern).lower()
        return self._add(lambda r: needle in str(getattr(r, field, "") or "").lower())

    def order_by(self, field, direction):
        self.orders.append((field, direction))
        return self

    def preload(self, relation, callback):
        self.preloads.append((relation, callback))
        return self

    def offset(self, number):
        self.skip = number
        return self

    def limit(self, number):
        self.take = number
        return self

    def _rows(self) -> List[Any]:
        rows = [r for r in self.model.store if all(check(r) for check in self.filters)]
        for field, direction in reversed(self.orders):
            rows.sort(key=lambda r: getattr(r, field), reverse=direction == "desc")
        end = None if self.take is None else self.skip + self.take
        rows = rows[self.skip : end]
        for relation, callback in self.preloads:
            target, local_key, foreign_key, many = self.model.relations[relation]
            for row in rows:
                related = callback(target.query().where(foreign_key, getattr(row, local_key, None)))._rows()
                setattr(row, relation, related if many else (related[0] if related else None))
        return rows

    async def first(self):
        rows = self._rows()
        return rows[0] if rows else None

    async def all(self):
        return self._rows()

    async def count(self):
        return len([r for r in self.model.store if all(check(r) for check in self.filters)])


class FakeModel:
    """Active-record model storing instances on its class."""

    relations: Dict[str, tuple] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls.store = []
        cls.next_id = 1

    def __init__(self, **fields: Any) -> None:
        self.__dict__.update(fields)

    @classmethod
    def query(cls) -> FakeQuery:
        return FakeQuery(cls)

    @classmethod
    async def create(cls, **payload: Any) -> "FakeModel":
        model = cls(id=cls.next_id, deletedAt=None, **payload)
        cls.next_id += 1
        cls.store.append(model)
        return model

    async def save(self) -> "FakeModel":
        return self

    async def delete(self) -> None:
        type(self).store.remove(self)


@pytest.fixture
def ar_models():
    """Fresh Company/User/Post active-record classes."""

    class Company(FakeModel):
        pass

    class User(FakeModel):
        relations = {"company": (Company, "company_id", "id", False)}

    class Post(FakeModel):
        relations = {"owner": (User, "owner_id", "id", False)}

    User.relations["posts"] = (Post, "id", "owner_id", True)
    return SimpleNamespace(Company=Company, User=User, Post=Post)


# ----------------------------------------------------------------------
# Prisma delegate fake
# ----------------------------------------------------------------------


def prisma_match(row: Dict[str, Any], where: Optional[Dict[str, Any]]) -> bool:
    for key, condition in (where or {}).items():
        if key == "AND":
            if not all(prisma_match(row, item) for item in condition):
                return False
            continue
        value = row.get(key)
        if not isinstance(condition, dict):
            if value != condition:
                return False
            continue
        for op, operand in condition.items():
            if op == "in" and value not in operand:
                return False
            if op == "not_in" and value in operand:
                return False
            if op == "not" and value == operand:
                return False
            if op == "gte" and (value is None or value < _coerce(value, operand)):
                return False
            if op == "lte" and (value is None or value > _coerce(value, operand)):
                return False
            if op == "contains" and operand.lower() not in str(value or "").lower():
                return False
    return True


class FakePrismaDelegate:
    """In-memory stand-in for a Prisma Client Python model delegate."""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None) -> None:
        self.rows: List[Dict[str, Any]] = [dict(row) for row in rows or []]
        self.calls: List[tuple] = []
        self.next_id = len(self.rows) + 1

    def _filter(self, where, order=None) -> List[Dict[str, Any]]:
        rows = [dict(row) for row in self.rows if prisma_match(row, where)]
        for clause in reversed(order or []):
            ((field, direction),) = clause.items()
            rows.sort(key=lambda r: r[field], reverse=direction == "desc")
        return rows

    async def find_first(self, where=None, include=None, order=None):
        self.calls.append(("find_first", {"where": where, "include": include, "order": order}))
        rows = self._filter(where, order)
        return rows[0] if rows else None

    async def find_many(self, where=None, include=None, order=None, skip=None, take=None):
        self.calls.append(("find_many", {"where": where, "include": include, "order": order, "skip": skip, "take": take}))
        rows = self._filter(where, order)
        start = skip or 0
        return rows[start : start + take] if take is not None else rows[start:]

    async def count(self, where=None):
        self.calls.append(("count", {"where": where}))
        return len(self._filter(where))

    async def create(self, data):
        row = {"id": self.next_id, "deletedAt": None, **data}
        self.next_id += 1
        self.rows.append(row)
        return dict(row)

    async def update(self, where, data):
        for row in self.rows:
            if prisma_match(row, where):
                row.update(data)
                return dict(row)
        return None

    async def delete(self, where):
        for row in list(self.rows):
            if prisma_match(row, where):
                self.rows.remove(row)
                return dict(row)
        return None


@pytest.fixture
def prisma_users():
    return FakePrismaDelegate(
        [
            {"id": 1, "name": "ana", "age": 31, "deletedAt": None},
            {"id": 2, "name": "bob", "age": 17, "deletedAt": None},
            {"id": 3, "name": "carla", "age": 45, "deletedAt": None},
        ]
    )


# ----------------------------------------------------------------------
# Motor collection fake
# ----------------------------------------------------------------------


def mongo_match(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for key, condition in query.items():
        if key == "$and":
            if not all(mongo_match(document, item) for item in condition):
                return False
            continue
        value = document.get(key)
        if not isinstance(condition, dict):
            if value != condition:
                return False
            continue
        for op, operand in condition.items():
            if op == "$in" and value not in operand:
                return False
            if op == "$nin" and value in operand:
                return False
            if op == "$ne" and value == operand:
                return False
            if op == "$gte" and (value is None or value < _coerce(value, operand)):
                return False
            if op == "$lte" and (value is None or value > _coerce(value, operand)):
                return False
            if op == "$regex":
                flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
                if value is None or not re.search(operand, str(value), flags):
                    return False
    return True


class FakeCursor:
    def __init__(self, documents: List[Dict[str, Any]]) -> None:
        self.documents = documents

    def sort(self, keys):
        for field, direction in reversed(keys):
            self.documents.sort(key=lambda d: d[field], reverse=direction == -1)
        return self

    def skip(self, number):
        self.documents = self.documents[number:]
        return self

    def limit(self, number):
        self.documents = self.documents[:number]
        return self

    async def to_list(self, length=None):
        return self.documents if length is None else self.documents[:length]


class FakeCollection:
    """Subset of AsyncIOMotorCollection backed by a list."""

    def __init__(self, name: str, documents: Optional[List[Dict[str, Any]]] = None) -> None:
        self.name = name
        self.documents: List[Dict[str, Any]] = [dict(d) for d in documents or []]
        self.finds: List[Dict[str, Any]] = []

    def find(self, query=None):
        self.finds.append(query or {})
        return FakeCursor([dict(d) for d in self.documents if mongo_match(d, query or {})])

    async def count_documents(self, query):
        return len([d for d in self.documents if mongo_match(d, query)])

    async def insert_one(self, document):
        document.setdefault("_id", ObjectId())
        self.documents.append(dict(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def update_one(self, query, update):
        for document in self.documents:
            if mongo_match(document, query):
                document.update(update["$set"])
                return SimpleNamespace(matched_count=1)
        return SimpleNamespace(matched_count=0)

    async def delete_one(self, query):
        for document in list(self.documents):
            if mongo_match(document, query):
                self.documents.remove(document)
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabase(dict):
    def __missing__(self, name):
        collection = self[name] = FakeCollection(name)
        return collection


@pytest.fixture
def mongo_db():
    company_id, user_ids = ObjectId(), [ObjectId() for _ in range(3)]
    db = FakeDatabase()
    db["companies"] = FakeCollection("companies", [{"_id": company_id, "name": "acme"}])
    db["users"] = FakeCollection(
        "users",
        [
            {"_id": user_ids[0], "name": "ana", "age": 31, "company": company_id, "deletedAt": None},
            {"_id": user_ids[1], "name": "bob", "age": 17, "company": None, "deletedAt": None},
            {"_id": user_ids[2], "name": "carla", "age": 45, "company": company_id, "deletedAt": None},
        ],
    )
    return db


# ----------------------------------------------------------------------
# psycopg2 connection mock
# ----------------------------------------------------------------------


@pytest.fixture
def pg_connection():
    """MagicMock connection whose cursor is shared across `with` blocks."""
    cursor = MagicMock()
    cursor.__enter__.return_value = cursor
    cursor.__exit__.return_value = False
    connection = MagicMock()
    connection.cursor.return_value = cursor
    connection.fake_cursor = cursor
    return connection
