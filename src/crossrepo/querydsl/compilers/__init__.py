from .activerecord import ActiveRecordEmitter, ActiveRecordQuery, activerecord_emitter
from .base import BaseEmitter
from .mongo import MongoEmitter, MongoQuery, Populate, mongo_emitter
from .prisma import PrismaEmitter, prisma_emitter
from .sql import IncludeColumn, SqlEmitter, SqlQuery, sql_emitter

__all__ = (
    "BaseEmitter",
    "ActiveRecordEmitter",
    "ActiveRecordQuery",
    "activerecord_emitter",
    "MongoEmitter",
    "MongoQuery",
    "Populate",
    "mongo_emitter",
    "PrismaEmitter",
    "prisma_emitter",
    "IncludeColumn",
    "SqlEmitter",
    "SqlQuery",
    "sql_emitter",
)
