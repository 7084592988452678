"""
Grammar tokens and ordering constants shared by the parser and all emitters.
"""

from enum import Enum

# Encoded value grammar
NULL_TOKEN = "null"
NOT_NULL_TOKEN = "!null"
RANGE_SEPARATOR = "->"
LIST_SEPARATOR = ","
NEGATION_MARKER = "!"
CONTAINS_MARKER = "%"


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"


DIRECTION_MAP = {
    "asc": Direction.ASC,
    "desc": Direction.DESC,
}

ROOT_ALIAS = "root"
