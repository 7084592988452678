"""Type aliases for crossrepo package.

This module provides reusable type definitions to ensure consistency
across the codebase and improve code readability.
"""

from typing import Any, Dict, Mapping, Sequence, Union

from .schema import FilterContract

# Scalar literal accepted inside a where mapping
Scalar = Union[str, int, float, bool]

# One where value: literal, sequence of literals or a punctuated string
EncodedValue = Union[Scalar, Sequence[Scalar]]

# Model identifiers - backends accept str or int keys
ModelId = Union[str, int]

# Filter options as callers pass them: contract, plain mapping or nothing
Options = Union[FilterContract, Mapping[str, Any], None]

# Payloads for store/update operations
Payload = Dict[str, Any]
