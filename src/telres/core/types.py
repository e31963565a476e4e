from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Union

Scalar = Union[str, bool, int, float]

# Sequences are normalized to tuples once inside an AttributeSet.
AttributeValue = Union[Scalar, Sequence[Scalar]]

Attributes = Mapping[str, AttributeValue]

SCALAR_TYPES: tuple[type, ...] = (str, bool, int, float)
