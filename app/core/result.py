"""Success/failure containers passed between layers for recoverable outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar
from typing import Generic
from typing import TypeVar
from typing import Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome carrying the produced value."""

    data: T
    success: ClassVar[bool] = True


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Failed outcome carrying the error that caused it."""

    error: E
    success: ClassVar[bool] = False


Result = Union[Success[T], Failure[E]]
