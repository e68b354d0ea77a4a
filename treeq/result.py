"""Result type for operations that can fail without raising."""

from dataclasses import dataclass
from typing import TypeAlias, TypeVar, Generic

T = TypeVar("T")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


Result: TypeAlias = Ok[T] | Err[E]
