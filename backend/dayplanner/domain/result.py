"""Tagged Success / Error / Loading result type."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

from dayplanner.domain.errors import SchedulerError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Error:
    error: SchedulerError


@dataclass(frozen=True)
class Loading:
    message: str = "Loading..."


Result = Union[Success[T], Error, Loading]


def on_success(result: "Result[T]", action: Callable[[T], None]) -> "Result[T]":
    if isinstance(result, Success):
        action(result.value)
    return result


def on_error(result: "Result[T]", action: Callable[[SchedulerError], None]) -> "Result[T]":
    if isinstance(result, Error):
        action(result.error)
    return result


def on_loading(result: "Result[T]", action: Callable[[str], None]) -> "Result[T]":
    if isinstance(result, Loading):
        action(result.message)
    return result
