"""Tagged call outcomes for callers that prefer matching over try/except."""

from dataclasses import dataclass
from typing import Callable, Generic, ParamSpec, TypeVar

from .errors import ErrorKind, FileSearchError

T = TypeVar("T")
P = ParamSpec("P")


@dataclass(frozen=True)
class Success(Generic[T]):
    """A call that returned normally."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A call that raised one of the client's errors."""

    error: FileSearchError

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


Outcome = Success[T] | Failure


def attempt(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> Outcome[T]:
    """
    Run a client call and wrap its result as a tagged outcome.

    Only ``FileSearchError`` subclasses are captured; anything else propagates.

    Example:
        >>> match attempt(client.get_store, "fileSearchStores/abc"):
        ...     case Success(value=store):
        ...         print(store.display_name)
        ...     case Failure(error=err) if err.kind is ErrorKind.HTTP_STATUS:
        ...         print(err.status)
    """
    try:
        return Success(func(*args, **kwargs))
    except FileSearchError as e:
        return Failure(e)
