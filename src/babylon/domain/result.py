"""Result type - explicit success/failure values instead of raised exceptions"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome holding a value"""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed outcome holding an error"""

    error: E

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        """Raise the held error (wrapped in RuntimeError if it is not an exception)"""
        if isinstance(self.error, BaseException):
            raise self.error
        raise RuntimeError(f"Called unwrap() on Err: {self.error!r}")

    def unwrap_or(self, default: Any) -> Any:
        return default


Result = Union[Ok[T], Err[E]]
