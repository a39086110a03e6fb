"""Success-or-fallback result type.

Operations that must always produce a value (insight generation, final
assessment) return an ``Outcome``. A fallback outcome still carries a usable
value, along with the error that forced the fallback.

Usage:
    outcome = await client.generate_insight(batch)
    insight = outcome.value
    if outcome.is_fallback:
        logger.info(f"Used fallback: {outcome.error}")
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """A value produced either by the primary path or by a fallback."""

    value: T
    _error: BaseException | None = None
    _is_fallback: bool = False

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def fallback(cls, value: T, error: BaseException | None = None) -> "Outcome[T]":
        """Wrap a substitute value.

        ``error`` is None when the fallback was chosen up front (for example
        because the AI client is not configured) rather than after a failure.
        """
        return cls(value=value, _error=error, _is_fallback=True)

    @property
    def is_success(self) -> bool:
        return not self._is_fallback

    @property
    def is_fallback(self) -> bool:
        return self._is_fallback

    @property
    def error(self) -> BaseException | None:
        """The error that caused the fallback.

        Raises:
            ValueError: If called on a successful outcome.
        """
        if not self._is_fallback:
            raise ValueError("Called error on Outcome.success")
        return self._error
