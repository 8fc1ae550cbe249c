"""Base class for immutable configuration payloads."""

from dataclasses import dataclass, replace
from typing import TypeVar

ConfigT = TypeVar("ConfigT", bound="_NLSBaseConfig")


@dataclass(frozen=True)
class _NLSBaseConfig:
    """Marker base class for frozen configuration dataclasses.

    Subclasses override :meth:`_validate`, which runs after construction and
    after every :meth:`merge`.
    """

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Validate the configuration."""
        return None

    def merge(self: ConfigT, **overrides) -> ConfigT:
        """Return a copy with *overrides* applied and re-validated."""
        return replace(self, **overrides)
