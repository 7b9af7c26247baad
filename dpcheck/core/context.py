"""Test execution context - holds data captured while a scenario runs.

One ``TestContext`` is created per scenario run and handed by reference to
every collaborator that needs it (steps, dispatcher). Nothing in dpcheck keeps
a module-level instance, so two runs in the same process never share state
unless the caller passes the same object to both.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from dpcheck.core.exceptions import ValidationException, ValueNotSetException

_MISSING = object()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TestContext:
    """Runtime state captured from the dashboard during a single run."""

    __test__ = False  # not a pytest test class

    data_plane_url: Optional[str] = None
    write_key: Optional[str] = None
    test_data: Dict[str, Any] = field(default_factory=dict)
    started_at: datetime = field(default_factory=_utc_now)

    @staticmethod
    def _require_text(name: str, value: Any) -> str:
        if not isinstance(value, str):
            raise ValidationException(
                f"{name} must be a string, got {type(value).__name__}"
            )
        value = value.strip()
        if not value:
            raise ValidationException(f"{name} must not be empty")
        return value

    def set_data_plane_url(self, url: str) -> None:
        self.data_plane_url = self._require_text("Data plane URL", url)

    def get_data_plane_url(self) -> str:
        if self.data_plane_url is None:
            raise ValueNotSetException("Data plane URL")
        return self.data_plane_url

    def set_write_key(self, key: str) -> None:
        self.write_key = self._require_text("Write key", key)

    def get_write_key(self) -> str:
        if self.write_key is None:
            raise ValueNotSetException("Write key")
        return self.write_key

    def set_test_data(self, key: str, value: Any) -> None:
        self.test_data[key] = value

    def get_test_data(self, key: str, default: Any = _MISSING) -> Any:
        """Return a scenario-specific value.

        Raises ValueNotSetException for an unknown key unless a default is given.
        """
        if key in self.test_data:
            return self.test_data[key]
        if default is _MISSING:
            raise ValueNotSetException(f"Test data '{key}'")
        return default

    def has_test_data(self, key: str) -> bool:
        return key in self.test_data

    def clear_all(self) -> None:
        """Reset every field so the object can back another isolated run."""
        self.data_plane_url = None
        self.write_key = None
        self.test_data.clear()
        self.started_at = _utc_now()
