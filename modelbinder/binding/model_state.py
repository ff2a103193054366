"""
Model state: per-key raw values and binding errors collected while binding a request.
"""

import logging
from typing import Any, Dict, ItemsView, Iterator, List, Optional

from modelbinder.models.binding import ModelError, ModelStateEntry

logger = logging.getLogger(__name__)

TOO_MANY_ERRORS_MESSAGE = "The maximum number of allowed model errors has been reached."


class ModelStateDictionary:
    """Maps model names (`people[0].age`) to `ModelStateEntry` objects."""

    def __init__(self, max_allowed_errors: int = 200) -> None:
        self.max_allowed_errors = max_allowed_errors
        self._entries: Dict[str, ModelStateEntry] = {}
        self._error_count = 0
        self._has_recorded_max_error = False

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __getitem__(self, key: str) -> ModelStateEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def items(self) -> ItemsView[str, ModelStateEntry]:
        return self._entries.items()

    def get(self, key: str) -> Optional[ModelStateEntry]:
        return self._entries.get(key)

    def _get_or_add(self, key: str) -> ModelStateEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = ModelStateEntry()
            self._entries[key] = entry
        return entry

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def has_reached_max_errors(self) -> bool:
        return self._error_count >= self.max_allowed_errors

    @property
    def is_valid(self) -> bool:
        return self._error_count == 0

    def set_model_value(
        self, key: str, raw_value: Any, attempted_value: Optional[str]
    ) -> None:
        entry = self._get_or_add(key)
        entry.raw_value = raw_value
        entry.attempted_value = attempted_value

    def has_errors(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and bool(entry.errors)

    def add_model_error(
        self, key: str, message: str, exception: Optional[BaseException] = None
    ) -> bool:
        """
        记录一条错误。达到 `max_allowed_errors` 后不再记录，
        并在空键 "" 下写入一次 "too many errors" 提示。

        Returns:
            bool: 错误是否被记录。
        """
        if self.has_reached_max_errors:
            if not self._has_recorded_max_error:
                logger.warning(
                    f"Model state reached {self.max_allowed_errors} errors; further errors are dropped."
                )
                self._get_or_add("").errors.append(
                    ModelError(error_message=TOO_MANY_ERRORS_MESSAGE)
                )
                self._get_or_add("").validation_state = "invalid"
                self._has_recorded_max_error = True
            return False

        entry = self._get_or_add(key)
        entry.errors.append(
            ModelError(
                error_message=message,
                exception_type=type(exception).__name__ if exception else None,
            )
        )
        entry.validation_state = "invalid"
        self._error_count += 1
        return True

    def to_errors(self) -> Dict[str, List[str]]:
        """Error messages grouped by key, for JSON responses."""
        return {
            key: [error.error_message for error in entry.errors]
            for key, entry in self._entries.items()
            if entry.errors
        }
