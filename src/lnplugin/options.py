"""Plugin options and the option registry.

Options are named, string-valued configuration knobs. The host learns about
them from the manifest and hands their values back in the ``init`` call.
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from lnplugin.exceptions import (
    DuplicateNameError,
    EmptyArgumentError,
    InvalidOptionValueError,
    NotFoundError,
)

logger = structlog.get_logger()

DEFAULT_OPTION_DESCRIPTION = "A lnplugin plugin option"

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "off"})


class Option(BaseModel):
    """A string-typed plugin option.

    Attributes:
        name: Unique option name, fixed at creation
        default: Value reported before the host sets one
        description: Human-readable description shown by the host

    Example:
        >>> option = Option(name="greeting", default="hello")
        >>> option.value
        'hello'
        >>> option.set("hi")
        >>> option.value
        'hi'
    """

    name: str = Field(..., min_length=1, frozen=True, description="Option name")
    default: str = Field(default="", description="Default value")
    description: str = Field(default="", description="Option description")

    _value: str | None = PrivateAttr(default=None)

    model_config = ConfigDict(validate_assignment=True)

    @property
    def description_text(self) -> str:
        """Return the description, or the generic one if none was given."""
        return self.description or DEFAULT_OPTION_DESCRIPTION

    @property
    def value(self) -> str:
        """Current value; the default until the host sets it."""
        if self._value is None:
            return self.default
        return self._value

    @property
    def is_set(self) -> bool:
        return self._value is not None

    def set(self, value: str) -> None:
        self._value = value

    def as_int(self) -> int:
        """Return the value as an integer.

        Raises:
            InvalidOptionValueError: If the value is not an integer
        """
        try:
            return int(self.value.strip())
        except ValueError as e:
            raise InvalidOptionValueError(self.name, self.value, "integer") from e

    def as_bool(self) -> bool:
        """Return the value as a boolean.

        Raises:
            InvalidOptionValueError: If the value is not a recognised boolean
        """
        lowered = self.value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise InvalidOptionValueError(self.name, self.value, "boolean")

    def to_manifest(self) -> dict[str, Any]:
        """Serialize to the manifest wire shape.

        All options are advertised as strings; ``default`` is omitted when
        empty.
        """
        entry: dict[str, Any] = {"name": self.name, "type": "string"}
        if self.default:
            entry["default"] = self.default
        entry["description"] = self.description_text
        return entry


class OptionRegistry:
    """Registry of plugin options keyed by name.

    Iteration follows registration order. Not thread-safe: options are
    registered during single-threaded setup, before the transport starts.
    """

    def __init__(self) -> None:
        self._options: dict[str, Option] = {}

    def register(self, option: Option | None) -> None:
        """Register an option.

        Raises:
            EmptyArgumentError: If option is None
            DuplicateNameError: If an option with the same name exists
        """
        if option is None:
            raise EmptyArgumentError("option")
        if option.name in self._options:
            raise DuplicateNameError("option", option.name)
        self._options[option.name] = option
        logger.debug("option_registered", option=option.name)

    def unregister(self, name: str) -> Option:
        """Remove and return the option registered under name.

        Raises:
            NotFoundError: If no such option exists
        """
        if name not in self._options:
            raise NotFoundError("option", name)
        logger.debug("option_unregistered", option=name)
        return self._options.pop(name)

    def get(self, name: str) -> Option | None:
        return self._options.get(name)

    def get_all(self) -> list[Option]:
        return list(self._options.values())

    def snapshot_values(self) -> dict[str, str]:
        """Return a name to current value mapping of every option."""
        return {name: option.value for name, option in self._options.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._options

    def __len__(self) -> int:
        return len(self._options)
