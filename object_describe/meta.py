"""
Shared conversion of report dataclasses into JSON-ready dictionaries.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from dataclasses import fields, is_dataclass
from typing import Any


# Classes --------------------------------------------------------------------------------------------------------------

class MetaMixin:
    """
    A mixin for report dataclasses to provide `to_dict` method.

    Field names are converted to camelCase keys. Nested reports are converted
    recursively, tuples become lists and any other non-JSON value is stringified.
    """

    def to_dict(self, include_none_attrs: bool = False) -> dict[str, Any]:
        """Convert instance to a dictionary representation.

        Args:
            include_none_attrs: If True, keys with None values are included.

        Returns:
            A dictionary representation of the instance.

        Raises:
            TypeError: If instance class is not a dataclass.
        """
        if not is_dataclass(self):
            raise TypeError(f"{self.__class__.__name__} must be a dataclass to use MetaMixin.")

        dict_ = {
            camel_case(field.name): _to_plain(getattr(self, field.name), include_none_attrs)
            for field in fields(self)
        }

        if not include_none_attrs:
            return {k: v for k, v in dict_.items() if v is not None}

        return dict_


# Methods --------------------------------------------------------------------------------------------------------------

def camel_case(name: str) -> str:
    """
    Convert a snake_case field name to camelCase.

    Examples:
        >>> camel_case("prototype_description")
        'prototypeDescription'
    """
    head, *tail = name.split("_")
    return head + "".join(part.capitalize() for part in tail)


# Private Methods ------------------------------------------------------------------------------------------------------

def _to_plain(value: Any, include_none_attrs: bool) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, MetaMixin):
        return value.to_dict(include_none_attrs=include_none_attrs)
    if isinstance(value, (tuple, list)):
        return [_to_plain(item, include_none_attrs) for item in value]
    return str(value)
