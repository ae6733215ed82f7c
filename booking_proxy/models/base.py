"""Shared base for inbound JSON bodies."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from booking_proxy.errors import MissingParameterError


class RequestBody(BaseModel):
    """Lenient request body.

    Every field is optional at the schema level so that absent values can be
    reported as a 400 listing the missing names, instead of a 422.  Numbers
    sent for text fields are accepted as strings.
    """

    model_config = ConfigDict(
        populate_by_name=True, extra="ignore", coerce_numbers_to_str=True
    )

    def require(self, *fields: str) -> None:
        """Raise MissingParameterError for any of ``fields`` left blank.

        Field names are reported by their camelCase wire name.
        """
        missing = []
        for name in fields:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(_wire_name(name))
        if missing:
            raise MissingParameterError(missing)


def _wire_name(field_name: str) -> str:
    head, *rest = field_name.split("_")
    return head + "".join(part.title() for part in rest)


def camel_or_pascal(camel: str, pascal: str, *more: str):
    """Optional field readable under either naming convention."""
    return Field(default=None, validation_alias=AliasChoices(camel, pascal, *more))
