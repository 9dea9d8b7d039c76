"""FlagRecord entity schema.

Represents a LaunchDarkly feature flag as returned by the list and get endpoints.
Only the fields the expiry run reads are modelled; everything else is ignored.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CustomProperty(BaseModel):
    """A named, string-list-valued custom property attached to a flag.

    Examples:
        >>> prop = CustomProperty(name="flag.expiry.date", value=["08/17/2025"])
        >>> prop.value[0]
        '08/17/2025'
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(default="", description="Property display name")
    value: list[str] = Field(default_factory=list, description="Property values")


class FlagRecord(BaseModel):
    """FlagRecord entity representing one LaunchDarkly feature flag.

    creation_date is kept raw (epoch milliseconds in practice) because the API
    occasionally returns flags with a missing or malformed value (any JSON type);
    the expiry filter decides what to do with those.

    Examples:
        >>> flag = FlagRecord.model_validate(
        ...     {
        ...         "key": "new-checkout",
        ...         "name": "New checkout",
        ...         "creationDate": 1752875955933,
        ...         "customProperties": {},
        ...     }
        ... )
        >>> flag.existing_value("flag.expiry.date") is None
        True
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    key: str = Field(..., min_length=1, description="Unique flag key within the project")
    name: str = Field(default="", description="Human-readable flag name")
    creation_date: Any = Field(
        default=None,
        alias="creationDate",
        description="Creation time in epoch milliseconds",
        examples=[1752875955933],
    )
    custom_properties: dict[str, CustomProperty] = Field(
        default_factory=dict,
        alias="customProperties",
        description="Custom properties keyed by property key",
    )

    def existing_value(self, property_name: str) -> str | None:
        """Return the first value of a custom property, or None if it has none."""
        prop = self.custom_properties.get(property_name)
        if prop is None or not prop.value:
            return None
        return prop.value[0]

    def has_property_value(self, property_name: str) -> bool:
        return self.existing_value(property_name) is not None


__all__ = ["CustomProperty", "FlagRecord"]
