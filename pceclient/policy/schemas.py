"""
Label Group Schemas.

Pydantic models for label group resources. Unknown fields sent by the PCE
are ignored on decode; unset fields are left out when serializing.
"""

from pydantic import BaseModel, ConfigDict, Field


class LabelRef(BaseModel):
    """Terminal label referenced by a label group."""

    href: str = Field(description="Label href")
    key: str | None = Field(default=None, description="Label dimension, e.g. role")
    value: str | None = Field(default=None, description="Label value")

    model_config = ConfigDict(extra="ignore")


class SubGroupRef(BaseModel):
    """Label group nested inside another label group."""

    href: str = Field(description="Label group href")
    name: str | None = None

    model_config = ConfigDict(extra="ignore")


class Usage(BaseModel):
    """Where a label group is used. Computed by the PCE, never created or updated."""

    label_group: bool = False
    rule: bool = False
    ruleset: bool = False
    static_policy_scopes: bool | None = None

    model_config = ConfigDict(extra="ignore")


class LabelGroup(BaseModel):
    """Label group as returned by /sec_policy/<status>/label_groups."""

    href: str | None = None
    name: str | None = None
    description: str | None = None
    key: str | None = Field(default=None, description="Label dimension; immutable after creation")
    labels: list[LabelRef] | None = None
    sub_groups: list[SubGroupRef] | None = None
    usage: Usage | None = None
    external_data_reference: str | None = None
    external_data_set: str | None = None

    model_config = ConfigDict(extra="ignore")

    def to_json(self) -> bytes:
        """Serialize for a POST/PUT body, omitting unset fields."""
        return self.model_dump_json(exclude_none=True).encode("utf-8")

    def label_hrefs(self) -> list[str]:
        """Hrefs of the directly contained labels."""
        return [label.href for label in self.labels or []]

    def sub_group_hrefs(self) -> list[str]:
        """Hrefs of the directly contained subgroups."""
        return [sub_group.href for sub_group in self.sub_groups or []]
