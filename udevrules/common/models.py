from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

MAX_USB_ID = 0xFFFF
DEFAULT_GROUP = "plugdev"


class UdevMode(str, Enum):
    restricted_group = "restricted-group"
    session_access = "session-access"


# Older names for the two modes ("headless" boxes vs. logged-in desktop sessions).
MODE_ALIASES = {
    "headless": UdevMode.restricted_group,
    "desktop": UdevMode.session_access,
}


class DeviceRule(BaseModel):
    vendor_id: int = Field(..., ge=0, le=MAX_USB_ID)
    product_ids: list[int] | None = Field(
        default=None,
        description="Allowed product ids; None allows every product of the vendor.",
    )

    @field_validator("product_ids")
    @classmethod
    def _check_product_ids(cls, v: list[int] | None) -> list[int] | None:
        if v is None:
            return v
        for pid in v:
            if not 0 <= pid <= MAX_USB_ID:
                raise ValueError(f"product id out of range: {pid}")
        # set semantics, first-seen order
        return list(dict.fromkeys(v))

    @property
    def is_wildcard(self) -> bool:
        return self.product_ids is None


class GeneratorOptions(BaseModel):
    mode: UdevMode = UdevMode.restricted_group
    group_name: str | None = Field(
        default=None,
        description="Owning group in restricted-group mode (defaults to plugdev).",
    )

    @field_validator("mode", mode="before")
    @classmethod
    def _coerce_mode(cls, v: Any) -> Any:
        if isinstance(v, UdevMode):
            return v
        if isinstance(v, str):
            key = v.strip().lower()
            if key in MODE_ALIASES:
                return MODE_ALIASES[key]
            for m in UdevMode:
                if m.value == key:
                    return m
        return UdevMode.restricted_group

    @field_validator("group_name", mode="before")
    @classmethod
    def _coerce_group(cls, v: Any) -> Any:
        return v if isinstance(v, str) else None

    @property
    def effective_group(self) -> str:
        if self.group_name and self.group_name.strip():
            return self.group_name.strip()
        return DEFAULT_GROUP
