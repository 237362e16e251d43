from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

MENU_SCHEMA_VERSION = 1


class MenuMode(str, Enum):
    MEMBER = "member"
    ADMIN = "admin"


class MenuEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    label: str = ""
    visible: bool = True
    order: int = 0
    is_header: bool = Field(default=False, alias="isHeader")


class MenuConfigDocument(BaseModel):
    schema_version: int = MENU_SCHEMA_VERSION
    entries: list[MenuEntry] = Field(default_factory=list)


class RenderItem(BaseModel):
    destination_id: str
    label: str
    icon: str | None = None
    is_header: bool = False
