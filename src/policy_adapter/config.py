"""Adapter configuration.

``AdapterConfig`` is what a host application deserializes from its own
settings file and hands to :func:`policy_adapter.adapters.create_adapter`.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class AdapterConfig(BaseModel):
    """Storage adapter configuration.

    Attributes:
        type:         Backend (``"memory"`` or ``"sqlite"``).
        path:         SQLite database file (required for the sqlite backend).
        table_name:   Rule table name.
        timeout:      Per-operation timeout in seconds, ``None`` for no limit.
        create_table: Create the rule table on open when it is missing.
    """

    type: Literal["memory", "sqlite"] = "memory"
    path: str = ""
    table_name: str = "casbin_rule"
    timeout: float | None = Field(default=None, gt=0)
    create_table: bool = True

    @field_validator("table_name")
    @classmethod
    def check_table_name(cls, value: str) -> str:
        if not _IDENTIFIER.match(value):
            raise ValueError(f"'{value}' is not a valid SQL identifier")
        return value

    @model_validator(mode="after")
    def check_path(self) -> AdapterConfig:
        if self.type == "sqlite" and not self.path:
            raise ValueError("SQLite adapter requires 'path' configuration")
        return self
