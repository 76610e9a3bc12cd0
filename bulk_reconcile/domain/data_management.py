"""
Identity configuration for record types.

A DataManagement block says which record types are managed (regex include and
exclude lists) and which ordered fields identify a record of each type when no
remote identifier is known in advance.
"""
from __future__ import annotations

import re
from typing import List

from pydantic import BaseModel, Field

LIST_SETTING_ID_FIELDS = ["Name"]


class IdFieldsOverride(BaseModel):
    """Identity fields for the record types whose name matches `object_pattern`."""

    object_pattern: str
    id_fields: List[str] = Field(..., min_length=1)

    model_config = {"frozen": True}


class DataManagement(BaseModel):
    include_objects: List[str] = Field(default_factory=list)
    exclude_objects: List[str] = Field(default_factory=list)
    default_id_fields: List[str] = Field(..., min_length=1)
    id_field_overrides: List[IdFieldsOverride] = Field(default_factory=list)

    model_config = {"frozen": True}

    def is_object_match(self, type_name: str) -> bool:
        included = any(re.search(pattern, type_name) for pattern in self.include_objects)
        excluded = any(re.search(pattern, type_name) for pattern in self.exclude_objects)
        return included and not excluded

    def id_fields_for(self, type_name: str) -> List[str]:
        """Ordered identity field names for a type; first matching override wins."""
        for override in self.id_field_overrides:
            if re.search(override.object_pattern, type_name):
                return list(override.id_fields)
        return list(self.default_id_fields)

    @classmethod
    def for_list_setting(cls, type_name: str) -> "DataManagement":
        return cls(
            include_objects=[f"^{re.escape(type_name)}"],
            default_id_fields=list(LIST_SETTING_ID_FIELDS),
        )


__all__ = ["DataManagement", "IdFieldsOverride", "LIST_SETTING_ID_FIELDS"]
