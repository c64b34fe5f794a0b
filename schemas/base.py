from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class SchemaBase(BaseModel):
    """Shared pydantic base: strict on unknown keys, accepts field names or aliases."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def to_dict(self, *, by_alias: bool = False) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=by_alias)


class ModelOutputBase(SchemaBase):
    """Base for shapes decoded from LLM output.

    Unknown keys are ignored: the model routinely adds extras (productionNotes, ids)
    and those must not fail the whole record.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)
