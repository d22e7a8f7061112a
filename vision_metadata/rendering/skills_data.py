from __future__ import annotations

from typing import Any, Dict, List, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field


CategoryClass = Literal["keyword", "transcript"]
CATEGORY_CLASSES: Tuple[str, ...] = ("keyword", "transcript")


# ---------
# skills_data document (metadata-store skill card template)
# ---------

class SkillEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str


class SkillsDataCard(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    # field order is the serialized key order
    type: Literal["skills_data"] = "skills_data"
    skills_data_type: CategoryClass
    skill: Dict[str, Any] = Field(default_factory=dict)
    invocation: Dict[str, Any] = Field(default_factory=dict)
    title: str
    entries: List[SkillEntry] = Field(default_factory=list)


class SkillsDataDocument(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    skills_data: List[SkillsDataCard]

    def to_json(self) -> str:
        """
        Compact JSON, keys in schema order. Same document -> same string.
        """
        return self.model_dump_json()
