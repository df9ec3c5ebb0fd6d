"""Stage definitions -- the nodes of the campaign map."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class StageType(str, Enum):
    """Difficulty tier of a stage.  Drives reward size and post-battle heal."""

    NORMAL = "normal"
    MID_BOSS = "mid_boss"
    BOSS = "boss"


class StageDefinition(BaseModel):
    """A single stage: which enemies appear and which stages it unlocks."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = ""
    type: StageType = StageType.NORMAL
    enemy_ids: list[str] = Field(alias="enemies", min_length=1)
    next_stage_ids: list[str] = Field(default_factory=list, alias="nextStages")
    description: str = ""
