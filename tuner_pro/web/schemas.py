from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from tuner_pro.frames import DEFAULT_FRAME_SIZE


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class InitMessage(_Model):
    type: Literal["init"]
    sample_rate: int = Field(alias="sampleRate", ge=8_000, le=192_000)
    frame_size: int = Field(alias="frameSize", default=DEFAULT_FRAME_SIZE, ge=256, le=32_768)


class StartMessage(_Model):
    type: Literal["start"]


class StopMessage(_Model):
    type: Literal["stop"]


class StatusEvent(_Model):
    type: Literal["status"] = "status"
    message: str


class ErrorEvent(_Model):
    type: Literal["error"] = "error"
    code: str
    message: str


class TuningTarget(_Model):
    note: str
    frequency: float
    instruments: list[str]
    equal_tempered: float | None = Field(alias="equalTempered", default=None)


class TunerStateEvent(_Model):
    type: Literal["tuner_state"] = "tuner_state"
    frequency: float
    note: str
    cents: int
    confidence: int = Field(ge=0, le=1)
    listening: bool
    target: TuningTarget | None
    in_tune: bool = Field(alias="inTune")
    direction: Literal["sharp", "flat"] | None
    needle: float


class CatalogResponse(_Model):
    instruments: list[str]
    entries: list[TuningTarget]
