from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from character_creation.context import (
    RANDOM,
    EthnicityMode,
    GenerationOptions,
    Locks,
    RaceMode,
)
from character_creation.darkdawn import DarkDawnLocks


class LockFlags(BaseModel):
    name: bool = False
    traits: bool = False
    occupation: bool = False
    gender: bool = False
    race: bool = False
    class_: bool = Field(False, alias="class")
    background: bool = False
    life: bool = False

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def to_locks(self) -> Locks:
        return Locks.from_mapping(self.model_dump(by_alias=True))


class GenerateRequest(BaseModel):
    books: List[str] = Field(default_factory=list, description="Book codes to enable; settings default when empty")
    ethnicity_mode: Optional[EthnicityMode] = None
    race_mode: Optional[RaceMode] = None
    race: str = RANDOM
    gender: str = RANDOM
    class_: str = Field(RANDOM, alias="class")
    background: str = RANDOM
    name: str = Field("", description="Manual name; blank generates one")
    locks: LockFlags = Field(default_factory=LockFlags)
    lock_all: bool = False
    previous: Dict[str, Any] = Field(default_factory=dict, description="Prior record, read for locked fields")
    seed: Optional[int] = None

    model_config = ConfigDict(populate_by_name=True)

    def to_options(self, default_books: List[str], ethnicity_mode: EthnicityMode, race_mode: RaceMode) -> GenerationOptions:
        return GenerationOptions(
            books=self.books or default_books,
            ethnicity_mode=self.ethnicity_mode or ethnicity_mode,
            race_mode=self.race_mode or race_mode,
            race=self.race,
            gender=self.gender,
            char_class=self.class_,
            background=self.background,
            name=self.name,
            locks=Locks.lock_all() if self.lock_all else self.locks.to_locks(),
        )


class StageResponse(BaseModel):
    stage: str
    value: Any = None
    character: Dict[str, Any]


class BooksResponse(BaseModel):
    available: List[str]
    universal: List[str]
    default: List[str]


class DarkDawnRequest(BaseModel):
    name: str = ""
    locks: Dict[str, bool] = Field(default_factory=dict)
    previous: Dict[str, Any] = Field(default_factory=dict)
    seed: Optional[int] = None

    @field_validator("locks")
    @classmethod
    def _known_locks(cls, value: Dict[str, bool]) -> Dict[str, bool]:
        DarkDawnLocks.from_mapping(value)
        return value

    def to_locks(self) -> DarkDawnLocks:
        return DarkDawnLocks.from_mapping(self.locks)


class ErrorEnvelope(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None
