from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, validator


class RosterEntryPayload(BaseModel):
    number: int = Field(..., ge=0, description="Number shown on the draw display.")
    user: str = Field(..., description="Owner announced when the number wins.")

    @validator("user")
    def validate_user(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("user must not be blank.")
        return value


class RosterUploadRequest(BaseModel):
    entries: List[RosterEntryPayload]
    adjust_digits: bool = Field(True, description="Match digit count to the largest roster number.")

    @validator("entries")
    def validate_entries(cls, value: List[RosterEntryPayload]) -> List[RosterEntryPayload]:
        if not value:
            raise ValueError("Roster must contain at least one entry.")
        return value


class RosterResponse(BaseModel):
    roster_size: int
    remaining_entries: int
    digit_count: int


class SettingsUpdateRequest(BaseModel):
    digit_count: Optional[int] = Field(None, ge=1)
    min_value: Optional[int] = Field(None, ge=0)
    max_value: Optional[int] = Field(None, ge=0)
    tick_interval_ms: Optional[int] = Field(None, gt=0)
    generating_time_ms: Optional[int] = Field(None, ge=0)
    digit_stop_delay_ms: Optional[int] = Field(None, ge=0)
    settle_delay_ms: Optional[int] = Field(None, ge=0)
    default_owner: Optional[str] = None


class SettingsResponse(BaseModel):
    digit_count: int
    min_value: int
    max_value: int
    tick_interval_ms: int
    generating_time_ms: int
    digit_stop_delay_ms: int
    settle_delay_ms: int
    default_owner: str


class SlotResponse(BaseModel):
    index: int
    value: int
    stopped: bool


class WinnerResponse(BaseModel):
    id: str
    value: str
    owner: str
    completed_at: str


class SessionStateResponse(BaseModel):
    state: str
    slots: List[SlotResponse]
    value: Optional[str] = None
    owner: Optional[str] = None
    roster_size: int
    remaining_entries: int
    drawn_values: int


class DrawResponse(BaseModel):
    status: str
    state: str
