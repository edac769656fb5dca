from pydantic import BaseModel, model_validator, Field, ConfigDict
from typing import List, Optional, Any


class CreateBookingRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    clientId: Optional[str] = None
    regionId: Optional[str] = None
    date: Optional[str] = None  # ISO day, parsed by the engine
    moduleIds: List[str] = Field(default_factory=list)
    requestedParticipants: int = 0
    offerId: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def accept_scheduled_date(cls, values: Any) -> Any:
        """
        Older clients send `scheduledDate` instead of `date`; move it across
        so the engine sees a single field.
        """
        if isinstance(values, dict) and not values.get("date") and values.get("scheduledDate"):
            values = dict(values)
            values["date"] = values.pop("scheduledDate")
        return values


class CheckAvailabilityRequest(BaseModel):
    regionId: Optional[str] = None
    date: Optional[str] = None
    moduleIds: List[str] = Field(default_factory=list)
    participantCount: int = 0
