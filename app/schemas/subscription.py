from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, StrictInt


class SubscriptionSchema(BaseModel):
    id: int
    service_name: str
    price: int
    user_id: str
    start_date: str
    end_date: str = ""


class SubscriptionCreate(BaseModel):
    service_name: str
    price: StrictInt
    user_id: str
    start_date: str
    end_date: Optional[str] = None


class SubscriptionUpdate(BaseModel):
    """Partial update; only fields present in the payload are applied.

    ``end_date=""`` clears the end date. Fields left out, or sent as null,
    stay unchanged.
    """

    service_name: Optional[str] = None
    price: Optional[StrictInt] = None
    user_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    def supplied(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class SubscriptionCreated(BaseModel):
    id: int


class TotalCostSchema(BaseModel):
    total: int
