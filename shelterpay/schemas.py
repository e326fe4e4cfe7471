from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class UserData(BaseModel):
    firstName: str = ""
    lastName: str = ""
    email: str = ""
    phone: str = ""


class CreatePaymentSessionRequest(BaseModel):
    userId: str
    shelterId: str
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    userData: UserData = Field(default_factory=UserData)
    bookingData: Dict[str, Any] = Field(default_factory=dict)


class PaymentSessionResponse(BaseModel):
    iframeUrl: str


class UpdateBookingStatusRequest(BaseModel):
    # Validated by the status updater so unknown values map to 400, not 422.
    status: Any = None
    actorId: Optional[str] = None
    note: Optional[str] = None


class OkResponse(BaseModel):
    ok: bool = True
