# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent-driven student registration models."""

from pydantic import Field

from src.models.common import CamelModel, PaymentMethod


class TempStudentCreateRequest(CamelModel):
    """Child details staged until the registration payment completes."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    age: int = Field(ge=3, le=25)
    grade: str = Field(min_length=1)
    password: str = Field(min_length=6)


class CompleteRegistrationRequest(CamelModel):
    child_temp_id: str = Field(min_length=1)
    amount: float = Field(ge=0)
    payment_method: PaymentMethod = PaymentMethod.MOBILE_MONEY_RWANDA
    notes: str | None = None
