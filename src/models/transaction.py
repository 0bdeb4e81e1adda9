# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Payment transaction models."""

from pydantic import Field

from src.models.common import CamelModel, PaymentMethod, TransactionType


class SchoolTransactionRequest(CamelModel):
    """First payment for a pending school, matched by name."""

    school_name: str = Field(min_length=1)
    amount: float = Field(ge=0)
    currency: str = Field(default="RWF", min_length=3, max_length=3)
    number_of_kids: int = Field(ge=1)
    payment_method: PaymentMethod = PaymentMethod.MOBILE_MONEY_RWANDA
    transaction_type: TransactionType
    notes: str | None = None


class ParentTransactionRequest(CamelModel):
    parent_id: str
    student_id: str
    amount: float = Field(ge=0)
    currency: str = Field(default="RWF", min_length=3, max_length=3)
    payment_method: PaymentMethod = PaymentMethod.MOBILE_MONEY_RWANDA
    transaction_type: TransactionType
    notes: str | None = None


class RenewSchoolTransactionRequest(CamelModel):
    school_id: str
    amount: float = Field(ge=0)
    currency: str = Field(default="RWF", min_length=3, max_length=3)
    number_of_kids: int = Field(ge=1)
    payment_method: PaymentMethod = PaymentMethod.MOBILE_MONEY_RWANDA
    transaction_type: TransactionType = TransactionType.SUBSCRIPTION
    notes: str | None = None
