# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Payment transaction API endpoints.

All endpoints require the super admin role:
- POST /school - Record a pending school's first payment
- POST /parent - Record a parent payment for a child
- POST /renew - Renew a school subscription
- GET / - List transactions with resolved names
- GET /pending-schools - List schools awaiting payment

Example:
    POST /api/v1/transactions/school
    {
        "schoolName": "Green Hills Academy",
        "amount": 150000,
        "numberOfKids": 40,
        "currency": "RWF",
        "paymentMethod": "mobilemoneyrwanda",
        "transactionType": "subscription"
    }
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status

from src.api.dependencies import Database, Email, Redis, SuperAdmin
from src.domains.transaction import (
    SchoolNotPendingError,
    TemporaryPasswordNotFoundError,
    TransactionService,
    TransactionServiceError,
    TransactionTargetNotFoundError,
)
from src.models.common import ApiResponse
from src.models.transaction import (
    ParentTransactionRequest,
    RenewSchoolTransactionRequest,
    SchoolTransactionRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_transaction_service(db, redis=None, email=None) -> TransactionService:
    return TransactionService(db, redis, email)


@router.post(
    "/school",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record school payment",
    description=(
        "Activates a pending school, sets its student limit and emails the "
        "temporary password to the school."
    ),
)
async def create_school_transaction(
    data: SchoolTransactionRequest,
    current_user: SuperAdmin,
    db: Database,
    redis: Redis,
    email: Email,
) -> ApiResponse:
    service = _get_transaction_service(db, redis, email)
    try:
        result = await service.create_school_transaction(data)
    except SchoolNotPendingError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except TemporaryPasswordNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail=str(e))
    except TransactionServiceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        )

    return ApiResponse(
        message="Transaction created, school activated and onboarding email sent",
        data=result,
    )


@router.post(
    "/parent",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record parent payment",
)
async def create_parent_transaction(
    data: ParentTransactionRequest,
    current_user: SuperAdmin,
    db: Database,
) -> ApiResponse:
    service = _get_transaction_service(db)
    try:
        transaction = await service.create_parent_transaction(data)
    except TransactionTargetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ApiResponse(message="Parent transaction created successfully", data=transaction)


@router.post(
    "/renew",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Renew school subscription",
)
async def renew_school_transaction(
    data: RenewSchoolTransactionRequest,
    current_user: SuperAdmin,
    db: Database,
) -> ApiResponse:
    service = _get_transaction_service(db)
    try:
        result = await service.renew_school_transaction(data)
    except TransactionTargetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ApiResponse(message="School subscription renewed successfully", data=result)


@router.get(
    "",
    summary="List transactions",
)
async def list_transactions(
    current_user: SuperAdmin,
    db: Database,
) -> list[dict[str, Any]]:
    return await _get_transaction_service(db).list_transactions()


@router.get(
    "/pending-schools",
    summary="List schools awaiting payment",
)
async def list_pending_schools(
    current_user: SuperAdmin,
    db: Database,
) -> list[dict[str, Any]]:
    return await _get_transaction_service(db).list_pending_schools()
