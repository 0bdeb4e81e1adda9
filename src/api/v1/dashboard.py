# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Dashboard API endpoint.

- GET / - Summary for the caller's role

Super admins see platform totals, school admins their seats, parents their
children, students their rewards and mentors their credentials and content.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from src.api.dependencies import AuthenticatedUser, Database
from src.domains.dashboard import (
    DashboardSchoolNotFoundError,
    DashboardService,
    UnsupportedRoleError,
)
from src.models.common import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_dashboard_service(db) -> DashboardService:
    return DashboardService(db)


@router.get(
    "",
    response_model=ApiResponse,
    summary="Role dashboard",
)
async def get_dashboard(
    current_user: AuthenticatedUser,
    db: Database,
) -> ApiResponse:
    service = _get_dashboard_service(db)
    try:
        result = await service.get_dashboard(current_user.id, current_user.role)
    except UnsupportedRoleError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except DashboardSchoolNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ApiResponse(message="Dashboard data retrieved successfully", data=result)
