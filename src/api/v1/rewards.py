# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rewards API endpoints.

Students only:
- POST /challenges/{challenge_id}/complete - Complete a challenge
- GET /challenges/completed - List completed challenges
- GET /challenges/{challenge_id}/status - Whether a challenge is completed
- POST /content/{content_id}/complete - Finish a video or book
- GET /summary - Stars and badges summary

Completing a challenge awards a category badge and project stars, then
re-evaluates tier badges and the Visionary badge. Finishing a video earns
one star and a book twenty.
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status

from src.api.dependencies import Database, StudentUser
from src.domains.rewards import (
    ChallengeAlreadyCompletedError,
    ChallengeNotFoundError,
    ContentNotFoundError,
    RewardsService,
)
from src.models.common import ApiResponse
from src.models.rewards import CompleteChallengeRequest, RewardsSummary

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_rewards_service(db) -> RewardsService:
    return RewardsService(db)


@router.post(
    "/challenges/{challenge_id}/complete",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Complete challenge",
)
async def complete_challenge(
    challenge_id: str,
    current_user: StudentUser,
    db: Database,
    data: CompleteChallengeRequest | None = None,
) -> ApiResponse:
    notes = data.completion_notes if data else None
    service = _get_rewards_service(db)
    try:
        result = await service.complete_challenge(current_user.id, challenge_id, notes)
    except ChallengeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ChallengeAlreadyCompletedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ApiResponse(message="Challenge completed successfully", data=result)


@router.get(
    "/challenges/completed",
    summary="List completed challenges",
)
async def list_completed_challenges(
    current_user: StudentUser,
    db: Database,
) -> list[dict[str, Any]]:
    return await _get_rewards_service(db).list_completed_challenges(current_user.id)


@router.get(
    "/challenges/{challenge_id}/status",
    summary="Challenge completion status",
)
async def challenge_status(
    challenge_id: str,
    current_user: StudentUser,
    db: Database,
) -> dict[str, bool]:
    completed = await _get_rewards_service(db).is_challenge_completed(
        current_user.id, challenge_id
    )
    return {"isCompleted": completed}


@router.get(
    "/summary",
    response_model=RewardsSummary,
    summary="Rewards summary",
)
async def rewards_summary(
    current_user: StudentUser,
    db: Database,
) -> RewardsSummary:
    summary = await _get_rewards_service(db).get_rewards_summary(current_user.id)
    return RewardsSummary.model_validate(summary)


@router.post(
    "/content/{content_id}/complete",
    response_model=ApiResponse,
    summary="Complete educational content",
)
async def complete_content(
    content_id: str,
    current_user: StudentUser,
    db: Database,
) -> ApiResponse:
    service = _get_rewards_service(db)
    try:
        result = await service.complete_content(current_user.id, content_id)
    except ContentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ApiResponse(message="Educational content completed successfully", data=result)
