# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API endpoints.

This module provides endpoints for authentication:
- POST /register - Parent or super admin self-registration
- POST /login - Email/password sign-in for users
- POST /school/signin - School admin sign-in
- POST /mentor/signin - Mentor sign-in
- POST /mentor/register - Mentor self-registration (multipart)
- POST /parent/signin - Parent sign-in
- POST /child/login - Student sign-in with first name and password
- GET /me - Current principal

Sign-in and registration endpoints are rate limited per client IP.

Example:
    POST /api/v1/auth/login
    {
        "email": "parent@example.com",
        "password": "secret1"
    }
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile, status

from src.api.dependencies import JWT, AuthenticatedUser, Database, Storage, read_upload
from src.api.middleware.rate_limit import auth_limit, get_ip_only, limiter
from src.domains.auth.service import (
    AuthService,
    EmailInUseError,
    InvalidCredentialsError,
    PrincipalNotFoundError,
    RegistrationNotAllowedError,
)
from src.models.auth import (
    AuthResponse,
    ChildLoginRequest,
    LoginRequest,
    MentorRegisterRequest,
    RegisterRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_auth_service(db, jwt_manager, storage=None) -> AuthService:
    return AuthService(db, jwt_manager, storage)


def _unauthorized(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=str(e),
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Self-registration. Only parents and super admins may register this way.",
)
@limiter.limit(auth_limit, key_func=get_ip_only)
async def register(
    request: Request,
    data: RegisterRequest,
    db: Database,
    jwt_manager: JWT,
) -> AuthResponse:
    service = _get_auth_service(db, jwt_manager)
    try:
        return await service.register(data)
    except RegistrationNotAllowedError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except EmailInUseError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Sign in",
)
@limiter.limit(auth_limit, key_func=get_ip_only)
async def login(
    request: Request,
    data: LoginRequest,
    db: Database,
    jwt_manager: JWT,
) -> AuthResponse:
    service = _get_auth_service(db, jwt_manager)
    try:
        return await service.login(data.email, data.password)
    except InvalidCredentialsError as e:
        raise _unauthorized(e)


@router.post(
    "/school/signin",
    response_model=AuthResponse,
    summary="School admin sign in",
    description="Signs in against the schools collection. The token subject is the school id.",
)
@limiter.limit(auth_limit, key_func=get_ip_only)
async def school_signin(
    request: Request,
    data: LoginRequest,
    db: Database,
    jwt_manager: JWT,
) -> AuthResponse:
    service = _get_auth_service(db, jwt_manager)
    try:
        return await service.school_signin(data.email, data.password)
    except InvalidCredentialsError as e:
        raise _unauthorized(e)


@router.post(
    "/mentor/signin",
    response_model=AuthResponse,
    summary="Mentor sign in",
)
@limiter.limit(auth_limit, key_func=get_ip_only)
async def mentor_signin(
    request: Request,
    data: LoginRequest,
    db: Database,
    jwt_manager: JWT,
) -> AuthResponse:
    service = _get_auth_service(db, jwt_manager)
    try:
        return await service.mentor_signin(data.email, data.password)
    except InvalidCredentialsError as e:
        raise _unauthorized(e)


@router.post(
    "/mentor/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Mentor self-registration",
    description="Multipart form with an optional photo and national ID document.",
)
@limiter.limit(auth_limit, key_func=get_ip_only)
async def mentor_register(
    request: Request,
    data: Annotated[MentorRegisterRequest, Form()],
    db: Database,
    jwt_manager: JWT,
    storage: Storage,
    photo: Annotated[UploadFile | None, File()] = None,
    national_id: Annotated[UploadFile | None, File(alias="nationalId")] = None,
) -> AuthResponse:
    service = _get_auth_service(db, jwt_manager, storage)
    try:
        return await service.mentor_self_register(
            data,
            photo=await read_upload(photo),
            national_id=await read_upload(national_id),
        )
    except EmailInUseError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post(
    "/parent/signin",
    response_model=AuthResponse,
    summary="Parent sign in",
)
@limiter.limit(auth_limit, key_func=get_ip_only)
async def parent_signin(
    request: Request,
    data: LoginRequest,
    db: Database,
    jwt_manager: JWT,
) -> AuthResponse:
    service = _get_auth_service(db, jwt_manager)
    try:
        return await service.parent_signin(data.email, data.password)
    except InvalidCredentialsError as e:
        raise _unauthorized(e)


@router.post(
    "/child/login",
    response_model=AuthResponse,
    summary="Student sign in",
    description="Students sign in with first name and password.",
)
@limiter.limit(auth_limit, key_func=get_ip_only)
async def child_login(
    request: Request,
    data: ChildLoginRequest,
    db: Database,
    jwt_manager: JWT,
) -> AuthResponse:
    service = _get_auth_service(db, jwt_manager)
    try:
        return await service.child_login(data.first_name, data.password)
    except InvalidCredentialsError as e:
        raise _unauthorized(e)


@router.get(
    "/me",
    summary="Current principal",
)
async def me(
    current_user: AuthenticatedUser,
    db: Database,
    jwt_manager: JWT,
) -> dict[str, Any]:
    service = _get_auth_service(db, jwt_manager)
    try:
        return await service.get_principal(current_user.id, current_user.role)
    except PrincipalNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
