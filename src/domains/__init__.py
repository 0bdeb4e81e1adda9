# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for Skillseed.

This package contains domain services that encapsulate business logic.
Each domain module provides services over the MongoDB collections and
the cache, email and storage clients.

Domains:
    auth: Sign-in, self-registration, JWT and passwords.
    user: Own profile and user administration.
    school: School onboarding and school-managed students.
    transaction: Payments that activate schools and register children.
    mentor: Mentor onboarding and credential verification.
    content: Content library, challenges and categories.
    community: Communities, posts and likes.
    rewards: Challenge completions, stars and badges.
    parent: Parent-driven child registration.
"""
