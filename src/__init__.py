"""Skillseed Backend.

Education platform connecting schools, mentors, parents and students
through content, challenges, communities and rewards.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
