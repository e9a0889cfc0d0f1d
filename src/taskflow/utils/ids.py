"""Identifier generation."""

import uuid


def new_id() -> str:
    """Random UUID string for tasks and labels."""
    return str(uuid.uuid4())
