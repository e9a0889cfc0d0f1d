"""Session resolution: guest or authenticated owner."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import RemoteStoreError
from ..repositories import IdentityProvider
from ..storage import BoardCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """Who the board belongs to for this session."""

    owner_id: str | None = None
    guest: bool = False

    @property
    def is_guest(self) -> bool:
        """Guest when flagged as such or when nobody is signed in."""
        return self.guest or self.owner_id is None


def resolve_session(
    cache: BoardCache,
    identity: IdentityProvider | None = None,
    force_guest: bool = False,
) -> Session:
    """
    Decide guest vs authenticated mode once, at startup.

    A set guest flag wins over any signed-in user. An identity lookup that
    fails is treated as "not signed in".
    """
    if force_guest or cache.is_guest():
        logger.info("Session: guest (flag set)")
        return Session(guest=True)

    if identity is None:
        logger.info("Session: guest (no remote configured)")
        return Session(guest=True)

    try:
        owner_id = identity.get_user_id()
    except RemoteStoreError as e:
        logger.warning("Could not resolve signed-in user: %s", e)
        owner_id = None

    if owner_id is None:
        logger.info("Session: guest (not signed in)")
        return Session(guest=True)

    logger.info("Session: authenticated as %s", owner_id)
    return Session(owner_id=owner_id)
