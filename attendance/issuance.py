"""
Daily token issuance.

A player has at most one token per calendar day. The (user, valid_date)
unique constraint decides who wins when two requests for the same day race:
the loser's insert fails and it reads back the winner's row.
"""

import logging
from datetime import date
from typing import Tuple

from django.contrib.auth.models import User
from django.db import DatabaseError, IntegrityError

from .audit_logging import log_token_issued
from .exceptions import TransientStoreError
from .models import DailyToken

logger = logging.getLogger(__name__)

# Retries only cover a clash on the globally unique token string.
MAX_TOKEN_ATTEMPTS = 5


def get_or_issue_token(user: User, today: date) -> Tuple[DailyToken, bool]:
    """
    Return the user's token for ``today``, creating it on first request.

    ``today`` is the server's local date, supplied by the caller. Never pass a
    client-provided date here.

    Returns:
        Tuple of (token, created)

    Raises:
        TransientStoreError: the database was unreachable or timed out
    """
    try:
        token, created = _get_or_create(user, today)
    except DatabaseError as exc:
        logger.error(f"Token issuance failed for user {user.id} on {today}: {exc}")
        raise TransientStoreError(f"Could not issue token: {exc}") from exc

    log_token_issued(user, token.id, today.isoformat(), created)
    return token, created


def _get_or_create(user, today):
    for attempt in range(1, MAX_TOKEN_ATTEMPTS + 1):
        try:
            # get_or_create inserts inside a savepoint and re-reads on
            # IntegrityError, so a concurrent first request returns the same row.
            return DailyToken.objects.get_or_create(
                user=user,
                valid_date=today,
                defaults={'token': DailyToken.generate_token()},
            )
        except IntegrityError:
            # get_or_create re-raises when the re-read finds no (user, date)
            # row, i.e. the clash was on the token string itself.
            logger.warning(f"Token string collision for user {user.id} (attempt {attempt})")
    raise IntegrityError(f"Could not generate a unique token after {MAX_TOKEN_ATTEMPTS} attempts")
