"""
Attendance validation: redeem a scanned daily token.

A token row is in one of three states for its (user, valid_date):

    NONE    no row for today -> reported as invalid_or_expired
    UNUSED  is_used = False  -> may be redeemed once
    USED    is_used = True   -> already redeemed, reported as a duplicate

UNUSED -> USED happens in a single conditional UPDATE
(``... SET is_used = true WHERE id = ? AND is_used = false``) inside the same
transaction that writes the AttendanceRecord. The affected-row count, not an
earlier read, decides whether this call won, so N concurrent scans of one
token produce exactly one record.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from django.contrib.auth.models import User
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from .audit_logging import log_redemption
from .event_resolution import resolve_event_for_today
from .exceptions import RedemptionConflict, TransientStoreError
from .models import AttendanceRecord, DailyToken, Profile, Team

logger = logging.getLogger(__name__)

INVALID_OR_EXPIRED = 'invalid_or_expired'
ALREADY_USED = 'already_used'
RECORD_CONFLICT = 'record_conflict'

# Longest string accepted from a scanner; generated tokens are 32 characters.
MAX_TOKEN_LENGTH = 64


@dataclass
class RedemptionResult:
    success: bool
    is_duplicate: bool = False
    reason: Optional[str] = None
    player_name: Optional[str] = None
    player_id: Optional[int] = None
    event_id: Optional[int] = None
    event_type: Optional[str] = None
    validated_at: Optional[datetime] = None

    @classmethod
    def invalid(cls):
        return cls(success=False, reason=INVALID_OR_EXPIRED)

    @classmethod
    def duplicate(cls, player):
        return cls(
            success=True,
            is_duplicate=True,
            player_name=player.profile.display_name,
            player_id=player.id,
        )

    @classmethod
    def record_conflict(cls, player):
        return cls(
            success=False,
            reason=RECORD_CONFLICT,
            player_name=player.profile.display_name,
            player_id=player.id,
        )

    def as_dict(self):
        data = {'success': self.success}
        if self.success:
            data['is_duplicate'] = self.is_duplicate
        if self.reason:
            data['reason'] = self.reason
        if self.player_name is not None:
            data['player_name'] = self.player_name
            data['player_id'] = self.player_id
        if self.event_id is not None:
            data['event_id'] = self.event_id
            data['event_type'] = self.event_type
        if self.validated_at is not None:
            data['validated_at'] = self.validated_at.isoformat()
        return data


def normalize_token(token_string) -> str:
    """Strip scanner noise; anything unusable becomes an empty string."""
    if not isinstance(token_string, str):
        return ''
    token_string = token_string.strip()
    if len(token_string) > MAX_TOKEN_LENGTH:
        return ''
    return token_string


def _find_token(token_string: str, team: Team, today: date) -> Optional[DailyToken]:
    """
    Look up a team player's token for today.

    Unknown tokens, tokens issued for another day and tokens belonging to
    another team all come back as None.
    """
    if not token_string:
        return None
    return (
        DailyToken.objects
        .select_related('user__profile')
        .filter(
            token=token_string,
            valid_date=today,
            user__profile__team=team,
            user__profile__role=Profile.Role.PLAYER,
        )
        .first()
    )


def inspect_token(token_string, team: Team, today: date) -> dict:
    """
    Read-only preview of a scanned token, for confirming before redeeming.

    Returns:
        {'valid': True, 'player_name', 'player_id'} for an unused token,
        {'valid': False, 'reason': 'already_used', 'player_name', 'player_id'} for a used one,
        {'valid': False, 'reason': 'invalid_or_expired'} otherwise.

    Raises:
        TransientStoreError: the database was unreachable or timed out
    """
    try:
        daily_token = _find_token(normalize_token(token_string), team, today)
    except DatabaseError as exc:
        raise TransientStoreError(f"Could not look up token: {exc}") from exc

    if daily_token is None:
        return {'valid': False, 'reason': INVALID_OR_EXPIRED}

    player = daily_token.user
    data = {
        'valid': not daily_token.is_used,
        'player_name': player.profile.display_name,
        'player_id': player.id,
    }
    if daily_token.is_used:
        data['reason'] = ALREADY_USED
    return data


def redeem_token(
    token_string,
    validated_by: User,
    team: Team,
    today: date,
    now: Optional[datetime] = None,
) -> RedemptionResult:
    """
    Redeem a scanned token and record the player's attendance.

    Args:
        token_string: Decoded QR payload or manually typed token
        validated_by: Admin performing the scan
        team: Team the scan is made for; tokens of other teams are rejected
        today: Server-side local date
        now: Validation timestamp (defaults to timezone.now())

    Returns:
        RedemptionResult. A re-scan of an already redeemed token is a
        successful duplicate, not an error. If the player already has a
        fact for the resolved event through another token, nothing is
        written, the token stays unused and reason is 'record_conflict'.

    Raises:
        TransientStoreError: the database was unreachable or timed out.
            Nothing was written; the caller may retry from scratch.
    """
    now = now or timezone.now()
    token_string = normalize_token(token_string)

    try:
        daily_token = _find_token(token_string, team, today)
        if daily_token is None:
            log_redemption(validated_by, INVALID_OR_EXPIRED, team.id)
            return RedemptionResult.invalid()

        player = daily_token.user
        if daily_token.is_used:
            log_redemption(validated_by, 'duplicate', team.id, player.id, token_id=daily_token.id)
            return RedemptionResult.duplicate(player)

        try:
            record = _claim_and_record(daily_token, validated_by, team, today, now)
        except RedemptionConflict:
            # Another scan of the same token committed first.
            logger.info(f"Lost redemption race for token {daily_token.id}")
            log_redemption(validated_by, 'duplicate', team.id, player.id, token_id=daily_token.id)
            return RedemptionResult.duplicate(player)
        except IntegrityError as exc:
            if _is_redeemed(daily_token):
                log_redemption(validated_by, 'duplicate', team.id, player.id, token_id=daily_token.id)
                return RedemptionResult.duplicate(player)
            # The latch is still open, so the record itself clashed with an existing fact.
            logger.error(f"Attendance record conflict for token {daily_token.id}: {exc}")
            log_redemption(validated_by, RECORD_CONFLICT, team.id, player.id, token_id=daily_token.id,
                           error_message=str(exc))
            return RedemptionResult.record_conflict(player)
    except TransientStoreError as exc:
        log_redemption(validated_by, 'transient', team.id, error_message=str(exc))
        raise
    except DatabaseError as exc:
        logger.error(f"Redemption failed for team {team.id}: {exc}")
        log_redemption(validated_by, 'transient', team.id, error_message=str(exc))
        raise TransientStoreError(f"Could not validate attendance: {exc}") from exc

    event = record.event
    log_redemption(validated_by, 'validated', team.id, player.id, event.id, daily_token.id)
    return RedemptionResult(
        success=True,
        is_duplicate=False,
        player_name=player.profile.display_name,
        player_id=player.id,
        event_id=event.id,
        event_type=event.event_type,
        validated_at=record.validated_at,
    )


def _is_redeemed(daily_token) -> bool:
    """Re-read the latch after a failed claim."""
    return DailyToken.objects.filter(pk=daily_token.pk, is_used=True).exists()


def _claim_and_record(daily_token, validated_by, team, today, now):
    """Flip the latch and write the attendance fact as one unit, or neither."""
    with transaction.atomic():
        event = resolve_event_for_today(team, today, now=now)

        claimed = (
            DailyToken.objects
            .filter(pk=daily_token.pk, is_used=False)
            .update(is_used=True, used_at=now)
        )
        if claimed != 1:
            raise RedemptionConflict(f"Token {daily_token.pk} was redeemed concurrently")

        return AttendanceRecord.objects.create(
            user=daily_token.user,
            event=event,
            daily_token=daily_token,
            validated_by=validated_by,
            validated_at=now,
        )
