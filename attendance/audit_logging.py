"""
Audit logging utilities for RollCall.

This module provides structured logging for token issuance, attendance validation
and event management to create an audit trail for disputes and debugging.
"""

import logging
from typing import Optional, Dict, Any
from django.contrib.auth.models import User
from django.utils import timezone

logger = logging.getLogger(__name__)


def _user_fields(user: Optional[User]) -> Dict[str, Any]:
    if user and user.is_authenticated:
        fields = {
            'user_id': user.id,
            'username': user.username,
        }
        profile = getattr(user, 'profile', None)
        if profile is not None:
            fields['user_role'] = profile.role
        return fields
    return {'user_id': None, 'username': 'anonymous'}


def log_token_issued(
    user: User,
    token_id: int,
    valid_date: str,
    created: bool,
):
    """
    Log daily token issuance.

    Args:
        user: Player the token belongs to
        token_id: DailyToken ID
        valid_date: Date the token is valid for (YYYY-MM-DD)
        created: False when an existing token for the day was returned
    """
    log_data = {
        'action_type': 'token_issued' if created else 'token_reused',
        'timestamp': timezone.now().isoformat(),
        'token_id': token_id,
        'valid_date': valid_date,
    }
    log_data.update(_user_fields(user))

    if created:
        logger.info(f"Token issuance: {log_data}")
    else:
        logger.debug(f"Token issuance: {log_data}")


def log_redemption(
    operator: Optional[User],
    outcome: str,
    team_id: int,
    player_id: Optional[int] = None,
    event_id: Optional[int] = None,
    token_id: Optional[int] = None,
    error_message: Optional[str] = None,
):
    """
    Log an attendance validation attempt for audit trail.

    Args:
        operator: Admin user who scanned the token
        outcome: 'validated', 'duplicate', 'invalid_or_expired', 'record_conflict' or 'transient'
        team_id: Team the scan was made for
        player_id: Player the token belongs to (unknown for invalid tokens)
        event_id: Event the attendance was recorded against
        token_id: DailyToken ID
        error_message: Error message if the attempt failed
    """
    success = outcome in ('validated', 'duplicate')
    log_data = {
        'action_type': 'attendance_validation',
        'timestamp': timezone.now().isoformat(),
        'outcome': outcome,
        'team_id': team_id,
        'success': success,
    }
    operator_fields = _user_fields(operator)
    log_data['operator_id'] = operator_fields['user_id']
    log_data['operator_username'] = operator_fields['username']

    if player_id:
        log_data['player_id'] = player_id
    if event_id:
        log_data['event_id'] = event_id
    if token_id:
        log_data['token_id'] = token_id
    if error_message:
        log_data['error'] = error_message

    if success:
        logger.info(f"Attendance validation: {log_data}")
    else:
        logger.warning(f"Attendance validation (FAILED): {log_data}")


def log_event_action(
    action_type: str,
    user: Optional[User],
    event_id: Optional[int],
    team_id: int,
    success: bool = True,
    details: Optional[Dict[str, Any]] = None,
    error_message: Optional[str] = None,
):
    """
    Log event management actions (create, update, delete, auto-create) for audit trail.

    Args:
        action_type: Type of action (e.g., 'event_created', 'event_auto_created', 'event_deleted')
        user: User performing the action (None for automatic creation)
        event_id: Event ID
        team_id: Team ID
        success: Whether the action was successful
        details: Additional details about the action
        error_message: Error message if action failed
    """
    log_data = {
        'action_type': action_type,
        'timestamp': timezone.now().isoformat(),
        'event_id': event_id,
        'team_id': team_id,
        'success': success,
    }
    log_data.update(_user_fields(user))

    if details:
        log_data.update(details)

    if error_message:
        log_data['error'] = error_message

    if success:
        logger.info(f"Event action: {log_data}")
    else:
        logger.warning(f"Event action (FAILED): {log_data}")
