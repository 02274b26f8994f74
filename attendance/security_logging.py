"""
Security logging utilities for RollCall.
Centralized logging for scan attempts that could indicate token guessing.
"""
import logging

logger = logging.getLogger(__name__)


def log_token_attempt(event_type, ip_address, user_id=None, token=None, success=False, team_id=None, error_message=None):
    """
    Log security events related to token scans for audit trail.

    Args:
        event_type: Type of event ('scan_rejected', 'scan_rate_limited', 'token_rate_limited')
        ip_address: IP address of the requester
        user_id: User ID (if authenticated)
        token: Token string attempted (never logged in full)
        success: Whether operation was successful
        team_id: Team ID the scan was made for
        error_message: Optional error message
    """
    log_data = {
        'event_type': event_type,
        'ip_address': ip_address,
        'success': success,
    }

    if user_id:
        log_data['user_id'] = user_id

    # Only log a prefix of failed tokens: enough to spot patterns, useless for replay
    if not success and token:
        log_data['token_prefix'] = token[:2] if len(token) >= 2 else 'XX'
        log_data['token_length'] = len(token)

    if team_id:
        log_data['team_id'] = team_id

    if error_message:
        log_data['error'] = error_message

    if success:
        logger.info(f"Token security event: {log_data}")
    else:
        # Failed attempts are warnings for security monitoring
        logger.warning(f"Token security event (FAILED): {log_data}")


def get_client_ip(request):
    """Return the requester's IP, honoring the first X-Forwarded-For hop."""
    forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded_for:
        return forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')
