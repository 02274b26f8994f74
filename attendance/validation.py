"""
Input validation utilities for views.

This module provides centralized validation functions for common input types
to ensure data integrity and security across all endpoints.
"""

import re
from datetime import datetime, date
from typing import Tuple, Optional, Any
from .models import Team, Profile

# Date format constants
DATE_FORMAT = '%Y-%m-%d'
MONTH_FORMAT = '%Y-%m'


def validate_date_string(date_str: str, param_name: str = 'date') -> Tuple[bool, Optional[date], Optional[str]]:
    """
    Validate a date string in YYYY-MM-DD format.

    Args:
        date_str: The date string to validate
        param_name: Name of the parameter for error messages

    Returns:
        Tuple of (is_valid, parsed_date, error_message)
    """
    if not date_str:
        return False, None, f"{param_name} parameter is required"

    if not isinstance(date_str, str):
        return False, None, f"{param_name} must be a string"

    # Check format with regex first (more strict)
    if not re.match(r'^\d{4}-\d{2}-\d{2}$', date_str):
        return False, None, f"{param_name} must be in YYYY-MM-DD format"

    try:
        parsed_date = datetime.strptime(date_str, DATE_FORMAT).date()
        return True, parsed_date, None
    except ValueError:
        return False, None, f"Invalid {param_name} format: must be YYYY-MM-DD"


def validate_year_month(year: Any, month: Any) -> Tuple[bool, Optional[int], Optional[int], Optional[str]]:
    """
    Validate a year and month given as separate values.

    Returns:
        Tuple of (is_valid, year, month, error_message)
    """
    try:
        year_int = int(year)
        month_int = int(month)
    except (ValueError, TypeError):
        return False, None, None, "year and month must be integers"

    if month_int < 1 or month_int > 12:
        return False, None, None, "month must be between 1 and 12"

    # Validate year range (reasonable bounds)
    if year_int < 2000 or year_int > 2100:
        return False, None, None, "year must be between 2000 and 2100"

    return True, year_int, month_int, None


def validate_month_string(month_str: str, param_name: str = 'month') -> Tuple[bool, Optional[int], Optional[int], Optional[str]]:
    """
    Validate a month string in YYYY-MM format.

    Args:
        month_str: The month string to validate (e.g., "2024-06")
        param_name: Name of the parameter for error messages

    Returns:
        Tuple of (is_valid, year, month, error_message)
    """
    if not month_str:
        return False, None, None, f"{param_name} parameter is required"

    if not isinstance(month_str, str):
        return False, None, None, f"{param_name} must be a string"

    if not re.match(r'^\d{4}-\d{2}$', month_str):
        return False, None, None, f"{param_name} must be in YYYY-MM format"

    year_str, month_part = month_str.split('-')
    return validate_year_month(year_str, month_part)


def validate_team_id(team_id: Any, user) -> Tuple[bool, Optional[Team], Optional[str]]:
    """
    Validate team ID and check the user belongs to that team.

    Args:
        team_id: Team ID (can be int, string, or None)
        user: Django User object

    Returns:
        Tuple of (is_valid, team_object, error_message)
    """
    if team_id is None:
        return False, None, "team_id parameter is required"

    try:
        team_id_int = int(team_id)
    except (ValueError, TypeError):
        return False, None, "team_id must be a valid integer"

    if team_id_int <= 0:
        return False, None, "team_id must be a positive integer"

    try:
        team = Team.objects.get(id=team_id_int)
    except Team.DoesNotExist:
        return False, None, "Team not found"

    try:
        profile = user.profile
    except Profile.DoesNotExist:
        return False, None, "User profile not found"

    if profile.team_id != team.id:
        return False, None, "You do not have access to this team"
    return True, team, None
