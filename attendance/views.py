import json

from django.conf import settings
from django.contrib.auth.decorators import login_required
from django.db import DatabaseError, IntegrityError, connection, transaction
from django.db.models import ProtectedError
from django.forms.models import model_to_dict
from django.http import JsonResponse
from django.utils import timezone
from django_ratelimit.decorators import ratelimit

from .aggregation import get_calendar_summary, get_roster_for_date, team_players
from .audit_logging import log_event_action
from .event_resolution import find_event_for_date
from .exceptions import TransientStoreError
from .forms import EventForm
from .issuance import get_or_issue_token
from .models import Event, Profile
from .posthog_tracking import track_event
from .redemption import RECORD_CONFLICT, inspect_token, redeem_token
from .security_logging import get_client_ip, log_token_attempt
from .validation import validate_date_string, validate_month_string, validate_team_id, validate_year_month


def _redeem_rate(group, request):
    return settings.ATTENDANCE_REDEEM_RATE


def _token_rate(group, request):
    return settings.ATTENDANCE_TOKEN_RATE


def _load_payload(request):
    """Return the request body as a dict, accepting JSON or form encoding."""
    try:
        data = json.loads(request.body.decode('utf-8')) if request.body else request.POST
    except (ValueError, UnicodeDecodeError):
        data = request.POST
    return data if hasattr(data, 'get') else {}


def _transient_response(exc):
    return JsonResponse({
        'success': False,
        'reason': exc.reason,
        'retryable': exc.retryable,
        'message': 'Attendance is temporarily unavailable. Please try again.',
    }, status=503)


def _form_errors(form):
    return {field: list(errors) for field, errors in form.errors.items()}


def get_active_team(request, admin_only=False):
    """
    Resolve the team a request acts on.

    Priority:
    1. team_id query parameter (must be the user's own team)
    2. The user's profile team

    Returns:
        Tuple of (team, error_response). Exactly one of them is None.
    """
    try:
        profile = request.user.profile
    except Profile.DoesNotExist:
        return None, JsonResponse({'success': False, 'message': 'Profile not found'}, status=404)

    if admin_only and not profile.is_admin:
        return None, JsonResponse({'success': False, 'message': 'Access denied'}, status=403)

    team_id = request.GET.get('team_id')
    if team_id is not None:
        is_valid, team, error_msg = validate_team_id(team_id, request.user)
        if not is_valid:
            return None, JsonResponse({'success': False, 'message': error_msg}, status=400)
        return team, None

    if profile.team is None:
        return None, JsonResponse({'success': False, 'message': 'No active team'}, status=400)
    return profile.team, None


@login_required
@ratelimit(key='user', rate=_token_rate, method='GET', block=False)
def daily_token(request):
    """
    GET: return the current user's token for today, issuing it on first request.

    The display surface polls this and treats is_used flipping to true as
    "checked in".
    """
    if request.method != 'GET':
        return JsonResponse({'success': False, 'message': 'GET required'}, status=405)

    if getattr(request, 'limited', False):
        log_token_attempt('token_rate_limited', get_client_ip(request), user_id=request.user.id)
        return JsonResponse({'success': False, 'message': 'Too many requests'}, status=429)

    team, error = get_active_team(request)
    if error:
        return error

    today = timezone.localdate()
    try:
        token, created = get_or_issue_token(request.user, today)
    except TransientStoreError as exc:
        return _transient_response(exc)

    if created:
        track_event(request.user, 'token_issued', {'valid_date': today.isoformat()})

    payload = {'success': True, 'player_name': request.user.profile.display_name}
    payload.update(token.as_dict())
    return JsonResponse(payload)


@login_required
def token_verify(request, token):
    """
    GET: preview a scanned token without redeeming it. Admin-only.
    """
    if request.method != 'GET':
        return JsonResponse({'success': False, 'message': 'GET required'}, status=405)

    team, error = get_active_team(request, admin_only=True)
    if error:
        return error

    try:
        preview = inspect_token(token, team, timezone.localdate())
    except TransientStoreError as exc:
        return _transient_response(exc)

    return JsonResponse({'success': True, **preview})


@login_required
@ratelimit(key='user', rate=_redeem_rate, method='POST', block=False)
def validate_attendance(request):
    """
    POST: redeem a scanned token and record attendance. Admin-only.
    Payload: {token}
    """
    if request.method != 'POST':
        return JsonResponse({'success': False, 'message': 'POST required'}, status=405)

    client_ip = get_client_ip(request)
    if getattr(request, 'limited', False):
        log_token_attempt('scan_rate_limited', client_ip, user_id=request.user.id)
        return JsonResponse({'success': False, 'message': 'Too many scans. Please wait a moment.'}, status=429)

    team, error = get_active_team(request, admin_only=True)
    if error:
        return error

    data = _load_payload(request)
    token_value = data.get('token') or data.get('qr_token')
    if not token_value or not isinstance(token_value, str):
        return JsonResponse({'success': False, 'message': 'token is required'}, status=400)

    try:
        result = redeem_token(token_value, request.user, team, timezone.localdate())
    except TransientStoreError as exc:
        return _transient_response(exc)

    if not result.success:
        log_token_attempt('scan_rejected', client_ip, user_id=request.user.id, token=token_value, team_id=team.id)
    elif not result.is_duplicate:
        track_event(request.user, 'attendance_validated', {
            'team_id': team.id,
            'player_id': result.player_id,
            'event_type': result.event_type,
        })

    status = 409 if result.reason == RECORD_CONFLICT else 200
    return JsonResponse(result.as_dict(), status=status)


@login_required
def attendance_for_date(request, date_str):
    """
    GET: the team roster for a date with who attended. Admin-only.
    """
    if request.method != 'GET':
        return JsonResponse({'success': False, 'message': 'GET required'}, status=405)

    team, error = get_active_team(request, admin_only=True)
    if error:
        return error

    is_valid, day, error_msg = validate_date_string(date_str)
    if not is_valid:
        return JsonResponse({'success': False, 'message': error_msg}, status=400)

    try:
        roster = get_roster_for_date(team, day)
    except TransientStoreError as exc:
        return _transient_response(exc)

    return JsonResponse({'success': True, **roster})


@login_required
def attendance_calendar(request):
    """
    GET: events and daily attendance counts for a month. Admin-only.
    Query: month=YYYY-MM, or year=YYYY&month=M. Defaults to the current month.
    """
    if request.method != 'GET':
        return JsonResponse({'success': False, 'message': 'GET required'}, status=405)

    team, error = get_active_team(request, admin_only=True)
    if error:
        return error

    month_param = request.GET.get('month')
    year_param = request.GET.get('year')
    if year_param is not None:
        is_valid, year, month, error_msg = validate_year_month(year_param, month_param)
    elif month_param:
        is_valid, year, month, error_msg = validate_month_string(month_param)
    else:
        today = timezone.localdate()
        is_valid, year, month, error_msg = True, today.year, today.month, None
    if not is_valid:
        return JsonResponse({'success': False, 'message': error_msg}, status=400)

    try:
        summary = get_calendar_summary(team, year, month)
    except TransientStoreError as exc:
        return _transient_response(exc)

    return JsonResponse({'success': True, **summary})


@login_required
def events(request):
    """
    GET: list the team's events, optionally bounded by from/to (YYYY-MM-DD).
    POST: create an event. Admin-only.
    """
    if request.method == 'POST':
        return _create_event(request)
    if request.method != 'GET':
        return JsonResponse({'success': False, 'message': 'GET or POST required'}, status=405)

    team, error = get_active_team(request)
    if error:
        return error

    queryset = Event.objects.filter(team=team)
    for param, lookup in (('from', 'event_date__gte'), ('to', 'event_date__lte')):
        value = request.GET.get(param)
        if value:
            is_valid, day, error_msg = validate_date_string(value, param)
            if not is_valid:
                return JsonResponse({'success': False, 'message': error_msg}, status=400)
            queryset = queryset.filter(**{lookup: day})

    try:
        event_list = [event.as_dict() for event in queryset.order_by('-event_date', '-start_time', '-id')]
    except DatabaseError as exc:
        return _transient_response(TransientStoreError(str(exc)))

    return JsonResponse({'success': True, 'events': event_list})


def _save_event(form, action_type, user, team):
    """
    Save a validated EventForm.

    Returns:
        Tuple of (event, error_response). Exactly one of them is None.
    """
    try:
        with transaction.atomic():
            return form.save(), None
    except IntegrityError as exc:
        # Only one auto-created event may exist per team and day
        log_event_action(action_type, user, form.instance.pk, team.id, success=False, error_message=str(exc))
        return None, JsonResponse({'success': False, 'message': 'Another event already occupies that day'}, status=409)
    except DatabaseError as exc:
        log_event_action(action_type, user, form.instance.pk, team.id, success=False, error_message=str(exc))
        return None, _transient_response(TransientStoreError(str(exc)))


def _create_event(request):
    team, error = get_active_team(request, admin_only=True)
    if error:
        return error

    form = EventForm(_load_payload(request), team=team, created_by=request.user)
    if not form.is_valid():
        return JsonResponse({'success': False, 'message': 'Invalid event data', 'errors': _form_errors(form)}, status=400)

    event, error = _save_event(form, 'event_created', request.user, team)
    if error:
        return error
    log_event_action('event_created', request.user, event.id, team.id, details={
        'event_type': event.event_type,
        'event_date': event.event_date.isoformat(),
    })
    return JsonResponse({'success': True, 'event': event.as_dict()}, status=201)


@login_required
def event_today(request):
    """
    GET: the team's event for today, or null. Never creates one.
    """
    if request.method != 'GET':
        return JsonResponse({'success': False, 'message': 'GET required'}, status=405)

    team, error = get_active_team(request)
    if error:
        return error

    try:
        event = find_event_for_date(team, timezone.localdate())
    except DatabaseError as exc:
        return _transient_response(TransientStoreError(str(exc)))

    return JsonResponse({'success': True, 'event': event.as_dict() if event else None})


@login_required
def event_detail(request, event_id):
    """
    POST/PUT: update an event. DELETE: delete an event with no attendance.
    Admin-only.
    """
    if request.method not in ('POST', 'PUT', 'DELETE'):
        return JsonResponse({'success': False, 'message': 'POST, PUT or DELETE required'}, status=405)

    team, error = get_active_team(request, admin_only=True)
    if error:
        return error

    try:
        event = Event.objects.get(id=event_id, team=team)
    except Event.DoesNotExist:
        return JsonResponse({'success': False, 'message': 'Event not found'}, status=404)
    except DatabaseError as exc:
        return _transient_response(TransientStoreError(str(exc)))

    if request.method == 'DELETE':
        if event.attendance_records.exists():
            log_event_action('event_deleted', request.user, event.id, team.id, success=False,
                             error_message='Event has attendance records')
            return JsonResponse({'success': False, 'message': 'Event has attendance records and cannot be deleted'}, status=409)
        deleted_id = event.id
        try:
            event.delete()
        except ProtectedError:
            return JsonResponse({'success': False, 'message': 'Event has attendance records and cannot be deleted'}, status=409)
        log_event_action('event_deleted', request.user, deleted_id, team.id)
        return JsonResponse({'success': True})

    # Partial updates: fields missing from the payload keep their current values
    data = model_to_dict(event, fields=EventForm.Meta.fields)
    data.update({key: value for key, value in _load_payload(request).items() if key in EventForm.Meta.fields})
    original_date = event.event_date
    form = EventForm(data, instance=event)
    if not form.is_valid():
        return JsonResponse({'success': False, 'message': 'Invalid event data', 'errors': _form_errors(form)}, status=400)

    # Attendance facts belong to the day they were recorded on
    if form.cleaned_data['event_date'] != original_date and event.attendance_records.exists():
        log_event_action('event_updated', request.user, event.id, team.id, success=False,
                         error_message='Event has attendance records; date is fixed')
        return JsonResponse({'success': False, 'message': 'Event has attendance records and its date cannot be changed'}, status=409)

    event, error = _save_event(form, 'event_updated', request.user, team)
    if error:
        return error
    log_event_action('event_updated', request.user, event.id, team.id, details={'fields': sorted(form.changed_data)})
    return JsonResponse({'success': True, 'event': event.as_dict()})


@login_required
def players(request):
    """
    GET: the team's active players, ordered by name. Admin-only.
    """
    if request.method != 'GET':
        return JsonResponse({'success': False, 'message': 'GET required'}, status=405)

    team, error = get_active_team(request, admin_only=True)
    if error:
        return error

    try:
        player_list = [
            {
                'id': player.id,
                'username': player.username,
                'name': player.profile.display_name,
                'email': player.email,
            }
            for player in team_players(team)
        ]
    except DatabaseError as exc:
        return _transient_response(TransientStoreError(str(exc)))

    return JsonResponse({'success': True, 'players': player_list})


def health(request):
    """GET: liveness check including a database round-trip."""
    try:
        connection.ensure_connection()
        status, code = 'ok', 200
    except DatabaseError:
        status, code = 'degraded', 503
    return JsonResponse({'status': status, 'timestamp': timezone.now().isoformat()}, status=code)
