from django.db import models
from django.db.models import Q
from django.contrib.auth.models import User
from django.utils import timezone
import secrets


class Team(models.Model):
    """Represents a single sports team."""
    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Profile(models.Model):
    """
    Extends the built-in Django User model.
    This holds extra information about a user, like their role and team.
    """

    class Role(models.TextChoices):
        ADMIN = 'ADMIN', 'Admin'
        PLAYER = 'PLAYER', 'Player'

    user = models.OneToOneField(User, on_delete=models.CASCADE)

    role = models.CharField(max_length=10, choices=Role.choices, default=Role.PLAYER)

    # 'null=True' allows users (like a super-admin) who are not on a team.
    team = models.ForeignKey(Team, on_delete=models.SET_NULL, null=True, blank=True, related_name='members')

    class Meta:
        indexes = [
            models.Index(fields=['team', 'role'], name='profile_team_role_idx'),
        ]

    def __str__(self):
        return f"{self.user.username} ({self.get_role_display()})"

    @property
    def display_name(self):
        return self.user.get_full_name() or self.user.username

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN


class DailyToken(models.Model):
    """
    A player's check-in token for one calendar day.

    The token string is opaque and carries no meaning of its own; the
    valid_date column is the only thing that scopes it to a day. is_used only
    ever moves from False to True, and only through a conditional update
    (see attendance.redemption).
    """

    class State(models.TextChoices):
        NONE = 'NONE', 'No token'
        UNUSED = 'UNUSED', 'Unused'
        USED = 'USED', 'Used'

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='daily_tokens')
    valid_date = models.DateField()
    token = models.CharField(max_length=64, unique=True, editable=False)
    is_used = models.BooleanField(default=False)
    used_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-valid_date']
        constraints = [
            models.UniqueConstraint(fields=['user', 'valid_date'], name='dailytoken_user_date_uniq'),
        ]
        indexes = [
            models.Index(fields=['token', 'valid_date'], name='dailytoken_token_date_idx'),
        ]

    @staticmethod
    def generate_token():
        """Generate a 32-character URL-safe random token."""
        return secrets.token_urlsafe(24)

    @property
    def state(self):
        return self.State.USED if self.is_used else self.State.UNUSED

    def __str__(self):
        return f"Token for {self.user.username} on {self.valid_date} ({self.state.label})"

    def as_dict(self):
        return {
            'token': self.token,
            'valid_date': self.valid_date.isoformat(),
            'is_used': self.is_used,
            'used_at': self.used_at.isoformat() if self.used_at else None,
        }


class Event(models.Model):
    """
    A team's scheduled activity on a given date.

    Admins create events explicitly; the first successful scan of a day
    creates a training event when none exists. At most one auto-created
    event exists per team and day.
    """

    class EventType(models.TextChoices):
        TRAINING = 'training', 'Training'
        MATCH = 'match', 'Match'

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='events')
    event_type = models.CharField(max_length=10, choices=EventType.choices, default=EventType.TRAINING)
    event_date = models.DateField()
    start_time = models.TimeField(null=True, blank=True)
    location = models.CharField(max_length=200, blank=True)
    description = models.TextField(max_length=1000, blank=True)
    is_auto_created = models.BooleanField(default=False, editable=False)
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_events',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['event_date', 'start_time', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['team', 'event_date'],
                condition=Q(is_auto_created=True),
                name='event_one_auto_per_team_day',
            ),
        ]
        indexes = [
            models.Index(fields=['team', 'event_date'], name='event_team_date_idx'),
        ]

    def __str__(self):
        return f"{self.get_event_type_display()} for {self.team.name} on {self.event_date}"

    def as_dict(self):
        return {
            'id': self.id,
            'team_id': self.team_id,
            'type': self.event_type,
            'event_date': self.event_date.isoformat(),
            'start_time': self.start_time.strftime('%H:%M') if self.start_time else None,
            'location': self.location,
            'description': self.description,
            'is_auto_created': self.is_auto_created,
        }


class AttendanceRecord(models.Model):
    """
    The fact that a player was present at an event.

    Written once, by the first successful redemption of the player's token,
    and never edited afterwards.
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='attendance_records')
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name='attendance_records')
    daily_token = models.OneToOneField(DailyToken, on_delete=models.PROTECT, related_name='attendance_record')
    validated_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='validated_attendance',
    )
    validated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-validated_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'event'], name='attendance_user_event_uniq'),
        ]

    def __str__(self):
        return f"{self.user.username} attended {self.event}"

    def as_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'event_id': self.event_id,
            'qr_token_id': self.daily_token_id,
            'validated_by': self.validated_by_id,
            'validated_at': self.validated_at.isoformat(),
        }
