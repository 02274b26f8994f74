from django.contrib import admin
from .models import Team, Profile, DailyToken, Event, AttendanceRecord


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ['name', 'player_count', 'created_at']
    search_fields = ['name']
    readonly_fields = ['created_at']

    def player_count(self, obj):
        return obj.members.filter(role=Profile.Role.PLAYER).count()
    player_count.short_description = 'Players'


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'role', 'team']
    list_filter = ['role', 'team']
    search_fields = ['user__username', 'user__first_name', 'user__last_name', 'user__email']
    list_select_related = ['user', 'team']


@admin.register(DailyToken)
class DailyTokenAdmin(admin.ModelAdmin):
    list_display = ['user', 'valid_date', 'is_used', 'used_at', 'created_at']
    list_filter = ['is_used', 'valid_date']
    search_fields = ['user__username', 'user__first_name', 'user__last_name']
    list_select_related = ['user']
    date_hierarchy = 'valid_date'
    # The latch only moves through redemption; the admin cannot flip it back.
    readonly_fields = ['user', 'valid_date', 'token', 'is_used', 'used_at', 'created_at']

    def has_add_permission(self, request):
        return False


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ['event_date', 'start_time', 'event_type', 'team', 'is_auto_created', 'attendance_count']
    list_filter = ['event_type', 'is_auto_created', 'team']
    search_fields = ['team__name', 'location', 'description']
    list_select_related = ['team']
    date_hierarchy = 'event_date'
    readonly_fields = ['is_auto_created', 'created_by', 'created_at']

    fieldsets = (
        ('Event', {
            'fields': ('team', 'event_type', 'event_date', 'start_time')
        }),
        ('Details', {
            'fields': ('location', 'description')
        }),
        ('Origin', {
            'fields': ('is_auto_created', 'created_by', 'created_at'),
            'classes': ('collapse',)
        }),
    )

    def attendance_count(self, obj):
        return obj.attendance_records.count()
    attendance_count.short_description = 'Attended'

    def get_readonly_fields(self, request, obj=None):
        readonly = list(super().get_readonly_fields(request, obj))
        # Moving an event with attendance would move the facts to another day or team
        if obj is not None and obj.attendance_records.exists():
            readonly += ['team', 'event_date']
        return readonly

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ['user', 'event', 'validated_by', 'validated_at']
    list_filter = ['event__team', 'event__event_type']
    search_fields = ['user__username', 'user__first_name', 'user__last_name']
    list_select_related = ['user', 'event', 'event__team', 'validated_by']
    date_hierarchy = 'validated_at'
    readonly_fields = ['user', 'event', 'daily_token', 'validated_by', 'validated_at']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
