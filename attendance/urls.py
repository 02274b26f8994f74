from django.urls import path
from . import views

app_name = 'attendance'

urlpatterns = [
    path('health/', views.health, name='health'),
    # Player token display
    path('tokens/today/', views.daily_token, name='daily_token'),
    # Scanner
    path('tokens/verify/<str:token>/', views.token_verify, name='token_verify'),
    path('attendance/validate/', views.validate_attendance, name='validate_attendance'),
    # Reporting
    path('attendance/date/<str:date_str>/', views.attendance_for_date, name='attendance_for_date'),
    path('attendance/calendar/', views.attendance_calendar, name='attendance_calendar'),
    path('players/', views.players, name='players'),
    # Events
    path('events/', views.events, name='events'),
    path('events/today/', views.event_today, name='event_today'),
    path('events/<int:event_id>/', views.event_detail, name='event_detail'),
]
