"""
Django settings for RollCall project.

Point DJANGO_SETTINGS_MODULE at RollCall.settings.development or
RollCall.settings.production directly. When it is set to the bare package
(RollCall.settings), ROLLCALL_ENV picks the concrete module instead.
Default is development settings for local development.
"""

import os

if os.environ.get('DJANGO_SETTINGS_MODULE') == 'RollCall.settings':
    if os.environ.get('ROLLCALL_ENV', 'development') == 'production':
        from .production import *
    else:
        from .development import *
