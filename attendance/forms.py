from django import forms
from .models import Event
from .sanitization import sanitize_text_field, validate_no_html


class EventForm(forms.ModelForm):
    """
    Form for admins to create and edit team events.
    """

    class Meta:
        model = Event
        fields = ['event_type', 'event_date', 'start_time', 'location', 'description']
        labels = {
            'event_type': 'Type',
            'event_date': 'Date',
            'start_time': 'Start Time',
        }

    def __init__(self, *args, **kwargs):
        team = kwargs.pop('team', None)
        created_by = kwargs.pop('created_by', None)
        super().__init__(*args, **kwargs)

        if team:
            self.instance.team = team
        if created_by and not self.instance.pk:
            self.instance.created_by = created_by

    def clean_location(self):
        """Sanitize location to prevent XSS attacks."""
        location = self.cleaned_data.get('location', '')
        sanitized = sanitize_text_field(location, max_length=200)
        is_valid, error_msg = validate_no_html(sanitized, "Location")
        if not is_valid:
            raise forms.ValidationError(error_msg)
        return sanitized

    def clean_description(self):
        """Sanitize description, keeping line breaks."""
        description = self.cleaned_data.get('description', '')
        sanitized = sanitize_text_field(description, max_length=1000, keep_newlines=True)
        is_valid, error_msg = validate_no_html(sanitized, "Description")
        if not is_valid:
            raise forms.ValidationError(error_msg)
        return sanitized
