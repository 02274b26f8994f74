"""
Input sanitization utilities for RollCall.

Event locations and descriptions are typed by admins and shown on scanner and
calendar screens, so they are reduced to plain text before they are stored.

Uses the bleach library to strip HTML while preserving safe text.
"""

import bleach
import logging
import re
import html

logger = logging.getLogger(__name__)

# Allowed HTML tags (empty list means strip all HTML)
ALLOWED_TAGS = []

# Allowed HTML attributes (empty dict means strip all attributes)
ALLOWED_ATTRIBUTES = {}

# Allowed protocols for links (empty list means no links allowed)
ALLOWED_PROTOCOLS = []


def sanitize_text_field(text, max_length=None, keep_newlines=False):
    """
    Sanitize a text field to prevent XSS attacks and malicious content.

    Args:
        text: Input text to sanitize
        max_length: Optional maximum length (truncates if longer)
        keep_newlines: If True, line breaks survive whitespace normalization

    Returns:
        Sanitized text string
    """
    if not text:
        return ''

    text = str(text).strip()

    # Remove all HTML tags, then decode HTML entities (&amp; -> &)
    text = bleach.clean(
        text,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )
    text = html.unescape(text)

    # Remove null bytes and carriage returns
    text = text.replace('\x00', '')
    text = text.replace('\r', '')

    if keep_newlines:
        lines = [re.sub(r'[ \t]+', ' ', line).strip() for line in text.split('\n')]
        text = '\n'.join(line for line in lines if line)
    else:
        text = re.sub(r'\s+', ' ', text)

    if max_length and len(text) > max_length:
        text = text[:max_length]
        logger.warning(f"Text truncated to {max_length} characters")

    return text.strip()


def validate_no_html(text, field_name="Field"):
    """
    Validate that text contains no HTML tags.

    Args:
        text: Text to validate
        field_name: Name of the field (for error messages)

    Returns:
        tuple: (is_valid, error_message)
    """
    if not text:
        return True, None

    html_pattern = re.compile(r'<[^>]+>')
    if html_pattern.search(text):
        return False, f"{field_name} cannot contain HTML tags. Please use plain text only."

    # Check for HTML entities (might indicate attempt to bypass)
    html_entity_pattern = re.compile(r'&[#\w]+;')
    if html_entity_pattern.search(text):
        decoded = html.unescape(text)
        if html_pattern.search(decoded):
            return False, f"{field_name} contains invalid characters. Please use plain text only."

    return True, None
