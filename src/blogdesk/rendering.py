"""Template filters for rendering stored blog text.

Descriptions may contain markup. They are never rendered verbatim: the
detail page goes through sanitize_html and listings through excerpt.
"""

import html

import bleach
from markupsafe import Markup

ALLOWED_TAGS = [
    'a', 'abbr', 'b', 'blockquote', 'br', 'code', 'em', 'h1', 'h2', 'h3', 'h4',
    'h5', 'h6', 'hr', 'i', 'img', 'li', 'ol', 'p', 'pre', 'strong', 'ul'
]
ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title'],
    'abbr': ['title'],
    'img': ['src', 'alt', 'title'],
}
ALLOWED_PROTOCOLS = ['http', 'https', 'mailto']

EXCERPT_LENGTH = 120

def sanitize_html(text: str) -> Markup:
    """Strip everything but a small set of formatting tags."""
    cleaned = bleach.clean(
        text or '',
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True
    )
    return Markup(cleaned)

def excerpt(text: str, length: int = EXCERPT_LENGTH) -> str:
    """Plain-text preview; autoescaping applies when rendered."""
    plain = html.unescape(bleach.clean(text or '', tags=[], strip=True))
    plain = ' '.join(plain.split())
    if len(plain) <= length:
        return plain
    return plain[:length].rstrip() + '...'
