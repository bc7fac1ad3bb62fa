"""
Validation rules for blog submissions, subscriptions and identifiers.

The same functions back the HTTP handlers and the publishing client, so a
submission the client accepts is one the server accepts too. Every check
raises ValidationError naming the offending field; category is the one
field that is coerced instead of rejected.
"""

import mimetypes
import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from common.errors import ValidationError

CATEGORIES = ('Startup', 'Technology', 'Lifestyle', 'General')
DEFAULT_CATEGORY = 'General'

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 10000
AUTHOR_MAX_LENGTH = 100

DEFAULT_ALLOWED_IMAGE_TYPES = ('image/jpeg', 'image/png', 'image/gif', 'image/webp')
DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024

OBJECT_ID_PATTERN = re.compile(r'^[0-9a-fA-F]{24}$')
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

@dataclass
class ImageUpload:
    """An uploaded image read fully into memory."""
    filename: str
    mimetype: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

@dataclass
class BlogSubmission:
    """A validated blog submission, ready to persist."""
    title: str
    description: str
    category: str
    author: Optional[str] = None
    author_img: Optional[str] = None

def _trimmed(value: Optional[str], field: str, label: Optional[str] = None) -> str:
    if value is None:
        return ''
    # JSON bodies can carry numbers, lists or objects where text belongs
    if not isinstance(value, str):
        raise ValidationError(f"{label or field.capitalize()} must be text", field=field)
    return value.strip()

def validate_title(title: Optional[str]) -> str:
    title = _trimmed(title, 'title')
    if not title:
        raise ValidationError("Title is required", field='title')
    if len(title) < TITLE_MIN_LENGTH:
        raise ValidationError(f"Title must be at least {TITLE_MIN_LENGTH} characters long", field='title')
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters long", field='title')
    return title

def validate_description(description: Optional[str]) -> str:
    description = _trimmed(description, 'description')
    if not description:
        raise ValidationError("Description is required", field='description')
    if len(description) < DESCRIPTION_MIN_LENGTH:
        raise ValidationError(
            f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters long", field='description')
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters long", field='description')
    return description

def normalize_category(category: Optional[str]) -> str:
    """Return the category if it is one of CATEGORIES, otherwise the default."""
    if not isinstance(category, str):
        return DEFAULT_CATEGORY
    category = category.strip()
    return category if category in CATEGORIES else DEFAULT_CATEGORY

def validate_author(author: Optional[str]) -> Optional[str]:
    """
    Trim the author name.

    :return: The trimmed name, or None when blank so the default applies
    """
    author = _trimmed(author, 'author')
    if not author:
        return None
    if len(author) > AUTHOR_MAX_LENGTH:
        raise ValidationError(f"Author name must be at most {AUTHOR_MAX_LENGTH} characters long", field='author')
    return author

def resolve_image_type(filename: Optional[str], mimetype: Optional[str]) -> str:
    """
    Work out an upload's content type.

    Browsers send application/octet-stream for some files; the filename's
    extension is used in that case.
    """
    mimetype = (mimetype or '').split(';', 1)[0].strip().lower()
    if mimetype and mimetype != 'application/octet-stream':
        return mimetype
    guessed, _ = mimetypes.guess_type(filename or '')
    return (guessed or mimetype or '').lower()

def validate_image(
    image: Optional[ImageUpload],
    allowed_types: Iterable[str] = DEFAULT_ALLOWED_IMAGE_TYPES,
    max_bytes: int = DEFAULT_MAX_IMAGE_BYTES
) -> ImageUpload:
    """
    Check an image upload's presence, type and size.

    :return: The upload with its mimetype resolved
    """
    if image is None or not image.data:
        raise ValidationError("No image provided", field='image')

    allowed_types = tuple(allowed_types)
    mimetype = resolve_image_type(image.filename, image.mimetype)
    if mimetype not in allowed_types:
        names = ', '.join(t.split('/', 1)[-1].upper() for t in allowed_types)
        raise ValidationError(f"Invalid image type. Allowed types: {names}", field='image')

    if image.size > max_bytes:
        raise ValidationError(
            f"Image must be smaller than {max_bytes // (1024 * 1024)}MB", field='image')

    return ImageUpload(filename=image.filename, mimetype=mimetype, data=image.data)

def validate_submission(fields: Mapping[str, Optional[str]]) -> BlogSubmission:
    """
    Validate the text fields of a blog submission.

    Checks run in form order and stop at the first failure.

    :param fields: Form-like mapping with title, description, category, author, authorImg
    :return: BlogSubmission with trimmed values
    """
    title = validate_title(fields.get('title'))
    description = validate_description(fields.get('description'))
    category = normalize_category(fields.get('category'))
    author = validate_author(fields.get('author'))
    author_img = _trimmed(fields.get('authorImg'), 'authorImg', 'Author image') or None
    return BlogSubmission(
        title=title,
        description=description,
        category=category,
        author=author,
        author_img=author_img
    )

def validate_object_id(value: Optional[str], label: str = 'ID') -> str:
    """
    Check an identifier is a 24-character hex string before any lookup.

    :param label: Name used in error messages, e.g. 'blog ID'
    """
    heading = f"{label[:1].upper()}{label[1:]}"
    value = _trimmed(value, 'id', heading)
    if not value:
        raise ValidationError(f"{heading} is required", field='id')
    if not OBJECT_ID_PATTERN.match(value):
        raise ValidationError(f"Invalid {label} format", field='id')
    return value.lower()

def validate_email(email: Optional[str]) -> str:
    """
    Check an email address against a basic pattern.

    :return: The trimmed, lower-cased address
    """
    email = _trimmed(email, 'email')
    if not email:
        raise ValidationError("Email is required", field='email')
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format", field='email')
    return email.lower()
