"""Shared blueprints and request helpers."""

from typing import Optional

from flask import Blueprint
from werkzeug.datastructures import FileStorage

from common.validation import ImageUpload

# JSON API consumed by the admin client and the publishing client
api_bp = Blueprint('api', 'blogdesk.blueprints')

# Public blog pages
pages_bp = Blueprint('pages', 'blogdesk.blueprints')

# Admin panel pages
admin_bp = Blueprint('admin', 'blogdesk.blueprints', url_prefix='/admin')

def read_image_upload(file: Optional[FileStorage]) -> Optional[ImageUpload]:
    """
    Read an uploaded file fully into memory.

    :return: ImageUpload, or None when no file was sent
    """
    if file is None or not file.filename:
        return None
    return ImageUpload(filename=file.filename, mimetype=file.mimetype, data=file.read())
