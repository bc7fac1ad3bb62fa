"""Blueprint for serving uploaded images from the public directory."""

import os
from typing import Optional

from flask import Blueprint, Response, abort, send_from_directory

from common.base.logging_config import get_logger
from common.config.blog_config import get_blog_config

logger = get_logger(__name__)

static_bp = Blueprint('uploads', __name__)

# Only what an upload or the author placeholder can be
IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}

def public_file_name(path: str, url_prefix: str) -> Optional[str]:
    """
    Name of the public file a URL path refers to.

    Files live directly in the upload directory and are reachable at the
    site root or under the configured url_prefix.

    :return: The file name, or None if the path names nothing servable
    """
    for prefix in ('/', url_prefix.rstrip('/') + '/'):
        if not path.startswith(prefix):
            continue
        name = path[len(prefix):]
        if name and '/' not in name:
            return name
    return None

@static_bp.route('/<path:reference>')
def serve_upload(reference: str) -> Response:
    """
    Serve an image written by the filesystem store, e.g. /1712345678901_cover.jpg
    or /uploads/1712345678901_cover.jpg with url_prefix = "/uploads".

    :raises: werkzeug.exceptions.NotFound if not an image or the file doesn't exist
    """
    config = get_blog_config()
    name = public_file_name('/' + reference, config.url_prefix)
    if name is None or os.path.splitext(name)[1].lower() not in IMAGE_EXTENSIONS:
        abort(404)
    return send_from_directory(config.upload_dir, name)
