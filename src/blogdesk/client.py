"""HTTP client for publishing to a blogdesk server.

Submissions are checked with the same validators the server uses and the
cover image is normalized locally before upload, so most mistakes are
caught without a round trip. The server remains authoritative.
"""

import mimetypes
import os
from typing import Any, Dict, List, Optional

import requests

from common.base.logging_config import get_logger
from common.errors import ValidationError
from common.images import (
    DEFAULT_MAX_BYTES,
    DEFAULT_MAX_DIMENSION,
    ImageNormalizationError,
    normalize_image,
    normalized_filename
)
from common.validation import (
    DEFAULT_ALLOWED_IMAGE_TYPES,
    DEFAULT_MAX_IMAGE_BYTES,
    ImageUpload,
    validate_email,
    validate_image,
    validate_object_id,
    validate_submission
)

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30

class ClientError(Exception):
    """A request failed, either locally or on the server.

    ``retryable`` is set for timeouts and connection failures, where sending
    the same request again may succeed.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, retryable: bool = False):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.retryable = retryable

class BlogClient:
    """Client for the /api/blog and /api/email endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        normalize: bool = True,
        max_image_bytes: int = DEFAULT_MAX_BYTES,
        max_dimension: int = DEFAULT_MAX_DIMENSION
    ):
        """
        :param base_url: Server root, e.g. http://localhost:5000
        :param timeout: Seconds to wait for each request
        :param session: requests session to reuse, one is created otherwise
        :param normalize: Resize and recompress images before upload
        :param max_image_bytes: Size budget for normalized images
        :param max_dimension: Long-edge limit for normalized images
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.normalize = normalize
        self.max_image_bytes = max_image_bytes
        self.max_dimension = max_dimension
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': 'Blogdesk-Client/1.0',
            'Accept': 'application/json'
        })

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            logger.warning(f"{method} {url} timed out after {self.timeout}s")
            raise ClientError("Request timed out, please try again", retryable=True) from e
        except requests.exceptions.ConnectionError as e:
            logger.warning(f"{method} {url} failed to connect: {e}")
            raise ClientError("Could not reach the server, please try again", retryable=True) from e
        except requests.exceptions.RequestException as e:
            raise ClientError(f"Request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not response.ok or not payload.get('success'):
            message = payload.get('msg') or f"Server returned {response.status_code}"
            logger.info(f"{method} {url} failed ({response.status_code}): {message}")
            raise ClientError(message, status_code=response.status_code)

        return payload

    def prepare_image(self, image_path: str) -> ImageUpload:
        """
        Read, validate and (optionally) normalize a local image.

        :raises: ClientError if the file is unreadable, invalid or cannot be normalized
        """
        try:
            with open(image_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise ClientError(f"Could not read image: {e}") from e

        filename = os.path.basename(image_path)
        mimetype, _ = mimetypes.guess_type(filename)
        try:
            image = validate_image(
                ImageUpload(filename=filename, mimetype=mimetype or '', data=data),
                DEFAULT_ALLOWED_IMAGE_TYPES,
                DEFAULT_MAX_IMAGE_BYTES
            )
        except ValidationError as e:
            raise ClientError(e.message, status_code=400) from e

        if not self.normalize:
            return image

        try:
            normalized = normalize_image(
                image.data,
                max_bytes=self.max_image_bytes,
                max_dimension=self.max_dimension
            )
        except ImageNormalizationError as e:
            raise ClientError("Image could not be processed") from e

        if normalized.oversized:
            logger.warning(f"{filename} is still {normalized.size} bytes after compression")

        return ImageUpload(
            filename=normalized_filename(filename),
            mimetype=normalized.mimetype,
            data=normalized.data
        )

    def publish(
        self,
        title: str,
        description: str,
        image_path: str,
        category: Optional[str] = None,
        author: Optional[str] = None,
        author_img: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Publish a blog post.

        :return: The created blog as returned by the server
        :raises: ClientError for local validation failures and server errors
        """
        fields = {
            'title': title,
            'description': description,
            'category': category or '',
            'author': author or '',
            'authorImg': author_img or ''
        }
        try:
            validate_submission(fields)
        except ValidationError as e:
            raise ClientError(e.message, status_code=400) from e

        image = self.prepare_image(image_path)
        payload = self._request(
            'POST', '/api/blog',
            data=fields,
            files={'image': (image.filename, image.data, image.mimetype)}
        )
        logger.info(f"Published blog {payload['blog']['id']}: {title!r}")
        return payload['blog']

    def list_blogs(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {'category': category} if category else None
        return self._request('GET', '/api/blog', params=params)['blogs']

    def get_blog(self, blog_id: str) -> Dict[str, Any]:
        return self._request('GET', '/api/blog', params={'id': blog_id})['blog']

    def delete_blog(self, blog_id: str) -> str:
        try:
            blog_id = validate_object_id(blog_id, 'blog ID')
        except ValidationError as e:
            raise ClientError(e.message, status_code=400) from e
        return self._request('DELETE', '/api/blog', params={'id': blog_id})['msg']

    def subscribe(self, email: str) -> str:
        try:
            email = validate_email(email)
        except ValidationError as e:
            raise ClientError(e.message, status_code=400) from e
        return self._request('POST', '/api/email', json={'email': email})['msg']

    def list_subscriptions(self) -> List[Dict[str, Any]]:
        return self._request('GET', '/api/email')['emails']

    def unsubscribe(self, subscription_id: str) -> str:
        return self._request('DELETE', '/api/email', params={'id': subscription_id})['msg']
