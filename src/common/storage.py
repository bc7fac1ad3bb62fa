"""
Storage backends for uploaded blog images.

Two implementations share the ImageStore interface:
- FilesystemImageStore writes files into a public directory and returns a
  root-relative URL such as ``/1712345678901_cover.jpg``
- InlineImageStore returns a ``data:<mime>;base64,<payload>`` reference and
  writes nothing, for deployments whose filesystem is read-only

The backend is chosen once at startup from configuration.
"""

import base64
import errno
import os
import re
import time
from abc import ABC, abstractmethod
from typing import Optional

from werkzeug.utils import secure_filename

from common.base.logging_config import get_logger
from common.config.blog_config import BlogConfig, get_blog_config
from common.errors import PersistenceError, StorageExhaustedError

logger = get_logger(__name__)

INLINE_PREFIX = 'data:'

EXTENSIONS = {
    'image/jpeg': '.jpg',
    'image/png': '.png',
    'image/gif': '.gif',
    'image/webp': '.webp',
}
DEFAULT_EXTENSION = '.jpg'

MAX_STEM_LENGTH = 100
MAX_NAME_ATTEMPTS = 50

STORED_NAME_PATTERN = re.compile(r'^\d+_[A-Za-z0-9._-]+$')

def is_inline_reference(reference: Optional[str]) -> bool:
    return bool(reference) and reference.startswith(INLINE_PREFIX)

def build_stored_name(filename: Optional[str], mimetype: Optional[str], timestamp_ms: int) -> str:
    """
    Build a collision-resistant file name: ``<timestamp>_<sanitized stem><ext>``.

    The extension follows the content type when it is known, then the
    original extension, then DEFAULT_EXTENSION.
    """
    stem, ext = os.path.splitext(secure_filename(filename or ''))
    stem = stem[:MAX_STEM_LENGTH] or 'image'
    ext = EXTENSIONS.get((mimetype or '').lower()) or ext.lower() or DEFAULT_EXTENSION
    if ext == '.jpeg':
        ext = '.jpg'
    return f"{timestamp_ms}_{stem}{ext}"

def _translate_os_error(e: OSError, name: str) -> PersistenceError:
    if e.errno in (errno.ENOSPC, errno.EDQUOT):
        return StorageExhaustedError("Storage is full, the image could not be saved", details=f"{name}: {e}")
    return PersistenceError("Failed to save image", details=f"{name}: {e}")

class ImageStore(ABC):
    """Where uploaded image bytes live."""

    kind: str = ''

    @abstractmethod
    def store(self, data: bytes, filename: str, mimetype: str) -> str:
        """
        Persist image bytes.

        :return: Reference to record on the blog post
        :raises: StorageExhaustedError or PersistenceError
        """

    @abstractmethod
    def delete(self, reference: str) -> bool:
        """
        Remove a stored image. Never raises.

        :return: True if something was removed
        """

class FilesystemImageStore(ImageStore):
    """Stores images as files under a public directory."""

    kind = 'filesystem'

    def __init__(self, directory: str, url_prefix: str = '/'):
        self.directory = directory
        self.url_prefix = url_prefix.rstrip('/') + '/'

    def store(self, data: bytes, filename: str, mimetype: str) -> str:
        try:
            os.makedirs(self.directory, exist_ok=True)
        except OSError as e:
            raise _translate_os_error(e, self.directory) from e

        timestamp = int(time.time() * 1000)
        for attempt in range(MAX_NAME_ATTEMPTS):
            name = build_stored_name(filename, mimetype, timestamp + attempt)
            path = os.path.join(self.directory, name)
            created = False
            try:
                # Exclusive create: a concurrent upload with the same name loses and retries
                with open(path, 'xb') as f:
                    created = True
                    f.write(data)
                    f.flush()
                    os.fsync(f.fileno())
            except FileExistsError:
                continue
            except OSError as e:
                if created:
                    self._remove_partial(path)
                raise _translate_os_error(e, name) from e

            logger.info(f"Stored image {name} ({len(data)} bytes)")
            return self.url_prefix + name

        raise PersistenceError("Failed to save image", details="Could not allocate a unique file name")

    def stored_name(self, reference: Optional[str]) -> Optional[str]:
        """
        Map a reference back to a file name in this store.

        :return: The file name, or None for inline, placeholder or foreign references
        """
        if not reference or is_inline_reference(reference):
            return None
        if not reference.startswith(self.url_prefix):
            return None
        name = reference[len(self.url_prefix):]
        if '/' in name or not STORED_NAME_PATTERN.match(name):
            return None
        return name

    def path_for(self, name: str) -> str:
        return os.path.join(self.directory, name)

    def delete(self, reference: str) -> bool:
        name = self.stored_name(reference)
        if name is None:
            logger.debug(f"Not deleting image {(reference or '')[:64]!r}: not a stored file")
            return False
        try:
            os.remove(self.path_for(name))
        except FileNotFoundError:
            logger.warning(f"Image file {name} already missing")
            return False
        except OSError as e:
            logger.error(f"Failed to delete image file {name}: {e}")
            return False
        logger.info(f"Deleted image file {name}")
        return True

    def _remove_partial(self, path: str) -> None:
        try:
            os.remove(path)
        except OSError as e:
            logger.error(f"Failed to remove partially written image {path}: {e}")

class InlineImageStore(ImageStore):
    """Embeds images in the record as data URIs. Nothing touches the disk."""

    kind = 'inline'

    def store(self, data: bytes, filename: str, mimetype: str) -> str:
        payload = base64.b64encode(data).decode('ascii')
        logger.info(f"Embedding image {filename!r} inline ({len(data)} bytes)")
        return f"{INLINE_PREFIX}{mimetype};base64,{payload}"

    def delete(self, reference: str) -> bool:
        # Inline images live inside the record and go away with it
        return False

def create_image_store(config: BlogConfig) -> ImageStore:
    backend = config.resolve_storage_backend()
    if backend == 'inline':
        return InlineImageStore()
    return FilesystemImageStore(config.upload_dir, config.url_prefix)

# Global image store instance
_image_store: Optional[ImageStore] = None

def init_image_store(config: Optional[BlogConfig] = None) -> ImageStore:
    """
    Initialize global image store from configuration.

    :param config: Blog configuration, defaults to the global one
    :return: ImageStore instance
    """
    global _image_store
    _image_store = create_image_store(config or get_blog_config())
    logger.info(f"Image storage backend: {_image_store.kind}")
    return _image_store

def get_image_store() -> ImageStore:
    """
    Get global image store instance.

    :return: ImageStore instance
    """
    global _image_store
    if _image_store is None:
        return init_image_store()
    return _image_store
