"""Blog configuration management for blogdesk."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

import tomli

import constants
from common.base.logging_config import get_logger
logger = get_logger(__name__)

STORAGE_BACKENDS = ('filesystem', 'inline', 'auto')

MIB = 1024 * 1024

@dataclass
class BlogConfig:
    """Blog configuration data structure."""
    database_url: Optional[str] = None
    storage_backend: str = 'auto'
    upload_dir: str = constants.PUBLIC_DIR
    url_prefix: str = '/'
    max_upload_bytes: int = 5 * MIB
    allowed_image_types: List[str] = field(default_factory=lambda: [
        'image/jpeg', 'image/png', 'image/gif', 'image/webp'
    ])
    normalize_uploads: bool = False
    normalized_max_bytes: int = 1 * MIB
    normalized_max_dimension: int = 1200
    default_author: str = 'Anonymous'
    default_author_img: str = '/default-author.png'

    def resolve_storage_backend(self) -> str:
        """
        Resolve 'auto' into a concrete backend.

        Serverless deployments (VERCEL set) and read-only upload directories
        fall back to inline storage.

        :return: 'filesystem' or 'inline'
        """
        if self.storage_backend != 'auto':
            return self.storage_backend
        if os.getenv('VERCEL'):
            return 'inline'
        if _directory_writable(self.upload_dir):
            return 'filesystem'
        logger.warning(f"Upload directory {self.upload_dir} is not writable, storing images inline")
        return 'inline'

def _directory_writable(directory: str) -> bool:
    try:
        os.makedirs(directory, exist_ok=True)
    except OSError:
        return False
    return os.access(directory, os.W_OK)

def load_blog_config(config_path: Union[str, Path]) -> BlogConfig:
    """
    Load blog configuration from a TOML file, then apply environment overrides.

    A missing file is not an error: defaults are used.

    :param config_path: Path to TOML configuration file
    :return: Populated BlogConfig
    :raises: ValueError if the configuration is invalid
    """
    config = BlogConfig()
    path = Path(config_path)

    if path.exists():
        logger.info(f"Loading blog configuration from {path}")
        with open(path, 'rb') as f:
            data = tomli.load(f)

        config.database_url = data.get('database_url', config.database_url)

        storage = data.get('storage', {})
        config.storage_backend = storage.get('backend', config.storage_backend)
        config.upload_dir = storage.get('upload_dir', config.upload_dir)
        config.url_prefix = storage.get('url_prefix', config.url_prefix)

        uploads = data.get('uploads', {})
        config.max_upload_bytes = uploads.get('max_bytes', config.max_upload_bytes)
        config.allowed_image_types = uploads.get('allowed_types', config.allowed_image_types)
        config.normalize_uploads = uploads.get('normalize', config.normalize_uploads)
        config.normalized_max_bytes = uploads.get('normalized_max_bytes', config.normalized_max_bytes)
        config.normalized_max_dimension = uploads.get('normalized_max_dimension', config.normalized_max_dimension)

        authors = data.get('authors', {})
        config.default_author = authors.get('default_name', config.default_author)
        config.default_author_img = authors.get('default_image', config.default_author_img)
    else:
        logger.info(f"No blog configuration at {path}, using defaults")

    if env_url := os.getenv('DATABASE_URL'):
        config.database_url = env_url
    if env_backend := os.getenv('BLOG_STORAGE_BACKEND'):
        config.storage_backend = env_backend.lower()
    if env_dir := os.getenv('BLOG_UPLOAD_DIR'):
        config.upload_dir = env_dir

    # Relative upload directories are anchored at the project root
    if not os.path.isabs(config.upload_dir):
        config.upload_dir = os.path.join(constants.PROJECT_ROOT, config.upload_dir)

    _validate_config(config)
    return config

def _validate_config(config: BlogConfig) -> None:
    if config.storage_backend not in STORAGE_BACKENDS:
        raise ValueError(f"Unknown storage backend '{config.storage_backend}', expected one of {STORAGE_BACKENDS}")
    if config.max_upload_bytes <= 0 or config.normalized_max_bytes <= 0:
        raise ValueError("Upload size limits must be positive")
    if config.normalized_max_dimension <= 0:
        raise ValueError("normalized_max_dimension must be positive")
    if not config.allowed_image_types:
        raise ValueError("At least one image type must be allowed")
    if not config.url_prefix.startswith('/'):
        raise ValueError("url_prefix must be root-relative")

# Default configuration file path
DEFAULT_CONFIG_PATH = Path(constants.CONFIG_DIR) / "blog.toml"

# Global blog configuration instance
_blog_config: Optional[BlogConfig] = None

def init_blog_config(
    config_path: Optional[Union[str, Path]] = None,
    config: Optional[BlogConfig] = None
) -> BlogConfig:
    """
    Initialize global blog configuration.

    :param config_path: Path to blog configuration file
    :param config: Ready-made configuration to install instead of loading a file
    :return: BlogConfig instance
    """
    global _blog_config
    if config is not None:
        _validate_config(config)
        _blog_config = config
    else:
        _blog_config = load_blog_config(config_path or DEFAULT_CONFIG_PATH)
    return _blog_config

def get_blog_config() -> BlogConfig:
    """
    Get global blog configuration, loading the default file on first use.

    :return: BlogConfig instance
    """
    global _blog_config
    if _blog_config is None:
        _blog_config = load_blog_config(DEFAULT_CONFIG_PATH)
    return _blog_config
