"""Configuration management for blogdesk."""

from .blog_config import (
    BlogConfig,
    load_blog_config,
    init_blog_config,
    get_blog_config
)

__all__ = [
    "BlogConfig",
    "load_blog_config",
    "init_blog_config",
    "get_blog_config",
]
