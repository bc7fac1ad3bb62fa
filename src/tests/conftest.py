"""Pytest configuration for all tests."""

import os

# Error details are only rendered in development mode; tests assert production behavior
os.environ.pop("FLASK_ENV", None)
os.environ.pop("BLOG_STORAGE_BACKEND", None)
os.environ.pop("BLOG_UPLOAD_DIR", None)
os.environ.pop("DATABASE_URL", None)
os.environ.pop("VERCEL", None)
