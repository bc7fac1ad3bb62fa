"""Blueprint package for blogdesk."""

# Import shared blueprints (routes are registered by the individual modules)
from .shared import api_bp, pages_bp, admin_bp

from . import blog_api
from . import email_api
from . import pages
from . import admin
from .static import static_bp
from .errors import errors_bp

__all__ = ["api_bp", "pages_bp", "admin_bp", "static_bp", "errors_bp"]

# Convenience list for bulk registration; static_bp goes last so named routes win
BLOG_BLUEPRINTS = [api_bp, pages_bp, admin_bp, errors_bp, static_bp]
