"""Error pages and JSON error bodies for blogdesk.

Every failure leaves the app through render_error(): browsers (Accept:
text/html) get error.html, everything else gets {"success": false, "msg": ...}.
Technical details are attached only in debug or development mode.
"""

from typing import Dict, Optional

from flask import Blueprint, current_app, jsonify, render_template, request
from flask.typing import ResponseReturnValue
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

import constants
from common.base.logging_config import get_logger
from common.errors import BlogError
from models.database import DatabaseError

logger = get_logger(__name__)

errors_bp = Blueprint('errors', __name__)

# Friendlier wording than werkzeug's defaults for the statuses users actually hit
HTTP_MESSAGES: Dict[int, str] = {
    400: "The request could not be understood by the server due to malformed syntax.",
    404: "The page you are looking for could not be found.",
    413: "The upload is too large.",
    500: "An unexpected error occurred. Please try again later.",
}

HTTP_TITLES: Dict[int, str] = {404: "Page Not Found"}

def show_details() -> bool:
    return current_app.debug or constants.is_development_mode()

def render_error(status_code: int, title: str, message: str, details: Optional[str] = None) -> ResponseReturnValue:
    """
    Build the error response in the format the client asked for.

    :param status_code: HTTP status of the response
    :param title: Heading of the HTML error page
    :param message: Text shown to the user, and the JSON "msg"
    :param details: Exception text, dropped outside debug/development mode
    """
    details = details if show_details() else None

    if request.headers.get('Accept', '').startswith('text/html'):
        page = render_template(
            'error.html',
            error_code=str(status_code),
            error_title=title,
            error_message=message,
            technical_details=details
        )
        return page, status_code

    body = {'success': False, 'msg': message}
    if details:
        body['error'] = details
    return jsonify(body), status_code

@errors_bp.app_errorhandler(BlogError)
def handle_blog_error(e: BlogError) -> ResponseReturnValue:
    if e.status_code >= 500:
        logger.error(f"{e.title}: {e.message} ({e.details})")
    else:
        logger.info(f"{e.title} on {request.method} {request.path}: {e.message}")
    return render_error(e.status_code, e.title, e.message, e.details)

@errors_bp.app_errorhandler(HTTPException)
def handle_http_error(e: HTTPException) -> ResponseReturnValue:
    """Routing, upload-size and unhandled errors that Flask raises itself."""
    status_code = e.code or 500
    if status_code == 405:
        message = f"The {request.method} method is not allowed for this endpoint."
    else:
        message = HTTP_MESSAGES.get(status_code, e.description or e.name)

    # Unhandled exceptions arrive wrapped in InternalServerError
    cause = getattr(e, 'original_exception', None)
    if status_code >= 500:
        logger.error(f"{e.name} on {request.method} {request.path}: {cause or e}", exc_info=cause)
    elif status_code == 404:
        logger.info(f"Page not found: {request.path}")
    else:
        logger.warning(f"{e.name}: {request.method} {request.path}")

    return render_error(status_code, HTTP_TITLES.get(status_code, e.name), message, str(cause or e))

@errors_bp.app_errorhandler(SQLAlchemyError)
def handle_database_error(e: SQLAlchemyError) -> ResponseReturnValue:
    logger.error(f"Database error: {str(e)}", exc_info=True)
    return render_error(
        500,
        "Database Error",
        "A database error occurred. Please try again later.",
        str(e)
    )

@errors_bp.app_errorhandler(DatabaseError)
def handle_database_unavailable(e: DatabaseError) -> ResponseReturnValue:
    """The database could not be opened at all."""
    logger.error(f"Database unavailable: {str(e)}")
    return render_error(
        500,
        "Database Error",
        "The database is unavailable. Please try again later.",
        str(e)
    )
