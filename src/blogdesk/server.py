#!/usr/bin/python3

""" Web server for blogdesk. """

import atexit
import os
import secrets
from pathlib import Path
from typing import Optional, Union

from flask import Flask
from flask_compress import Compress
from waitress import serve

import constants

from common.base.logging_config import get_logger
from common.config.blog_config import BlogConfig, get_blog_config, init_blog_config
from common.storage import init_image_store
from models.database import db
from .rendering import excerpt, sanitize_html
logger = get_logger(__name__)

# Room for the text fields sent alongside the image in a multipart upload
FORM_OVERHEAD_BYTES = 1024 * 1024

SECRET_KEY_FILE = 'flask_secret_key'

def load_or_create_secret_key() -> str:
    """
    Secret key for signing session cookies (flash messages).

    FLASK_SECRET_KEY wins; otherwise the key is read from KEY_DIR, and
    generated there on first start.

    :raises: RuntimeError if the key file cannot be read or written
    """
    if env_key := os.getenv('FLASK_SECRET_KEY'):
        return env_key

    key_path = Path(constants.KEY_DIR) / SECRET_KEY_FILE
    try:
        if key_path.exists():
            return key_path.read_text().strip()
        key_path.parent.mkdir(parents=True, exist_ok=True)
        key = secrets.token_hex(32)
        key_path.write_text(key)
        logger.info(f"Generated new secret key at {key_path}")
        return key
    except OSError as e:
        logger.error(f"Failed to access secret key file: {e}")
        raise RuntimeError(f"Could not access secret key directory: {e}")

def _resolve_config(
    config_path: Optional[Union[str, Path]],
    blog_config: Optional[BlogConfig]
) -> BlogConfig:
    if config_path is None and blog_config is None:
        # launch.py has usually loaded the configuration already
        return get_blog_config()
    return init_blog_config(config_path, config=blog_config)

def _install_extensions(app: Flask) -> None:
    if constants.is_development_mode():
        from flask_cors import CORS
        CORS(app, origins="*", supports_credentials=True)
        logger.info("CORS disabled for development mode - allowing all origins")
    Compress(app)

def create_app(
    testing: bool = False,
    config_path: Optional[Union[str, Path]] = None,
    blog_config: Optional[BlogConfig] = None
) -> Flask:
    """
    Build the blog application: API, public pages, admin pages and uploads.

    :param testing: Use the in-memory test database and skip request logging
    :param config_path: Blog configuration file to load
    :param blog_config: Ready-made configuration, takes precedence over config_path
    :return: Configured Flask app
    :raises: RuntimeError in production if launch.py did not initialize the system
    """
    if testing:
        constants.init_testing()
    if not constants.INITIALIZED:
        raise RuntimeError("System not initialized. In production, launch.py must initialize the system.")

    config = _resolve_config(config_path, blog_config)

    app = Flask(__name__)
    app.secret_key = 'test-key' if testing else load_or_create_secret_key()
    app.config['MAX_CONTENT_LENGTH'] = config.max_upload_bytes + FORM_OVERHEAD_BYTES
    _install_extensions(app)

    store = init_image_store(config)
    logger.debug(f"Serving images from the {store.kind} store, uploads capped at {config.max_upload_bytes} bytes")

    app.add_template_filter(sanitize_html, 'sanitize_html')
    app.add_template_filter(excerpt, 'excerpt')

    if not testing:
        from common.base.request_logger import RequestLogger
        RequestLogger(app, log_dir=constants.REQUEST_LOG_DIR)

    from .blueprints import BLOG_BLUEPRINTS
    for blueprint in BLOG_BLUEPRINTS:
        app.register_blueprint(blueprint)

    return app

# Built on first use so that launch.py can initialize the system first
app = None

def get_app() -> Flask:
    global app
    if app is None:
        app = create_app()
    return app

def run_server(host: str = '0.0.0.0', port: int = 5000, debug: bool = False) -> None:
    """Open the database, then serve until shutdown."""
    application = get_app()

    # One engine and connection pool for the life of the process
    if not db.initialize():
        raise RuntimeError("Database initialization failed")
    atexit.register(db.cleanup)

    logger.info(f"Starting blog server on {host}:{port}")

    if debug:
        application.config['DEBUG'] = True
        application.run(host=host, port=port, debug=True, use_reloader=False)
        return

    serve(
        application,
        host=host,
        port=port,
        channel_timeout=60,
        cleanup_interval=30,
        connection_limit=100
    )
