"""Per-request access logging for the Flask app.

Every request gets one INFO line in requests.log (method, path, status,
duration) and one DEBUG line in requests.debug.log that adds the client,
query parameters and submitted fields. Both are JSON.
"""

import json
import logging
import os
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from flask import Flask, Response, g, request

REQUEST_LOGGER_NAME = 'request_logger'

class RequestLogger:
    # Never logged
    SENSITIVE_PARAMS = {'credential', 'token', 'password', 'secret', 'auth', 'key'}

    # Long form fields are cut down so a blog body does not flood the log
    MAX_FIELD_LENGTH = 200

    LOG_FILE_BYTES = 10 * 1024 * 1024
    LOG_FILE_COUNT = 10

    def __init__(self, app: Optional[Flask] = None, log_dir: str = "logs"):
        self.log_dir = log_dir
        self.trusted_proxies = ['127.0.0.1', '::1']
        self.logger = logging.getLogger(REQUEST_LOGGER_NAME)
        if app:
            self.init_app(app)

    def _add_file_handler(self, filename: str, level: int, only_level: bool) -> None:
        handler = RotatingFileHandler(
            os.path.join(self.log_dir, filename),
            maxBytes=self.LOG_FILE_BYTES,
            backupCount=self.LOG_FILE_COUNT
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
        if only_level:
            handler.addFilter(lambda record: record.levelno == level)
        self.logger.addHandler(handler)

    def _sanitize(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        sanitized = {}
        for k, v in fields.items():
            if k.lower() in self.SENSITIVE_PARAMS:
                continue
            if isinstance(v, str) and len(v) > self.MAX_FIELD_LENGTH:
                v = v[:self.MAX_FIELD_LENGTH] + '...'
            sanitized[k] = v
        return sanitized

    def _client_ip(self) -> Optional[str]:
        real_ip = request.headers.get('X-Real-IP')
        if real_ip and request.remote_addr in self.trusted_proxies:
            return real_ip
        return request.remote_addr

    def _submitted_fields(self) -> Dict[str, Any]:
        """JSON body or form fields; uploaded files by name and type only."""
        fields: Dict[str, Any] = {}
        if request.is_json:
            body = request.get_json(silent=True)
            if isinstance(body, dict) and (sanitized := self._sanitize(body)):
                fields['request_body'] = sanitized
        elif request.form:
            fields['form'] = self._sanitize(request.form.to_dict())
        if request.files:
            fields['files'] = {
                name: {'filename': f.filename, 'mimetype': f.mimetype}
                for name, f in request.files.items()
            }
        return fields

    def init_app(self, app: Flask) -> None:
        os.makedirs(self.log_dir, exist_ok=True)

        self.logger.propagate = False
        self.logger.setLevel(logging.DEBUG)
        self._add_file_handler('requests.debug.log', logging.DEBUG, only_level=True)
        self._add_file_handler('requests.log', logging.INFO, only_level=False)

        @app.before_request
        def start_timer():
            g.request_start_time = datetime.utcnow()

        @app.after_request
        def log_request(response: Response) -> Response:
            if request.path.startswith('/static/'):
                return response

            start_time = getattr(g, 'request_start_time', None)
            duration_ms = 0
            if start_time is not None:
                duration_ms = int((datetime.utcnow() - start_time).total_seconds() * 1000)

            entry = {
                'timestamp': datetime.utcnow().isoformat(),
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'duration_ms': duration_ms,
            }
            self.logger.info(json.dumps(entry))

            entry.update({
                'ip_address': self._client_ip(),
                'user_agent': request.user_agent.string,
                'referer': request.referrer,
            })
            if request.args and (params := self._sanitize(request.args.to_dict())):
                entry['query_params'] = params
            if request.method in ('POST', 'PUT', 'DELETE'):
                entry.update(self._submitted_fields())
            self.logger.debug(json.dumps(entry))

            return response

def get_request_logger(name: str = REQUEST_LOGGER_NAME) -> logging.Logger:
    """Helper function to get the request logger instance."""
    return logging.getLogger(name)
