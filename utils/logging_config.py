"""
Root logger for the API process.

create_app() calls configure_logging() with the app, so LOG_LEVEL and
LOG_FORMAT ("text" or "json") follow the Flask config. JSON lines carry the
HTTP method and path when the record is emitted inside a request.
"""
import json
import logging
import sys
from datetime import datetime, timezone

from flask import has_request_context, request

TEXT_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'
TEXT_DATEFMT = '%Y-%m-%d %H:%M:%S'

QUIET_LOGGERS = ('werkzeug', 'sqlalchemy.engine')


class JSONFormatter(logging.Formatter):

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if has_request_context():
            entry['method'] = request.method
            entry['path'] = request.path
        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _level(config):
    name = str(config.get('LOG_LEVEL', 'INFO')).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _formatter(config):
    if str(config.get('LOG_FORMAT', 'text')).lower() == 'json':
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)


def configure_logging(app=None):
    config = app.config if app is not None else {}
    level = _level(config)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_formatter(config))

    root = logging.getLogger()
    root.setLevel(level)
    # Tests build many apps in one process; keep a single handler
    root.handlers.clear()
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
