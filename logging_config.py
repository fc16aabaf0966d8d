"""
Centralized Logging Configuration
Console output for the gateway plus an optional rotating log file under logs/
"""
import logging
import logging.handlers
from pathlib import Path

# Chatty libraries kept at WARNING unless explicitly requested
QUIET_LOGGERS = ('werkzeug', 'urllib3', 'alembic')


def _attach(root_logger, handler, level, log_format):
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(log_format))
    root_logger.addHandler(handler)
    return handler


def setup_logging(app):
    """
    Configure the root logger from LOG_LEVEL, LOG_FORMAT, LOG_TO_FILE and LOG_FILE

    Repositories and services only call logging.getLogger(__name__); all
    routing of their records happens here.

    Args:
        app: Flask application instance
    """
    log_level = getattr(logging, app.config['LOG_LEVEL'].upper(), logging.INFO)
    log_format = app.config['LOG_FORMAT']

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # A second create_app() (tests) must not duplicate handlers
    root_logger.handlers = []

    _attach(root_logger, logging.StreamHandler(), log_level, log_format)

    log_path = None
    if app.config.get('LOG_TO_FILE', True):
        log_dir = Path('logs')
        log_dir.mkdir(exist_ok=True)
        log_path = log_dir / app.config['LOG_FILE']
        _attach(
            root_logger,
            logging.handlers.RotatingFileHandler(log_path, maxBytes=10 * 1024 * 1024, backupCount=5),
            log_level,
            log_format,
        )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    # SQLALCHEMY_ECHO already prints statements through the engine logger
    if not app.config.get('SQLALCHEMY_ECHO'):
        logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    app.logger.info(f"Logging initialized at {logging.getLevelName(log_level)} level"
                    + (f", writing to {log_path}" if log_path else ""))
    return root_logger
