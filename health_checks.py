"""
Health Check & Monitoring Endpoints
Provides endpoints for deployment health checks and monitoring
"""
import os
import sys
import time
import psutil
from datetime import datetime, timezone
from typing import Dict, Any
from flask import Blueprint, jsonify
import logging

logger = logging.getLogger(__name__)

# Create Blueprint for health check routes
health_bp = Blueprint('health', __name__)

SERVICE_NAME = 'sitebook-gateway'

# Track application start time
START_TIME = time.time()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_system_metrics() -> Dict[str, Any]:
    """
    Get basic system metrics

    Returns:
        Dictionary of system metrics
    """
    try:
        process = psutil.Process()

        return {
            'cpu_percent': process.cpu_percent(interval=0.1),
            'memory_mb': process.memory_info().rss / 1024 / 1024,
            'memory_percent': process.memory_percent(),
            'threads': process.num_threads(),
            'open_files': len(process.open_files()),
        }
    except Exception as e:
        logger.warning(f"Failed to get system metrics: {e}")
        return {}


def get_uptime() -> Dict[str, Any]:
    """
    Get application uptime

    Returns:
        Dictionary with uptime information
    """
    uptime_seconds = time.time() - START_TIME

    return {
        'uptime_seconds': round(uptime_seconds, 2),
        'uptime_minutes': round(uptime_seconds / 60, 2),
        'uptime_hours': round(uptime_seconds / 3600, 2),
        'started_at': datetime.fromtimestamp(START_TIME, timezone.utc).isoformat()
    }


def check_database() -> Dict[str, Any]:
    """
    Check that the database answers and report its backend

    Returns:
        Dictionary with 'healthy' and either 'backend' or 'error'
    """
    from database.connection import check_db_connection, get_engine

    try:
        check_db_connection()
        return {'healthy': True, 'backend': get_engine().url.get_backend_name()}
    except RuntimeError as e:
        return {'healthy': False, 'error': str(e)}


def check_schema() -> Dict[str, Any]:
    """
    Report columns added after the first deployments

    A missing column is not an outage: the invoice repository adds it on the
    next write. Operators can also run `flask repair-invoices`.

    Returns:
        Dictionary mapping table.column to presence, or an error
    """
    from sqlalchemy.exc import SQLAlchemyError
    from database.connection import get_db_session
    from services.schema_guard import column_exists

    try:
        with get_db_session() as session:
            return {'invoices.attachment_url': column_exists(session, 'invoices', 'attachment_url')}
    except (RuntimeError, SQLAlchemyError) as e:
        logger.warning(f"Schema check failed: {e}")
        return {'error': str(e)}


def check_filesystem() -> Dict[str, Dict[str, bool]]:
    """
    Check if required directories exist and are writable

    Returns:
        Dictionary of filesystem checks
    """
    required_dirs = ['logs']

    filesystem_status = {}

    for dir_name in required_dirs:
        dir_path = os.path.join(os.getcwd(), dir_name)
        exists = os.path.exists(dir_path)
        writable = os.access(dir_path, os.W_OK) if exists else False

        filesystem_status[dir_name] = {
            'exists': exists,
            'writable': writable,
            'healthy': exists and writable
        }

    return filesystem_status


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Basic health check endpoint
    Returns 200 if application is running
    """
    return jsonify({
        'status': 'healthy',
        'timestamp': _now(),
        'service': SERVICE_NAME
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness_check():
    """
    Readiness probe endpoint
    Returns 200 once the database answers
    """
    database = check_database()
    is_ready = database['healthy']

    response = {
        'status': 'ready' if is_ready else 'not_ready',
        'timestamp': _now(),
        'checks': {
            'database': database,
        }
    }

    return jsonify(response), 200 if is_ready else 503


@health_bp.route('/metrics', methods=['GET'])
def metrics():
    """
    Basic metrics endpoint
    Returns system metrics and application statistics
    """
    response = {
        'timestamp': _now(),
        'service': SERVICE_NAME,
        'version': '1.0.0',
        'environment': os.environ.get('FLASK_ENV', 'production'),
        'uptime': get_uptime(),
        'system': get_system_metrics(),
        'database': check_database(),
        'schema': check_schema(),
        'filesystem': check_filesystem(),
        'python_version': sys.version.split()[0]
    }

    return jsonify(response), 200


@health_bp.route('/ping', methods=['GET'])
def ping():
    """
    Simple ping endpoint
    Returns immediate response for basic connectivity tests
    """
    return 'pong', 200


def register_health_checks(app):
    """
    Register health check blueprint with Flask app

    Args:
        app: Flask application instance
    """
    app.register_blueprint(health_bp, url_prefix=app.config.get('API_PREFIX', '/api'))
    logger.info("Health check endpoints registered")
