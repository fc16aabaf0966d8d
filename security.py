"""
Security Utilities & Middleware
CORS, cache headers, JSON error handlers and request logging for the sync gateway
"""
import os
import secrets
import traceback
from typing import Dict, Any
from flask import Flask, request, jsonify, Response
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
import logging

from services.errors import NotFoundError, PermissionDeniedError, TenantBoundaryError
from validators import ValidationError

logger = logging.getLogger(__name__)

# Paths too noisy to log on every hit
QUIET_PATHS = ('/api/health', '/api/ping')


class SecurityConfig:
    """Security configuration and validation"""

    @staticmethod
    def generate_secret_key() -> str:
        """
        Generate a cryptographically secure secret key

        Returns:
            Hex-encoded secret key
        """
        return secrets.token_hex(32)

    @staticmethod
    def validate_secret_key(secret_key: str) -> bool:
        """
        Validate that secret key is sufficiently secure

        Args:
            secret_key: Secret key to validate

        Returns:
            True if key is secure, False otherwise
        """
        if not secret_key:
            return False

        # Check minimum length (32 characters for 128-bit security)
        if len(secret_key) < 32:
            logger.warning("Secret key is too short (minimum 32 characters)")
            return False

        weak_keys = ['dev', 'test', 'secret', 'password', '12345']
        if any(weak in secret_key.lower() for weak in weak_keys):
            logger.warning("Secret key appears to be weak or default")
            return False

        return True

    @staticmethod
    def ensure_secret_key(config: Dict[str, Any]) -> str:
        """
        Ensure a secure secret key is configured

        Args:
            config: Application configuration dictionary

        Returns:
            Secure secret key
        """
        secret_key = config.get('SECRET_KEY')

        if not secret_key or not SecurityConfig.validate_secret_key(secret_key):
            if os.environ.get('FLASK_ENV') == 'production':
                logger.error("No secure SECRET_KEY in production! Generating one...")

            secret_key = SecurityConfig.generate_secret_key()
            logger.warning(f"Generated new secret key (length: {len(secret_key)})")

        return secret_key


def setup_cache_headers(app: Flask):
    """
    Mark every response as uncacheable; clients always re-read the snapshot

    Args:
        app: Flask application instance
    """
    @app.after_request
    def add_cache_headers(response: Response) -> Response:
        response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate'
        response.headers['Pragma'] = 'no-cache'
        response.headers['Expires'] = '0'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        return response

    logger.info("Cache headers configured")


def setup_cors(app: Flask, config: Dict[str, Any]):
    """
    Configure CORS for the gateway routes

    Args:
        app: Flask application instance
        config: Application configuration dictionary
    """
    cors_origins = config.get('CORS_ORIGINS', ['*'])
    cors_methods = config.get('CORS_METHODS', ['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'])
    cors_headers = config.get('CORS_ALLOW_HEADERS', ['Content-Type', 'X-Organization-Id'])

    CORS(
        app,
        origins=cors_origins,
        methods=cors_methods,
        allow_headers=cors_headers,
        max_age=3600
    )

    logger.info(f"CORS configured: origins={cors_origins}")


def error_body(message: str, error: Exception = None, include_trace: bool = False) -> Dict[str, Any]:
    """
    Build a JSON error body

    Args:
        message: Human readable message
        error: Exception being reported
        include_trace: Attach the formatted traceback

    Returns:
        Error response dictionary
    """
    body = {'success': False, 'message': message}
    if error is not None:
        body['type'] = type(error).__name__
        if include_trace:
            body['trace'] = ''.join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
    return body


def setup_error_handlers(app: Flask):
    """
    Map the error taxonomy onto HTTP status codes

    ValidationError -> 400, PermissionDeniedError / TenantBoundaryError -> 403,
    NotFoundError -> 404, anything else -> 500 with the diagnostic trace when
    EXPOSE_ERROR_TRACE is on. Database sessions have already rolled back by the
    time these handlers run.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(ValidationError)
    def validation_error(error):
        logger.info(f"Rejected {request.method} {request.path}: {error.message}")
        body = error_body(error.message)
        if error.field:
            body['field'] = error.field
        return jsonify(body), 400

    @app.errorhandler(PermissionDeniedError)
    def permission_denied(error):
        logger.warning(f"Permission denied on {request.method} {request.path}: {error.message}")
        return jsonify(error_body(error.message)), 403

    @app.errorhandler(TenantBoundaryError)
    def tenant_boundary(error):
        logger.error(f"Cross-tenant request {request.method} {request.path}: {error.message}")
        return jsonify(error_body(error.message)), 403

    @app.errorhandler(NotFoundError)
    def not_found_error(error):
        return jsonify(error_body(error.message)), 404

    @app.errorhandler(HTTPException)
    def http_error(error):
        """Unknown routes, wrong methods, oversized bodies"""
        if error.code == 404:
            message = f"Route not found: {request.method} {request.path}"
        else:
            message = error.description or error.name
        return jsonify(error_body(message)), error.code

    @app.errorhandler(Exception)
    def internal_server_error(error):
        logger.error(f"Unhandled error on {request.method} {request.path}: {error}", exc_info=True)
        include_trace = app.config.get('EXPOSE_ERROR_TRACE', False)
        return jsonify(error_body(str(error) or type(error).__name__, error, include_trace)), 500

    logger.info("Error handlers registered")


def setup_request_logging(app: Flask):
    """
    Setup request/response logging

    Args:
        app: Flask application instance
    """
    @app.before_request
    def log_request():
        if request.path in QUIET_PATHS:
            return

        logger.info(
            f"Request: {request.method} {request.path} "
            f"from {request.remote_addr} "
            f"org={request.headers.get('X-Organization-Id', '-')}"
        )

    @app.after_request
    def log_response(response: Response) -> Response:
        if request.path in QUIET_PATHS:
            return response

        logger.info(
            f"Response: {request.method} {request.path} "
            f"status={response.status_code} "
            f"size={response.content_length}"
        )

        return response

    logger.info("Request logging configured")


def validate_environment_variables(required_vars: list, app: Flask):
    """
    Validate that required environment variables are set

    Args:
        required_vars: List of required environment variable names
        app: Flask application instance
    """
    missing_vars = []

    for var in required_vars:
        if not os.environ.get(var):
            missing_vars.append(var)
            logger.warning(f"Missing environment variable: {var}")

    if missing_vars and not app.debug:
        logger.error(f"Missing required environment variables in production: {missing_vars}")

    return len(missing_vars) == 0


def setup_security(app: Flask, config: Dict[str, Any]):
    """
    Setup all security features for the application

    Args:
        app: Flask application instance
        config: Application configuration dictionary
    """
    logger.info("Configuring application security...")

    app.secret_key = SecurityConfig.ensure_secret_key(config)

    setup_cors(app, config)
    setup_cache_headers(app)
    setup_error_handlers(app)
    setup_request_logging(app)

    if not app.debug:
        validate_environment_variables(['SECRET_KEY', 'DATABASE_URL'], app)

    logger.info("Security configuration complete")
