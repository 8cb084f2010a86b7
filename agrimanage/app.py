# =============================================================================
# AgriManage Backend
# app.py - Application Factory & Entry Point
#
# Flask application factory pattern implementation with extension
# initialization, blueprint registration, error handlers, and cost table
# loading.
# =============================================================================

import os
import logging
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify

from agrimanage.config import get_config
from agrimanage.errors import AppError
from agrimanage.extensions import db, migrate, jwt, bcrypt, cors, limiter


def create_app(config_name=None):
    """
    Application factory function.

    Creates and configures the Flask application with all extensions,
    blueprints, and error handlers.

    Args:
        config_name: Configuration environment ('development', 'testing', 'production')
                    Defaults to FLASK_ENV environment variable or 'development'

    Returns:
        Flask: Configured Flask application instance
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    setup_logging(app)
    init_extensions(app)
    register_blueprints(app)
    register_error_handlers(app)
    setup_database_handlers(app)
    init_cost_table(app)

    app.logger.info(f"AgriManage API started in {config_name} mode")

    return app


def setup_logging(app):
    """
    Configure application logging.

    Sets up logging format and level based on environment, plus a rotating
    log file when LOG_FILE is configured.
    """
    log_level = logging.DEBUG if app.config['DEBUG'] else logging.INFO
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    date_format = '%Y-%m-%d %H:%M:%S'

    logging.basicConfig(level=log_level, format=log_format, datefmt=date_format)

    app.logger.setLevel(log_level)

    log_file = app.config.get('LOG_FILE')
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=app.config.get('LOG_MAX_BYTES', 10 * 1024 * 1024),
            backupCount=app.config.get('LOG_BACKUP_COUNT', 5),
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        app.logger.addHandler(file_handler)


def init_extensions(app):
    """
    Initialize Flask extensions with the application instance.

    Extensions are created in extensions.py without app context,
    then initialized here with the app instance.
    """
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    bcrypt.init_app(app)

    cors.init_app(
        app,
        origins=app.config.get('CORS_ORIGINS', ['http://localhost:5173']),
        supports_credentials=app.config.get('CORS_SUPPORTS_CREDENTIALS', True),
        allow_headers=['Content-Type', 'Authorization'],
        methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS']
    )

    limiter.init_app(app)

    app.logger.info("Flask extensions initialized")


def register_blueprints(app):
    """
    Register all API route blueprints.

    All API routes are prefixed with '/api'.
    """
    from agrimanage.routes.auth import auth_bp
    from agrimanage.routes.plants import plants_bp
    from agrimanage.routes.diseases import diseases_bp
    from agrimanage.routes.locations import locations_bp
    from agrimanage.routes.crops import crops_bp
    from agrimanage.routes.calculator import calculator_bp
    from agrimanage.routes.users import users_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(plants_bp, url_prefix='/api/plants')
    app.register_blueprint(diseases_bp, url_prefix='/api/diseases')
    app.register_blueprint(locations_bp, url_prefix='/api/locations')
    app.register_blueprint(crops_bp, url_prefix='/api/crops')
    app.register_blueprint(calculator_bp, url_prefix='/api/costCalculator')
    app.register_blueprint(users_bp, url_prefix='/api/users')

    @app.route('/health', methods=['GET'])
    def health_check():
        """
        Health check endpoint for monitoring and load balancers.

        Returns:
            JSON response with API status and database connectivity
        """
        db_healthy = False
        db_message = 'unknown'

        try:
            db.session.execute(db.text('SELECT 1'))
            db.session.commit()
            db_healthy = True
            db_message = 'connected'
        except Exception as e:
            app.logger.error(f"Database health check failed: {e}")
            db.session.rollback()
            db_message = 'error'

        return jsonify({
            'status': 'healthy' if db_healthy else 'degraded',
            'message': 'AgriManage API is running',
            'version': '1.0.0',
            'database': db_message
        }), 200 if db_healthy else 503

    @app.route('/', methods=['GET'])
    def index():
        """Root endpoint with API information."""
        return jsonify({
            'name': 'AgriManage API',
            'description': 'Plant, disease, location and crop cost management',
            'version': '1.0.0',
            'health': '/health'
        })

    app.logger.info("Blueprints registered")


def register_error_handlers(app):
    """
    Register global error handlers.

    Application errors carry their own status; HTTP errors get a
    consistent JSON body.
    """

    @app.errorhandler(AppError)
    def application_error(error):
        level = logging.ERROR if error.status_code >= 500 else logging.INFO
        app.logger.log(level, f"{error.title}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({
            'success': False,
            'error': 'Bad Request',
            'message': str(error.description) if hasattr(error, 'description') else 'Invalid request'
        }), 400

    @app.errorhandler(401)
    def unauthorized(error):
        return jsonify({
            'success': False,
            'error': 'Unauthorized',
            'message': 'Authentication required'
        }), 401

    @app.errorhandler(403)
    def forbidden(error):
        return jsonify({
            'success': False,
            'error': 'Forbidden',
            'message': 'You do not have permission to access this resource'
        }), 403

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'error': 'Not Found',
            'message': 'The requested resource was not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'error': 'Method Not Allowed',
            'message': 'The method is not allowed for this endpoint'
        }), 405

    @app.errorhandler(429)
    def rate_limit_exceeded(error):
        return jsonify({
            'success': False,
            'error': 'Rate Limit Exceeded',
            'message': 'Too many requests. Please try again later.'
        }), 429

    @app.errorhandler(500)
    def internal_server_error(error):
        db.session.rollback()
        app.logger.error(f"Internal server error: {error}")
        return jsonify({
            'success': False,
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred. Please try again later.'
        }), 500

    # JWT Error Handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({
            'success': False,
            'error': 'Token Expired',
            'message': 'Your session has expired. Please login again.'
        }), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({
            'success': False,
            'error': 'Invalid Token',
            'message': 'Token verification failed'
        }), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify({
            'success': False,
            'error': 'Authorization Required',
            'message': 'Missing access token'
        }), 401

    app.logger.info("Error handlers registered")


def setup_database_handlers(app):
    """
    Setup database session handling for request lifecycle.

    Ensures the session is rolled back on exceptions and removed at the
    end of every request context.
    """

    @app.teardown_appcontext
    def shutdown_session(exception=None):
        if exception:
            db.session.rollback()
        db.session.remove()


def init_cost_table(app):
    """
    Load the cost calculator's coefficient table at startup.

    Uses COST_TABLE_PATH when set, otherwise the built-in defaults.
    """
    from agrimanage.services.cost_engine import CostTable

    path = app.config.get('COST_TABLE_PATH')
    app.config['COST_TABLE'] = CostTable.load(path)

    if path:
        app.logger.info(f"Cost table loaded from {path}")
    else:
        app.logger.info("Using default cost table")


# =============================================================================
# Application Entry Point
# =============================================================================

if __name__ == '__main__':
    app = create_app()

    port = int(os.getenv('PORT', 5000))

    app.run(
        host='0.0.0.0',
        port=port,
        debug=app.config['DEBUG']
    )
