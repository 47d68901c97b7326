"""
LexiBridge - Flask Application

Application factory wiring the merge engine to its HTTP routes.

Storage:
    DATABASE_URL set      -> SQLStore over Flask-SQLAlchemy (tables created on start)
    DATABASE_URL unset    -> InMemoryStore (development and tests)

Thresholds:
    The registry is loaded from LEXIBRIDGE_THRESHOLDS_FILE when it exists and
    saved there whenever a recalibration is applied. Each request first
    reloads the file if scripts/recalibrate_thresholds.py rewrote it.
"""
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from lexibridge.blueprints import (
    translations_bp, init_translations_blueprint,
    learning_bp, init_learning_blueprint,
)
from lexibridge.calibration import ThresholdRegistry
from lexibridge.config import AppConfig
from lexibridge.db_utils import check_connection
from lexibridge.logging_config import setup_logging, get_logger
from lexibridge.memory_store import InMemoryStore
from lexibridge.models import db
from lexibridge.orchestrator import MergeOrchestrator
from lexibridge.sql_store import SQLStore

logger = get_logger('app')

API_PREFIX = '/api'


def create_app(store=None, config=None, registry=None):
    """Build the Flask app around a store, defaulting from configuration"""
    config = config or AppConfig.load()
    setup_logging(config.debug_mode)

    app = Flask(__name__)
    app.config['DEBUG'] = config.debug_mode
    CORS(app, supports_credentials=True)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

    if store is None:
        if config.database_url:
            app.config['SQLALCHEMY_DATABASE_URI'] = config.database_url
            app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {'pool_pre_ping': True, 'pool_recycle': 300}
            db.init_app(app)
            with app.app_context():
                db.create_all()
            store = SQLStore()
            logger.info("Using SQL store")
        else:
            store = InMemoryStore()
            logger.info("DATABASE_URL not configured, using in-memory store")

    if registry is None:
        registry = ThresholdRegistry(path=config.thresholds_file or None)
        registry.load()

    orchestrator = MergeOrchestrator(store, config=config, registry=registry)
    app.extensions['lexibridge'] = orchestrator

    init_translations_blueprint(orchestrator)
    init_learning_blueprint(orchestrator, registry)
    app.register_blueprint(translations_bp, url_prefix=API_PREFIX)
    app.register_blueprint(learning_bp, url_prefix=API_PREFIX)

    @app.before_request
    def refresh_thresholds():
        registry.refresh()

    @app.route(f'{API_PREFIX}/health')
    def api_health():
        """API health check endpoint"""
        current = registry.current()
        healthy = check_connection() if isinstance(store, SQLStore) else True
        return jsonify({
            "status": "ok" if healthy else "degraded",
            "message": "LexiBridge is running",
            "store": type(store).__name__,
            "thresholds_version": current.version,
            "settings": config.get_settings(),
        })

    @app.errorhandler(404)
    def page_not_found(e):
        return jsonify({'error': 'Not found'}), 404

    return app
