#!/usr/bin/env python3
"""
Tiket Now - Main Application
JSON API over the Google Sheet that holds events and ticket purchases
"""

from flask import Flask
import logging
import os
from datetime import datetime, timezone

from tiketnow.config import AppConfig, load_project_config
from tiketnow.ticketing_service import TicketingService
from tiketnow.routes.helpers import EXTENSION_KEY

# Import our route modules
from tiketnow.routes.api_routes import api_bp
from tiketnow.routes.auth_routes import auth_bp
from tiketnow.routes.event_routes import event_bp, admin_event_bp
from tiketnow.routes.purchase_routes import purchase_bp
from tiketnow.routes.dashboard_routes import dashboard_bp
from tiketnow.routes.storefront_routes import storefront_bp

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


def setup_logging(config: AppConfig):
    """Console logging, plus logs/app.log when LOGS_DIR is set"""
    handlers = [logging.StreamHandler()]
    if config.logs_dir:
        os.makedirs(config.logs_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(config.logs_dir, 'app.log')))

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, handlers=handlers)


def create_app(config: AppConfig = None, ticketing: TicketingService = None):
    """Create and configure Flask app"""
    config = config or load_project_config()
    setup_logging(config)

    app = Flask(__name__)
    app.config['SECRET_KEY'] = config.secret_key
    app.extensions[EXTENSION_KEY] = ticketing or TicketingService(config)

    # Register blueprints
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(event_bp, url_prefix='/api/events')
    app.register_blueprint(admin_event_bp, url_prefix='/api/admin/events')
    app.register_blueprint(purchase_bp, url_prefix='/api/purchases')
    app.register_blueprint(dashboard_bp, url_prefix='/api/dashboard')
    app.register_blueprint(storefront_bp, url_prefix='/api/orders')

    @app.route('/health')
    def health():
        """Simple health check"""
        return {'status': 'ok', 'timestamp': datetime.now(timezone.utc).isoformat()}

    logger.info(f"Tiket Now app created (sheet {config.sheet_id or 'not configured'})")
    return app


if __name__ == '__main__':
    app = create_app()

    print("🎟️  Starting Tiket Now...")
    print("📊 API available at: http://localhost:8080/api")

    app.run(host='0.0.0.0', port=8080, debug=True)
