"""Flask application factory for the Quroosh zakat service."""
import logging
import os
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


logger = logging.getLogger('quroosh')


def create_app(config: dict | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Optional configuration dictionary to override defaults.
            GOLD_PRICE_RESOLVER may be set to inject a pre-built resolver.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Trust X-Forwarded-For from reverse proxy
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    # Default configuration
    app.config.update(
        DATA_DIR=os.environ.get('DATA_DIR', os.path.join(os.path.dirname(__file__), '..', 'data')),
        GOLD_PRICE_RESOLVER=None,
    )

    # Override with provided config
    if config:
        app.config.update(config)

    # Keep response keys in insertion order
    app.json.sort_keys = False

    # Initialize database
    from quroosh import db
    db.init_app(app)

    # Register CLI commands
    from quroosh import cli
    cli.register_cli(app)

    # One resolver (and therefore one quote cache) per process
    from quroosh.services.gold_price import GoldPriceResolver
    resolver = app.config.get('GOLD_PRICE_RESOLVER') or GoldPriceResolver()
    app.extensions['gold_price_resolver'] = resolver
    logger.info(
        f"Gold price sources: {[s.name for s in resolver.current_sources] or 'none'} "
        f"(currency {resolver.currency}, cache {resolver.cache_seconds}s)"
    )

    # Register blueprints
    from quroosh.routes.health import health_bp
    from quroosh.routes.api import api_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(api_bp, url_prefix='/api/v1')

    return app


def get_gold_price_resolver():
    """Get the resolver composed by create_app for the current app."""
    from flask import current_app
    return current_app.extensions['gold_price_resolver']
