"""
School results system
Main Flask application entry point
"""

import logging

from flask import Flask
from flask_wtf.csrf import CSRFProtect
from config import Config
from database import db, init_db
from utils.formatters import format_number

csrf = CSRFProtect()


def configure_logging(app):
    """Route application and engine logs through the standard logging module"""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    logging.getLogger().setLevel(level)
    app.logger.setLevel(level)


def create_app(config_class=Config):
    """Application factory pattern"""
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)

    # Initialize extensions with app
    db.init_app(app)
    csrf.init_app(app)

    # Register blueprints
    from routes.reports import reports_bp
    from routes.saved_reports import saved_reports_bp

    # JSON API; no form posts to protect
    csrf.exempt(reports_bp)
    csrf.exempt(saved_reports_bp)

    app.register_blueprint(reports_bp, url_prefix='/api/reports')
    app.register_blueprint(saved_reports_bp, url_prefix='/api/saved-reports')

    # Initialize database
    init_db(app)

    # Jinja filter: format numbers so 34.0 -> 34, keep 34.5 as 34.5
    @app.template_filter('format_mark')
    def format_mark(value):
        if value is None or value == "":
            return ""
        return format_number(value)

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=8000, debug=True, use_reloader=False)
