"""
Binds the database models to a Flask application.
"""

import logging
from flask import Flask

from .models import db

logger = logging.getLogger(__name__)


def init_db(app: Flask) -> None:
    """Register the models with app and create any missing tables"""
    db.init_app(app)

    with app.app_context():
        db.create_all()
        logger.info(f"Database ready at {app.config.get('SQLALCHEMY_DATABASE_URI')}")


def create_app(config_class=None) -> Flask:
    """Create a Flask application with the forecast database initialized"""
    app = Flask(__name__)

    if config_class is None:
        from config.settings import get_config
        config_class = get_config()
    app.config.from_object(config_class)

    init_db(app)
    return app
