import logging

from flask import Flask, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
cors = CORS()

logger = logging.getLogger(__name__)


def create_app(config_object='hotel_api.config.Config'):
    app = Flask(__name__)
    app.config.from_object(config_object)

    from hotel_api.logging_config import configure_logging
    configure_logging(app)

    # Inicializar extensiones
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    cors.init_app(app, origins=app.config['CORS_ORIGINS'])

    from hotel_api.auth import register_jwt_handlers
    from hotel_api.errors import register_error_handlers
    register_jwt_handlers(jwt)
    register_error_handlers(app)

    @app.after_request
    def log_request(response):
        logger.info('%s %s -> %s', request.method, request.path, response.status_code)
        return response

    # Importar y registrar las rutas
    with app.app_context():
        from hotel_api import routes
        app.register_blueprint(routes.api)

        db.create_all()  # Crear tablas si no existen

    return app
