import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS
from argon2 import PasswordHasher

from .config import AuthSettings, get_config
from .errors import register_error_handlers
from models.dao import DAOContainer
from models.db_storage import DBStorage
from utils.security import PasswordService, TokenService
from utils.time_utils import Clock

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Token Auth API",
        "version": "1.0.0",
        "description": "User registration/login with access and refresh tokens, and per-user projects.",
    },
    "basePath": "/",  # blueprints are mounted under /api/v1
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger().setLevel(level.upper())


def create_app(config_name: str | None = None, config_overrides: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.

    Services are built once here from the loaded config and stored in
    app.extensions:
      - db_storage: engine owner and session factory
      - transaction_coordinator: one transaction per write request
      - daos, token_service, password_service, auth_workflows, clock
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if config_overrides:
        app.config.update(config_overrides)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    from .transaction import TransactionCoordinator
    from .workflows import AuthWorkflows

    settings = AuthSettings.from_config(app.config)
    storage = DBStorage(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))
    storage.reload()

    daos = DAOContainer()
    token_service = TokenService.from_settings(settings)
    password_service = PasswordService(
        PasswordHasher(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
        )
    )

    app.extensions["auth_settings"] = settings
    app.extensions["db_storage"] = storage
    app.extensions["transaction_coordinator"] = TransactionCoordinator(storage)
    app.extensions["daos"] = daos
    app.extensions["token_service"] = token_service
    app.extensions["password_service"] = password_service
    app.extensions["auth_workflows"] = AuthWorkflows(daos, token_service, password_service)
    app.extensions["clock"] = Clock()

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .projects import bp as projects_bp
    from .maintenance import purge_tokens_command

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(projects_bp, url_prefix="/api/v1")
    app.cli.add_command(purge_tokens_command)

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Token Auth API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    app.logger.info("Token Auth API ready (env=%s)", app.config.get("APP_ENV"))
    return app
