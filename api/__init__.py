from flask import Flask
from flasgger import Swagger
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import get_config
from .errors import register_error_handlers
from .version import __version__
from models import storage  # DBStorage singleton (scoped_session)
from utils.mailer import EmailSender
from utils.rate_limit import SlidingWindowLimiter

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Auth Gateway API",
        "version": __version__,
        "description": "Credential login, MFA verification, token rotation/revocation and password reset.",
    },
    "basePath": "/",
    "schemes": ["http", "https"],
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


def create_app(config_name: str | None = None, mailer=None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    `mailer` replaces the SMTP sender built from config (anything with a
    send(to, subject, text, html=None) method).
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    hops = app.config.get("TRUST_PROXY_HOPS", 0)
    if hops:
        # request.remote_addr then reflects X-Forwarded-For, which the rate limiter keys on
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops)

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    # Database engine + scoped session; removed on every app-context teardown
    storage.init_app(app)

    if mailer is None:
        mailer = EmailSender.from_config(app.config)
        if not mailer.is_configured and not mailer.log_only:
            app.logger.warning("SMTP_HOST is not set: MFA logins and password resets cannot send email")
    app.extensions["mailer"] = mailer
    app.extensions["rate_limiters"] = {
        "login": SlidingWindowLimiter(
            app.config["LOGIN_RATE_LIMIT"],
            app.config["LOGIN_RATE_WINDOW"].total_seconds(),
        ),
    }

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .cli import register_commands

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    register_commands(app)

    @app.route("/")
    def root():
        return {
            "message": "Auth Gateway API",
            "docs": "/apidocs/",
            "health": "/api/health",
        }, 200

    return app
