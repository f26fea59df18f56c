import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import Config
from routes import health_bp, submit_bp, slots_bp, reschedule_bp, admin_bp, webhook_bp

from models import db
from flask_migrate import Migrate
from scheduling.errors import ServiceError, RateLimitError

logger = logging.getLogger(__name__)


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(submit_bp)
    app.register_blueprint(slots_bp)
    app.register_blueprint(reschedule_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(webhook_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    register_error_handlers(app)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        # CSP can be strict since the frontend is served separately
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app


def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def _service_error(exc):
        resp = jsonify(error=exc.message)
        resp.status_code = exc.status_code
        if isinstance(exc, RateLimitError):
            resp.headers["Retry-After"] = str(exc.retry_after)
        return resp

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        resp = jsonify(error=exc.description)
        resp.status_code = exc.code
        return resp

    @app.errorhandler(Exception)
    def _unhandled(exc):
        logger.exception("Unhandled error")
        db.session.rollback()
        return jsonify(error="Internal server error"), 500

#-------------------------
import click


def register_cli(app):
    @app.cli.command("regenerate-reschedule-token")
    @click.argument("request_id")
    def regenerate_token(request_id):
        """Issue a new reschedule link for a request (the old one stops working)."""
        from scheduling.errors import NotFoundError, ValidationError
        from scheduling.lifecycle import regenerate_reschedule_token, reschedule_link

        try:
            req = regenerate_reschedule_token(request_id)
        except (NotFoundError, ValidationError) as exc:
            print(exc.message)
            return

        print(reschedule_link(req.reschedule_token, app.config.get("APP_URL") or ""))

    @app.cli.command("init-db")
    def init_db():
        """Create tables directly (local/dev; use `flask db upgrade` elsewhere)."""
        db.create_all()
        print("Database tables created")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
