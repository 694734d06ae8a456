# backend/medstore/__init__.py
from flask import Flask

from .config import Config
from .extensions import db


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions
    db.init_app(app)

    # Import models so the snapshot table is registered on the metadata
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.medicines import medicines_bp
    from .routes.transactions import transactions_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(medicines_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(reports_bp)

    # Load the store state once; routes save it back after each mutation.
    from .services.persistence_service import load_state

    with app.app_context():
        db.create_all()
        state = load_state(
            app.config["MEDSTORE_SNAPSHOT_KEY"],
            gst_rate_bps=app.config["MEDSTORE_GST_RATE_BPS"],
        )
        app.extensions["medstore"] = state
        app.logger.info(
            "Loaded store state: %d medicines, %d transactions",
            len(state.medicines),
            len(state.transactions),
        )

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
