"""Flask application factory and bootstrap.

This module provides the create_app() factory that serves the user
administration commands to the desktop shell on a local port.
"""
from __future__ import annotations
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from fleetdesk.config import AppConfig, load_settings


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None) -> Flask:
    """Create and configure Flask application.
    
    Args:
        cfg: Preloaded configuration; read from .env and the environment when omitted
    """
    if cfg is None:
        load_dotenv()
        cfg = load_settings()
    
    app = Flask(__name__)
    
    # Store config for easy access in routes
    app.config["APP_CONFIG"] = cfg
    
    # Register blueprints
    from fleetdesk.api import commands, errors, health
    
    app.register_blueprint(health.bp)
    app.register_blueprint(commands.bp, url_prefix="/commands")
    
    # Register error handlers
    errors.register_error_handlers(app)
    
    # Log startup info
    print("[flask_app] Commands registered at /commands")
    if not cfg.platform_url or not cfg.service_role_key:
        print("[flask_app] WARNING: platform not configured - commands will fail until .env is fixed")
    
    return app


def main() -> None:
    """Serve the command API for the desktop shell."""
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app()
    cfg: AppConfig = app.config["APP_CONFIG"]
    app.run(host=cfg.server_host, port=cfg.server_port, threaded=True)


if __name__ == "__main__":
    main()
