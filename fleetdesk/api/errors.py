"""Error handlers for the application.

The desktop shell only needs a message, so every error is JSON:
{"error": "<message>"}.
"""
from flask import jsonify
from werkzeug.exceptions import HTTPException


def register_error_handlers(app):
    """Register error handlers with the Flask app."""
    
    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        """Handle aborts and routing errors (400, 404, 405, ...)."""
        return jsonify({"error": error.description or error.name}), error.code
    
    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        if isinstance(error, HTTPException):
            return handle_http_error(error)
        
        # Full details go to the log only
        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        return jsonify({"error": "An unexpected error occurred"}), 500
