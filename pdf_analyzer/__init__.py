"""
PDF Analyzer Application Factory
"""
from datetime import datetime, timezone

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from config import config
from pdf_analyzer.errors import AnalyzerError
from pdf_analyzer.services.openai_service import OpenAIAnalyzer
from pdf_analyzer.services.storage import FileUploadStore


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AnalyzerError)
    def handle_analyzer_error(e):
        app.logger.error("%s: %s", type(e).__name__, e)
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e):
        limit_mb = (app.config.get("MAX_CONTENT_LENGTH") or 0) // (1024 * 1024)
        return jsonify({"error": f"File is too large (max {limit_mb} MB)"}), 413

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        app.logger.exception("Unhandled error")
        return jsonify({"error": str(e) or type(e).__name__}), 500


def create_app(config_name='default', analyzer=None, store=None):
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    app.logger.setLevel(app.config["LOG_LEVEL"].upper())

    # Upload storage and analysis client live on the app, not in module globals
    app.extensions["upload_store"] = store or FileUploadStore(app.config["UPLOAD_FOLDER"])
    app.extensions["analyzer"] = analyzer or OpenAIAnalyzer.from_config(app.config)

    from pdf_analyzer.api import api_bp
    app.register_blueprint(api_bp)

    register_error_handlers(app)

    # Health check endpoint
    @app.route('/healthz')
    def healthz():
        """Health check for load balancers and monitoring"""
        analyzer_obj = app.extensions["analyzer"]
        ready, message = (True, "")
        if hasattr(analyzer_obj, "client_ready"):
            ready, message = analyzer_obj.client_ready()
        return jsonify({
            "status": "ok",
            "version": app.config["APP_VERSION"],
            "openai_ready": ready,
            "openai_message": message,
            "model": app.config["OPENAI_MODEL"],
            "upload_dir": app.config["UPLOAD_FOLDER"],
            "timestamp": datetime.now(timezone.utc).isoformat()
        })

    # Version endpoint
    @app.route('/version')
    def version():
        """Version and build info"""
        return jsonify({
            "version": app.config["APP_VERSION"],
            "build_time": app.config["BUILD_TIME"],
            "git_commit": app.config["GIT_COMMIT"],
        })

    app.logger.info('Upload directory: %s', app.config["UPLOAD_FOLDER"])
    return app
