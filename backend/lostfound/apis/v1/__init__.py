from flask import Blueprint, Flask, jsonify, request
from werkzeug.exceptions import MethodNotAllowed, NotFound

# Mapper configuration needs every model imported before first use
from ...models import app_setting, item, match, notification, user  # noqa: F401
from ...modules.matching.routes import bp as matching_bp
from ...modules.matches.routes import bp as matches_bp

API_PREFIX = "/api/v1"


def register_api(app: Flask) -> None:
    api_v1 = Blueprint("api_v1", __name__, url_prefix=API_PREFIX)

    # Mount feature blueprints
    api_v1.register_blueprint(matching_bp)
    api_v1.register_blueprint(matches_bp)

    app.register_blueprint(api_v1)

    # Routing errors never reach blueprint handlers, so map them to JSON at the app level
    @app.errorhandler(MethodNotAllowed)
    def _method_not_allowed(e):
        if request.path.startswith(API_PREFIX):
            return jsonify({"error": "Method not allowed"}), 405
        return e

    @app.errorhandler(NotFound)
    def _not_found(e):
        if request.path.startswith(API_PREFIX):
            return jsonify({"error": "Not found"}), 404
        return e
