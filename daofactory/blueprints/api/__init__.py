from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from daofactory.extensions import db
from daofactory.services.errors import InvalidArgument, ServiceError

bp = Blueprint("api", __name__)


def json_body() -> dict:
    """Parsed JSON object body; anything else is a caller error."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgument("Request body must be a JSON object")
    return data


def write_limit() -> str:
    return current_app.config.get("RATELIMIT_WRITE", "60 per minute")


@bp.errorhandler(ServiceError)
def handle_service_error(e: ServiceError):
    return jsonify({"error": e.message, "code": e.code}), e.status


@bp.errorhandler(SQLAlchemyError)
def handle_db_error(e: SQLAlchemyError):
    db.session.rollback()
    current_app.logger.exception("%s %s failed", request.method, request.path)
    return jsonify({"error": "server_error", "code": "internal"}), 500


# Import route modules so their @bp.route decorators run
from . import daos  # noqa: E402,F401
from . import proposals  # noqa: E402,F401
from . import stats  # noqa: E402,F401
