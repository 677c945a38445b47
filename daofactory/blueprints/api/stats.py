from flask import jsonify

from daofactory.services.registry import factory_stats
from . import bp


@bp.get("/stats")
def stats():
    """Factory-wide totals for the landing page."""
    return jsonify(factory_stats()), 200
