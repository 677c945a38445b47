from flask import current_app, render_template

from . import bp


@bp.get("/")
@bp.get("/index.html")
def home():
    """Single-page UI; all data is fetched from /api by static/js/main.js."""
    return render_template("index.html", site_name=current_app.config.get("SITE_NAME", "DAO Factory"))
