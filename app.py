import logging
import uuid
from datetime import datetime

from flask import Flask, g, jsonify, redirect, request
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from config import Config
from extensions import db, migrate, limiter
from routes.admin_routes import admin_bp
from routes.attendance_routes import attendance_bp
from routes.auth_routes import auth_bp
from routes.group_routes import group_bp
from routes.material_routes import material_bp
from routes.parent_routes import parent_bp
from routes.payment_routes import payment_bp
from routes.score_routes import score_bp
from routes.student_routes import student_bp
from routes.telegram_routes import telegram_bp
from scheduler import start_scheduler

_APP_START_TS = datetime.now()

app = Flask(__name__)

# Load configuration from Config (env vars, .env via python-dotenv)
app.config.from_object(Config)
app.logger.setLevel(getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO))

# Trust reverse proxy headers for scheme/host when enabled
if app.config.get("TRUST_PROXY", True):
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)  # type: ignore[method-assign]

# Initialize database, migrations and rate limiting
db.init_app(app)
migrate.init_app(app, db)
limiter.init_app(app)

with app.app_context():
    import models  # noqa: F401 - registers tables on db.metadata
    db.create_all()


# Set security headers on every response
@app.after_request
def _set_security_headers(resp):
    resp.headers.setdefault("X-Content-Type-Options", "nosniff")
    resp.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    resp.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    resp.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    if request.is_secure:
        resp.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    request_id = getattr(g, "request_id", None)
    if request_id:
        resp.headers.setdefault("X-Request-ID", request_id)
    return resp


# Enforce HTTPS for all requests (except localhost) when enabled
@app.before_request
def _enforce_https_redirect():
    if not app.config.get("ENFORCE_HTTPS", False):
        return None
    # Skip for local development hosts
    host = (request.host or "").split(":")[0]
    if host in ("127.0.0.1", "localhost"):
        return None
    xf_proto = (request.headers.get("X-Forwarded-Proto", "").split(",")[0].strip().lower())
    if request.is_secure or xf_proto == "https":
        return None
    url = request.url.replace("http://", "https://", 1)
    return redirect(url, code=301)


# Assign a per-request correlation id for tracing
@app.before_request
def _assign_request_id():
    g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:16]


@app.errorhandler(HTTPException)
def _json_http_error(e):
    """JSON bodies for API errors; everything else keeps Flask's default page."""
    if not request.path.startswith("/api/"):
        return e
    return jsonify({"error": e.description or e.name}), e.code


@app.errorhandler(429)
def _rate_limited(e):
    return jsonify({"error": "Too many attempts, try again later", "reason": "rate_limited"}), 429


# Register blueprints
app.register_blueprint(admin_bp)
app.register_blueprint(auth_bp)
app.register_blueprint(student_bp)
app.register_blueprint(group_bp)
app.register_blueprint(payment_bp)
app.register_blueprint(attendance_bp)
app.register_blueprint(score_bp)
app.register_blueprint(parent_bp)
app.register_blueprint(material_bp)
app.register_blueprint(telegram_bp)


@app.route("/healthz")
def healthz():
    """Basic liveness probe. Public and unauthenticated; does not touch the DB."""
    up_secs = max(0, int((datetime.now() - _APP_START_TS).total_seconds()))
    return jsonify({
        "ok": True,
        "status": "ok",
        "uptime_seconds": up_secs,
        "version": app.config.get("APP_NAME", "Kevin's Academy"),
    })


if app.config.get("ENABLE_SCHEDULER"):
    start_scheduler(app)

if __name__ == "__main__":
    app.run(debug=True)
