import logging

from flask import Flask
from flask_cors import CORS

from config import Config
from models import db
from routes.admin import admin_bp
from routes.auth import auth_bp
from routes.leads import leads_bp
from routes.mobile import mobile_bp
from routes.visitors import visitors_bp
from utils.clock import utc_now
from utils.logging_config import configure_logging
from utils.responses import fail

logger = logging.getLogger('app')


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    configure_logging(app)

    # Initialize Extensions
    CORS(app, resources={r"/*": {
        "origins": app.config.get("CORS_ORIGINS", "*"),
        "allow_headers": ["Content-Type", "Authorization"],
        "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    }})
    db.init_app(app)

    # Register Blueprints
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
    app.register_blueprint(visitors_bp, url_prefix="/api/visitors")
    app.register_blueprint(leads_bp, url_prefix="/api/leads")
    app.register_blueprint(mobile_bp, url_prefix="/api/mobile")

    @app.route("/health")
    def health():
        return {"status": "OK", "timestamp": utc_now().isoformat()}

    @app.route("/")
    def home():
        return {
            "endpoints": {
                "auth": {
                    "login": "POST /api/auth/login",
                    "register": "POST /api/auth/register",
                    "profile": "GET|PUT /api/auth/profile",
                    "change_password": "PUT /api/auth/change-password",
                },
                "admin": {
                    "companies": "GET|POST /api/admin/companies",
                    "update_company": "PUT /api/admin/companies/<id>",
                    "users": "GET|POST /api/admin/users",
                    "update_user": "PUT /api/admin/users/<id>",
                    "deactivate_user": "PUT /api/admin/users/<id>/deactivate",
                    "delete_employee": "DELETE /api/admin/employees/<id>",
                    "company_admins": "GET|POST /api/admin/company-admins",
                    "company_admin": "PUT|DELETE /api/admin/company-admins/<id>",
                    "dashboards": "GET /api/admin/dashboard/overview|company|employee",
                },
                "visitors": {
                    "search": "GET /api/visitors/search/<phone>",
                    "visitor": "GET|PUT|DELETE /api/visitors/<id>",
                    "create": "POST /api/visitors",
                    "list": "GET /api/visitors",
                    "stats": "GET /api/visitors/stats/overview",
                },
                "leads": {
                    "leads": "GET|POST /api/leads",
                    "lead": "GET|PUT|DELETE /api/leads/<id>",
                    "stats": "GET /api/leads/stats/overview",
                    "export": "GET /api/leads/export/csv",
                },
                "mobile": {
                    "login": "POST /api/mobile/login",
                    "register": "POST /api/mobile/register",
                    "profile": "GET|PUT /api/mobile/profile",
                    "leads": "GET|POST /api/mobile/leads",
                    "update_lead": "PUT /api/mobile/leads/<id>",
                    "search_visitors": "GET /api/mobile/visitors/search",
                    "visitor_exists": "GET /api/mobile/visitors/exists/<phone>",
                    "phone_suggestions": "GET /api/mobile/visitors/phone-suggestions/<query>",
                },
            },
            "message": "Expo Leads API",
            "version": "1.0.0",
        }

    @app.errorhandler(404)
    def not_found(_e):
        return fail("Route not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_e):
        return fail("Method not allowed", 405)

    return app


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        db.create_all()
    app.run(debug=True, port=5000)
