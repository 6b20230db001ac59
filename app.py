import logging
import os
from dotenv import load_dotenv
load_dotenv()
from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_migrate import Migrate
from config import config_dict
from models import db
from classes.data_store import SqlDataStore
from classes.session_registry import SessionRegistry
from routes.authentication import auth_bp
from routes.challengers import challenger_bp
from routes.admin import admin_bp

migrate = Migrate()


def create_app(config_name=None):
    env = config_name or os.environ.get("FLASK_ENV", "production")
    app = Flask(__name__)
    app.config.from_object(config_dict.get(env, config_dict["production"]))

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)
    logger.info("Environment: %s", env)

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"], "supports_credentials": True}})

    app.extensions["quiz_sessions"] = SessionRegistry()
    if app.config.get("SQLALCHEMY_DATABASE_URI"):
        db.init_app(app)
        migrate.init_app(app, db)
        app.extensions["quiz_store"] = SqlDataStore()
    else:
        logger.warning("No database configured; quiz endpoints will report NotConfigured")

    @app.before_request
    def sweep_quiz_sessions():
        # the session this request targets is synced, not evicted, so it can still answer
        keep = (request.view_args or {}).get("session_id")
        app.extensions["quiz_sessions"].sweep(keep=keep)

    @app.route('/')
    def home():
        return jsonify({"message": "Quiz engine is running"})

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(challenger_bp, url_prefix='/api/challenger')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    return app


app = create_app()

if __name__ == '__main__':
    app.run(debug=app.config['DEBUG'])
