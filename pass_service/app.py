"""
Pass Service — Flask application
Issues QR event passes at registration and admits them at the gate.
"""

import logging
import os

import click
from dotenv import load_dotenv
from flask import Flask, jsonify
from flasgger import Swagger
from werkzeug.exceptions import HTTPException

from pass_service.errors import PassServiceError
from pass_service.extensions import db, jwt
from pass_service.models import Registrant  # Register model

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = 'dev-secret-change-me'


def _database_uri():
    if os.environ.get('DATABASE_URL'):
        return os.environ['DATABASE_URL']
    db_user = os.environ.get('DB_USER', 'pass_svc_user')
    db_pass = os.environ.get('DB_PASS', 'password')
    db_host = os.environ.get('DB_HOST', 'passes-db')
    db_name = os.environ.get('DB_NAME', 'passes_db')
    return f"postgresql://{db_user}:{db_pass}@{db_host}/{db_name}"


def create_app(test_config=None):
    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO'),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    app = Flask(__name__)

    # Configuration
    app.config['SQLALCHEMY_DATABASE_URI'] = _database_uri()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['JWT_SECRET_KEY'] = os.environ.get('JWT_SECRET', DEFAULT_JWT_SECRET)
    app.config['BCRYPT_ROUNDS'] = int(os.environ.get('BCRYPT_ROUNDS', '10'))
    app.config['SERIAL_PREFIX'] = os.environ.get('SERIAL_PREFIX', 'AUR')
    app.config['ALLOWED_EMAIL_DOMAIN'] = os.environ.get('ALLOWED_EMAIL_DOMAIN', 'bitmesra.ac.in')
    app.config['ASSET_STORE_URL'] = os.environ.get('ASSET_STORE_URL', 'http://asset-store:8080')
    app.config['ASSET_FOLDER_ID'] = os.environ.get('FOLDER_ID')
    app.config['UPLOAD_MAX_RETRIES'] = int(os.environ.get('UPLOAD_MAX_RETRIES', '5'))
    app.config['UPLOAD_RETRY_DELAY'] = float(os.environ.get('UPLOAD_RETRY_DELAY', '1.0'))
    app.config['UPLOAD_TIMEOUT'] = float(os.environ.get('UPLOAD_TIMEOUT', '10.0'))
    app.config['MAX_CONTENT_LENGTH'] = 10 * 1024 * 1024

    if test_config:
        app.config.update(test_config)

    if app.config['JWT_SECRET_KEY'] == DEFAULT_JWT_SECRET and not app.config.get('TESTING'):
        logger.warning("JWT_SECRET is not set; passes are signed with the development key")

    # Initialize Extensions
    db.init_app(app)
    jwt.init_app(app)

    Swagger(app)

    # Register Blueprints
    from pass_service.routes.registration import registration_bp
    app.register_blueprint(registration_bp, url_prefix='/api')

    from pass_service.routes.verification import verification_bp
    app.register_blueprint(verification_bp, url_prefix='/api')

    from pass_service.routes.uploads import uploads_bp
    app.register_blueprint(uploads_bp, url_prefix='/api')

    _register_error_handlers(app)

    @app.route('/health')
    def health():
        try:
            db.session.execute(db.text('SELECT 1'))
            return {"service": "pass-service", "status": "healthy"}, 200
        except Exception:
            logger.exception("Health check failed")
            return {"service": "pass-service", "status": "unhealthy"}, 503

    @app.cli.command('init-db')
    def init_db():
        """Create the registrants table."""
        db.create_all()
        click.echo(f"Created table {Registrant.__tablename__}")

    return app


def _register_error_handlers(app):
    @app.errorhandler(PassServiceError)
    def handle_pass_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception("Unhandled error: %s", e)
        return jsonify({'error': PassServiceError.message}), 500


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=3001)
