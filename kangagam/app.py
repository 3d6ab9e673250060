# kangagam/app.py (aplikasi utama)
from datetime import datetime, timezone
import logging

import click
from flask import Flask, current_app
from flask_cors import CORS

from . import __version__, config
from .admin_routes import admin_bp
from .admins import seed_superadmin
from .content_routes import content_bp
from .dashboard_routes import dashboard_bp
from .database import get_db, ADMINS
from .errors import register_error_handlers
from .public_routes import public_bp
from .scheduler import scheduler
from .settings import get_app_settings
from .storage import get_s3

# Konfigurasi logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def seed_database():
    """Pastikan dokumen pengaturan dan superadmin pertama ada"""
    settings = get_app_settings()
    logger.info(f"Pengaturan aplikasi: maxAdmins={settings.get('maxAdmins')}")
    seed_superadmin(
        current_app.config.get('SUPERADMIN_EMAIL'),
        current_app.config.get('SUPERADMIN_PASSWORD')
    )


def _add_headers(response):
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    return response


def health_check():
    """Status layanan"""
    try:
        get_db().collection(ADMINS).limit(1).get()
        firestore_status = 'healthy'
    except Exception:
        firestore_status = 'unhealthy'

    try:
        get_s3().head_bucket(Bucket=current_app.config['BUCKET_NAME'])
        s3_status = 'healthy'
    except Exception:
        s3_status = 'unhealthy'

    overall_status = 'healthy' if (firestore_status == 'healthy' and s3_status == 'healthy') else 'unhealthy'

    return {
        'status': overall_status,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'services': {
            'firestore': firestore_status,
            's3': s3_status,
            'scheduler': scheduler.running
        },
        'version': __version__
    }, 200 if overall_status == 'healthy' else 503


def create_app(test_config=None):
    """Buat aplikasi Flask"""
    app = Flask(__name__)
    app.config.from_object(config)
    if test_config:
        app.config.update(test_config)
    app.secret_key = app.config['SECRET_KEY']

    CORS(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGIN']}})
    register_error_handlers(app)

    # Blueprint
    app.register_blueprint(admin_bp, url_prefix='/api')
    app.register_blueprint(content_bp, url_prefix='/api')
    app.register_blueprint(public_bp, url_prefix='/api')
    app.register_blueprint(dashboard_bp, url_prefix='/api')

    app.after_request(_add_headers)
    app.add_url_rule('/health', 'health_check', health_check, methods=['GET'])

    @app.cli.command('seed')
    def seed_command():
        """Buat pengaturan bawaan dan superadmin"""
        seed_database()
        click.echo('Seed selesai.')

    return app


def initialize_app(app):
    """Inisialisasi saat start: seed data awal"""
    try:
        with app.app_context():
            seed_database()
        app.logger.info("✅ Inisialisasi aplikasi selesai")
        return True

    except Exception as e:
        app.logger.error(f"❌ Inisialisasi aplikasi gagal: {e}")
        return False
