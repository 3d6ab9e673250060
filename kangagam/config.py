# kangagam/config.py

import os

# Lingkungan aplikasi
APP_ENV = os.environ.get('APP_ENV', 'development')
SECRET_KEY = os.environ.get('FLASK_SECRET_KEY', 'supersecret')
FRONTEND_URL = os.environ.get('FRONTEND_URL', 'http://localhost:3000')
CORS_ORIGIN = os.environ.get('CORS_ORIGIN', '*')
TIMEZONE = os.environ.get('TIMEZONE', 'Asia/Jakarta')

# Autentikasi
JWT_SECRET = os.environ.get('JWT_SECRET', 'supersecretjwt')
JWT_ALGORITHM = 'HS256'
JWT_EXPIRES_HOURS = int(os.environ.get('JWT_EXPIRES_HOURS', 24 * 30))
PASSWORD_MIN_LENGTH = 6
RESET_TOKEN_EXPIRES_MINUTES = 30
SUPERADMIN_EMAIL = os.environ.get('SUPERADMIN_EMAIL', '')
SUPERADMIN_PASSWORD = os.environ.get('SUPERADMIN_PASSWORD', '')
DEFAULT_MAX_ADMINS = int(os.environ.get('DEFAULT_MAX_ADMINS', 5))

# S3 (Wasabi / S3 kompatibel)
AWS_ACCESS_KEY = os.environ.get('AWS_ACCESS_KEY', '')
AWS_SECRET_KEY = os.environ.get('AWS_SECRET_KEY', '')
REGION_NAME = os.environ.get('REGION_NAME', 'ap-southeast-1')
BUCKET_NAME = os.environ.get('BUCKET_NAME', 'kang-agam-media')
S3_ENDPOINT_URL = os.environ.get('S3_ENDPOINT_URL', f'https://s3.{REGION_NAME}.wasabisys.com')
PRESIGNED_URL_EXPIRES = 604800  # 7 hari

# Firebase
FIREBASE_CREDS = {
    "type": os.environ.get("type", "service_account"),
    "project_id": os.environ.get("project_id", ""),
    "private_key_id": os.environ.get("private_key_id", ""),
    "private_key": os.environ.get("private_key", "").replace('\\n', '\n'),
    "client_email": os.environ.get("client_email", ""),
    "client_id": os.environ.get("client_id", ""),
    "auth_uri": os.environ.get("auth_uri", "https://accounts.google.com/o/oauth2/auth"),
    "token_uri": os.environ.get("token_uri", "https://oauth2.googleapis.com/token"),
    "auth_provider_x509_cert_url": os.environ.get("auth_provider_x509_cert_url", ""),
    "client_x509_cert_url": os.environ.get("client_x509_cert_url", "")
}

# Bahasa yang didukung (urutan = urutan tampilan)
SUPPORTED_LANGUAGES = {
    'id': 'Indonesia',
    'su': 'Sunda',
    'en': 'English'
}
DEFAULT_LANGUAGE = 'id'
AUTO_TRANSLATE = os.environ.get('AUTO_TRANSLATE', 'false').lower() == 'true'

# Unggahan
MAX_CONTENT_LENGTH = 100 * 1024 * 1024  # 100MB per request
ALLOWED_IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}
ALLOWED_AUDIO_EXTENSIONS = {'.mp3', '.wav', '.ogg', '.m4a', '.webm'}
ALLOWED_VIDEO_EXTENSIONS = {'.mp4', '.webm', '.ogg'}

# Email (reset password)
SMTP_HOST = os.environ.get('SMTP_HOST', '')
SMTP_PORT = int(os.environ.get('SMTP_PORT', 587))
SMTP_USER = os.environ.get('SMTP_USER', '')
SMTP_PASSWORD = os.environ.get('SMTP_PASSWORD', '')
MAIL_FROM = os.environ.get('MAIL_FROM', 'no-reply@kangagam.id')

# Scheduler
SCHEDULER_ENABLED = os.environ.get('SCHEDULER_ENABLED', 'true').lower() == 'true'
URL_REFRESH_INTERVAL_HOURS = 3
