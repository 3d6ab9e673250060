# kangagam/auth.py
from datetime import datetime, timedelta, timezone
from functools import wraps
import hashlib
import secrets

import jwt
from flask import request, jsonify, g, current_app
from werkzeug.security import generate_password_hash, check_password_hash

from .database import get_document, ADMINS

ROLE_ADMIN = 'admin'
ROLE_SUPERADMIN = 'superadmin'
ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPERADMIN)


def hash_password(password):
    return generate_password_hash(password)


def verify_password(password_hash, password):
    if not password_hash or not password:
        return False
    return check_password_hash(password_hash, password)


def create_jwt_for_admin(admin):
    """Buat token JWT untuk admin"""
    now = datetime.now(timezone.utc)
    payload = {
        'sub': admin['_id'],
        'role': admin.get('role', ROLE_ADMIN),
        'iat': now,
        'exp': now + timedelta(hours=current_app.config['JWT_EXPIRES_HOURS'])
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET'],
        algorithm=current_app.config['JWT_ALGORITHM']
    )


def decode_jwt_token(token):
    """Verifikasi token JWT, kembalikan payload atau None"""
    try:
        return jwt.decode(
            token,
            current_app.config['JWT_SECRET'],
            algorithms=[current_app.config['JWT_ALGORITHM']]
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def generate_reset_token():
    """Token reset password: (token mentah, hash sha256 untuk disimpan)"""
    token = secrets.token_hex(32)
    return token, hash_reset_token(token)


def hash_reset_token(token):
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def _authenticate():
    """Isi g.current_admin dari header Authorization; respons error atau None"""
    auth_header = request.headers.get('Authorization', None)
    if not auth_header or not auth_header.startswith('Bearer '):
        return jsonify({'message': 'Tidak terotorisasi, token tidak ada.'}), 401

    token = auth_header.split(' ', 1)[1]
    payload = decode_jwt_token(token)
    if not payload:
        return jsonify({'message': 'Tidak terotorisasi, token tidak valid atau kedaluwarsa.'}), 401

    admin = get_document(ADMINS, payload.get('sub'))
    if not admin or admin.get('role') not in ADMIN_ROLES:
        return jsonify({'message': 'Tidak terotorisasi, admin tidak ditemukan.'}), 401

    g.current_admin = admin
    return None


def admin_required(f):
    """Dekorator: admin atau superadmin"""
    @wraps(f)
    def decorated(*args, **kwargs):
        error = _authenticate()
        if error:
            return error
        return f(*args, **kwargs)
    return decorated


def superadmin_required(f):
    """Dekorator: hanya superadmin"""
    @wraps(f)
    def decorated(*args, **kwargs):
        error = _authenticate()
        if error:
            return error
        if g.current_admin.get('role') != ROLE_SUPERADMIN:
            return jsonify({'message': 'Akses ditolak: hanya untuk superadmin.'}), 403
        return f(*args, **kwargs)
    return decorated
