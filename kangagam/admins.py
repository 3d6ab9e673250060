# kangagam/admins.py
from datetime import timedelta
import logging
import re

from flask import current_app

from .auth import (
    hash_password, verify_password, create_jwt_for_admin, generate_reset_token,
    hash_reset_token, ROLE_ADMIN, ROLE_SUPERADMIN, ADMIN_ROLES
)
from .database import (
    get_document, create_document, update_document, delete_document,
    list_documents, count_documents, now_utc, ADMINS
)
from .errors import ValidationError, AuthenticationError, PermissionDenied, NotFoundError, ApiError
from .mailer import send_email
from .settings import get_max_admins
from .utils import serialize

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
PRIVATE_FIELDS = ('adminPassword', 'passwordResetToken', 'passwordResetExpires')


def public_admin(admin):
    return serialize(admin, exclude=PRIVATE_FIELDS)


def find_admin_by_email(email):
    email = (email or '').strip().lower()
    if not email:
        return None
    found = list_documents(ADMINS, [('adminEmail', '==', email)], limit=1)
    return found[0] if found else None


def _check_password(new_password, confirm_password=None):
    if confirm_password is not None and new_password != confirm_password:
        raise ValidationError("Password baru dan konfirmasi password tidak cocok.")
    min_length = current_app.config['PASSWORD_MIN_LENGTH']
    if len(new_password) < min_length:
        raise ValidationError(f"Password harus minimal {min_length} karakter.")


def _check_email(email):
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Format email tidak valid.")


def _session_payload(admin, message):
    return {
        'message': message,
        '_id': admin['_id'],
        'adminName': admin['adminName'],
        'adminEmail': admin['adminEmail'],
        'role': admin['role'],
        'token': create_jwt_for_admin(admin)
    }


def login(data):
    """Login admin dengan email dan password"""
    email = (data.get('adminEmail') or '').strip().lower()
    password = data.get('adminPassword') or ''
    if not email or not password:
        raise ValidationError("Email dan password harus diisi.")

    admin = find_admin_by_email(email)
    if not admin or not verify_password(admin.get('adminPassword'), password):
        raise AuthenticationError("Email atau password salah.")

    logger.info(f"Admin login: {email}")
    return _session_payload(admin, "Login berhasil.")


def create_admin(data):
    """Daftarkan admin baru (dibatasi oleh maxAdmins)"""
    max_admins = get_max_admins()
    if count_documents(ADMINS) >= max_admins:
        raise PermissionDenied(f"Batas maksimum admin ({max_admins}) telah tercapai.")

    name = (data.get('adminName') or '').strip()
    email = (data.get('adminEmail') or '').strip().lower()
    password = data.get('adminPassword') or ''
    role = data.get('role') or ROLE_ADMIN

    if not name or not email or not password:
        raise ValidationError("Nama, email, dan password admin wajib diisi.")
    _check_email(email)
    _check_password(password)
    if role not in ADMIN_ROLES:
        raise ValidationError(f"Peran '{role}' tidak valid.")
    if find_admin_by_email(email):
        raise ValidationError("Admin dengan email ini sudah terdaftar.")

    admin = create_document(ADMINS, {
        'adminName': name,
        'adminEmail': email,
        'adminPassword': hash_password(password),
        'role': role
    })
    logger.info(f"✅ Admin baru dibuat: {email} ({role})")
    return _session_payload(admin, "Admin berhasil dibuat.")


def list_admins():
    admins = list_documents(ADMINS)
    admins.sort(key=lambda a: (a.get('role') != ROLE_SUPERADMIN, a.get('adminName', '').lower()))
    return [public_admin(a) for a in admins]


def _get_admin_or_404(admin_id):
    admin = get_document(ADMINS, admin_id)
    if not admin:
        raise NotFoundError("Admin tidak ditemukan.")
    return admin


def _can_edit(current_admin, target_id):
    return current_admin['role'] == ROLE_SUPERADMIN or current_admin['_id'] == target_id


def update_admin(current_admin, target_id, data):
    """Perbarui admin: superadmin atau admin itu sendiri"""
    if not _can_edit(current_admin, target_id):
        raise PermissionDenied("Akses ditolak: Anda hanya dapat mengedit data diri sendiri.")
    target = _get_admin_or_404(target_id)
    updates = {}

    name = (data.get('adminName') or '').strip()
    if name:
        updates['adminName'] = name

    email = (data.get('adminEmail') or '').strip().lower()
    if email and email != target['adminEmail']:
        _check_email(email)
        if find_admin_by_email(email):
            raise ValidationError("Admin dengan email ini sudah terdaftar.")
        updates['adminEmail'] = email

    role = data.get('role')
    if role and current_admin['role'] == ROLE_SUPERADMIN:
        if role not in ADMIN_ROLES:
            raise ValidationError(f"Peran '{role}' tidak valid.")
        if current_admin['_id'] == target_id and role != ROLE_SUPERADMIN:
            raise ValidationError("Superadmin tidak dapat menurunkan perannya sendiri.")
        updates['role'] = role

    new_password = data.get('newPassword')
    confirm_password = data.get('confirmPassword')
    if new_password and confirm_password:
        _check_password(new_password, confirm_password)
        updates['adminPassword'] = hash_password(new_password)

    if updates:
        update_document(ADMINS, target_id, updates)
        logger.info(f"Admin {target_id} diperbarui: {sorted(updates)}")
    target.update(updates)
    return public_admin(target)


def change_password(current_admin, target_id, data):
    """Ganti password tanpa password lama"""
    new_password = data.get('newPassword')
    confirm_password = data.get('confirmPassword')
    if not new_password or not confirm_password:
        raise ValidationError("Password baru dan konfirmasi password diperlukan.")
    if new_password != confirm_password:
        raise ValidationError("Password baru dan konfirmasi password tidak cocok.")
    if not _can_edit(current_admin, target_id):
        raise PermissionDenied("Akses ditolak: Anda hanya dapat mengubah password diri sendiri.")
    _get_admin_or_404(target_id)
    _check_password(new_password)

    update_document(ADMINS, target_id, {'adminPassword': hash_password(new_password)})
    logger.info(f"Password admin {target_id} diperbarui")


def delete_admin(target_id):
    target = _get_admin_or_404(target_id)
    if target.get('role') == ROLE_SUPERADMIN:
        raise PermissionDenied("Akses ditolak: Superadmin tidak dapat dihapus.")
    delete_document(ADMINS, target_id)
    logger.info(f"Admin dihapus: {target['adminEmail']}")


def forgot_password(email):
    """Kirim tautan reset password jika email terdaftar"""
    admin = find_admin_by_email(email)
    if not admin:
        return

    token, hashed = generate_reset_token()
    expires = now_utc() + timedelta(minutes=current_app.config['RESET_TOKEN_EXPIRES_MINUTES'])
    update_document(ADMINS, admin['_id'], {
        'passwordResetToken': hashed,
        'passwordResetExpires': expires
    })

    reset_url = f"{current_app.config['FRONTEND_URL'].rstrip('/')}/reset-password/{token}"
    message = (
        "Anda menerima email ini karena Anda (atau orang lain) meminta untuk mereset "
        "kata sandi Anda. Silakan klik link di bawah untuk melanjutkan:\n\n"
        f"{reset_url}\n\n"
        "Jika Anda tidak merasa meminta ini, abaikan saja email ini. "
        f"Token ini akan hangus dalam {current_app.config['RESET_TOKEN_EXPIRES_MINUTES']} menit."
    )
    try:
        send_email(admin['adminEmail'], 'Reset Kata Sandi Akun Admin Kang Agam', message)
    except Exception as e:
        logger.error(f"Email reset gagal dikirim ke {admin['adminEmail']}: {e}")
        update_document(ADMINS, admin['_id'], {
            'passwordResetToken': None,
            'passwordResetExpires': None
        })
        raise ApiError("Gagal mengirim email.", 500)


def reset_password(token, data):
    """Reset password dengan token dari email"""
    hashed = hash_reset_token(token or '')
    found = list_documents(ADMINS, [('passwordResetToken', '==', hashed)], limit=1)
    admin = found[0] if found else None
    expires = admin.get('passwordResetExpires') if admin else None
    if not admin or not expires or expires <= now_utc():
        raise ValidationError("Token tidak valid atau sudah hangus.")

    password = data.get('password') or ''
    _check_password(password)
    update_document(ADMINS, admin['_id'], {
        'adminPassword': hash_password(password),
        'passwordResetToken': None,
        'passwordResetExpires': None
    })
    logger.info(f"Password admin {admin['adminEmail']} direset")
    return create_jwt_for_admin(admin)


def seed_superadmin(email, password):
    """Buat superadmin pertama bila belum ada"""
    if list_documents(ADMINS, [('role', '==', ROLE_SUPERADMIN)], limit=1):
        return None
    if not email or not password:
        logger.error("❌ SUPERADMIN_EMAIL dan SUPERADMIN_PASSWORD harus diisi untuk membuat superadmin")
        return None
    existing = find_admin_by_email(email)
    if existing:
        update_document(ADMINS, existing['_id'], {'role': ROLE_SUPERADMIN})
        logger.info(f"✅ Admin {existing['adminEmail']} dijadikan superadmin")
        return dict(existing, role=ROLE_SUPERADMIN)
    admin = create_document(ADMINS, {
        'adminName': 'Super Admin',
        'adminEmail': email.strip().lower(),
        'adminPassword': hash_password(password),
        'role': ROLE_SUPERADMIN
    })
    logger.info("✅ Superadmin dibuat")
    return admin
