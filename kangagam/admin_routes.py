# kangagam/admin_routes.py
import threading
import logging

from flask import Blueprint, request, jsonify, g

from .auth import admin_required, superadmin_required
from .admins import (
    login, create_admin, list_admins, public_admin, update_admin, change_password,
    delete_admin, forgot_password, reset_password
)
from .scheduler import refresh_expiring_urls, scheduler_status
from .settings import get_app_settings, update_app_settings

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__)


# ========================================
# Admin
# ========================================

@admin_bp.route('/admins/login', methods=['POST'])
def api_admin_login():
    """Login admin"""
    return jsonify(login(request.get_json(silent=True) or {})), 200


@admin_bp.route('/admins', methods=['POST'])
@superadmin_required
def api_create_admin():
    return jsonify(create_admin(request.get_json(silent=True) or {})), 201


@admin_bp.route('/admins', methods=['GET'])
@admin_required
def api_list_admins():
    admins = list_admins()
    return jsonify({'count': len(admins), 'data': admins})


@admin_bp.route('/admins/me', methods=['GET'])
@admin_required
def api_get_me():
    return jsonify(public_admin(g.current_admin))


@admin_bp.route('/admins/<admin_id>', methods=['PUT'])
@admin_required
def api_update_admin(admin_id):
    admin = update_admin(g.current_admin, admin_id, request.get_json(silent=True) or {})
    return jsonify({'message': 'Data admin berhasil diperbarui.', 'data': admin})


@admin_bp.route('/admins/<admin_id>/change-password', methods=['PUT'])
@admin_required
def api_change_password(admin_id):
    change_password(g.current_admin, admin_id, request.get_json(silent=True) or {})
    return jsonify({'message': 'Password berhasil diperbarui.'})


@admin_bp.route('/admins/<admin_id>', methods=['DELETE'])
@superadmin_required
def api_delete_admin(admin_id):
    delete_admin(admin_id)
    return jsonify({'message': 'Admin berhasil dihapus.'})


@admin_bp.route('/admins/forgot-password', methods=['POST'])
def api_forgot_password():
    data = request.get_json(silent=True) or {}
    forgot_password(data.get('adminEmail'))
    return jsonify({
        'message': 'Jika email terdaftar, tautan untuk reset password telah dikirim.'
    })


@admin_bp.route('/admins/reset-password/<token>', methods=['PUT'])
def api_reset_password(token):
    new_token = reset_password(token, request.get_json(silent=True) or {})
    return jsonify({'message': 'Password berhasil direset.', 'token': new_token})


# ========================================
# Pengaturan
# ========================================

@admin_bp.route('/settings', methods=['GET'])
@admin_required
def api_get_settings():
    return jsonify({'maxAdmins': get_app_settings().get('maxAdmins')})


@admin_bp.route('/settings', methods=['PUT'])
@superadmin_required
def api_update_settings():
    value = update_app_settings(request.get_json(silent=True) or {})
    return jsonify({'message': 'Pengaturan berhasil diperbarui.', 'data': value})


# ========================================
# Sistem
# ========================================

@admin_bp.route('/system/refresh-urls', methods=['POST'])
@superadmin_required
def api_refresh_urls():
    """Pembaruan URL manual (latar belakang)"""
    thread = threading.Thread(target=refresh_expiring_urls)
    thread.daemon = True
    thread.start()
    logger.info(f"Pembaruan URL manual dimulai oleh {g.current_admin['adminEmail']}")
    return jsonify({
        'message': 'Pembaruan URL berjalan di latar belakang.',
        'status': 'started'
    })


@admin_bp.route('/system/scheduler-status', methods=['GET'])
@superadmin_required
def api_scheduler_status():
    return jsonify(scheduler_status())
