# kangagam/public_routes.py
from flask import Blueprint, request, jsonify

from .learners import register_learner
from .reference import list_languages, list_cities
from .visitor_logs import record_visit

public_bp = Blueprint('public', __name__)


@public_bp.route('/learners', methods=['POST'])
def api_register_learner():
    """Onboarding pengguna (tanpa login)"""
    learner, created = register_learner(request.get_json(silent=True) or {})
    if created:
        return jsonify({'message': 'Pengguna berhasil didaftarkan.', 'data': learner}), 201
    return jsonify({'message': 'Selamat datang kembali.', 'data': learner}), 200


@public_bp.route('/visitor-logs', methods=['POST'])
def api_record_visit():
    log = record_visit(request.get_json(silent=True) or {})
    return jsonify({'message': 'Kunjungan berhasil dicatat.', 'data': log}), 201


@public_bp.route('/languages', methods=['GET'])
def api_list_languages():
    languages = list_languages()
    return jsonify({'count': len(languages), 'data': languages})


@public_bp.route('/locations/cities', methods=['GET'])
def api_list_cities():
    return jsonify(list_cities())
