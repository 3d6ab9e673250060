# kangagam/dashboard_routes.py
from datetime import datetime
from zoneinfo import ZoneInfo
import logging

from flask import Blueprint, request, jsonify, send_file, current_app

from .auth import admin_required
from .errors import ValidationError
from .learners import list_learners, get_learner, delete_learner
from .reports import EXPORT_FORMATS, build_statistics_pdf, build_statistics_excel, build_learners_excel
from .statistics import parse_periods, compute_statistics
from .utils import requested_language
from .visitor_logs import list_visitor_logs

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__)

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _local_now():
    return datetime.now(ZoneInfo(current_app.config['TIMEZONE']))


# ========================================
# Statistik
# ========================================

@dashboard_bp.route('/dashboard/stats', methods=['GET'])
@admin_required
def api_dashboard_stats():
    periods = parse_periods(request.args)
    stats = compute_statistics(periods, requested_language(request.args.get('language')))
    return jsonify(stats)


@dashboard_bp.route('/dashboard/export', methods=['GET'])
@admin_required
def api_dashboard_export():
    """Ekspor statistik ke PDF atau Excel"""
    export_format = (request.args.get('format') or 'pdf').lower()
    if export_format not in EXPORT_FORMATS:
        raise ValidationError(f"Format ekspor harus salah satu dari: {', '.join(EXPORT_FORMATS)}.")

    periods = parse_periods(request.args)
    now = _local_now()
    stats = compute_statistics(periods, requested_language(request.args.get('language')), now)
    filename = f"statistik-kang-agam-{now.strftime('%Y-%m-%d')}.{export_format}"

    if export_format == 'pdf':
        buffer = build_statistics_pdf(stats, periods, now)
        mimetype = 'application/pdf'
    else:
        buffer = build_statistics_excel(stats, periods, now)
        mimetype = XLSX_MIMETYPE

    return send_file(buffer, mimetype=mimetype, as_attachment=True, download_name=filename)


# ========================================
# Pengguna
# ========================================

@dashboard_bp.route('/learners', methods=['GET'])
@admin_required
def api_list_learners():
    learners = list_learners(request.args.get('city'), request.args.get('search'))
    return jsonify({'count': len(learners), 'data': learners})


@dashboard_bp.route('/learners/export', methods=['GET'])
@admin_required
def api_export_learners():
    learners = list_learners(request.args.get('city'), request.args.get('search'))
    buffer = build_learners_excel(learners)
    filename = f"pengguna-kang-agam-{_local_now().strftime('%Y-%m-%d')}.xlsx"
    return send_file(buffer, mimetype=XLSX_MIMETYPE, as_attachment=True, download_name=filename)


@dashboard_bp.route('/learners/<learner_id>', methods=['GET'])
@admin_required
def api_get_learner(learner_id):
    return jsonify({'data': get_learner(learner_id)})


@dashboard_bp.route('/learners/<learner_id>', methods=['DELETE'])
@admin_required
def api_delete_learner(learner_id):
    delete_learner(learner_id)
    return jsonify({'message': 'Pengguna dan log kunjungannya berhasil dihapus.'})


# ========================================
# Log kunjungan
# ========================================

@dashboard_bp.route('/visitor-logs', methods=['GET'])
@admin_required
def api_list_visitor_logs():
    logs = list_visitor_logs(
        request.args.get('learnerId'),
        request.args.get('topicId'),
        request.args.get('week')
    )
    return jsonify({'count': len(logs), 'data': logs})
