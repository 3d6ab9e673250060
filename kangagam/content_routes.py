# kangagam/content_routes.py
import logging

from flask import Blueprint, request, jsonify

from .auth import admin_required, superadmin_required
from .culture import (
    list_culture_topics, get_culture_topic, create_culture_topic, update_culture_topic,
    delete_culture_topic, list_culture_entries, get_culture_entry, create_culture_entry,
    update_culture_entry, delete_culture_entry
)
from .entries import list_entries, get_entry, create_entry, update_entry, delete_entry, build_quiz
from .errors import ValidationError
from .topics import list_topics, get_topic, create_topic, update_topic, delete_topic
from .utils import requested_language

logger = logging.getLogger(__name__)

content_bp = Blueprint('content', __name__)


def _language():
    return requested_language(request.args.get('language'))


# ========================================
# Topik
# ========================================

@content_bp.route('/topics', methods=['GET'])
def api_list_topics():
    """Daftar topik (filter status opsional)"""
    topics = list_topics(_language(), request.args.get('status'))
    return jsonify({'count': len(topics), 'topics': topics})


@content_bp.route('/topics/<topic_id>', methods=['GET'])
def api_get_topic(topic_id):
    return jsonify({'topic': get_topic(topic_id, _language())})


@content_bp.route('/topics', methods=['POST'])
@admin_required
def api_create_topic():
    topic = create_topic(request.form, request.files)
    return jsonify({'message': 'Topik berhasil dibuat.', 'data': topic}), 201


@content_bp.route('/topics/<topic_id>', methods=['PUT'])
@admin_required
def api_update_topic(topic_id):
    topic = update_topic(topic_id, request.form, request.files)
    return jsonify({'message': 'Topik berhasil diperbarui.', 'data': topic})


@content_bp.route('/topics/<topic_id>', methods=['DELETE'])
@superadmin_required
def api_delete_topic(topic_id):
    delete_topic(topic_id)
    return jsonify({'message': 'Topik dan seluruh isinya berhasil dihapus.'})


# ========================================
# Entri kosakata
# ========================================

@content_bp.route('/topics/<topic_id>/entries', methods=['GET'])
def api_list_entries(topic_id):
    entries = list_entries(topic_id)
    return jsonify({'message': 'Entri berhasil diambil.', 'entries': entries})


@content_bp.route('/topics/<topic_id>/entries/<entry_id>', methods=['GET'])
def api_get_topic_entry(topic_id, entry_id):
    return jsonify({'message': 'Entri berhasil diambil.', 'entry': get_entry(entry_id, topic_id)})


@content_bp.route('/entries/<entry_id>', methods=['GET'])
def api_get_entry(entry_id):
    return jsonify({'message': 'Entri berhasil diambil.', 'entry': get_entry(entry_id)})


@content_bp.route('/topics/<topic_id>/entries', methods=['POST'])
@admin_required
def api_create_entry(topic_id):
    entry = create_entry(topic_id, request.form, request.files)
    return jsonify({'message': 'Entri berhasil dibuat.', 'entry': entry}), 201


@content_bp.route('/topics/<topic_id>/entries/<entry_id>', methods=['PUT'])
@admin_required
def api_update_topic_entry(topic_id, entry_id):
    entry = update_entry(entry_id, request.form, request.files, topic_id)
    return jsonify({'message': 'Entri berhasil diperbarui.', 'entry': entry})


@content_bp.route('/entries/<entry_id>', methods=['PUT'])
@admin_required
def api_update_entry(entry_id):
    entry = update_entry(entry_id, request.form, request.files)
    return jsonify({'message': 'Entri berhasil diperbarui.', 'entry': entry})


@content_bp.route('/topics/<topic_id>/entries/<entry_id>', methods=['DELETE'])
@admin_required
def api_delete_topic_entry(topic_id, entry_id):
    delete_entry(entry_id, topic_id)
    return jsonify({'message': 'Entri berhasil dihapus.'})


@content_bp.route('/entries/<entry_id>', methods=['DELETE'])
@admin_required
def api_delete_entry(entry_id):
    delete_entry(entry_id)
    return jsonify({'message': 'Entri berhasil dihapus.'})


@content_bp.route('/topics/<topic_id>/quiz', methods=['GET'])
def api_topic_quiz(topic_id):
    """Soal kuis tebak gambar untuk satu topik"""
    try:
        options = int(request.args.get('options', 4))
    except ValueError:
        raise ValidationError("Parameter options harus berupa angka.")
    seed = request.args.get('seed') or None
    questions = build_quiz(topic_id, _language(), options, seed)
    return jsonify({'count': len(questions), 'questions': questions})


# ========================================
# Budaya
# ========================================

@content_bp.route('/culture-topics', methods=['GET'])
def api_list_culture_topics():
    topics = list_culture_topics(_language(), request.args.get('status'))
    return jsonify({'count': len(topics), 'data': topics})


@content_bp.route('/culture-topics/<topic_id>', methods=['GET'])
def api_get_culture_topic(topic_id):
    return jsonify({'data': get_culture_topic(topic_id, _language())})


@content_bp.route('/culture-topics', methods=['POST'])
@admin_required
def api_create_culture_topic():
    topic = create_culture_topic(request.form, request.files)
    return jsonify({'message': 'Topik budaya berhasil dibuat.', 'data': topic}), 201


@content_bp.route('/culture-topics/<topic_id>', methods=['PUT'])
@admin_required
def api_update_culture_topic(topic_id):
    topic = update_culture_topic(topic_id, request.form, request.files)
    return jsonify({'message': 'Topik budaya berhasil diperbarui.', 'data': topic})


@content_bp.route('/culture-topics/<topic_id>', methods=['DELETE'])
@superadmin_required
def api_delete_culture_topic(topic_id):
    delete_culture_topic(topic_id)
    return jsonify({'message': 'Topik budaya dan seluruh entrinya berhasil dihapus.'})


@content_bp.route('/culture-topics/<topic_id>/entries', methods=['GET'])
def api_list_culture_entries(topic_id):
    entries = list_culture_entries(topic_id, _language())
    return jsonify({'count': len(entries), 'data': entries})


@content_bp.route('/culture-topics/<topic_id>/entries/<entry_id>', methods=['GET'])
def api_get_culture_entry(topic_id, entry_id):
    return jsonify({'data': get_culture_entry(topic_id, entry_id, _language())})


@content_bp.route('/culture-topics/<topic_id>/entries', methods=['POST'])
@admin_required
def api_create_culture_entry(topic_id):
    entry = create_culture_entry(topic_id, request.form, request.files)
    return jsonify({'message': 'Entri budaya berhasil dibuat.', 'data': entry}), 201


@content_bp.route('/culture-topics/<topic_id>/entries/<entry_id>', methods=['PUT'])
@admin_required
def api_update_culture_entry(topic_id, entry_id):
    entry = update_culture_entry(topic_id, entry_id, request.form, request.files)
    return jsonify({'message': 'Entri budaya berhasil diperbarui.', 'data': entry})


@content_bp.route('/culture-topics/<topic_id>/entries/<entry_id>', methods=['DELETE'])
@admin_required
def api_delete_culture_entry(topic_id, entry_id):
    delete_culture_entry(topic_id, entry_id)
    return jsonify({'message': 'Entri budaya berhasil dihapus.'})
