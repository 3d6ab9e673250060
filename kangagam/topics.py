# kangagam/topics.py
import logging

from flask import current_app

from .database import (
    get_document, create_document, update_document, delete_document,
    list_documents, delete_where, TOPICS, ENTRIES, VISITOR_LOGS
)
from .errors import ValidationError, NotFoundError
from .media import IMAGE, check_file, has_file, upload_media, media_transaction, media_url
from .storage import delete_objects
from .translation import fill_missing_translations
from .config import DEFAULT_LANGUAGE
from .utils import serialize, parse_json_field, normalize_localized, resolve_localized

logger = logging.getLogger(__name__)

STATUS_PUBLISHED = 'Published'
STATUS_DRAFT = 'Draft'
TOPIC_STATUSES = (STATUS_PUBLISHED, STATUS_DRAFT)


def check_status(status):
    if status not in TOPIC_STATUSES:
        raise ValidationError(f"Status harus salah satu dari: {', '.join(TOPIC_STATUSES)}.")
    return status


def prepare_names(raw, field_name, label):
    """Parse, validasi dan (opsional) terjemahkan nama multibahasa"""
    names = normalize_localized(parse_json_field(raw, field_name) or None, label)
    if current_app.config.get('AUTO_TRANSLATE'):
        names = fill_missing_translations(names)
    return names


def find_duplicate_name(collection, field, names, exclude_id=None):
    """Cari dokumen lain dengan nama Indonesia yang sama (tanpa beda huruf besar/kecil)"""
    target = resolve_localized(names, DEFAULT_LANGUAGE).lower()
    for doc in list_documents(collection):
        if doc['_id'] == exclude_id:
            continue
        if resolve_localized(doc.get(field), DEFAULT_LANGUAGE).lower() == target:
            return doc
    return None


def topic_view(topic, lang=DEFAULT_LANGUAGE):
    data = serialize(topic)
    data['topicNames'] = data.get('topicName', [])
    data['topicName'] = resolve_localized(topic.get('topicName'), lang)
    data['topicImagePath'] = media_url(topic, 'topicImageKey', 'topicImagePath')
    data.setdefault('topicEntries', [])
    return data


def list_topics(lang=DEFAULT_LANGUAGE, status=None):
    filters = [('status', '==', status)] if status else None
    topics = [topic_view(t, lang) for t in list_documents(TOPICS, filters)]
    topics.sort(key=lambda t: t['topicName'].lower())
    return topics


def get_topic_or_404(topic_id):
    topic = get_document(TOPICS, topic_id)
    if not topic:
        raise NotFoundError("Topik tidak ditemukan.")
    return topic


def get_topic(topic_id, lang=DEFAULT_LANGUAGE):
    return topic_view(get_topic_or_404(topic_id), lang)


def create_topic(form, files):
    """Buat topik baru dari form multipart (topicNames, status, topicImage)"""
    names = prepare_names(form.get('topicNames'), 'topicNames', 'Nama topik')
    status = check_status(form.get('status') or STATUS_DRAFT)
    image = files.get('topicImage')
    check_file(image, IMAGE)

    if find_duplicate_name(TOPICS, 'topicName', names):
        raise ValidationError("Topik dengan nama tersebut sudah ada.")

    id_name = resolve_localized(names)
    with media_transaction() as uploaded:
        image_key, image_url = upload_media(image, 'topics', id_name, IMAGE, uploaded)
        topic = create_document(TOPICS, {
            'topicName': names,
            'topicImageKey': image_key,
            'topicImagePath': image_url,
            'status': status,
            'topicEntries': []
        })

    logger.info(f"✅ Topik dibuat: {id_name} ({topic['_id']})")
    return topic_view(topic)


def update_topic(topic_id, form, files):
    topic = get_topic_or_404(topic_id)
    updates = {}

    if form.get('topicNames'):
        names = prepare_names(form.get('topicNames'), 'topicNames', 'Nama topik')
        if find_duplicate_name(TOPICS, 'topicName', names, exclude_id=topic_id):
            raise ValidationError("Topik dengan nama tersebut sudah ada.")
        updates['topicName'] = names

    if form.get('status'):
        updates['status'] = check_status(form.get('status'))

    image = files.get('topicImage')
    old_keys = []
    with media_transaction() as uploaded:
        if has_file(image):
            name = resolve_localized(updates.get('topicName') or topic.get('topicName'))
            updates['topicImageKey'], updates['topicImagePath'] = upload_media(
                image, 'topics', name, IMAGE, uploaded)
            old_keys.append(topic.get('topicImageKey'))
        if updates:
            update_document(TOPICS, topic_id, updates)

    delete_objects(old_keys)
    topic.update(updates)
    logger.info(f"Topik {topic_id} diperbarui: {sorted(updates)}")
    return topic_view(topic)


def delete_topic(topic_id):
    """Hapus topik beserta entri, log kunjungan dan seluruh medianya"""
    topic = get_topic_or_404(topic_id)

    keys = [topic.get('topicImageKey')]
    for entry in list_documents(ENTRIES, [('topicId', '==', topic_id)]):
        keys.append(entry.get('entryImageKey'))
        keys.extend(v.get('audioKey') for v in entry.get('entryVocabularies', []))

    removed_entries = delete_where(ENTRIES, 'topicId', topic_id)
    removed_logs = delete_where(VISITOR_LOGS, 'topicId', topic_id)
    delete_document(TOPICS, topic_id)
    delete_objects(keys)
    logger.info(
        f"🗑️ Topik {topic_id} dihapus beserta {removed_entries} entri dan {removed_logs} log kunjungan"
    )
