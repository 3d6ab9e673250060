# kangagam/culture.py
import logging

from .config import DEFAULT_LANGUAGE
from .database import (
    get_document, create_document, update_document, delete_document,
    list_documents, delete_where, CULTURE_TOPICS, CULTURE_ENTRIES
)
from .errors import ValidationError, NotFoundError
from .media import (
    IMAGE, check_file, has_file, upload_media, upload_video, media_transaction, media_url
)
from .storage import delete_objects
from .topics import STATUS_DRAFT, check_status, prepare_names, find_duplicate_name
from .utils import serialize, parse_json_field, normalize_localized, resolve_localized

logger = logging.getLogger(__name__)


# ========================================
# Topik budaya
# ========================================

def culture_topic_view(topic, lang=DEFAULT_LANGUAGE):
    data = serialize(topic)
    data['names'] = data.get('name', [])
    data['name'] = resolve_localized(topic.get('name'), lang)
    data['imagePath'] = media_url(topic, 'imageKey', 'imagePath')
    return data


def get_culture_topic_or_404(topic_id):
    topic = get_document(CULTURE_TOPICS, topic_id)
    if not topic:
        raise NotFoundError("Topik budaya tidak ditemukan.")
    return topic


def list_culture_topics(lang=DEFAULT_LANGUAGE, status=None):
    filters = [('status', '==', status)] if status else None
    topics = [culture_topic_view(t, lang) for t in list_documents(CULTURE_TOPICS, filters)]
    topics.sort(key=lambda t: t['name'].lower())
    return topics


def get_culture_topic(topic_id, lang=DEFAULT_LANGUAGE):
    return culture_topic_view(get_culture_topic_or_404(topic_id), lang)


def create_culture_topic(form, files):
    """Buat topik budaya dari topicData {name, status} dan topicImage"""
    topic_data = parse_json_field(form.get('topicData'), 'topicData')
    names = prepare_names(topic_data.get('name'), 'name', 'Nama topik budaya')
    status = check_status(topic_data.get('status') or STATUS_DRAFT)
    image = files.get('topicImage')
    check_file(image, IMAGE)

    if find_duplicate_name(CULTURE_TOPICS, 'name', names):
        raise ValidationError("Topik budaya dengan nama tersebut sudah ada.")

    id_name = resolve_localized(names)
    with media_transaction() as uploaded:
        image_key, image_url = upload_media(image, 'culture', id_name, IMAGE, uploaded)
        topic = create_document(CULTURE_TOPICS, {
            'name': names,
            'imageKey': image_key,
            'imagePath': image_url,
            'status': status
        })

    logger.info(f"✅ Topik budaya dibuat: {id_name} ({topic['_id']})")
    return culture_topic_view(topic)


def update_culture_topic(topic_id, form, files):
    topic = get_culture_topic_or_404(topic_id)
    topic_data = parse_json_field(form.get('topicData'), 'topicData')
    updates = {}

    if topic_data.get('name'):
        names = prepare_names(topic_data.get('name'), 'name', 'Nama topik budaya')
        if find_duplicate_name(CULTURE_TOPICS, 'name', names, exclude_id=topic_id):
            raise ValidationError("Topik budaya dengan nama tersebut sudah ada.")
        updates['name'] = names
    if topic_data.get('status'):
        updates['status'] = check_status(topic_data.get('status'))

    image = files.get('topicImage')
    old_keys = []
    with media_transaction() as uploaded:
        if has_file(image):
            name = resolve_localized(updates.get('name') or topic.get('name'))
            updates['imageKey'], updates['imagePath'] = upload_media(
                image, 'culture', name, IMAGE, uploaded)
            old_keys.append(topic.get('imageKey'))
        if updates:
            update_document(CULTURE_TOPICS, topic_id, updates)

    delete_objects(old_keys)
    topic.update(updates)
    logger.info(f"Topik budaya {topic_id} diperbarui: {sorted(updates)}")
    return culture_topic_view(topic)


def delete_culture_topic(topic_id):
    """Hapus topik budaya beserta seluruh entri dan medianya"""
    topic = get_culture_topic_or_404(topic_id)

    keys = [topic.get('imageKey')]
    for entry in list_documents(CULTURE_ENTRIES, [('cultureTopicId', '==', topic_id)]):
        keys.extend([entry.get('imageKey'), entry.get('videoKey')])

    removed = delete_where(CULTURE_ENTRIES, 'cultureTopicId', topic_id)
    delete_document(CULTURE_TOPICS, topic_id)
    delete_objects(keys)
    logger.info(f"🗑️ Topik budaya {topic_id} dihapus beserta {removed} entri")


# ========================================
# Entri budaya
# ========================================

def culture_entry_view(entry, lang=DEFAULT_LANGUAGE):
    data = serialize(entry)
    data['titles'] = data.get('title', [])
    data['descriptions'] = data.get('description', [])
    data['title'] = resolve_localized(entry.get('title'), lang)
    data['description'] = resolve_localized(entry.get('description'), lang)
    data['imagePath'] = media_url(entry, 'imageKey', 'imagePath')
    if entry.get('videoKey'):
        data['videoUrl'] = media_url(entry, 'videoKey', 'videoUrl')
    return data


def get_culture_entry_or_404(topic_id, entry_id):
    entry = get_document(CULTURE_ENTRIES, entry_id)
    if not entry or entry.get('cultureTopicId') != topic_id:
        raise NotFoundError("Entri budaya tidak ditemukan.")
    return entry


def list_culture_entries(topic_id, lang=DEFAULT_LANGUAGE):
    get_culture_topic_or_404(topic_id)
    entries = list_documents(CULTURE_ENTRIES, [('cultureTopicId', '==', topic_id)])
    entries.sort(key=lambda e: e.get('createdAt'))
    return [culture_entry_view(e, lang) for e in entries]


def get_culture_entry(topic_id, entry_id, lang=DEFAULT_LANGUAGE):
    get_culture_topic_or_404(topic_id)
    return culture_entry_view(get_culture_entry_or_404(topic_id, entry_id), lang)


def _video_source(entry_data, files):
    """Sumber video: file unggahan atau tautan eksternal (None, None jika tidak ada)"""
    video = files.get('entryVideo')
    video_url = (entry_data.get('videoUrl') or '').strip()
    if has_file(video) and video_url:
        raise ValidationError("Pilih salah satu: unggah video atau tautan video.")
    if has_file(video):
        return video, None
    if video_url:
        return None, video_url
    return None, None


def create_culture_entry(topic_id, form, files):
    """Buat entri budaya: judul, deskripsi, gambar dan satu sumber video"""
    get_culture_topic_or_404(topic_id)
    entry_data = parse_json_field(form.get('entryData'), 'entryData')
    title = normalize_localized(entry_data.get('title'), 'Judul')
    description = normalize_localized(entry_data.get('description'), 'Deskripsi')
    image = files.get('entryImage')
    check_file(image, IMAGE)
    video, video_url = _video_source(entry_data, files)
    if video is None and video_url is None:
        raise ValidationError("Video wajib diunggah atau diisi tautannya.")

    id_title = resolve_localized(title)
    with media_transaction() as uploaded:
        image_key, image_url = upload_media(image, 'culture', id_title, IMAGE, uploaded)
        video_key, duration = '', '0:00'
        if video is not None:
            video_key, video_url, duration = upload_video(video, 'culture/videos', uploaded)
        entry = create_document(CULTURE_ENTRIES, {
            'cultureTopicId': topic_id,
            'title': title,
            'description': description,
            'imageKey': image_key,
            'imagePath': image_url,
            'videoKey': video_key,
            'videoUrl': video_url,
            'videoDuration': duration
        })

    logger.info(f"✅ Entri budaya dibuat: {id_title} ({entry['_id']})")
    return culture_entry_view(entry)


def update_culture_entry(topic_id, entry_id, form, files):
    get_culture_topic_or_404(topic_id)
    entry = get_culture_entry_or_404(topic_id, entry_id)
    entry_data = parse_json_field(form.get('entryData'), 'entryData')
    updates = {}

    if entry_data.get('title'):
        updates['title'] = normalize_localized(entry_data.get('title'), 'Judul')
    if entry_data.get('description'):
        updates['description'] = normalize_localized(entry_data.get('description'), 'Deskripsi')

    image = files.get('entryImage')
    if has_file(image):
        check_file(image, IMAGE)
    video, video_url = _video_source(entry_data, files)

    old_keys = []
    with media_transaction() as uploaded:
        if has_file(image):
            title = resolve_localized(updates.get('title') or entry.get('title'))
            updates['imageKey'], updates['imagePath'] = upload_media(
                image, 'culture', title, IMAGE, uploaded)
            old_keys.append(entry.get('imageKey'))

        if video is not None:
            updates['videoKey'], updates['videoUrl'], updates['videoDuration'] = upload_video(
                video, 'culture/videos', uploaded)
            old_keys.append(entry.get('videoKey'))
        elif video_url and video_url != entry.get('videoUrl'):
            updates.update({'videoKey': '', 'videoUrl': video_url, 'videoDuration': '0:00'})
            old_keys.append(entry.get('videoKey'))

        if updates:
            update_document(CULTURE_ENTRIES, entry_id, updates)

    delete_objects(old_keys)
    entry.update(updates)
    logger.info(f"Entri budaya {entry_id} diperbarui: {sorted(updates)}")
    return culture_entry_view(entry)


def delete_culture_entry(topic_id, entry_id):
    entry = get_culture_entry_or_404(topic_id, entry_id)
    delete_document(CULTURE_ENTRIES, entry_id)
    delete_objects([entry.get('imageKey'), entry.get('videoKey')])
    logger.info(f"🗑️ Entri budaya {entry_id} dihapus")
