# kangagam/entries.py
import logging
import random
import uuid

from .config import SUPPORTED_LANGUAGES, DEFAULT_LANGUAGE
from .database import (
    get_document, create_document, update_document, delete_document,
    list_documents, add_to_array, remove_from_array, TOPICS, ENTRIES
)
from .errors import ValidationError, NotFoundError
from .media import IMAGE, AUDIO, check_file, has_file, upload_media, media_transaction, media_url
from .storage import delete_objects, fresh_url
from .topics import get_topic_or_404
from .utils import serialize, parse_json_field

logger = logging.getLogger(__name__)


def entry_view(entry):
    data = serialize(entry)
    data['entryImagePath'] = media_url(entry, 'entryImageKey', 'entryImagePath')
    for vocab in data.get('entryVocabularies', []):
        vocab['audioUrl'] = fresh_url(vocab.get('audioKey'), vocab.get('audioUrl', ''))
    return data


def _audio_index(item, audio_files):
    """Indeks audio baru untuk kosakata, None jika tidak ada"""
    index = item.get('newAudioIndex')
    if index is None or index == '':
        return None
    try:
        index = int(index)
    except (TypeError, ValueError):
        raise ValidationError("newAudioIndex harus berupa angka.")
    if index < 0 or index >= len(audio_files):
        raise ValidationError(f"File audio untuk indeks {index} tidak ditemukan.")
    check_file(audio_files[index], AUDIO)
    return index


def _parse_vocabularies(entry_data, audio_files, existing=None):
    """
    Validasi daftar kosakata dari entryData.

    Kosakata dengan _id harus ada di existing; kosakata baru wajib
    menyertakan audio. Mengembalikan list dict yang sudah dirapikan.
    """
    items = entry_data.get('entryVocabularies')
    if not isinstance(items, list) or not items:
        raise ValidationError("Minimal harus ada satu kosakata.")

    existing = existing or {}
    seen_languages = set()
    seen_ids = set()
    seen_audio = set()
    parsed = []
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("Format kosakata tidak valid.")
        lang = (item.get('languageCode') or '').strip().lower()
        vocab = (item.get('vocab') or '').strip()
        if lang not in SUPPORTED_LANGUAGES:
            raise ValidationError(f"Bahasa '{lang}' tidak didukung.")
        if not vocab:
            raise ValidationError(f"Kosakata untuk bahasa '{lang}' tidak boleh kosong.")
        if lang in seen_languages:
            raise ValidationError(f"Kosakata untuk bahasa '{lang}' diisi lebih dari sekali.")
        seen_languages.add(lang)

        vocab_id = item.get('_id')
        if vocab_id and vocab_id not in existing:
            raise ValidationError(f"Kosakata dengan id {vocab_id} tidak ditemukan pada entri ini.")
        if vocab_id in seen_ids:
            raise ValidationError(f"Kosakata dengan id {vocab_id} dikirim lebih dari sekali.")
        if vocab_id:
            seen_ids.add(vocab_id)
        audio_index = _audio_index(item, audio_files)
        if audio_index in seen_audio:
            raise ValidationError(f"File audio indeks {audio_index} dipakai lebih dari satu kosakata.")
        if audio_index is not None:
            seen_audio.add(audio_index)
        if not vocab_id and audio_index is None:
            raise ValidationError(f"Audio untuk kosakata '{vocab}' wajib diunggah.")

        parsed.append({'_id': vocab_id, 'lang': lang, 'vocab': vocab, 'audio_index': audio_index})
    return parsed


def _build_vocabulary(item, audio_files, uploaded, previous=None):
    vocab = dict(previous) if previous else {'_id': uuid.uuid4().hex}
    vocab['vocab'] = item['vocab']
    vocab['language'] = {
        'languageCode': item['lang'],
        'languageName': SUPPORTED_LANGUAGES[item['lang']]
    }
    if item['audio_index'] is not None:
        vocab['audioKey'], vocab['audioUrl'] = upload_media(
            audio_files[item['audio_index']], 'audio', f"{item['lang']}-{item['vocab']}", AUDIO, uploaded)
    return vocab


def get_entry_or_404(entry_id, topic_id=None):
    entry = get_document(ENTRIES, entry_id)
    if not entry or (topic_id and entry.get('topicId') != topic_id):
        raise NotFoundError("Entri tidak ditemukan.")
    return entry


def list_entries(topic_id):
    get_topic_or_404(topic_id)
    entries = list_documents(ENTRIES, [('topicId', '==', topic_id)])
    entries.sort(key=lambda e: e.get('createdAt'))
    return [entry_view(e) for e in entries]


def get_entry(entry_id, topic_id=None):
    return entry_view(get_entry_or_404(entry_id, topic_id))


def create_entry(topic_id, form, files):
    """Buat entri kosakata (gambar + kosakata per bahasa dengan audio)"""
    get_topic_or_404(topic_id)
    entry_data = parse_json_field(form.get('entryData'), 'entryData')
    audio_files = files.getlist('audioFiles')
    image = files.get('entryImage')
    check_file(image, IMAGE)
    items = _parse_vocabularies(entry_data, audio_files)

    with media_transaction() as uploaded:
        name = next((i['vocab'] for i in items if i['lang'] == DEFAULT_LANGUAGE), items[0]['vocab'])
        image_key, image_url = upload_media(image, 'entries', name, IMAGE, uploaded)
        vocabularies = [_build_vocabulary(i, audio_files, uploaded) for i in items]
        entry = create_document(ENTRIES, {
            'topicId': topic_id,
            'entryImageKey': image_key,
            'entryImagePath': image_url,
            'entryVocabularies': vocabularies
        })
        add_to_array(TOPICS, topic_id, 'topicEntries', entry['_id'])

    logger.info(f"✅ Entri dibuat: {entry['_id']} ({len(vocabularies)} kosakata) di topik {topic_id}")
    return entry_view(entry)


def update_entry(entry_id, form, files, topic_id=None):
    """
    Perbarui entri. Kosakata dengan _id diperbarui, tanpa _id dibuat,
    dan yang tidak dikirim lagi dihapus beserta audionya.
    """
    entry = get_entry_or_404(entry_id, topic_id)
    entry_data = parse_json_field(form.get('entryData'), 'entryData')
    audio_files = files.getlist('audioFiles')
    image = files.get('entryImage')
    if has_file(image):
        check_file(image, IMAGE)

    existing = {v['_id']: v for v in entry.get('entryVocabularies', [])}
    items = None
    if 'entryVocabularies' in entry_data:
        items = _parse_vocabularies(entry_data, audio_files, existing)

    updates = {}
    old_keys = []
    with media_transaction() as uploaded:
        if has_file(image):
            updates['entryImageKey'], updates['entryImagePath'] = upload_media(
                image, 'entries', entry_id, IMAGE, uploaded)
            old_keys.append(entry.get('entryImageKey'))

        if items is not None:
            vocabularies = []
            for item in items:
                previous = existing.get(item['_id'])
                if previous and item['audio_index'] is not None:
                    old_keys.append(previous.get('audioKey'))
                vocabularies.append(_build_vocabulary(item, audio_files, uploaded, previous))
            kept_ids = {v['_id'] for v in vocabularies}
            old_keys.extend(v.get('audioKey') for v_id, v in existing.items() if v_id not in kept_ids)
            updates['entryVocabularies'] = vocabularies

        if updates:
            update_document(ENTRIES, entry_id, updates)

    delete_objects(old_keys)
    entry.update(updates)
    logger.info(f"Entri {entry_id} diperbarui: {sorted(updates)}")
    return entry_view(entry)


def delete_entry(entry_id, topic_id=None):
    entry = get_entry_or_404(entry_id, topic_id)
    delete_document(ENTRIES, entry_id)
    if get_document(TOPICS, entry.get('topicId')):
        remove_from_array(TOPICS, entry['topicId'], 'topicEntries', entry_id)

    keys = [entry.get('entryImageKey')]
    keys.extend(v.get('audioKey') for v in entry.get('entryVocabularies', []))
    delete_objects(keys)
    logger.info(f"🗑️ Entri {entry_id} dihapus")


def _pick_vocabulary(entry, lang):
    vocabularies = entry.get('entryVocabularies', [])
    for vocab in vocabularies:
        if vocab['language']['languageCode'] == lang:
            return vocab
    for vocab in vocabularies:
        if vocab['language']['languageCode'] == DEFAULT_LANGUAGE:
            return vocab
    return vocabularies[0] if vocabularies else None


def build_quiz(topic_id, lang=DEFAULT_LANGUAGE, options=4, seed=None):
    """
    Soal tebak gambar: dengarkan audio, pilih gambar yang benar.

    Satu soal per entri; pilihan = jawaban benar + pengecoh dari entri
    lain, diacak. seed membuat urutan bisa diulang.
    """
    get_topic_or_404(topic_id)
    if options < 2:
        raise ValidationError("Jumlah pilihan minimal 2.")

    entries = [entry_view(e) for e in list_documents(ENTRIES, [('topicId', '==', topic_id)])]
    entries.sort(key=lambda e: e.get('createdAt') or '')
    if len(entries) < 2:
        raise ValidationError("Topik ini belum memiliki cukup entri untuk kuis.")

    rng = random.Random(seed)
    questions = []
    for entry in entries:
        vocab = _pick_vocabulary(entry, lang)
        if not vocab:
            continue
        others = [e for e in entries if e['_id'] != entry['_id']]
        choices = [entry] + rng.sample(others, min(options - 1, len(others)))
        rng.shuffle(choices)
        questions.append({
            'entryId': entry['_id'],
            'audioUrl': vocab.get('audioUrl', ''),
            'vocab': vocab['vocab'],
            'options': [
                {'entryId': c['_id'], 'entryImagePath': c['entryImagePath']} for c in choices
            ],
            'answerId': entry['_id']
        })

    rng.shuffle(questions)
    return questions
