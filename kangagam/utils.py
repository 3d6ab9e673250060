# kangagam/utils.py
from datetime import datetime, date, timedelta
import json
import logging

from .config import SUPPORTED_LANGUAGES, DEFAULT_LANGUAGE
from .errors import ValidationError

logger = logging.getLogger(__name__)


def serialize(value, exclude=()):
    """Ubah dokumen Firestore menjadi data yang aman untuk JSON"""
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items() if k not in exclude}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def parse_json_field(raw, field_name):
    """Parse field JSON dari form multipart"""
    if raw is None or raw == '':
        return {}
    if isinstance(raw, (dict, list)):
        return raw
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Format '{field_name}' bukan JSON yang valid.")


def normalize_localized(items, field_label, required=True):
    """
    Rapikan teks multibahasa menjadi [{lang, value}] berurutan id, su, en.

    Menerima list [{lang, value}] atau dict {lang: value}. Nilai kosong
    dibuang; bahasa Indonesia wajib ada jika required.
    """
    if items is None:
        items = []
    if isinstance(items, dict):
        items = [{'lang': lang, 'value': value} for lang, value in items.items()]
    if not isinstance(items, list):
        raise ValidationError(f"{field_label} harus berupa daftar {{lang, value}}.")

    values = {}
    seen = set()
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError(f"{field_label} harus berupa daftar {{lang, value}}.")
        lang = (item.get('lang') or '').strip().lower()
        value = item.get('value')
        value = value.strip() if isinstance(value, str) else ''
        if lang not in SUPPORTED_LANGUAGES:
            raise ValidationError(f"Bahasa '{lang}' tidak didukung.")
        if lang in seen:
            raise ValidationError(f"{field_label} untuk bahasa '{lang}' diisi lebih dari sekali.")
        seen.add(lang)
        if value:
            values[lang] = value

    if required and DEFAULT_LANGUAGE not in values:
        raise ValidationError(f"{field_label} dalam bahasa Indonesia wajib diisi.")

    return [{'lang': lang, 'value': values[lang]} for lang in SUPPORTED_LANGUAGES if lang in values]


def resolve_localized(items, lang=DEFAULT_LANGUAGE):
    """Ambil teks untuk bahasa tertentu (fallback: Indonesia, lalu yang pertama)"""
    if not items:
        return ''
    if isinstance(items, str):
        return items
    by_lang = {item.get('lang'): item.get('value', '') for item in items}
    if lang in by_lang:
        return by_lang[lang]
    if DEFAULT_LANGUAGE in by_lang:
        return by_lang[DEFAULT_LANGUAGE]
    return items[0].get('value', '')


def requested_language(value):
    value = (value or DEFAULT_LANGUAGE).lower()
    return value if value in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def parse_iso_week(week_str):
    """Parse minggu ISO 'YYYY-Www' menjadi (awal, akhir)"""
    try:
        year_part, week_part = week_str.split('-W')
        year = int(year_part)
        week_num = int(week_part)
        week_start_date = date.fromisocalendar(year, week_num, 1)
        week_end_date = week_start_date + timedelta(days=6)

        week_start_dt = datetime.combine(week_start_date, datetime.min.time())
        week_end_dt = datetime.combine(week_end_date, datetime.max.time())
        return week_start_dt, week_end_dt
    except Exception as e:
        raise ValueError(f"Format minggu tidak valid: {week_str} ({e})")
