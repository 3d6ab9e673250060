# kangagam/settings.py
import logging

from flask import current_app

from .database import get_document, create_document, update_document, SETTINGS
from .errors import ValidationError

logger = logging.getLogger(__name__)

APP_SETTINGS_ID = 'app_settings'


def get_app_settings():
    """Pengaturan aplikasi, dibuat dengan nilai bawaan jika belum ada"""
    doc = get_document(SETTINGS, APP_SETTINGS_ID)
    if doc is None:
        doc = create_document(SETTINGS, {
            'key': APP_SETTINGS_ID,
            'value': {'maxAdmins': current_app.config['DEFAULT_MAX_ADMINS']}
        }, doc_id=APP_SETTINGS_ID)
        logger.info("Dokumen pengaturan aplikasi dibuat")
    return doc['value']


def get_max_admins():
    return get_app_settings().get('maxAdmins', current_app.config['DEFAULT_MAX_ADMINS'])


def update_app_settings(data):
    value = dict(get_app_settings())
    max_admins = data.get('maxAdmins')
    if isinstance(max_admins, bool) or not isinstance(max_admins, (int, str)):
        raise ValidationError("maxAdmins harus berupa bilangan bulat.")
    try:
        max_admins = int(max_admins)
    except ValueError:
        raise ValidationError("maxAdmins harus berupa bilangan bulat.")
    if max_admins < 1:
        raise ValidationError("maxAdmins minimal 1.")

    value['maxAdmins'] = max_admins
    update_document(SETTINGS, APP_SETTINGS_ID, {'value': value})
    logger.info(f"Batas admin diubah menjadi {max_admins}")
    return value
