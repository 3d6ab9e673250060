# kangagam/learners.py
import logging
import re

from .database import (
    get_document, create_document, update_document, delete_document,
    list_documents, delete_where, LEARNERS, VISITOR_LOGS
)
from .errors import ValidationError, NotFoundError
from .utils import serialize

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r'^[0-9]{10,15}$')


def _clean(data):
    name = (data.get('learnerName') or '').strip()
    phone = str(data.get('learnerPhone') or '').strip()
    city = (data.get('learnerCity') or '').strip()

    if not name:
        raise ValidationError("Nama pengguna wajib diisi.")
    if not PHONE_PATTERN.match(phone):
        raise ValidationError("Nomor telepon harus berupa angka 10-15 digit.")
    if not city:
        raise ValidationError("Kota domisili wajib diisi.")
    return name, phone, city


def find_learner_by_phone(phone):
    found = list_documents(LEARNERS, [('learnerPhone', '==', phone)], limit=1)
    return found[0] if found else None


def register_learner(data):
    """
    Onboarding pengguna publik.

    Nomor telepon unik: jika sudah terdaftar, nama dan kota diperbarui dan
    record lama dikembalikan. Mengembalikan (learner, created).
    """
    name, phone, city = _clean(data)

    existing = find_learner_by_phone(phone)
    if existing:
        updates = {'learnerName': name, 'learnerCity': city}
        update_document(LEARNERS, existing['_id'], updates)
        existing.update(updates)
        logger.info(f"Pengguna kembali: {existing['_id']}")
        return serialize(existing), False

    learner = create_document(LEARNERS, {
        'learnerName': name,
        'learnerPhone': phone,
        'learnerCity': city
    })
    logger.info(f"✅ Pengguna baru terdaftar: {learner['_id']} ({city})")
    return serialize(learner), True


def list_learners(city=None, search=None):
    """Daftar pengguna terbaru lebih dulu, dengan filter kota/kata kunci"""
    filters = [('learnerCity', '==', city)] if city else None
    learners = list_documents(LEARNERS, filters)

    if search:
        needle = search.strip().lower()
        learners = [
            l for l in learners
            if needle in l.get('learnerName', '').lower() or needle in l.get('learnerCity', '').lower()
        ]

    learners.sort(key=lambda l: l.get('createdAt'), reverse=True)
    return [serialize(l) for l in learners]


def get_learner(learner_id):
    learner = get_document(LEARNERS, learner_id)
    if not learner:
        raise NotFoundError("Pengguna tidak ditemukan.")
    return serialize(learner)


def delete_learner(learner_id):
    """Hapus pengguna beserta log kunjungannya"""
    get_learner(learner_id)
    removed_logs = delete_where(VISITOR_LOGS, 'learnerId', learner_id)
    delete_document(LEARNERS, learner_id)
    logger.info(f"Pengguna {learner_id} dihapus ({removed_logs} log kunjungan)")
