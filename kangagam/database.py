# kangagam/database.py

from datetime import datetime, timezone
import logging

import firebase_admin
from firebase_admin import credentials, firestore

from .config import FIREBASE_CREDS

logger = logging.getLogger(__name__)

_db = None

# Nama koleksi
ADMINS = 'admins'
LEARNERS = 'learners'
TOPICS = 'topics'
ENTRIES = 'entries'
CULTURE_TOPICS = 'culture_topics'
CULTURE_ENTRIES = 'culture_entries'
VISITOR_LOGS = 'visitor_logs'
SETTINGS = 'settings'


def get_db():
    """Klien Firestore (dibuat saat pertama dipakai)"""
    global _db
    if _db is None:
        if not firebase_admin._apps:
            cred = credentials.Certificate(FIREBASE_CREDS)
            firebase_admin.initialize_app(cred)
        _db = firestore.client()
        logger.info("Firestore client siap")
    return _db


def set_db(client):
    """Ganti klien Firestore (dipakai oleh test)"""
    global _db
    _db = client


def now_utc():
    return datetime.now(timezone.utc)


def snapshot_to_dict(doc):
    data = doc.to_dict() or {}
    data['_id'] = doc.id
    return data


def get_document(collection, doc_id):
    """Ambil satu dokumen, None jika tidak ada"""
    if not doc_id:
        return None
    doc = get_db().collection(collection).document(doc_id).get()
    return snapshot_to_dict(doc) if doc.exists else None


def create_document(collection, data, doc_id=None):
    """Buat dokumen baru dan kembalikan isinya beserta _id"""
    ref = get_db().collection(collection).document(doc_id) if doc_id else \
        get_db().collection(collection).document()
    payload = dict(data)
    payload.setdefault('createdAt', now_utc())
    payload.setdefault('updatedAt', payload['createdAt'])
    ref.set(payload)
    payload['_id'] = ref.id
    return payload


def update_document(collection, doc_id, data):
    """Perbarui sebagian field dokumen"""
    payload = dict(data)
    payload['updatedAt'] = now_utc()
    get_db().collection(collection).document(doc_id).update(payload)


def delete_document(collection, doc_id):
    get_db().collection(collection).document(doc_id).delete()


def _build_query(collection, filters=None, order_by=None, descending=False, limit=None):
    query = get_db().collection(collection)
    for field, op, value in filters or []:
        query = query.where(field, op, value)
    if order_by:
        direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
        query = query.order_by(order_by, direction=direction)
    if limit:
        query = query.limit(limit)
    return query


def list_documents(collection, filters=None, order_by=None, descending=False, limit=None):
    """Daftar dokumen dengan filter (field, op, value)"""
    query = _build_query(collection, filters, order_by, descending, limit)
    return [snapshot_to_dict(doc) for doc in query.stream()]


def count_documents(collection, filters=None):
    return len(list(_build_query(collection, filters).stream()))


def delete_where(collection, field, value):
    """Hapus semua dokumen yang cocok dalam satu batch, kembalikan jumlahnya"""
    db = get_db()
    docs = list(db.collection(collection).where(field, '==', value).stream())
    if not docs:
        return 0
    # Firestore membatasi 500 operasi per batch
    for start in range(0, len(docs), 400):
        batch = db.batch()
        for doc in docs[start:start + 400]:
            batch.delete(doc.reference)
        batch.commit()
    logger.info(f"{len(docs)} dokumen {collection} dihapus ({field}={value})")
    return len(docs)


def add_to_array(collection, doc_id, field, value):
    get_db().collection(collection).document(doc_id).update({
        field: firestore.ArrayUnion([value]),
        'updatedAt': now_utc()
    })


def remove_from_array(collection, doc_id, field, value):
    get_db().collection(collection).document(doc_id).update({
        field: firestore.ArrayRemove([value]),
        'updatedAt': now_utc()
    })
