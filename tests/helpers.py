# tests/helpers.py
import io
import json

from kangagam.auth import hash_password, create_jwt_for_admin
from kangagam.database import create_document, ADMINS

TEST_PASSWORD = 'rahasia123'


def make_admin(email='admin@kangagam.id', role='admin', name='Admin Biasa'):
    return create_document(ADMINS, {
        'adminName': name,
        'adminEmail': email,
        'adminPassword': hash_password(TEST_PASSWORD),
        'role': role
    })


def auth_headers(admin):
    return {'Authorization': f"Bearer {create_jwt_for_admin(admin)}"}


def image_file(name='gambar.png'):
    return (io.BytesIO(b'\x89PNG fake image'), name)


def audio_file(name='suara.mp3'):
    return (io.BytesIO(b'ID3 fake audio'), name)


def video_file(name='video.mp4'):
    return (io.BytesIO(b'fake mp4 bytes'), name)


def names(id_name, su=None, en=None):
    items = [{'lang': 'id', 'value': id_name}]
    if su:
        items.append({'lang': 'su', 'value': su})
    if en:
        items.append({'lang': 'en', 'value': en})
    return json.dumps(items)
