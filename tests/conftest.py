# tests/conftest.py
import json

import pytest

from kangagam import database, storage, media
from kangagam.app import create_app

from .fakes import FakeFirestore, FakeS3
from .helpers import TEST_PASSWORD, make_admin, auth_headers, image_file, audio_file, names


@pytest.fixture
def db():
    """Firestore tiruan yang dipasang ke modul database"""
    fake = FakeFirestore()
    database.set_db(fake)
    yield fake
    database.set_db(None)


@pytest.fixture
def s3():
    """S3 tiruan yang dipasang ke modul storage"""
    fake = FakeS3()
    storage.set_s3(fake)
    yield fake
    storage.set_s3(None)


@pytest.fixture(autouse=True)
def fixed_video_duration(monkeypatch):
    monkeypatch.setattr(media, 'get_video_duration', lambda path: ('1:05', 65))


@pytest.fixture
def app(db, s3):
    app = create_app({
        'TESTING': True,
        'APP_ENV': 'test',
        'JWT_SECRET': 'test-secret',
        'AUTO_TRANSLATE': False,
        'SMTP_HOST': '',
        'SUPERADMIN_EMAIL': 'super@kangagam.id',
        'SUPERADMIN_PASSWORD': TEST_PASSWORD,
        'FRONTEND_URL': 'http://frontend.test',
    })
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def superadmin(app):
    return make_admin('super@kangagam.id', 'superadmin', 'Super Admin')


@pytest.fixture
def admin(app):
    return make_admin()


@pytest.fixture
def super_headers(superadmin):
    return auth_headers(superadmin)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def create_topic(client, admin_headers):
    """Buat topik lewat API, kembalikan data topik"""
    def _create(id_name='Hewan', status='Published', su='Sato', en='Animals'):
        response = client.post('/api/topics', headers=admin_headers, data={
            'topicNames': names(id_name, su, en),
            'status': status,
            'topicImage': image_file()
        }, content_type='multipart/form-data')
        assert response.status_code == 201, response.get_json()
        return response.get_json()['data']
    return _create


@pytest.fixture
def create_entry(client, admin_headers):
    """Buat entri kosakata id + su dengan dua file audio"""
    def _create(topic_id, id_vocab='Kucing', su_vocab='Ucing'):
        entry_data = {'entryVocabularies': [
            {'languageCode': 'id', 'vocab': id_vocab, 'newAudioIndex': 0},
            {'languageCode': 'su', 'vocab': su_vocab, 'newAudioIndex': 1},
        ]}
        response = client.post(f'/api/topics/{topic_id}/entries', headers=admin_headers, data={
            'entryData': json.dumps(entry_data),
            'entryImage': image_file(),
            'audioFiles': [audio_file('id.mp3'), audio_file('su.mp3')]
        }, content_type='multipart/form-data')
        assert response.status_code == 201, response.get_json()
        return response.get_json()['entry']
    return _create
