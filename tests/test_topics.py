# tests/test_topics.py
from kangagam import translation
from kangagam.database import TOPICS, ENTRIES, VISITOR_LOGS, create_document, now_utc

from .helpers import image_file, names


def test_create_topic(client, db, s3, create_topic):
    topic = create_topic('Hewan')
    assert topic['topicName'] == 'Hewan'
    assert [n['lang'] for n in topic['topicNames']] == ['id', 'su', 'en']
    assert topic['status'] == 'Published'
    assert topic['topicEntries'] == []
    assert topic['topicImageKey'] in s3.objects
    assert 'X-Amz-Expires=604800' in topic['topicImagePath']
    assert topic['_id'] in db.docs(TOPICS)


def test_create_topic_requires_admin(client):
    response = client.post('/api/topics', data={
        'topicNames': names('Hewan'), 'topicImage': image_file()
    }, content_type='multipart/form-data')
    assert response.status_code == 401


def test_create_topic_defaults_to_draft(client, admin_headers):
    response = client.post('/api/topics', headers=admin_headers, data={
        'topicNames': names('Buah'), 'topicImage': image_file()
    }, content_type='multipart/form-data')
    assert response.status_code == 201
    assert response.get_json()['data']['status'] == 'Draft'


def test_create_topic_validation(client, admin_headers, s3):
    def post(data):
        return client.post('/api/topics', headers=admin_headers, data=data,
                           content_type='multipart/form-data')

    assert post({'topicImage': image_file()}).status_code == 400
    assert post({'topicNames': '[{"lang": "su", "value": "Sato"}]',
                 'topicImage': image_file()}).status_code == 400
    assert post({'topicNames': 'bukan json', 'topicImage': image_file()}).status_code == 400
    assert post({'topicNames': names('Hewan')}).status_code == 400
    assert post({'topicNames': names('Hewan'), 'topicImage': image_file('skrip.exe')}).status_code == 400
    assert post({'topicNames': names('Hewan'), 'status': 'Archived',
                 'topicImage': image_file()}).status_code == 400
    assert s3.objects == {}


def test_duplicate_indonesian_name_rejected(client, admin_headers, create_topic):
    create_topic('Hewan')
    response = client.post('/api/topics', headers=admin_headers, data={
        'topicNames': names('hewan'), 'topicImage': image_file()
    }, content_type='multipart/form-data')
    assert response.status_code == 400


def test_auto_translate_fills_missing_languages(client, app, admin_headers, monkeypatch):
    app.config['AUTO_TRANSLATE'] = True
    monkeypatch.setattr(translation, 'translate_text',
                        lambda text, target, source='id': f"{text}-{target}")
    response = client.post('/api/topics', headers=admin_headers, data={
        'topicNames': names('Rumah'), 'topicImage': image_file()
    }, content_type='multipart/form-data')
    topic_names = response.get_json()['data']['topicNames']
    assert topic_names == [
        {'lang': 'id', 'value': 'Rumah'},
        {'lang': 'su', 'value': 'Rumah-su'},
        {'lang': 'en', 'value': 'Rumah-en'},
    ]


def test_list_topics_language_and_status(client, create_topic):
    create_topic('Hewan', su='Sato', en='Animals')
    create_topic('Buah', status='Draft', su='Bubuahan', en='Fruits')

    body = client.get('/api/topics').get_json()
    assert body['count'] == 2
    assert [t['topicName'] for t in body['topics']] == ['Buah', 'Hewan']

    body = client.get('/api/topics?language=en&status=Published').get_json()
    assert body['count'] == 1
    assert body['topics'][0]['topicName'] == 'Animals'


def test_topic_name_falls_back_to_indonesian(client, create_topic):
    topic = create_topic('Warna', su=None, en=None)
    body = client.get(f"/api/topics/{topic['_id']}?language=en").get_json()
    assert body['topic']['topicName'] == 'Warna'


def test_get_missing_topic(client):
    assert client.get('/api/topics/tidak-ada').status_code == 404


def test_update_topic_replaces_image(client, admin_headers, s3, create_topic):
    topic = create_topic('Hewan')
    old_key = topic['topicImageKey']

    response = client.put(f"/api/topics/{topic['_id']}", headers=admin_headers, data={
        'status': 'Draft', 'topicImage': image_file('baru.jpg')
    }, content_type='multipart/form-data')
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['status'] == 'Draft'
    assert data['topicImageKey'] != old_key
    assert old_key in s3.deleted
    assert data['topicImageKey'] in s3.objects


def test_update_topic_duplicate_name(client, admin_headers, create_topic):
    create_topic('Hewan')
    buah = create_topic('Buah')
    response = client.put(f"/api/topics/{buah['_id']}", headers=admin_headers, data={
        'topicNames': names('HEWAN')
    }, content_type='multipart/form-data')
    assert response.status_code == 400


def test_delete_topic_requires_superadmin(client, admin_headers, create_topic):
    topic = create_topic()
    assert client.delete(f"/api/topics/{topic['_id']}", headers=admin_headers).status_code == 403


def test_delete_topic_cascades(client, db, s3, super_headers, create_topic, create_entry):
    topic = create_topic()
    entry = create_entry(topic['_id'])
    create_document(VISITOR_LOGS, {'learnerId': 'l1', 'topicId': topic['_id'], 'timestamp': now_utc()})

    response = client.delete(f"/api/topics/{topic['_id']}", headers=super_headers)
    assert response.status_code == 200
    assert db.docs(TOPICS) == {}
    assert db.docs(ENTRIES) == {}
    assert db.docs(VISITOR_LOGS) == {}
    assert topic['topicImageKey'] in s3.deleted
    assert entry['entryImageKey'] in s3.deleted
    assert s3.objects == {}
