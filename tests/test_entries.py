# tests/test_entries.py
import json

from kangagam.database import TOPICS, ENTRIES

from .helpers import image_file, audio_file


def post_entry(client, headers, topic_id, entry_data, audio=None, image=True):
    data = {'entryData': json.dumps(entry_data)}
    if image:
        data['entryImage'] = image_file()
    if audio:
        data['audioFiles'] = audio
    return client.post(f'/api/topics/{topic_id}/entries', headers=headers, data=data,
                       content_type='multipart/form-data')


def test_create_entry(client, db, s3, create_topic, create_entry):
    topic = create_topic()
    entry = create_entry(topic['_id'])

    assert entry['topicId'] == topic['_id']
    vocabularies = entry['entryVocabularies']
    assert [v['language']['languageCode'] for v in vocabularies] == ['id', 'su']
    assert vocabularies[1]['language']['languageName'] == 'Sunda'
    assert all(v['audioKey'] in s3.objects for v in vocabularies)
    assert db.docs(TOPICS)[topic['_id']]['topicEntries'] == [entry['_id']]


def test_create_entry_unknown_topic(client, admin_headers):
    response = post_entry(client, admin_headers, 'tidak-ada',
                          {'entryVocabularies': [{'languageCode': 'id', 'vocab': 'A', 'newAudioIndex': 0}]},
                          audio=[audio_file()])
    assert response.status_code == 404


def test_create_entry_validation(client, admin_headers, s3, create_topic):
    topic_id = create_topic()['_id']
    uploaded_before = set(s3.objects)

    def post(entry_data, audio=None, image=True):
        return post_entry(client, admin_headers, topic_id, entry_data, audio, image)

    assert post({'entryVocabularies': []}).status_code == 400
    assert post({'entryVocabularies': [{'languageCode': 'jp', 'vocab': 'Neko', 'newAudioIndex': 0}]},
                [audio_file()]).status_code == 400
    assert post({'entryVocabularies': [{'languageCode': 'id', 'vocab': ' ', 'newAudioIndex': 0}]},
                [audio_file()]).status_code == 400
    assert post({'entryVocabularies': [
        {'languageCode': 'id', 'vocab': 'Kucing', 'newAudioIndex': 0},
        {'languageCode': 'id', 'vocab': 'Meong', 'newAudioIndex': 1},
    ]}, [audio_file(), audio_file()]).status_code == 400
    assert post({'entryVocabularies': [{'languageCode': 'id', 'vocab': 'Kucing'}]}).status_code == 400
    assert post({'entryVocabularies': [{'languageCode': 'id', 'vocab': 'Kucing', 'newAudioIndex': 3}]},
                [audio_file()]).status_code == 400
    assert post({'entryVocabularies': [{'languageCode': 'id', 'vocab': 'Kucing', 'newAudioIndex': 0}]},
                [audio_file()], image=False).status_code == 400

    assert set(s3.objects) == uploaded_before


def test_failed_save_cleans_uploaded_media(client, admin_headers, s3, create_topic, monkeypatch):
    from kangagam import entries

    topic_id = create_topic()['_id']
    uploaded_before = set(s3.objects)

    def broken_create(collection, data, doc_id=None):
        raise RuntimeError('Firestore tidak tersedia')

    monkeypatch.setattr(entries, 'create_document', broken_create)
    response = post_entry(client, admin_headers, topic_id,
                          {'entryVocabularies': [{'languageCode': 'id', 'vocab': 'Kucing', 'newAudioIndex': 0}]},
                          [audio_file()])
    assert response.status_code == 500
    assert 'stack' in response.get_json()
    assert set(s3.objects) == uploaded_before
    assert len(s3.deleted) == 2


def test_list_and_get_entries(client, create_topic, create_entry):
    topic = create_topic()
    other_topic = create_topic('Buah')
    first = create_entry(topic['_id'], 'Kucing', 'Ucing')
    second = create_entry(topic['_id'], 'Anjing', 'Anjing')

    body = client.get(f"/api/topics/{topic['_id']}/entries").get_json()
    assert [e['_id'] for e in body['entries']] == [first['_id'], second['_id']]

    assert client.get(f"/api/entries/{first['_id']}").get_json()['entry']['_id'] == first['_id']
    nested = client.get(f"/api/topics/{topic['_id']}/entries/{first['_id']}")
    assert nested.status_code == 200
    wrong_topic = client.get(f"/api/topics/{other_topic['_id']}/entries/{first['_id']}")
    assert wrong_topic.status_code == 404
    assert client.get('/api/topics/tidak-ada/entries').status_code == 404


def test_update_entry_vocabularies(client, db, s3, admin_headers, create_topic, create_entry):
    topic = create_topic()
    entry = create_entry(topic['_id'])
    id_vocab, su_vocab = entry['entryVocabularies']

    entry_data = {'entryVocabularies': [
        {'_id': id_vocab['_id'], 'languageCode': 'id', 'vocab': 'Kucing Oren'},
        {'languageCode': 'en', 'vocab': 'Cat', 'newAudioIndex': 0},
    ]}
    response = client.put(f"/api/topics/{topic['_id']}/entries/{entry['_id']}", headers=admin_headers,
                          data={'entryData': json.dumps(entry_data), 'audioFiles': [audio_file('en.mp3')]},
                          content_type='multipart/form-data')
    assert response.status_code == 200

    stored = db.docs(ENTRIES)[entry['_id']]['entryVocabularies']
    assert [v['language']['languageCode'] for v in stored] == ['id', 'en']
    assert stored[0]['_id'] == id_vocab['_id']
    assert stored[0]['vocab'] == 'Kucing Oren'
    assert stored[0]['audioKey'] == id_vocab['audioKey']
    assert su_vocab['audioKey'] in s3.deleted
    assert id_vocab['audioKey'] not in s3.deleted


def test_update_entry_replaces_audio_and_image(client, db, s3, admin_headers, create_topic, create_entry):
    topic = create_topic()
    entry = create_entry(topic['_id'])
    id_vocab, su_vocab = entry['entryVocabularies']

    entry_data = {'entryVocabularies': [
        {'_id': id_vocab['_id'], 'languageCode': 'id', 'vocab': 'Kucing', 'newAudioIndex': 0},
        {'_id': su_vocab['_id'], 'languageCode': 'su', 'vocab': 'Ucing'},
    ]}
    response = client.put(f"/api/entries/{entry['_id']}", headers=admin_headers, data={
        'entryData': json.dumps(entry_data),
        'audioFiles': [audio_file('baru.mp3')],
        'entryImage': image_file('baru.png')
    }, content_type='multipart/form-data')
    assert response.status_code == 200

    stored = db.docs(ENTRIES)[entry['_id']]
    assert stored['entryVocabularies'][0]['audioKey'] != id_vocab['audioKey']
    assert id_vocab['audioKey'] in s3.deleted
    assert entry['entryImageKey'] in s3.deleted
    assert stored['entryImageKey'] in s3.objects


def test_update_entry_unknown_vocabulary_id(client, admin_headers, create_topic, create_entry):
    topic = create_topic()
    entry = create_entry(topic['_id'])
    entry_data = {'entryVocabularies': [{'_id': 'palsu', 'languageCode': 'id', 'vocab': 'X'}]}
    response = client.put(f"/api/entries/{entry['_id']}", headers=admin_headers,
                          data={'entryData': json.dumps(entry_data)},
                          content_type='multipart/form-data')
    assert response.status_code == 400


def test_create_entry_rejects_shared_audio_index(client, admin_headers, s3, create_topic):
    topic_id = create_topic()['_id']
    uploaded_before = set(s3.objects)
    response = post_entry(client, admin_headers, topic_id, {'entryVocabularies': [
        {'languageCode': 'id', 'vocab': 'Kucing', 'newAudioIndex': 0},
        {'languageCode': 'su', 'vocab': 'Ucing', 'newAudioIndex': 0},
    ]}, audio=[audio_file()])
    assert response.status_code == 400
    assert set(s3.objects) == uploaded_before


def test_update_entry_repeated_vocabulary_id(client, db, admin_headers, create_topic, create_entry):
    topic = create_topic()
    entry = create_entry(topic['_id'])
    id_vocab = entry['entryVocabularies'][0]
    entry_data = {'entryVocabularies': [
        {'_id': id_vocab['_id'], 'languageCode': 'id', 'vocab': 'Kucing'},
        {'_id': id_vocab['_id'], 'languageCode': 'en', 'vocab': 'Cat'},
    ]}
    response = client.put(f"/api/entries/{entry['_id']}", headers=admin_headers,
                          data={'entryData': json.dumps(entry_data)},
                          content_type='multipart/form-data')
    assert response.status_code == 400
    stored = db.docs(ENTRIES)[entry['_id']]['entryVocabularies']
    assert len({v['_id'] for v in stored}) == len(stored) == 2


def test_delete_entry(client, db, s3, admin_headers, create_topic, create_entry):
    topic = create_topic()
    entry = create_entry(topic['_id'])

    response = client.delete(f"/api/topics/{topic['_id']}/entries/{entry['_id']}", headers=admin_headers)
    assert response.status_code == 200
    assert db.docs(ENTRIES) == {}
    assert db.docs(TOPICS)[topic['_id']]['topicEntries'] == []
    assert entry['entryImageKey'] in s3.deleted
    assert all(v['audioKey'] in s3.deleted for v in entry['entryVocabularies'])


def test_quiz(client, create_topic, create_entry):
    topic = create_topic()
    entries = [create_entry(topic['_id'], f'Kata {i}', f'Kecap {i}') for i in range(5)]

    response = client.get(f"/api/topics/{topic['_id']}/quiz?language=su&options=3&seed=42")
    assert response.status_code == 200
    body = response.get_json()
    assert body['count'] == 5
    entry_ids = {e['_id'] for e in entries}
    for question in body['questions']:
        option_ids = [o['entryId'] for o in question['options']]
        assert len(option_ids) == 3
        assert len(set(option_ids)) == 3
        assert question['answerId'] in option_ids
        assert set(option_ids) <= entry_ids
        assert question['vocab'].startswith('Kecap')

    again = client.get(f"/api/topics/{topic['_id']}/quiz?language=su&options=3&seed=42").get_json()
    assert again == body


def test_quiz_needs_two_entries(client, create_topic, create_entry):
    topic = create_topic()
    create_entry(topic['_id'])
    assert client.get(f"/api/topics/{topic['_id']}/quiz").status_code == 400
    assert client.get('/api/topics/tidak-ada/quiz').status_code == 404
    assert client.get(f"/api/topics/{topic['_id']}/quiz?options=abc").status_code == 400
