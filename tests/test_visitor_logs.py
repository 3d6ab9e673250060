# tests/test_visitor_logs.py
from datetime import datetime, timezone

from kangagam.database import LEARNERS, VISITOR_LOGS, create_document


def make_learner(phone='081200000001', city='Kota Bandung'):
    return create_document(LEARNERS, {
        'learnerName': 'Pengguna', 'learnerPhone': phone, 'learnerCity': city
    })


def test_record_visit(client, db, create_topic):
    topic = create_topic()
    learner = make_learner()
    response = client.post('/api/visitor-logs', json={'learnerId': learner['_id'], 'topicId': topic['_id']})
    assert response.status_code == 201
    log = response.get_json()['data']
    stored = db.docs(VISITOR_LOGS)[log['_id']]
    assert stored['timestamp'].tzinfo is not None


def test_record_visit_validation(client, create_topic):
    topic = create_topic()
    learner = make_learner()
    assert client.post('/api/visitor-logs', json={'topicId': topic['_id']}).status_code == 400
    assert client.post('/api/visitor-logs', json={
        'learnerId': 'tidak-ada', 'topicId': topic['_id']}).status_code == 404
    assert client.post('/api/visitor-logs', json={
        'learnerId': learner['_id'], 'topicId': 'tidak-ada'}).status_code == 404


def test_list_visitor_logs_filters(client, admin_headers):
    logs = [
        ('l1', 't1', datetime(2026, 10, 13, 8, tzinfo=timezone.utc)),
        ('l1', 't2', datetime(2026, 10, 6, 8, tzinfo=timezone.utc)),
        ('l2', 't1', datetime(2026, 10, 15, 8, tzinfo=timezone.utc)),
    ]
    for learner_id, topic_id, timestamp in logs:
        create_document(VISITOR_LOGS, {'learnerId': learner_id, 'topicId': topic_id, 'timestamp': timestamp})

    body = client.get('/api/visitor-logs', headers=admin_headers).get_json()
    assert body['count'] == 3
    assert body['data'][0]['learnerId'] == 'l2'

    body = client.get('/api/visitor-logs?learnerId=l1', headers=admin_headers).get_json()
    assert body['count'] == 2

    body = client.get('/api/visitor-logs?topicId=t1&week=2026-W42', headers=admin_headers).get_json()
    assert body['count'] == 2

    body = client.get('/api/visitor-logs?week=2026-W41', headers=admin_headers).get_json()
    assert [log['topicId'] for log in body['data']] == ['t2']

    assert client.get('/api/visitor-logs?week=minggu-lalu', headers=admin_headers).status_code == 400
    assert client.get('/api/visitor-logs').status_code == 401


def test_week_filter_follows_local_timezone(client, admin_headers):
    # Senin 12 Okt 03:00 WIB = Minggu 11 Okt 20:00 UTC
    create_document(VISITOR_LOGS, {'learnerId': 'l1', 'topicId': 't1',
                                   'timestamp': datetime(2026, 10, 11, 20, tzinfo=timezone.utc)})

    body = client.get('/api/visitor-logs?week=2026-W42', headers=admin_headers).get_json()
    assert body['count'] == 1
    body = client.get('/api/visitor-logs?week=2026-W41', headers=admin_headers).get_json()
    assert body['count'] == 0
