# kangagam/visitor_logs.py
import logging
from zoneinfo import ZoneInfo

from flask import current_app

from .database import (
    get_document, create_document, list_documents, now_utc,
    LEARNERS, TOPICS, VISITOR_LOGS
)
from .errors import ValidationError, NotFoundError
from .utils import serialize, parse_iso_week

logger = logging.getLogger(__name__)


def record_visit(data):
    """Catat kunjungan pengguna ke sebuah topik"""
    learner_id = data.get('learnerId')
    topic_id = data.get('topicId')
    if not learner_id or not topic_id:
        raise ValidationError("learnerId dan topicId wajib diisi.")
    if not get_document(LEARNERS, learner_id):
        raise NotFoundError("Pengguna tidak ditemukan.")
    if not get_document(TOPICS, topic_id):
        raise NotFoundError("Topik tidak ditemukan.")

    log = create_document(VISITOR_LOGS, {
        'learnerId': learner_id,
        'topicId': topic_id,
        'timestamp': now_utc()
    })
    logger.info(f"Kunjungan dicatat: pengguna {learner_id} → topik {topic_id}")
    return serialize(log)


def list_visitor_logs(learner_id=None, topic_id=None, week=None):
    """Log kunjungan terbaru lebih dulu, dengan filter pengguna/topik/minggu ISO"""
    filters = []
    if learner_id:
        filters.append(('learnerId', '==', learner_id))
    if topic_id:
        filters.append(('topicId', '==', topic_id))
    if week:
        try:
            week_start, week_end = parse_iso_week(week)
        except ValueError as e:
            raise ValidationError(str(e))
        tz = ZoneInfo(current_app.config['TIMEZONE'])
        filters.append(('timestamp', '>=', week_start.replace(tzinfo=tz)))
        filters.append(('timestamp', '<=', week_end.replace(tzinfo=tz)))

    logs = list_documents(VISITOR_LOGS, filters)
    logs.sort(key=lambda l: l['timestamp'], reverse=True)
    return [serialize(l) for l in logs]
