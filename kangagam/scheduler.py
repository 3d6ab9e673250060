# kangagam/scheduler.py
import atexit
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .config import URL_REFRESH_INTERVAL_HOURS
from .database import get_db, now_utc, TOPICS, ENTRIES, CULTURE_TOPICS, CULTURE_ENTRIES
from .storage import generate_presigned_url, is_presigned_url_expired

logger = logging.getLogger(__name__)

REFRESH_MARGIN_MINUTES = 120

scheduler = BackgroundScheduler(
    timezone='UTC',
    job_defaults={
        'coalesce': True,
        'max_instances': 1
    }
)

# (koleksi, [(field key, field URL)])
MEDIA_FIELDS = [
    (TOPICS, [('topicImageKey', 'topicImagePath')]),
    (ENTRIES, [('entryImageKey', 'entryImagePath')]),
    (CULTURE_TOPICS, [('imageKey', 'imagePath')]),
    (CULTURE_ENTRIES, [('imageKey', 'imagePath'), ('videoKey', 'videoUrl')]),
]


def _needs_refresh(key, url):
    return bool(key) and (not url or is_presigned_url_expired(url, REFRESH_MARGIN_MINUTES))


def _refreshed_fields(collection, fields, data):
    """Field URL yang perlu diperbarui untuk satu dokumen"""
    update_data = {}
    for key_field, url_field in fields:
        key = data.get(key_field)
        if _needs_refresh(key, data.get(url_field)):
            update_data[url_field] = generate_presigned_url(key)

    if collection == ENTRIES:
        vocabularies = data.get('entryVocabularies', [])
        changed = False
        for vocab in vocabularies:
            if _needs_refresh(vocab.get('audioKey'), vocab.get('audioUrl')):
                vocab['audioUrl'] = generate_presigned_url(vocab['audioKey'])
                changed = True
        if changed:
            update_data['entryVocabularies'] = vocabularies
    return update_data


def refresh_expiring_urls():
    """Perbarui presigned URL yang akan kedaluwarsa dalam 2 jam"""
    try:
        logger.info("🔄 Pembaruan URL media dimulai...")
        updated_count = 0
        total_count = 0

        for collection, fields in MEDIA_FIELDS:
            for doc in get_db().collection(collection).stream():
                total_count += 1
                try:
                    update_data = _refreshed_fields(collection, fields, doc.to_dict() or {})
                    if update_data:
                        update_data['urlRefreshedAt'] = now_utc()
                        doc.reference.update(update_data)
                        updated_count += 1
                except Exception as e:
                    logger.error(f"❌ Gagal memperbarui URL {collection}/{doc.id}: {e}")

        logger.info(f"🎉 Pembaruan URL selesai: {updated_count}/{total_count} dokumen")
        return updated_count, total_count

    except Exception as e:
        logger.error(f"❌ Pembaruan URL gagal: {e}")
        return 0, 0


def start_scheduler():
    """Mulai scheduler latar belakang"""
    if scheduler.running:
        return
    try:
        scheduler.add_job(
            func=refresh_expiring_urls,
            trigger=IntervalTrigger(hours=URL_REFRESH_INTERVAL_HOURS),
            id='refresh_urls',
            name='Pembaruan URL media otomatis',
            replace_existing=True
        )
        scheduler.start()
        logger.info("🚀 Scheduler latar belakang berjalan")

        atexit.register(lambda: scheduler.shutdown(wait=False))

    except Exception as e:
        logger.error(f"❌ Scheduler gagal dimulai: {e}")


def scheduler_status():
    return {
        'running': scheduler.running,
        'jobs': [
            {
                'id': job.id,
                'name': job.name,
                'nextRunTime': job.next_run_time.isoformat() if job.next_run_time else None,
                'trigger': str(job.trigger)
            }
            for job in scheduler.get_jobs()
        ]
    }
