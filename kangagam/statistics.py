# kangagam/statistics.py
from collections import Counter, defaultdict
from datetime import datetime, date, time, timedelta
from zoneinfo import ZoneInfo
import logging

from flask import current_app

from .config import DEFAULT_LANGUAGE
from .database import list_documents, count_documents, ADMINS, LEARNERS, TOPICS, VISITOR_LOGS
from .errors import ValidationError
from .utils import resolve_localized

logger = logging.getLogger(__name__)

PERIODS = ('daily', 'weekly', 'monthly', 'yearly')
DEFAULT_PERIOD = 'monthly'
PERIOD_NAMES = {
    'daily': 'Harian',
    'weekly': 'Mingguan',
    'monthly': 'Bulanan',
    'yearly': 'Tahunan'
}
PERIOD_PARAMS = ('visitorsPeriod', 'uniqueVisitorsPeriod', 'cityPeriod', 'topicPeriod')

SHORT_MONTHS = ['Jan', 'Feb', 'Mar', 'Apr', 'Mei', 'Jun', 'Jul', 'Agu', 'Sep', 'Okt', 'Nov', 'Des']
MONTHS = [
    'Januari', 'Februari', 'Maret', 'April', 'Mei', 'Juni',
    'Juli', 'Agustus', 'September', 'Oktober', 'November', 'Desember'
]

TOP_CITIES = 5


def parse_periods(args):
    """Ambil periode tiap grafik dari query string; nilai tak dikenal → 400"""
    periods = {}
    for param in PERIOD_PARAMS:
        value = args.get(param) or DEFAULT_PERIOD
        if value not in PERIODS:
            raise ValidationError(
                f"Periode '{value}' untuk {param} tidak valid. Gunakan: {', '.join(PERIODS)}."
            )
        periods[param] = value
    return periods


def _shift_months(day, months):
    month_index = day.year * 12 + day.month - 1 + months
    return date(month_index // 12, month_index % 12 + 1, 1)


def window_start(period, today):
    """Tanggal awal jendela statistik (jendela berakhir di akhir hari ini)"""
    if period == 'daily':
        return today - timedelta(days=6)
    if period == 'weekly':
        return today.replace(day=1)
    if period == 'monthly':
        return _shift_months(today, -5)
    return date(today.year - 4, 1, 1)


def bucket_key(period, day):
    if period == 'daily':
        return day.isoformat()
    if period == 'weekly':
        iso_year, iso_week, _ = day.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if period == 'monthly':
        return f"{day.year}-{day.month:02d}"
    return str(day.year)


def buckets(period, today):
    """Daftar berurutan (key, label) untuk semua bucket dalam jendela"""
    start = window_start(period, today)

    if period == 'daily':
        days = [start + timedelta(days=i) for i in range(7)]
        return [(bucket_key(period, d), f"{d.day} {SHORT_MONTHS[d.month - 1]}") for d in days]

    if period == 'weekly':
        result = []
        day = start
        while day <= today:
            key = bucket_key(period, day)
            if not result or result[-1][0] != key:
                result.append((key, f"{MONTHS[today.month - 1]}-Minggu {len(result) + 1}"))
            day += timedelta(days=1)
        return result

    if period == 'monthly':
        months = [_shift_months(start, i) for i in range(6)]
        return [(bucket_key(period, m), f"{MONTHS[m.month - 1]} {m.year}") for m in months]

    return [(str(year), str(year)) for year in range(start.year, today.year + 1)]


class StatisticsContext:
    """Data bersama untuk satu permintaan statistik (zona waktu, cache log)"""

    def __init__(self, now=None):
        self.tz = ZoneInfo(current_app.config['TIMEZONE'])
        self.now = (now or datetime.now(self.tz)).astimezone(self.tz)
        self.today = self.now.date()
        self._logs = {}

    def logs(self, period):
        """Log kunjungan dalam jendela periode, dengan tanggal lokal"""
        if period not in self._logs:
            start = datetime.combine(window_start(period, self.today), time.min, tzinfo=self.tz)
            end = datetime.combine(self.today, time.max, tzinfo=self.tz)
            found = list_documents(VISITOR_LOGS, [('timestamp', '>=', start)])
            logs = []
            for log in found:
                local = log['timestamp'].astimezone(self.tz)
                if local <= end:
                    log['localDate'] = local.date()
                    logs.append(log)
            self._logs[period] = logs
        return self._logs[period]


def visitor_distribution(logs, period, today, unique=False):
    """Distribusi lengkap (bucket kosong = 0) dalam urutan waktu"""
    if unique:
        per_bucket = defaultdict(set)
        for log in logs:
            per_bucket[bucket_key(period, log['localDate'])].add(log['learnerId'])
        counts = {k: len(v) for k, v in per_bucket.items()}
    else:
        counts = Counter(bucket_key(period, log['localDate']) for log in logs)
    return [{'label': label, 'count': counts.get(key, 0)} for key, label in buckets(period, today)]


def topic_distribution(logs, lang=DEFAULT_LANGUAGE):
    topics = {t['_id']: t for t in list_documents(TOPICS)}
    counts = Counter(log['topicId'] for log in logs if log.get('topicId') in topics)
    result = [
        {
            'topicId': topic_id,
            'name': resolve_localized(topics[topic_id].get('topicName'), lang),
            'count': count
        }
        for topic_id, count in counts.items()
    ]
    result.sort(key=lambda item: (-item['count'], item['name'].lower()))
    return result


def city_distribution(logs):
    """Top kota berdasarkan jumlah pengguna unik yang masih ada"""
    learners = {l['_id']: l for l in list_documents(LEARNERS)}
    learner_ids = {log['learnerId'] for log in logs if log.get('learnerId') in learners}
    counts = Counter(learners[l_id].get('learnerCity') or 'Lainnya' for l_id in learner_ids)
    result = [{'label': city, 'count': count} for city, count in counts.items()]
    result.sort(key=lambda item: (-item['count'], item['label']))
    return result[:TOP_CITIES]


def compute_statistics(periods, lang=DEFAULT_LANGUAGE, now=None):
    """Hitung seluruh angka dashboard untuk periode yang dipilih"""
    ctx = StatisticsContext(now)

    visitor_logs = ctx.logs(periods['visitorsPeriod'])
    unique_logs = ctx.logs(periods['uniqueVisitorsPeriod'])
    topics = topic_distribution(ctx.logs(periods['topicPeriod']), lang)
    cities = city_distribution(ctx.logs(periods['cityPeriod']))

    stats = {
        'totalVisitors': len(visitor_logs),
        'totalUniqueVisitors': len({log['learnerId'] for log in unique_logs}),
        'visitorDistribution': visitor_distribution(
            visitor_logs, periods['visitorsPeriod'], ctx.today),
        'uniqueVisitorDistribution': visitor_distribution(
            unique_logs, periods['uniqueVisitorsPeriod'], ctx.today, unique=True),
        'topicDistribution': topics,
        'favoriteTopic': topics[0] if topics else {},
        'cityDistribution': cities,
        'mostfrequentcity': cities[0] if cities else {},
        'totalTopics': count_documents(TOPICS),
        'totalAdmins': count_documents(ADMINS)
    }
    logger.info(
        f"Statistik dihitung: {stats['totalVisitors']} kunjungan, "
        f"{stats['totalUniqueVisitors']} pengunjung unik"
    )
    return stats
