# tests/test_reports.py
import io
from datetime import datetime

import pandas as pd

from kangagam.reports import build_statistics_excel, build_statistics_pdf, report_sections

PERIODS = {'visitorsPeriod': 'daily', 'uniqueVisitorsPeriod': 'weekly',
           'cityPeriod': 'monthly', 'topicPeriod': 'yearly'}

STATS = {
    'totalVisitors': 4,
    'totalUniqueVisitors': 2,
    'visitorDistribution': [{'label': '17 Okt', 'count': 1}, {'label': '18 Okt', 'count': 3}],
    'uniqueVisitorDistribution': [{'label': 'Oktober-Minggu 1', 'count': 2}],
    'topicDistribution': [{'topicId': 't1', 'name': 'Hewan', 'count': 4}],
    'favoriteTopic': {'topicId': 't1', 'name': 'Hewan', 'count': 4},
    'cityDistribution': [],
    'mostfrequentcity': {},
    'totalTopics': 1,
    'totalAdmins': 2,
}


def test_report_sections_use_period_names():
    sections = report_sections(STATS, PERIODS)
    assert [s['title'] for s in sections] == [
        'Total Kunjungan', 'Pengunjung Unik', 'Distribusi Kunjungan Topik', 'Distribusi Domisili Pengunjung'
    ]
    assert [s['period'] for s in sections] == ['Harian', 'Mingguan', 'Tahunan', 'Bulanan']
    assert sections[0]['total'] == 4
    assert sections[2]['total'] is None


def test_statistics_pdf():
    buffer = build_statistics_pdf(STATS, PERIODS, datetime(2026, 10, 18, 9, 30))
    assert buffer.getvalue().startswith(b'%PDF')


def test_statistics_excel_sheets():
    buffer = build_statistics_excel(STATS, PERIODS, datetime(2026, 10, 18, 9, 30))
    sheets = pd.read_excel(io.BytesIO(buffer.getvalue()), sheet_name=None)
    assert list(sheets) == [
        'Ringkasan', 'Total Kunjungan', 'Pengunjung Unik',
        'Distribusi Kunjungan Topik', 'Distribusi Domisili Pengunjung'
    ]
    assert sheets['Total Kunjungan']['Jumlah Kunjungan'].tolist() == [1, 3]
    summary = dict(zip(sheets['Ringkasan']['Keterangan'], sheets['Ringkasan']['Nilai']))
    assert summary['Topik Favorit'] == 'Hewan'
    assert summary['Kota Terbanyak'] == '-'


def test_export_endpoint(client, admin_headers):
    pdf = client.get('/api/dashboard/export?format=pdf', headers=admin_headers)
    assert pdf.status_code == 200
    assert pdf.mimetype == 'application/pdf'
    disposition = pdf.headers['Content-Disposition']
    assert 'statistik-kang-agam-' in disposition and '.pdf' in disposition

    xlsx = client.get('/api/dashboard/export?format=xlsx&cityPeriod=yearly', headers=admin_headers)
    assert xlsx.status_code == 200
    assert xlsx.data[:2] == b'PK'

    assert client.get('/api/dashboard/export?format=csv', headers=admin_headers).status_code == 400
