# kangagam/reports.py
import io
import logging

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
import pandas as pd

from .statistics import PERIOD_NAMES

logger = logging.getLogger(__name__)

REPORT_TITLE = 'Laporan Statistik Pengguna Kang Agam'
EXPORT_FORMATS = ('pdf', 'xlsx')


def report_sections(stats, periods):
    """Bagian laporan: judul, periode, total (opsional) dan tabel data"""
    return [
        {
            'title': 'Total Kunjungan',
            'period': PERIOD_NAMES[periods['visitorsPeriod']],
            'total': stats['totalVisitors'],
            'columns': ('Periode', 'Jumlah Kunjungan'),
            'rows': [(d['label'], d['count']) for d in stats['visitorDistribution']]
        },
        {
            'title': 'Pengunjung Unik',
            'period': PERIOD_NAMES[periods['uniqueVisitorsPeriod']],
            'total': stats['totalUniqueVisitors'],
            'columns': ('Periode', 'Pengunjung Unik'),
            'rows': [(d['label'], d['count']) for d in stats['uniqueVisitorDistribution']]
        },
        {
            'title': 'Distribusi Kunjungan Topik',
            'period': PERIOD_NAMES[periods['topicPeriod']],
            'total': None,
            'columns': ('Topik', 'Jumlah Kunjungan'),
            'rows': [(d['name'], d['count']) for d in stats['topicDistribution']]
        },
        {
            'title': 'Distribusi Domisili Pengunjung',
            'period': PERIOD_NAMES[periods['cityPeriod']],
            'total': None,
            'columns': ('Kota', 'Jumlah Pengguna'),
            'rows': [(d['label'], d['count']) for d in stats['cityDistribution']]
        }
    ]


def _cover_page(pdf, export_date):
    fig = plt.figure(figsize=(8.27, 11.69))
    fig.text(0.5, 0.6, REPORT_TITLE, ha='center', fontsize=18, weight='bold')
    fig.text(0.5, 0.55, f"Tanggal ekspor: {export_date.strftime('%d-%m-%Y %H:%M')}", ha='center', fontsize=11)
    pdf.savefig(fig)
    plt.close(fig)


def _section_page(pdf, section):
    fig, (chart_ax, table_ax) = plt.subplots(
        2, 1, figsize=(8.27, 11.69), gridspec_kw={'height_ratios': [3, 2]})

    heading = f"{section['title']} ({section['period']})"
    if section['total'] is not None:
        heading += f"\nTotal: {section['total']}"
    fig.suptitle(heading, fontsize=14, weight='bold')

    labels = [str(row[0]) for row in section['rows']]
    counts = [row[1] for row in section['rows']]
    if section['rows']:
        chart_ax.bar(labels, counts, color='#2f7d4f', alpha=0.85)
        chart_ax.set_ylabel(section['columns'][1])
        chart_ax.tick_params(axis='x', labelrotation=45)
    else:
        chart_ax.text(0.5, 0.5, 'Tidak ada data', ha='center', va='center')
        chart_ax.set_xticks([])
        chart_ax.set_yticks([])

    table_ax.axis('off')
    if section['rows']:
        table = table_ax.table(
            cellText=[[str(c) for c in row] for row in section['rows']],
            colLabels=list(section['columns']),
            loc='upper center'
        )
        table.auto_set_font_size(False)
        table.set_fontsize(9)

    fig.tight_layout(rect=(0, 0, 1, 0.94))
    pdf.savefig(fig)
    plt.close(fig)


def build_statistics_pdf(stats, periods, export_date):
    """Laporan PDF: sampul lalu satu halaman per grafik"""
    buffer = io.BytesIO()
    with PdfPages(buffer) as pdf:
        _cover_page(pdf, export_date)
        for section in report_sections(stats, periods):
            _section_page(pdf, section)
        info = pdf.infodict()
        info['Title'] = REPORT_TITLE
    buffer.seek(0)
    logger.info("📄 Laporan statistik PDF dibuat")
    return buffer


def build_statistics_excel(stats, periods, export_date):
    """Workbook Excel: sheet ringkasan + satu sheet per bagian"""
    summary = pd.DataFrame([
        ('Judul', REPORT_TITLE),
        ('Tanggal Ekspor', export_date.strftime('%d-%m-%Y %H:%M')),
        ('Total Kunjungan', stats['totalVisitors']),
        ('Pengunjung Unik', stats['totalUniqueVisitors']),
        ('Topik Favorit', stats['favoriteTopic'].get('name', '-')),
        ('Kota Terbanyak', stats['mostfrequentcity'].get('label', '-')),
        ('Total Topik', stats['totalTopics']),
        ('Total Admin', stats['totalAdmins'])
    ], columns=['Keterangan', 'Nilai'])

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        summary.to_excel(writer, index=False, sheet_name='Ringkasan')
        for section in report_sections(stats, periods):
            df = pd.DataFrame(section['rows'], columns=list(section['columns']))
            df.to_excel(writer, index=False, sheet_name=section['title'][:31])
    buffer.seek(0)
    logger.info("📊 Laporan statistik Excel dibuat")
    return buffer


def build_learners_excel(learners):
    rows = [
        {
            'Nama': l.get('learnerName', ''),
            'Telepon': l.get('learnerPhone', ''),
            'Kota': l.get('learnerCity', ''),
            'Terdaftar': l.get('createdAt', '')
        }
        for l in learners
    ]
    df = pd.DataFrame(rows, columns=['Nama', 'Telepon', 'Kota', 'Terdaftar'])

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name='Pengguna')
    buffer.seek(0)
    return buffer
