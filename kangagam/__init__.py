# kangagam/__init__.py
"""
Kang Agam Backend

Paket ini menyediakan layanan REST untuk kamus bergambar dan beraudio
tiga bahasa (Indonesia, Sunda, Inggris) beserta panel admin.

Modul utama:
- app: Flask app factory dan health check
- config: pengaturan dari environment
- auth: JWT, hash password, dekorator peran admin
- database: koneksi Firestore
- storage: penyimpanan media di S3
- media: validasi dan unggah file (gambar, audio, video)
- translation: pengisian terjemahan otomatis
- scheduler: penyegaran presigned URL di latar belakang
- admins, settings, learners, topics, entries, culture, visitor_logs: layanan data
- reference: daftar bahasa dan kota
- mailer: pengiriman email reset password
- statistics: agregasi statistik kunjungan
- reports: ekspor PDF / Excel
- *_routes: endpoint REST
"""

__version__ = "1.0.0"
__description__ = "Kang Agam trilingual audio dictionary backend"
