# kangagam/media.py
from contextlib import contextmanager
import re
import tempfile
import uuid
import logging
from pathlib import Path

from moviepy.video.io.VideoFileClip import VideoFileClip

from .config import ALLOWED_IMAGE_EXTENSIONS, ALLOWED_AUDIO_EXTENSIONS, ALLOWED_VIDEO_EXTENSIONS
from .errors import ValidationError
from .storage import upload_fileobj, upload_to_s3, generate_presigned_url, fresh_url, delete_objects

logger = logging.getLogger(__name__)

IMAGE = ('gambar', ALLOWED_IMAGE_EXTENSIONS)
AUDIO = ('audio', ALLOWED_AUDIO_EXTENSIONS)
VIDEO = ('video', ALLOWED_VIDEO_EXTENSIONS)


def is_allowed_file(filename, allowed_extensions):
    """Cek ekstensi file"""
    return bool(filename) and Path(filename).suffix.lower() in allowed_extensions


def check_file(file, kind):
    label, allowed = kind
    if not file or not file.filename:
        raise ValidationError(f"File {label} wajib diunggah.")
    if not is_allowed_file(file.filename, allowed):
        raise ValidationError(
            f"Tipe file {label} tidak diizinkan. Format yang didukung: {', '.join(sorted(allowed))}"
        )


def get_video_duration(file_path):
    """Durasi video sebagai ('m:ss', detik)"""
    try:
        with VideoFileClip(str(file_path)) as clip:
            duration_sec = int(clip.duration)
            minutes = duration_sec // 60
            seconds = duration_sec % 60
            return f"{minutes}:{seconds:02d}", duration_sec
    except Exception as e:
        logger.warning(f"Durasi video tidak dapat dibaca: {e}")
        return "0:00", 0


def _slug(name):
    return re.sub(r'[^a-z0-9]+', '-', (name or '').lower()).strip('-')[:40] or 'media'


def _object_key(folder, name, filename):
    ext = Path(filename).suffix.lower()
    return f"{folder}/{_slug(name)}-{uuid.uuid4().hex[:12]}{ext}"


@contextmanager
def media_transaction():
    """Kumpulkan key yang diunggah; hapus semuanya jika blok gagal"""
    uploaded_keys = []
    try:
        yield uploaded_keys
    except Exception:
        if uploaded_keys:
            logger.warning(f"Request gagal, membersihkan {len(uploaded_keys)} media yang sudah diunggah")
            delete_objects(uploaded_keys)
        raise


def has_file(file):
    return bool(file and file.filename)


def upload_media(file, folder, name, kind, uploaded_keys):
    """
    Validasi lalu unggah file ke S3, kembalikan (key, presigned_url).

    Key yang berhasil diunggah ditambahkan ke uploaded_keys supaya bisa
    dibersihkan bila request gagal di tahap berikutnya.
    """
    check_file(file, kind)
    key = _object_key(folder, name, file.filename)
    upload_fileobj(file.stream, key, file.mimetype)
    uploaded_keys.append(key)
    logger.info(f"Media diunggah: {key}")
    return key, generate_presigned_url(key)


def upload_video(file, folder, uploaded_keys):
    """Unggah video lewat file sementara (sekaligus ukur durasinya)"""
    check_file(file, VIDEO)
    ext = Path(file.filename).suffix.lower()
    key = _object_key(folder, 'video', file.filename)

    with tempfile.NamedTemporaryFile(suffix=ext, delete=False) as tmp_file:
        tmp_path = Path(tmp_file.name)
        file.save(tmp_file)

    try:
        duration, duration_sec = get_video_duration(tmp_path)
        logger.info(f"Durasi video: {duration} ({duration_sec} detik)")
        upload_to_s3(tmp_path, key)
    finally:
        tmp_path.unlink(missing_ok=True)

    uploaded_keys.append(key)
    return key, generate_presigned_url(key), duration


def media_url(doc, key_field, url_field):
    """URL media yang masih berlaku untuk dokumen"""
    return fresh_url(doc.get(key_field), doc.get(url_field, ''))
