# kangagam/storage.py
from datetime import datetime, timedelta
from urllib.parse import urlparse, parse_qs
import logging

import boto3
from boto3.s3.transfer import TransferConfig

from .config import (
    AWS_ACCESS_KEY, AWS_SECRET_KEY, REGION_NAME, BUCKET_NAME,
    S3_ENDPOINT_URL, PRESIGNED_URL_EXPIRES
)

logger = logging.getLogger(__name__)

_s3 = None

s3_config = TransferConfig(
    multipart_threshold=1024 * 1024 * 25,
    multipart_chunksize=1024 * 1024 * 50,
    max_concurrency=5,
    use_threads=True
)


def get_s3():
    """Klien S3 (dibuat saat pertama dipakai)"""
    global _s3
    if _s3 is None:
        _s3 = boto3.client(
            's3',
            aws_access_key_id=AWS_ACCESS_KEY,
            aws_secret_access_key=AWS_SECRET_KEY,
            region_name=REGION_NAME,
            endpoint_url=S3_ENDPOINT_URL
        )
    return _s3


def set_s3(client):
    """Ganti klien S3 (dipakai oleh test)"""
    global _s3
    _s3 = client


def generate_presigned_url(key, expires_in=PRESIGNED_URL_EXPIRES):
    """Buat presigned URL untuk objek S3"""
    return get_s3().generate_presigned_url(
        ClientMethod='get_object',
        Params={'Bucket': BUCKET_NAME, 'Key': key},
        ExpiresIn=expires_in
    )


def upload_to_s3(file_path, key):
    """Unggah file lokal ke S3"""
    get_s3().upload_file(str(file_path), BUCKET_NAME, key, Config=s3_config)


def upload_fileobj(fileobj, key, content_type=None):
    """Unggah stream file ke S3"""
    extra_args = {'ContentType': content_type} if content_type else None
    get_s3().upload_fileobj(fileobj, BUCKET_NAME, key, ExtraArgs=extra_args, Config=s3_config)


def delete_objects(keys):
    """Hapus objek S3; kegagalan dicatat tanpa membatalkan request"""
    keys = [k for k in keys if k]
    if not keys:
        return
    try:
        get_s3().delete_objects(
            Bucket=BUCKET_NAME,
            Delete={'Objects': [{'Key': k} for k in keys], 'Quiet': True}
        )
        logger.info(f"{len(keys)} objek media dihapus")
    except Exception as e:
        logger.error(f"Gagal menghapus objek media {keys}: {e}")


def is_presigned_url_expired(url, safety_margin_minutes=60):
    """Cek apakah presigned URL sudah (hampir) kedaluwarsa"""
    try:
        parsed = urlparse(url)
        query = parse_qs(parsed.query)
        if 'X-Amz-Date' not in query or 'X-Amz-Expires' not in query:
            return True
        issued_str = query['X-Amz-Date'][0]
        expires_in = int(query['X-Amz-Expires'][0])
        issued_time = datetime.strptime(issued_str, '%Y%m%dT%H%M%SZ')
        expiry_time = issued_time + timedelta(seconds=expires_in)
        margin_time = datetime.utcnow() + timedelta(minutes=safety_margin_minutes)
        return margin_time >= expiry_time
    except Exception as e:
        logger.warning(f"URL tidak dapat diperiksa: {e}")
        return True


def fresh_url(key, current_url, safety_margin_minutes=60):
    """Kembalikan URL yang masih berlaku untuk key (dibuat ulang bila perlu)"""
    if not key:
        return current_url or ''
    if current_url and not is_presigned_url_expired(current_url, safety_margin_minutes):
        return current_url
    return generate_presigned_url(key)
