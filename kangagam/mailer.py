# kangagam/mailer.py
from email.message import EmailMessage
import logging
import smtplib

from flask import current_app

logger = logging.getLogger(__name__)


def send_email(to_address, subject, body):
    """Kirim email teks lewat SMTP; tanpa SMTP_HOST isi email hanya dicatat"""
    config = current_app.config
    if not config.get('SMTP_HOST'):
        logger.warning(f"SMTP belum dikonfigurasi, email ke {to_address} tidak dikirim:\n{body}")
        return False

    message = EmailMessage()
    message['From'] = config['MAIL_FROM']
    message['To'] = to_address
    message['Subject'] = subject
    message.set_content(body)

    with smtplib.SMTP(config['SMTP_HOST'], config['SMTP_PORT'], timeout=30) as smtp:
        smtp.starttls()
        if config.get('SMTP_USER'):
            smtp.login(config['SMTP_USER'], config['SMTP_PASSWORD'])
        smtp.send_message(message)

    logger.info(f"Email '{subject}' dikirim ke {to_address}")
    return True
