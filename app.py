# app.py - Kang Agam backend (Flask)
import os

from kangagam.app import create_app, initialize_app
from kangagam.config import SUPPORTED_LANGUAGES, SCHEDULER_ENABLED, APP_ENV
from kangagam.scheduler import start_scheduler

app = create_app()

if __name__ == "__main__":
    # Inisialisasi data awal
    initialize_app(app)

    # Scheduler pembaruan URL media
    if SCHEDULER_ENABLED:
        start_scheduler()

    port = int(os.environ.get("PORT", 8080))

    app.logger.info("🚀 Server Flask Kang Agam dimulai")
    app.logger.info(f"📱 Bahasa yang didukung: {', '.join(SUPPORTED_LANGUAGES.values())}")

    app.run(host="0.0.0.0", port=port, debug=APP_ENV != 'production')
