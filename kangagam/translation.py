# kangagam/translation.py
import asyncio
import logging

from googletrans import Translator

from .config import SUPPORTED_LANGUAGES, DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)


async def _translate(text, target_language, source_language):
    async with Translator() as translator:
        result = await translator.translate(text, src=source_language, dest=target_language)
        return result.text


def translate_text(text, target_language, source_language=DEFAULT_LANGUAGE):
    """Terjemahkan teks; None jika gagal"""
    if target_language == source_language or not text.strip():
        return text
    try:
        translated_text = asyncio.run(_translate(text, target_language, source_language))
        logger.info(f"Terjemahan selesai: '{text}' → '{translated_text}' ({target_language})")
        return translated_text
    except Exception as e:
        logger.warning(f"Terjemahan gagal ({target_language}): {e}")
        return None


def fill_missing_translations(localized):
    """Lengkapi bahasa yang kosong dari teks bahasa Indonesia"""
    values = {item['lang']: item['value'] for item in localized}
    source_text = values.get(DEFAULT_LANGUAGE)
    if not source_text:
        return localized

    for lang_code in SUPPORTED_LANGUAGES:
        if lang_code in values:
            continue
        translated = translate_text(source_text, lang_code)
        if translated:
            values[lang_code] = translated

    return [{'lang': lang, 'value': values[lang]} for lang in SUPPORTED_LANGUAGES if lang in values]
