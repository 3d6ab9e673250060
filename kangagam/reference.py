# kangagam/reference.py
from .config import SUPPORTED_LANGUAGES

# Kabupaten/kota di Jawa Barat
WEST_JAVA_CITIES = [
    'Kabupaten Bandung',
    'Kabupaten Bandung Barat',
    'Kabupaten Bekasi',
    'Kabupaten Bogor',
    'Kabupaten Ciamis',
    'Kabupaten Cianjur',
    'Kabupaten Cirebon',
    'Kabupaten Garut',
    'Kabupaten Indramayu',
    'Kabupaten Karawang',
    'Kabupaten Kuningan',
    'Kabupaten Majalengka',
    'Kabupaten Pangandaran',
    'Kabupaten Purwakarta',
    'Kabupaten Subang',
    'Kabupaten Sukabumi',
    'Kabupaten Sumedang',
    'Kabupaten Tasikmalaya',
    'Kota Bandung',
    'Kota Banjar',
    'Kota Bekasi',
    'Kota Bogor',
    'Kota Cimahi',
    'Kota Cirebon',
    'Kota Depok',
    'Kota Sukabumi',
    'Kota Tasikmalaya',
]
OTHER_CITY = 'Lainnya'


def list_languages():
    return [
        {'languageCode': code, 'languageName': name}
        for code, name in SUPPORTED_LANGUAGES.items()
    ]


def language_name(code):
    return SUPPORTED_LANGUAGES.get(code)


def list_cities():
    return [{'name': city} for city in WEST_JAVA_CITIES + [OTHER_CITY]]
