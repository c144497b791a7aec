from enum import Enum

# Размер тайла Web Mercator по одной стороне (px)
TILE_SIZE = 256

# Длина экватора (метры), разрешение на зуме 0 = EARTH_CIRCUMFERENCE_M / TILE_SIZE
EARTH_CIRCUMFERENCE_M = 40_075_016.686

# Диапазон уровней приближения
MIN_ZOOM = 0
MAX_ZOOM = 18

# Предельная широта проекции Web Mercator (градусы)
MAX_MERCATOR_LAT_DEG = 85.05112878

WORLD_LNG_HALF_SPAN_DEG = 180.0
WORLD_LNG_SPAN_DEG = 360.0

# Допуск (в долях тайла) для точек, лежащих ровно на границе тайла
TILE_EDGE_EPSILON = 1e-7

# Целевое разрешение на местности (м/px), ~10 м соответствует Sentinel-2
DEFAULT_TARGET_METERS_PER_PIXEL = 10.0

# Максимальное число одновременных запросов тайлов
DOWNLOAD_CONCURRENCY = 4

# Качество итогового JPEG
DEFAULT_JPEG_QUALITY = 90
JPEG_QUALITY_MIN = 1
JPEG_QUALITY_MAX = 100

# Цвет заливки мозаики там, где тайл отсутствует (RGB)
MOSAIC_FILL_COLOR = (0, 0, 0)

# Шаблон имени итогового снимка
OUTPUT_IMAGE_PREFIX = 'geosat_'
OUTPUT_TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'
OUTPUT_IMAGE_EXT = '.jpg'

# Количество видимых символов секрета при маскировке
API_KEY_VISIBLE_PREFIX_LEN = 4

# --- HTTP
HTTP_TIMEOUT_DEFAULT = 20.0
HTTP_OK = 200
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403

# --- Mapbox Raster Tiles API v4
MAPBOX_RASTER_BASE = 'https://api.mapbox.com/v4'
MAPBOX_DEFAULT_TILESET = 'mapbox.satellite'
MAPBOX_TILE_FORMAT = 'jpg90'

# --- Sentinel Hub (Copernicus Data Space)
SENTINEL_TOKEN_URL = (
    'https://identity.dataspace.copernicus.eu/auth/realms/CDSE/protocol/'
    'openid-connect/token'
)
SENTINEL_WMTS_BASE = 'https://sh.dataspace.copernicus.eu/ogc/wmts'
SENTINEL_DEFAULT_LAYER = 'TRUE_COLOR'
WMTS_TILE_MATRIX_SET = 'PopularWebMercator256'
WMTS_VERSION = '1.0.0'
WMTS_FORMAT = 'image/jpeg'

# Токен обновляется заранее, за столько секунд до истечения
TOKEN_REFRESH_MARGIN_S = 60

# --- Пути пользователя
APP_DIR_NAME = 'GeoSat'
HOME_DIR_NAME = '.geosat'
TILE_CACHE_DIR_NAME = 'TileCache'
SETTINGS_FILE_NAME = 'settings.toml'
SETTINGS_ENV_VAR = 'GEOSAT_SETTINGS'
MAPBOX_TOKEN_ENV_VAR = 'MAPBOX_ACCESS_TOKEN'
LOG_FILE_NAME = 'geosat.log'


class ImageryProvider(str, Enum):
    SENTINEL_HUB = 'SENTINEL_HUB'
    MAPBOX = 'MAPBOX'


def default_provider() -> ImageryProvider:
    return ImageryProvider.MAPBOX
