"""Supported CWA forecast regions (F-C0032-001 county/city coverage)."""

TAIWAN_CITIES: tuple[str, ...] = (
    "臺北市", "新北市", "桃園市", "臺中市", "臺南市", "高雄市",
    "基隆市", "新竹市", "嘉義市",
    "新竹縣", "苗栗縣", "彰化縣", "南投縣", "雲林縣", "嘉義縣",
    "屏東縣", "宜蘭縣", "花蓮縣", "臺東縣", "澎湖縣", "金門縣", "連江縣",
)

DEFAULT_CITY = "臺北市"

# Simplified character commonly typed instead of the official one.
CITY_CHAR_ALIASES: dict[str, str] = {"台": "臺"}
