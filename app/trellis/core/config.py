import os

# --- ENV STEUERUNG ---
# Alle Umgebungsvariablen werden hier EINMAL gelesen, der Rest der App importiert nur noch Konstanten.
# TRELLIS_DEBUG=true  -> Volles Rohr (DEBUG)
# TRELLIS_DEBUG=false -> Sauberer Betrieb (INFO)
IS_DEBUG = os.getenv("TRELLIS_DEBUG", "false").lower() == "true"

LOG_DIR = os.getenv("TRELLIS_LOG_DIR", "logs")
LOG_FILE_NAME = "trellis.log"

# Backend für die HTTP Resource-Services
API_URL = os.getenv("TRELLIS_API_URL", "http://localhost:8000/api/v1").rstrip("/")
API_TIMEOUT = float(os.getenv("TRELLIS_API_TIMEOUT", "10"))

DEFAULT_LOCALE = os.getenv("TRELLIS_DEFAULT_LOCALE", "en")
FALLBACK_LOCALE = os.getenv("TRELLIS_FALLBACK_LOCALE", "en")

# Paket, in dem der ModuleManager nach Modulen sucht
PLUGIN_PACKAGE = os.getenv("TRELLIS_PLUGIN_PACKAGE", "trellis.plugins")

STORAGE_SECRET = os.getenv("TRELLIS_STORAGE_SECRET", "trellis_dev_storage_secret")
PORT = int(os.getenv("TRELLIS_PORT", "8081"))
