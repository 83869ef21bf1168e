from dotenv import load_dotenv

# Load .env before the settings are read
load_dotenv()

from studio.config import settings
from studio.factory import create_app
from studio.logging.config import StructuredLogger, get_structured_logger

StructuredLogger.setup_logging(
    log_level=settings.log_level,
    enable_json=settings.environment.value == "production" and settings.log_format == "json"
)
logger = get_structured_logger("video-studio-service")

app = create_app()
