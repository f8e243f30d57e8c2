import sys
import logging
from loguru import logger


# ===========================
# Log Contexts
# ===========================
DEFAULT_CONTEXT = "ADDON"

CONTEXT_STYLES = {
    "ADDON": ("green", "🚀"),
    "API": ("cyan", "🔗"),
    "SCRAPER": ("blue", "🌐"),
    "STREAM": ("yellow", "🎬"),
    "CACHE": ("white", "💾"),
    "HTTP": ("magenta", "📡"),
}


# ===========================
# Log Formatter
# ===========================
def format_log(record):
    color, icon = CONTEXT_STYLES.get(record["extra"].get("context"), ("white", "📦"))

    return (
        "<magenta>{time:YYYY-MM-DD HH:mm:ss}</magenta> | "
        "<level>{level: <8}</level> | "
        f"<{color}>{icon} {{extra[context]: <8}}</{color}> | "
        "<level>{message}</level>\n{exception}"
    )


# ===========================
# Logger Setup Function
# ===========================
def setup_logger(level: str = "INFO"):
    logger.remove()
    logger.configure(extra={"context": DEFAULT_CONTEXT})
    logger.add(sys.stderr, level=level, format=format_log, colorize=True, backtrace=True, diagnose=False)


# ===========================
# Logger Instances
# ===========================
def get_logger(context: str):
    return logger.bind(context=context)


addon_logger = get_logger("ADDON")
api_logger = get_logger("API")
scraper_logger = get_logger("SCRAPER")
stream_logger = get_logger("STREAM")
cache_logger = get_logger("CACHE")
http_logger = get_logger("HTTP")

# uvicorn access lines duplicate the request middleware
logging.getLogger("uvicorn.access").disabled = True
logging.getLogger("httpx").setLevel(logging.WARNING)
