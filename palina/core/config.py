import os
from dotenv import load_dotenv
from pydantic import BaseModel

# Load variables from .env
load_dotenv()


class Settings(BaseModel):
    database_url: str = "sqlite+aiosqlite:///./data/palina_resort.db"
    export_dir: str = "data"

    # Resort identity used in message templates
    resort_name: str = "Palina Resort"
    resort_location: str = "Lebanon"
    instagram_handle: str = "@palina_pool"

    # WhatsApp notifications
    admin_whatsapp_number: str = ""
    default_country_code: str = "+961"
    notification_timeout_seconds: float = 10.0

    # WhatsApp Cloud API (Meta)
    whatsapp_phone_number_id: str = ""
    whatsapp_access_token: str = ""
    whatsapp_api_version: str = "v18.0"

    # Twilio WhatsApp gateway
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_whatsapp_number: str = ""

    # Reports
    daily_report_window_days: int = 7

    # Rate limiting settings
    rate_limit_enabled: bool = True  # Killswitch for quick disable
    rate_limit_bookings: str = "10/minute"  # Public booking form, per IP

    # Logging settings
    log_format: str = "console"  # Options: "console", "json"
    log_slow_request_threshold_ms: int = 500  # Log timing only if duration > threshold


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


settings = Settings(
    database_url=os.environ.get(
        "DATABASE_URL", "sqlite+aiosqlite:///./data/palina_resort.db"
    ),
    export_dir=os.environ.get("EXPORT_DIR", "data"),
    resort_name=os.environ.get("RESORT_NAME", "Palina Resort"),
    resort_location=os.environ.get("RESORT_LOCATION", "Lebanon"),
    instagram_handle=os.environ.get("INSTAGRAM_HANDLE", "@palina_pool"),
    admin_whatsapp_number=os.environ.get("ADMIN_WHATSAPP_NUMBER", ""),
    default_country_code=os.environ.get("DEFAULT_COUNTRY_CODE", "+961"),
    notification_timeout_seconds=float(
        os.environ.get("NOTIFICATION_TIMEOUT_SECONDS", "10")
    ),
    whatsapp_phone_number_id=os.environ.get("WHATSAPP_PHONE_NUMBER_ID", ""),
    whatsapp_access_token=os.environ.get("WHATSAPP_ACCESS_TOKEN", ""),
    whatsapp_api_version=os.environ.get("WHATSAPP_API_VERSION", "v18.0"),
    twilio_account_sid=os.environ.get("TWILIO_ACCOUNT_SID", ""),
    twilio_auth_token=os.environ.get("TWILIO_AUTH_TOKEN", ""),
    twilio_whatsapp_number=os.environ.get("TWILIO_WHATSAPP_NUMBER", ""),
    daily_report_window_days=int(os.environ.get("DAILY_REPORT_WINDOW_DAYS", "7")),
    rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", "true"),
    rate_limit_bookings=os.environ.get("RATE_LIMIT_BOOKINGS", "10/minute"),
    log_format=os.environ.get("LOG_FORMAT", "console"),
    log_slow_request_threshold_ms=int(
        os.environ.get("LOG_SLOW_REQUEST_THRESHOLD_MS", "500")
    ),
)
