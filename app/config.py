from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    app_name: str = "FIB Resignation Reports"

    # Discord webhook for accepted reports. Unset disables dispatch.
    discord_webhook_url: Optional[str] = None
    webhook_timeout_seconds: float = 10.0
    webhook_username: str = "FIB Forms Bot"
    webhook_avatar_url: str = "https://cdn-icons-png.flaticon.com/512/5968/5968524.png"
    # Role pinged in the message content; empty string disables the mention
    webhook_mention_role_id: str = "1069528090679705622"
    webhook_embed_title: str = "📋 FIB resignation report"
    webhook_embed_color: int = 65535
    webhook_footer_text: str = "by k.i.t.i.k.o.t"

    # 3 submissions per 2 minutes per client address
    report_rate_limit_max_attempts: int = 3
    report_rate_limit_window_seconds: float = 120.0
    rate_limit_sweep_interval_seconds: float = 60.0

    # Simulated identity lookup latency
    identity_check_delay_seconds: float = 0.5

    # CORS configuration - comma-separated list of allowed origins
    # Example: "https://forms.example.com,https://fib.example.com"
    cors_allowed_origins: Optional[str] = None

    # X-Forwarded-For is ignored unless the app runs behind a proxy that sets
    # it. trusted_proxies is a comma-separated list of peer addresses whose
    # header is honoured even when trust_forwarded_for is off.
    trust_forwarded_for: bool = False
    trusted_proxies: Optional[str] = None

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def webhook_enabled(self) -> bool:
        return bool(self.discord_webhook_url and self.discord_webhook_url.strip())

    def get_trusted_proxies(self) -> frozenset[str]:
        if not self.trusted_proxies:
            return frozenset()
        return frozenset(p.strip() for p in self.trusted_proxies.split(",") if p.strip())

    def get_cors_origins(self) -> list[str]:
        """Local form origins plus any from CORS_ALLOWED_ORIGINS, without trailing slashes."""
        origins = ["http://localhost:3000", "http://127.0.0.1:3000"]

        for origin in (self.cors_allowed_origins or "").split(","):
            cleaned = origin.strip().rstrip("/")
            if cleaned and cleaned not in origins:
                origins.append(cleaned)

        return origins


@lru_cache()
def get_settings() -> Settings:
    return Settings()
