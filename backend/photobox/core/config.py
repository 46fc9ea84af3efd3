import os
from datetime import timedelta


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    MINIO_ENDPOINT: str = os.getenv("MINIO_ENDPOINT", "")
    MINIO_ACCESS_KEY: str = os.getenv("MINIO_ACCESS_KEY", "")
    MINIO_SECRET_KEY: str = os.getenv("MINIO_SECRET_KEY", "")
    MINIO_BUCKET: str = os.getenv("MINIO_BUCKET_NAME", "")
    MINIO_SECURE: bool = os.getenv("MINIO_SECURE", "false").lower() in ("1", "true", "yes")
    MINIO_REGION: str = os.getenv("MINIO_REGION", "us-east-1")
    MINIO_TIMEOUT_SECONDS: float = float(os.getenv("MINIO_TIMEOUT_SECONDS", "30"))

    # Empty means "derive from the incoming request".
    SERVER_URL: str = os.getenv("SERVER_URL", "")
    PORT: int = int(os.getenv("PORT", "4600"))

    LINK_TTL_HOURS: int = int(os.getenv("LINK_TTL_HOURS", "48"))
    SWEEP_INTERVAL_SECONDS: int = int(os.getenv("SWEEP_INTERVAL_SECONDS", "3600"))

    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
    ALLOWED_CONTENT_TYPES: set = set(
        _csv(os.getenv("ALLOWED_CONTENT_TYPES", "image/jpeg,image/png,image/webp"))
    )
    CORS_ORIGINS: list = _csv(
        os.getenv("CORS_ORIGINS", "http://localhost:4601,http://localhost:5173")
    )

    REQUIRED = {
        "MINIO_ENDPOINT": "MINIO_ENDPOINT",
        "MINIO_ACCESS_KEY": "MINIO_ACCESS_KEY",
        "MINIO_SECRET_KEY": "MINIO_SECRET_KEY",
        "MINIO_BUCKET_NAME": "MINIO_BUCKET",
    }

    @property
    def link_ttl(self) -> timedelta:
        return timedelta(hours=self.LINK_TTL_HOURS)

    def missing_required(self) -> list[str]:
        """Names of required environment variables that are not set."""
        return [env for env, attr in self.REQUIRED.items() if not getattr(self, attr)]


settings = Settings()
