from os import getenv

class Settings:
    DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://teamnest:teamnest@db:5432/teamnest")

    JWT_SECRET = getenv("JWT_SECRET", "dev-secret-change-in-prod")
    JWT_EXPIRE_MIN = int(getenv("JWT_EXPIRE_MIN", "10080"))  # 7 jours

    OTP_EXPIRE_MIN = int(getenv("OTP_EXPIRE_MIN", "10"))

    SENDGRID_API_KEY = getenv("SENDGRID_API_KEY")
    SENDGRID_FROM_EMAIL = getenv("SENDGRID_FROM_EMAIL", "no-reply@teamnest.app")

    CORS_ORIGINS = [o.strip() for o in getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")

settings = Settings()
