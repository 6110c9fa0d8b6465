# accounts/config.py
import os
from pydantic import BaseModel, ConfigDict
from dotenv import load_dotenv


class ConfigError(RuntimeError):
    """Raised at startup when a required setting is absent."""


# Env var -> Settings field, for the values the service cannot start without
REQUIRED_ENV = {
    "DATABASE_URL": "database_url",
    "DATABASE_KEY": "database_key",
    "JWT_SECRET": "jwt_secret",
}


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "User Accounts API"

    # Datastore: connection URL plus the access key (password) for it
    database_url: str
    database_key: str
    # Create the users table on startup (development convenience)
    generate_schemas: bool = False

    # Token signing
    jwt_secret: str
    access_token_expire_minutes: int = 60

    # Host & Port settings
    host: str = "0.0.0.0"
    port: int = 5000

    # Allowed CORS origin ("*" = any)
    cors_origin: str = "*"

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from the process environment (and a .env file if present).

        Raises:
            ConfigError: If DATABASE_URL, DATABASE_KEY or JWT_SECRET is missing.
        """
        load_dotenv()  # Load environment variables from .env file
        missing = [name for name in REQUIRED_ENV if not os.getenv(name)]
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

        return cls(
            database_url=os.environ["DATABASE_URL"],
            database_key=os.environ["DATABASE_KEY"],
            generate_schemas=os.getenv("DB_GENERATE_SCHEMAS", "false").lower() in ("true", "1", "yes"),
            jwt_secret=os.environ["JWT_SECRET"],
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            cors_origin=os.getenv("CORS_ORIGIN", "*"),
        )
