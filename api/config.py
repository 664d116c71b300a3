"""Service configuration from environment variables."""

import os

REQUEST_TIMEOUT: float = float(os.getenv("GATEWAY_REQUEST_TIMEOUT", "30"))
# Target clusters are often self-signed; certificate checks are off unless asked for.
VERIFY_CERTS: bool = os.getenv("GATEWAY_VERIFY_CERTS", "false").lower() in ("1", "true", "yes")
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///connections.db")
API_HOST: str = os.getenv("GATEWAY_HOST", "127.0.0.1")
API_PORT: int = int(os.getenv("GATEWAY_PORT", "8000"))
