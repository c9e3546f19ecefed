import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "cutools-proxy")
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "info").lower()

UPSTREAM_ORIGIN = os.environ.get("UPSTREAM_ORIGIN", "https://cutoolsfree.fun").rstrip(
    "/"
)
UPSTREAM_TIMEOUT = float(os.environ.get("UPSTREAM_TIMEOUT", "15"))
# Used by the bulk test endpoint
UPSTREAM_PROBE_TIMEOUT = float(os.environ.get("UPSTREAM_PROBE_TIMEOUT", "8"))
UPSTREAM_USER_AGENT = os.environ.get(
    "UPSTREAM_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
)
UPSTREAM_ACCEPT_LANGUAGE = os.environ.get(
    "UPSTREAM_ACCEPT_LANGUAGE", "vi-VN,vi;q=0.9,en-US;q=0.8,en;q=0.7"
)

CORS_ORIGINS = [
    o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()
]

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")
