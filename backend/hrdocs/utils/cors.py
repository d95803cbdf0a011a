from hrdocs.config import Settings

ALLOWED_METHODS = "POST, DELETE, OPTIONS"
ALLOWED_HEADERS = "authorization, x-client-info, apikey, content-type"
PREFLIGHT_MAX_AGE = "86400"


def cors_headers(settings: Settings, origin: str | None) -> dict[str, str]:
    # Known origins are echoed back; anything else falls back to the wildcard
    allow_origin = origin if origin and origin in settings.allowed_origins else "*"
    headers = {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
    }
    if allow_origin != "*":
        headers["Vary"] = "Origin"
    return headers


def preflight_headers(settings: Settings, origin: str | None) -> dict[str, str]:
    return {**cors_headers(settings, origin), "Access-Control-Max-Age": PREFLIGHT_MAX_AGE}
