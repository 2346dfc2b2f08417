import time
from datetime import datetime, timezone

from feedback_relay.extensions import limiter
from . import bp

# Close enough to process start: the package is imported while the app boots
_STARTED = time.monotonic()


@limiter.exempt
@bp.get("/health")
def health():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "uptime": round(time.monotonic() - _STARTED, 3),
    }, 200
