from .fingerprint import EXTRA_HTTP_HEADERS, USER_AGENTS, VIEWPORTS, pick_fingerprint
from .pool import DEFAULT_LAUNCH_ARGS, BrowserPool

__all__ = [
    "BrowserPool",
    "DEFAULT_LAUNCH_ARGS",
    "EXTRA_HTTP_HEADERS",
    "USER_AGENTS",
    "VIEWPORTS",
    "pick_fingerprint",
]
