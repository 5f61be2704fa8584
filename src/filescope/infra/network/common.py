from __future__ import annotations

USER_AGENT = "Filescope-Client/0.1.0"
DEFAULT_TIMEOUT = 60
API_KEY_ENV = "FILESCOPE_API_KEY"
