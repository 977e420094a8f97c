"""CORS settings for the storage and gallery API.

Browsers calling the API from another origin need the download's
``Content-Disposition`` header exposed to read the filename.
"""

import os
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

DEFAULT_DEV_ORIGINS = "http://localhost:3000,http://localhost:8000"


@dataclass
class CORSConfig:
    """Options passed through to Starlette's CORSMiddleware.

    Attributes:
        allow_origins: Origins allowed to call the API; ``["*"]`` for any
        allow_methods: Methods used by the storage routes
        allow_headers: Request headers a browser may send
        allow_credentials: Whether cookies may accompany requests
        expose_headers: Response headers readable from scripts
        max_age: Seconds a browser may cache a preflight answer
    """

    allow_origins: List[str] = field(default_factory=lambda: ["*"])
    allow_methods: List[str] = field(
        default_factory=lambda: ["GET", "POST", "DELETE", "OPTIONS"]
    )
    allow_headers: List[str] = field(default_factory=lambda: ["*"])
    allow_credentials: bool = True
    expose_headers: List[str] = field(default_factory=lambda: ["Content-Disposition"])
    max_age: int = 600

    @classmethod
    def from_env(
        cls,
        env_prefix: str,
        default_origins: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> "CORSConfig":
        """Build from ``{prefix}_CORS_*`` variables.

        Environment variables:
            {prefix}_CORS_ORIGINS: Comma-separated origins, or ``*``
                (default: the local dev servers on ports 3000 and 8000)
            {prefix}_CORS_CREDENTIALS: ``true`` or ``false`` (default: true)
            {prefix}_CORS_MAX_AGE: Preflight cache seconds (default: 600)
        """
        values = os.environ if env is None else env
        origins = values.get(f"{env_prefix}_CORS_ORIGINS", default_origins or DEFAULT_DEV_ORIGINS)
        credentials = values.get(f"{env_prefix}_CORS_CREDENTIALS", "true")
        max_age = values.get(f"{env_prefix}_CORS_MAX_AGE", "").strip()

        return cls(
            allow_origins=get_cors_origins(origins),
            allow_credentials=credentials.strip().lower() == "true",
            max_age=int(max_age) if max_age.isdigit() else 600,
        )

    @classmethod
    def permissive(cls) -> "CORSConfig":
        """Any origin; for local development and tests."""
        return cls(allow_origins=["*"])


def get_cors_origins(origins_str: str) -> List[str]:
    """Split a comma-separated origin list, keeping a lone ``*`` as-is."""
    if origins_str.strip() == "*":
        return ["*"]
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


def create_cors_middleware(
    app: Any,
    config: Optional[CORSConfig] = None,
) -> Any:
    """Wrap ``app`` in CORSMiddleware (permissive when ``config`` is None)."""
    from starlette.middleware.cors import CORSMiddleware

    if config is None:
        config = CORSConfig.permissive()

    return CORSMiddleware(
        app,
        allow_origins=config.allow_origins,
        allow_credentials=config.allow_credentials,
        allow_methods=config.allow_methods,
        allow_headers=config.allow_headers,
        expose_headers=config.expose_headers,
        max_age=config.max_age,
    )
