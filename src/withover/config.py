"""Runtime configuration objects for withover."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal

from sqlalchemy.engine import Engine

FetchFormat = Literal["pandas", "polars", "records"]

_TRUTHY = ("true", "1", "yes", "on")


@dataclass
class EngineConfig:
    """Connection + execution options for SQLAlchemy engines."""

    dsn: str | None = None
    engine: Engine | None = None
    echo: bool = False
    fetch_format: FetchFormat = "records"
    dialect: str | None = None
    query_timeout: float | None = None  # Query execution timeout in seconds
    future: bool = True

    def __post_init__(self) -> None:
        """Validate that either dsn or engine is provided, but not both."""
        if self.dsn is None and self.engine is None:
            raise ValueError("Either 'dsn' or 'engine' must be provided")
        if self.dsn is not None and self.engine is not None:
            raise ValueError(
                "Cannot provide both 'dsn' and 'engine'. Provide either a connection string or an Engine instance."
            )
        if self.fetch_format not in ("pandas", "polars", "records"):
            raise ValueError(
                f"fetch_format must be 'records', 'pandas' or 'polars', got {self.fetch_format!r}"
            )


@dataclass
class WithoverConfig:
    """Container for all runtime configuration knobs."""

    engine: EngineConfig
    options: dict[str, object] = field(default_factory=dict)


def _load_env_config() -> dict[str, object]:
    """Load configuration from environment variables.

    Returns:
        Dictionary of configuration values from environment
    """
    config: dict[str, object] = {}

    # DSN is handled separately in create_config
    if "WITHOVER_ECHO" in os.environ:
        config["echo"] = os.environ["WITHOVER_ECHO"].lower() in _TRUTHY

    if "WITHOVER_FETCH_FORMAT" in os.environ:
        config["fetch_format"] = os.environ["WITHOVER_FETCH_FORMAT"]

    if "WITHOVER_DIALECT" in os.environ:
        config["dialect"] = os.environ["WITHOVER_DIALECT"]

    if "WITHOVER_QUERY_TIMEOUT" in os.environ:
        config["query_timeout"] = float(os.environ["WITHOVER_QUERY_TIMEOUT"])

    return config


def create_config(
    dsn: str | None = None,
    engine: Engine | None = None,
    **kwargs: object,
) -> WithoverConfig:
    """Convenience helper used by ``withover.connect``.

    Supports environment variables for configuration:
    - WITHOVER_DSN: Database connection string
    - WITHOVER_ECHO: Enable SQLAlchemy echo mode (true/false)
    - WITHOVER_FETCH_FORMAT: "records", "pandas", or "polars"
    - WITHOVER_DIALECT: Override SQL dialect detection
    - WITHOVER_QUERY_TIMEOUT: Query execution timeout in seconds

    Args:
        dsn: Database connection string (e.g., "sqlite:///example.db").
             If None, will try WITHOVER_DSN environment variable.
        engine: SQLAlchemy Engine instance to use instead of a connection string.
        **kwargs: Additional configuration options (``echo``, ``fetch_format``,
            ``dialect``, ``query_timeout``, ``future``). Other options are stored
            in ``config.options``.

    Returns:
        WithoverConfig instance with parsed configuration

    Raises:
        ValueError: If neither dsn nor engine is provided and WITHOVER_DSN is not set
        ValueError: If both dsn and engine are provided
    """
    if engine is None:
        if dsn is None:
            dsn = os.environ.get("WITHOVER_DSN")
            if dsn is None:
                raise ValueError(
                    "Either 'dsn' or 'engine' must be provided as argument, or WITHOVER_DSN environment variable must be set"
                )
        # SQLite URLs always use forward slashes, even on Windows
        if dsn.startswith("sqlite:///"):
            dsn = dsn.replace("\\", "/")
    elif dsn is not None:
        raise ValueError(
            "Cannot provide both 'dsn' and 'engine'. Provide either a connection string or an Engine instance."
        )

    # Merge: kwargs override env vars, env vars override defaults
    merged_kwargs = {**_load_env_config(), **kwargs}

    if "dialect" not in merged_kwargs and engine is not None:
        inferred = getattr(getattr(engine, "dialect", None), "name", None)
        if inferred:
            merged_kwargs["dialect"] = inferred.split("+", 1)[0]

    engine_kwargs: dict[str, object] = {
        k: merged_kwargs.pop(k)
        for k in list(merged_kwargs)
        if k in EngineConfig.__dataclass_fields__
    }
    engine_config = EngineConfig(dsn=dsn, engine=engine, **engine_kwargs)  # type: ignore[arg-type]
    return WithoverConfig(engine=engine_config, options=merged_kwargs)
