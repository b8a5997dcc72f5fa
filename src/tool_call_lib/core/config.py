"""Runtime configuration.

Settings are plain constructor arguments; ``RuntimeConfig.from_env`` additionally
reads them from ``TOOL_CALL_*`` environment variables, loading a ``.env`` file
first if one can be found.
"""

import os
from typing import Any, Dict, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .logger import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "TOOL_CALL_"


class RuntimeConfig(BaseModel):
    """
    Settings for a ``ToolRuntime``.

    Attributes:
        strict: Raise ``ToolRegistrationError`` on failed registrations instead of returning False.
        allow_overwrite: Registering an existing name replaces the previous tool.
        max_concurrency: Default batch size for parallel execution.
        tool_timeout: Per-call timeout in seconds; None waits indefinitely.
        max_extraction_depth: Nesting depth searched for tool calls.
        max_extraction_nodes: Objects/lists visited per parsed document.
        log_level: If set, ``setup_logging`` is called with this level when the runtime starts.
    """

    model_config = ConfigDict(extra="forbid")

    strict: bool = False
    allow_overwrite: bool = True
    max_concurrency: int = Field(default=5, ge=1)
    tool_timeout: Optional[float] = Field(default=None, gt=0)
    max_extraction_depth: int = Field(default=32, ge=1)
    max_extraction_nodes: int = Field(default=10_000, ge=1)
    log_level: Optional[str] = None

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, dotenv_path: Optional[str] = None, **overrides: Any) -> "RuntimeConfig":
        """Build a config from environment variables.

        Args:
            prefix: Prefix of the variables, e.g. ``TOOL_CALL_STRICT=true``.
            dotenv_path: Explicit ``.env`` file. If None, the nearest one is searched for.
            **overrides: Values taking precedence over the environment.

        Returns:
            The validated configuration.
        """
        env_file = dotenv_path or find_dotenv(usecwd=True)
        if env_file:
            logger.debug(f"Loading environment from: {env_file}")
            load_dotenv(env_file, override=False)

        values: Dict[str, Any] = {}
        for field_name in cls.model_fields:
            raw = os.getenv(f"{prefix}{field_name.upper()}")
            if raw is not None and raw != "":
                values[field_name] = raw
        values.update(overrides)
        return cls.model_validate(values)
