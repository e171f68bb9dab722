"""Console configuration for fleetvision."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from fleetvision._constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MODEL,
    DEFAULT_REMEMBER_ME_NAMESPACE,
    DEFAULT_REQUEST_TIMEOUT,
)

_ENV_TEXT_FIELDS: tuple[tuple[str, str], ...] = (
    ("FLEETVISION_BASE_URL", "base_url"),
    ("FLEETVISION_MODEL", "model"),
    ("FLEETVISION_REMEMBER_ME_NAMESPACE", "remember_me_namespace"),
)


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class FleetVisionConfig:
    """Console configuration.

    Parameters
    ----------
    api_key : str or None
        Credential for the recognition provider.  May be left empty;
        operations that need recognition then fail with
        :class:`~fleetvision.exceptions.RecognitionConfigError`.
    base_url : str
        Provider root URL.
    model : str
        Provider model used for image understanding.
    request_timeout : float
        Total seconds allowed for one recognition request.  Expiry is
        reported as a transport error.
    api_trace_enabled : bool
        Log redacted request/response bodies at DEBUG level.
    remember_me_namespace : str
        Fixed key namespace for the "remember me" e-mail hint.
    """

    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    api_trace_enabled: bool = False
    remember_me_namespace: str = DEFAULT_REMEMBER_ME_NAMESPACE

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @classmethod
    def from_env(cls, **overrides: Any) -> FleetVisionConfig:
        """Build a configuration from ``FLEETVISION_*`` environment variables.

        The API key is read from ``FLEETVISION_API_KEY`` and, when that is
        unset, from the generic ``API_KEY``. Keyword arguments win over
        anything found in the environment.

        Parameters
        ----------
        **overrides
            Field values applied last.

        Returns
        -------
        FleetVisionConfig
            Populated configuration.

        Raises
        ------
        ValueError
            If ``FLEETVISION_REQUEST_TIMEOUT`` is not a number.
        """
        env = os.environ
        values: dict[str, Any] = {}

        api_key = env.get("FLEETVISION_API_KEY") or env.get("API_KEY")
        if api_key is not None:
            values["api_key"] = api_key

        for env_key, field_name in _ENV_TEXT_FIELDS:
            if env_key in env:
                values[field_name] = env[env_key]

        raw_timeout = env.get("FLEETVISION_REQUEST_TIMEOUT")
        if raw_timeout is not None:
            values["request_timeout"] = float(raw_timeout)

        values["api_trace_enabled"] = _env_bool(env.get("FLEETVISION_API_TRACE_ENABLED"), False)

        values.update(overrides)
        return cls(**values)
