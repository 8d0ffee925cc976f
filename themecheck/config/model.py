from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .typed import ConfigLoadError, load_typed
from ..types import Severity


@dataclass(frozen=True)
class CheckSettings:
    """Effective settings of one check for one run."""
    enabled: bool
    severity: Severity
    options: Any = None


@dataclass
class ThemeCheckConfig:
    """
    Raw run configuration.

    ``checks`` keeps the unvalidated mapping per check code: a check's
    settings are validated against its own options type when the run
    activates it, so one bad entry disables one check, not the run.
    """
    uri: str
    ignore: List[str] = field(default_factory=list)
    checks: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    #: Error of the config file as a whole (syntax, shape); the run uses defaults
    load_error: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], uri: str) -> "ThemeCheckConfig":
        """
        Split a top-level config mapping into ignore patterns and check entries.

        Raises:
            ConfigLoadError: If ``ignore`` is not a list of strings or a check
                entry is not a mapping
        """
        data = dict(data)
        ignore = load_typed(List[str], data.pop("ignore", []) or [], path="ignore")
        checks: Dict[str, Dict[str, Any]] = {}
        for code, entry in data.items():
            if entry is None:
                entry = {}
            if not isinstance(entry, dict):
                raise ConfigLoadError(str(code), f"expected mapping, got {type(entry).__name__}")
            checks[str(code)] = entry
        return cls(uri=uri, ignore=ignore, checks=checks)


def resolve_settings(
    code: str,
    default_severity: Severity,
    options_type: Any,
    raw: Optional[Mapping[str, Any]],
) -> CheckSettings:
    """
    Validate the raw entry of one check.

    Args:
        code: Check code (used for error paths)
        default_severity: Severity used when the entry does not override it
        options_type: Options dataclass of the check (None if it takes no options)
        raw: Entry from the config file, or None

    Raises:
        ConfigLoadError: On an invalid value or an unknown key
    """
    raw = dict(raw or {})
    enabled = load_typed(bool, raw.pop("enabled", True), path=f"{code}.enabled")

    severity = default_severity
    if "severity" in raw:
        severity = load_typed(Severity, raw.pop("severity"), path=f"{code}.severity")

    if options_type is None:
        if raw:
            raise ConfigLoadError(code, f"unknown key(s): {sorted(raw)}")
        options = None
    else:
        options = load_typed(options_type, raw, path=code)

    return CheckSettings(enabled=enabled, severity=severity, options=options)


__all__ = ["CheckSettings", "ThemeCheckConfig", "resolve_settings"]
