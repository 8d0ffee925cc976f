"""
Typed loading of raw config values.

Coerces plain YAML data (dicts, lists, scalars) into the option dataclasses
that checks declare, reporting the dotted path of the first offending field.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import sys
import typing as t
from dataclasses import fields, is_dataclass
from enum import Enum
from types import UnionType
from typing import Any, get_args, get_origin

from pydantic import BaseModel, ValidationError

# -------------------- Logging setup --------------------

_LOG = logging.getLogger("themecheck.config.typed")


def _setup_logging_once() -> None:
    if getattr(_setup_logging_once, "_inited", False):
        return
    _setup_logging_once._inited = True  # type: ignore[attr-defined]
    if os.environ.get("THEMECHECK_TYPED_DEBUG"):
        _LOG.setLevel(logging.DEBUG)


_setup_logging_once()

# -------------------- Public error --------------------


class ConfigLoadError(ValueError):
    """Typed loading failed; ``path`` is the dotted path of the offending field."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


# -------------------- Helpers --------------------

def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", str(tp))


def _err(path: str, msg: str) -> ConfigLoadError:
    _LOG.debug("RAISE at %s: %s", path, msg)
    return ConfigLoadError(path, msg)


def _is_base_model(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, BaseModel)


def _strip_annotated(tp: Any) -> Any:
    if get_origin(tp) is t.Annotated:
        args = get_args(tp)
        return args[0] if args else Any
    return tp


def _coerce_literal(val: Any, tp: Any, path: str) -> Any:
    allowed = get_args(tp)
    if val in allowed:
        return val
    raise _err(path, f"expected one of {list(allowed)}, got {val!r}")


def _coerce_enum(val: Any, tp: Any, path: str) -> Any:
    _LOG.debug("Enum at %s: enum=%s, val=%r", path, _type_name(tp), val)
    if isinstance(val, tp):
        return val
    parse = getattr(tp, "parse", None)
    if callable(parse):
        try:
            return parse(val)
        except ValueError as e:
            raise _err(path, str(e)) from None
    if isinstance(val, str) and val in tp.__members__:
        return tp[val]
    try:
        return tp(val)
    except ValueError:
        raise _err(path, f"expected enum {_type_name(tp)}, got {val!r}") from None


def _coerce_union(val: Any, tp: Any, path: str) -> Any:
    variants = get_args(tp)
    errs: list[str] = []
    for sub in variants:
        # NoneType only matches None itself
        if sub is type(None):
            if val is None:
                return None
            continue
        try:
            return load_typed(sub, val, path=path)
        except ConfigLoadError as e:
            errs.append(e.message)
    raise _err(path, " | ".join(errs) or f"no variant of {_type_name(tp)} matched")


def _coerce_mapping(val: Any, tp: Any, path: str) -> Any:
    if not isinstance(val, dict):
        raise _err(path, f"expected mapping, got {type(val).__name__}")
    kt, vt = get_args(tp) or (Any, Any)
    out: dict[Any, Any] = {}
    for k, v in val.items():
        k2 = load_typed(kt, k, path=f"{path}.<key>")
        out[k2] = load_typed(vt, v, path=f"{path}.{k2}")
    return out


def _coerce_sequence(val: Any, tp: Any, path: str) -> Any:
    origin = get_origin(tp)
    # A bare string is a sequence too, but never the one a config means
    if not isinstance(val, (list, tuple, set)):
        raise _err(path, f"expected list, got {type(val).__name__}")
    args = get_args(tp)
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        args = (args[0],)
    (et,) = args or (Any,)
    items = [load_typed(et, v, path=f"{path}[{i}]") for i, v in enumerate(val)]
    if origin is tuple:
        return tuple(items)
    if origin is set:
        return set(items)
    return items


def _resolve_type_hints_for_class(tp: Any) -> dict[str, Any]:
    module = sys.modules.get(tp.__module__)
    gns = dict(vars(module)) if module is not None else {}
    return t.get_type_hints(tp, globalns=gns, include_extras=True)


def _coerce_dataclass(val: Any, tp: Any, path: str) -> Any:
    _LOG.debug("Dataclass at %s: %s", path, _type_name(tp))
    if val is None:
        val = {}
    if not isinstance(val, dict):
        raise _err(path, f"expected mapping for {_type_name(tp)}, got {type(val).__name__}")
    type_hints = _resolve_type_hints_for_class(tp)
    fld_map = {f.name: f for f in fields(tp) if f.init}
    extras = set(val.keys()) - set(fld_map.keys())
    if extras:
        raise _err(path, f"unknown key(s): {sorted(str(k) for k in extras)}")
    kwargs: dict[str, Any] = {}
    for name, f in fld_map.items():
        sub_path = f"{path}.{name}"
        ftype = type_hints.get(name, f.type)
        if name in val:
            kwargs[name] = load_typed(ftype, val[name], path=sub_path)
            continue
        if f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
            continue
        ftype0 = _strip_annotated(ftype)
        if get_origin(ftype0) in (t.Union, UnionType) and type(None) in get_args(ftype0):
            kwargs[name] = None
        else:
            raise _err(sub_path, "required field missing")
    return tp(**kwargs)


def _coerce_pydantic(val: Any, tp: Any, path: str) -> Any:
    try:
        return tp.model_validate(val)
    except ValidationError as e:
        raise _err(path, f"validation error: {e}") from None


# -------------------- Entry point --------------------

def load_typed(tp: Any, val: Any, *, path: str = "$") -> Any:
    """
    Recursively coerce a raw value into the type described by *tp*.

    Supports dataclasses, pydantic models, Literal, Optional/Union, enums,
    dict/list/tuple/set and the primitive scalars.

    Raises:
        ConfigLoadError: With the dotted path of the first field that does not fit
    """
    tp = _strip_annotated(tp)
    origin = get_origin(tp)

    _LOG.debug("load_typed: path=%s, tp=%s, val-type=%s", path, _type_name(tp), type(val).__name__)

    if tp is Any or tp is object:
        return val

    if _is_base_model(tp):
        return _coerce_pydantic(val, tp, path)

    if isinstance(tp, type) and is_dataclass(tp):
        return _coerce_dataclass(val, tp, path)

    if origin is t.Literal:
        return _coerce_literal(val, tp, path)

    if origin in (t.Union, UnionType):
        return _coerce_union(val, tp, path)

    if origin is dict:
        return _coerce_mapping(val, tp, path)
    if origin in (list, tuple, set):
        return _coerce_sequence(val, tp, path)

    if isinstance(tp, type) and issubclass(tp, Enum):
        return _coerce_enum(val, tp, path)

    if tp is type(None):
        if val is None:
            return None
        raise _err(path, f"expected null, got {type(val).__name__}")

    if tp in (str, int, float, bool):
        # bool is an int subclass; `severity: true` must not pass as 1
        if isinstance(val, bool) and tp is not bool:
            raise _err(path, f"expected {_type_name(tp)}, got bool")
        if tp is float and isinstance(val, int):
            return float(val)
        if not isinstance(val, tp):
            raise _err(path, f"expected {_type_name(tp)}, got {type(val).__name__}")
        return val

    raise _err(path, f"unsupported option type {_type_name(tp)}")


__all__ = ["ConfigLoadError", "load_typed"]
