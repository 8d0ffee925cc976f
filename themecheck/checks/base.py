from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, Type, TypeVar, Union, get_args

from .context import Context
from ..liquid.nodes import LiquidNode, NodeKind
from ..types import Severity

__all__ = [
    "CheckDefinition",
    "CheckDocs",
    "Handler",
    "Hook",
    "HandlerMap",
    "ON_CODE_PATH_START",
    "ON_CODE_PATH_END",
]

C = TypeVar("C")  # options type of a concrete check

#: Node handler: awaited with the node and a snapshot of its ancestors (outermost first)
Handler = Callable[[LiquidNode, tuple], Awaitable[None]]
#: File hook: awaited with the Document before/after the traversal
Hook = Callable[[LiquidNode], Awaitable[None]]

ON_CODE_PATH_START = "on_code_path_start"
ON_CODE_PATH_END = "on_code_path_end"

HandlerMap = Dict[Union[NodeKind, str], Callable[..., Awaitable[None]]]


@dataclass(frozen=True)
class CheckDocs:
    description: str
    url: Optional[str] = None
    recommended: bool = True


class CheckDefinition(Generic[C]):
    """
    Base class of a check.

    A check is declared once (class attributes) and instantiated once per
    (check, file) with that file's Context. ``create`` returns the handlers
    the visitor should call, keyed by node kind; the two hook names
    ON_CODE_PATH_START / ON_CODE_PATH_END may be used as keys too.

    Options are declared by parametrizing the base with a dataclass:
    ``class MissingTemplate(CheckDefinition[MissingTemplateOptions])``.
    """
    #: Unique identifier used in config files and offenses
    code: str = ""
    #: Human readable name
    name: str = ""
    #: Default severity (config may override)
    severity: Severity = Severity.WARNING
    docs: CheckDocs = CheckDocs(description="")

    def __init__(self, context: Context[C]):
        self.context = context

    # --- options type introspection ----------------------------
    @classmethod
    def options_type(cls) -> Type[C] | None:
        """
        Concrete C from the subclass declaration CheckDefinition[C].
        None if the check is not parametrized with options.
        """
        for kls in cls.__mro__:
            for base in getattr(kls, "__orig_bases__", ()) or ():
                args = get_args(base) or ()
                if args and not isinstance(args[0], TypeVar):
                    return args[0]
        return None

    @classmethod
    def create(cls, context: Context[C]) -> HandlerMap:
        """Handlers of this check for the file of *context*."""
        return cls(context).handlers()

    @property
    def options(self) -> C:
        return self.context.options

    # --- overridable -------------------------------------------
    def handlers(self) -> HandlerMap:
        return {}

    @classmethod
    def describe(cls) -> Dict[str, Any]:
        return {
            "code": cls.code,
            "name": cls.name,
            "severity": cls.severity.name.lower(),
            "description": cls.docs.description,
            "url": cls.docs.url,
            "recommended": cls.docs.recommended,
        }
