from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from .base import CheckDefinition, CheckDocs, HandlerMap
from ..fs import build_ignore_spec
from ..graph.references import reference_from_node
from ..liquid.nodes import LiquidNode, NodeKind
from ..types import Severity


@dataclass
class MissingTemplateOptions:
    #: gitignore-style patterns of targets allowed to be missing ("snippets/icon-*")
    ignore_missing: List[str] = field(default_factory=list)


class MissingTemplate(CheckDefinition[MissingTemplateOptions]):
    """Reports static references to snippets, sections, layouts, blocks or assets that do not exist."""
    code = "MissingTemplate"
    name = "Prevent missing templates"
    severity = Severity.ERROR
    docs = CheckDocs(
        description="Reports references to theme files that do not exist.",
        url="https://shopify.dev/docs/storefronts/themes/tools/theme-check/checks/missing-template",
    )

    def handlers(self) -> HandlerMap:
        if not self.context.has_file_system:
            return {}
        self._ignore = build_ignore_spec(self.options.ignore_missing)
        return {
            NodeKind.LIQUID_TAG: self.on_reference,
            NodeKind.LIQUID_VARIABLE: self.on_reference,
        }

    async def on_reference(self, node: LiquidNode, ancestors: Tuple[LiquidNode, ...]) -> None:
        ref = reference_from_node(node)
        if ref is None or ref.target is None:
            return
        if self._ignore is not None and self._ignore.match_file(ref.target):
            return
        if await self.context.file_exists(ref.target):
            return
        self.context.report(
            f"'{ref.target}' does not exist",
            ref.position.start,
            ref.position.end,
        )


__all__ = ["MissingTemplate", "MissingTemplateOptions"]
