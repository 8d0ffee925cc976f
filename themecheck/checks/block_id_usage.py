from __future__ import annotations

from typing import Tuple

from .base import CheckDefinition, CheckDocs, HandlerMap
from ..liquid.nodes import Comparison, LiquidNode, LiquidTag, NodeKind, String, VariableLookup
from ..types import Severity

MESSAGE = (
    "The ID is dynamically generated by Shopify and is subject to change. "
    "You should avoid relying on a literal value of this ID."
)


def is_block_id(node: LiquidNode) -> bool:
    """``block.id`` or ``block['id']``"""
    return (
        isinstance(node, VariableLookup)
        and node.name == "block"
        and bool(node.lookups)
        and isinstance(node.lookups[0], String)
        and node.lookups[0].value == "id"
    )


class BlockIdUsage(CheckDefinition):
    """
    Reports logic that depends on the literal value of ``block.id``:
    equality comparisons (``if``/``elsif``/``unless``) and ``case`` subjects.
    """
    code = "BlockIdUsage"
    name = "Avoid depending on block.id values"
    severity = Severity.WARNING
    docs = CheckDocs(
        description="Block IDs are generated by the platform; comparing them against literals breaks silently.",
        url="https://shopify.dev/docs/storefronts/themes/tools/theme-check/checks/block-id-usage",
    )

    def handlers(self) -> HandlerMap:
        return {
            NodeKind.COMPARISON: self.on_comparison,
            NodeKind.VARIABLE_LOOKUP: self.on_variable_lookup,
        }

    async def on_comparison(self, node: Comparison, ancestors: Tuple[LiquidNode, ...]) -> None:
        if node.comparator == "==" and is_block_id(node.left):
            self.context.report(MESSAGE, node.position.start, node.position.end)

    async def on_variable_lookup(self, node: VariableLookup, ancestors: Tuple[LiquidNode, ...]) -> None:
        if not is_block_id(node) or not ancestors:
            return
        parent = ancestors[-1]
        if isinstance(parent, LiquidTag) and parent.name == "case":
            self.context.report(MESSAGE, node.position.start, node.position.end)


__all__ = ["BlockIdUsage", "MESSAGE", "is_block_id"]
