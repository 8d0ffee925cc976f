"""
Tests for the visitor dispatch engine.
"""

import asyncio
from dataclasses import FrozenInstanceError

import pytest

from themecheck.checks.base import ON_CODE_PATH_END, ON_CODE_PATH_START
from themecheck.liquid import LiquidTag, NodeKind, parse_liquid, walk
from themecheck.visitor import DispatchTable, Visitor

SOURCE = "{% if a.b %}{{ c | upcase }}{% endif %}{% render 'x' %}"


class TestVisitor:

    def setup_method(self):
        self.errors = []
        self.document = parse_liquid(SOURCE)

    def _visitor(self, table):
        return Visitor(table, lambda handler, node, error: self.errors.append((handler.check_code, node.kind, error)))

    @pytest.mark.asyncio
    async def test_visits_every_node_in_pre_order(self):
        seen = []
        table = DispatchTable()
        table.add("All", 0, {kind: (lambda node, ancestors: seen.append(node)) for kind in NodeKind})

        await self._visitor(table).visit(self.document)

        assert seen == list(walk(self.document))

    @pytest.mark.asyncio
    async def test_ancestors_are_outermost_first_and_exclude_node(self):
        chains = {}

        def on_lookup(node, ancestors):
            chains[node.name] = [a.kind for a in ancestors]

        table = DispatchTable()
        table.add("Lookups", 0, {NodeKind.VARIABLE_LOOKUP: on_lookup})
        await self._visitor(table).visit(self.document)

        assert chains["a"] == [NodeKind.DOCUMENT, NodeKind.LIQUID_TAG]
        assert chains["c"] == [
            NodeKind.DOCUMENT,
            NodeKind.LIQUID_TAG,
            NodeKind.LIQUID_BRANCH,
            NodeKind.LIQUID_VARIABLE_OUTPUT,
            NodeKind.LIQUID_VARIABLE,
        ]

    @pytest.mark.asyncio
    async def test_ancestors_are_a_snapshot(self):
        captured = []
        table = DispatchTable()
        table.add("Snap", 0, {"VariableLookup": lambda node, ancestors: captured.append(ancestors)})
        await self._visitor(table).visit(self.document)

        assert all(isinstance(chain, tuple) for chain in captured)
        assert len(captured[0]) == 2

    @pytest.mark.asyncio
    async def test_parent_handlers_complete_before_children(self):
        events = []

        async def on_tag(node, ancestors):
            await asyncio.sleep(0.01)
            events.append(f"tag:{node.name}")

        async def on_lookup(node, ancestors):
            events.append(f"lookup:{node.name}")

        table = DispatchTable()
        table.add("Tags", 0, {NodeKind.LIQUID_TAG: on_tag})
        table.add("Lookups", 1, {NodeKind.VARIABLE_LOOKUP: on_lookup})
        await self._visitor(table).visit(self.document)

        assert events == ["tag:if", "lookup:a", "lookup:c", "tag:render"]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self):
        seen = []

        def boom(node, ancestors):
            raise RuntimeError("boom")

        table = DispatchTable()
        table.add("Broken", 0, {NodeKind.VARIABLE_LOOKUP: boom})
        table.add("Fine", 1, {NodeKind.VARIABLE_LOOKUP: lambda node, ancestors: seen.append(node.name)})
        await self._visitor(table).visit(self.document)

        assert seen == ["a", "c"]
        assert [(code, kind) for code, kind, _ in self.errors] == [
            ("Broken", NodeKind.VARIABLE_LOOKUP),
            ("Broken", NodeKind.VARIABLE_LOOKUP),
        ]
        assert all(isinstance(error, RuntimeError) for _, _, error in self.errors)

    @pytest.mark.asyncio
    async def test_file_hooks_run_around_traversal(self):
        events = []
        table = DispatchTable()
        table.add("Hooks", 0, {
            ON_CODE_PATH_START: lambda root: events.append("start"),
            NodeKind.LIQUID_TAG: lambda node, ancestors: events.append(node.name),
            ON_CODE_PATH_END: lambda root: events.append("end"),
        })
        await self._visitor(table).visit(self.document)

        assert events == ["start", "if", "render", "end"]

    @pytest.mark.asyncio
    async def test_failing_hook_is_reported(self):
        async def broken(root):
            raise KeyError("missing")

        table = DispatchTable()
        table.add("Hooks", 0, {ON_CODE_PATH_END: broken})
        await self._visitor(table).visit(self.document)

        assert [(code, kind) for code, kind, _ in self.errors] == [("Hooks", NodeKind.DOCUMENT)]

    def test_unknown_key_registers_nothing(self):
        table = DispatchTable()
        with pytest.raises(ValueError, match="Unknown node kind"):
            table.add("Bad", 0, {
                NodeKind.LIQUID_TAG: lambda node, ancestors: None,
                "NotAKind": lambda node, ancestors: None,
            })

        assert not table
        assert NodeKind.LIQUID_TAG not in table.handlers

    def test_node_kind_parse_accepts_names_and_values(self):
        assert NodeKind.parse("VariableLookup") is NodeKind.VARIABLE_LOOKUP
        assert NodeKind.parse("VARIABLE_LOOKUP") is NodeKind.VARIABLE_LOOKUP
        assert NodeKind.parse(NodeKind.STRING) is NodeKind.STRING

    @pytest.mark.asyncio
    async def test_handlers_see_frozen_nodes(self):
        seen = []
        table = DispatchTable()
        table.add("Tags", 0, {NodeKind.LIQUID_TAG: lambda node, ancestors: seen.append(node)})
        await self._visitor(table).visit(self.document)

        assert all(isinstance(node, LiquidTag) for node in seen)
        with pytest.raises(FrozenInstanceError):
            seen[0].name = "changed"
