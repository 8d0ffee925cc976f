"""
Tests for the check pass: failure isolation, configuration, ignore
patterns, cancellation and the theme root contract.
"""

import pytest

from themecheck import check_source, check_theme
from themecheck.cancellation import CancellationToken
from themecheck.checks import ON_CODE_PATH_END, BlockIdUsage, CheckDefinition, MissingTemplate
from themecheck.errors import RunCancelledError, ThemeRootNotFoundError
from themecheck.liquid import NodeKind
from themecheck.offenses import CONFIG_ERROR, INTERNAL_ERROR, LIQUID_SYNTAX_ERROR
from themecheck.types import Position, Severity

from tests.infrastructure import codes, highlights


class ExplodesOnRender(CheckDefinition):
    code = "ExplodesOnRender"

    def handlers(self):
        return {NodeKind.LIQUID_TAG: self.on_tag}

    async def on_tag(self, node, ancestors):
        if node.name == "render":
            raise RuntimeError("boom")


class CannotStart(CheckDefinition):
    code = "CannotStart"

    def handlers(self):
        raise RuntimeError("no handlers today")


class ReportsPastEnd(CheckDefinition):
    code = "ReportsPastEnd"

    def handlers(self):
        return {NodeKind.DOCUMENT: self.on_document}

    async def on_document(self, node, ancestors):
        self.context.report("too far", 0, len(self.context.file.text) + 1)


class CountsFiles(CheckDefinition):
    code = "CountsFiles"
    seen = []

    def handlers(self):
        return {ON_CODE_PATH_END: self.on_end}

    async def on_end(self, document):
        CountsFiles.seen.append(self.context.file.relative_path)


class ReadsSibling(CheckDefinition):
    code = "ReadsSibling"

    def handlers(self):
        return {NodeKind.DOCUMENT: self.on_document}

    async def on_document(self, node, ancestors):
        try:
            text = await self.context.read_file("snippets/x.liquid")
        except FileNotFoundError:
            self.context.report("no sibling", 0, 0)
            return
        self.context.report(f"sibling says {text}", 0, 0)


BLOCK_ID_A = "{% render 'x' %}{% if block.id == '1' %}{% endif %}"
BLOCK_ID_B = "{% if block.id == '2' %}{% endif %}"


class TestCheckTheme:

    def setup_method(self):
        CountsFiles.seen = []

    @pytest.mark.asyncio
    async def test_failing_check_does_not_affect_others(self, memory_theme):
        fs = memory_theme({"snippets/a.liquid": BLOCK_ID_A, "snippets/b.liquid": BLOCK_ID_B})
        result = await check_theme("/theme", fs, checks=[ExplodesOnRender, BlockIdUsage])

        grouped = result.by_file()
        a = grouped["/theme/snippets/a.liquid"]
        assert codes(a) == [INTERNAL_ERROR, "BlockIdUsage"]
        assert a[0].position == Position(0, len("{% render 'x' %}"))
        assert "ExplodesOnRender failed: RuntimeError: boom" == a[0].message
        assert highlights(a[1:], BLOCK_ID_A) == ["block.id == '1'"]

        b = grouped["/theme/snippets/b.liquid"]
        assert codes(b) == ["BlockIdUsage"]

    @pytest.mark.asyncio
    async def test_check_that_cannot_start_is_an_internal_error(self, memory_theme):
        fs = memory_theme({"snippets/a.liquid": BLOCK_ID_B})
        result = await check_theme("/theme", fs, checks=[CannotStart, BlockIdUsage])

        assert codes(result.offenses) == [INTERNAL_ERROR, "BlockIdUsage"]
        assert result.offenses[0].position == Position(0, 0)
        assert result.offenses[0].message.startswith("CannotStart failed")

    @pytest.mark.asyncio
    async def test_report_outside_file_is_an_internal_error(self, memory_theme):
        fs = memory_theme({"snippets/a.liquid": "abc"})
        result = await check_theme("/theme", fs, checks=[ReportsPastEnd])

        (offense,) = result.offenses
        assert offense.check_code == INTERNAL_ERROR
        assert "ValueError" in offense.message

    @pytest.mark.asyncio
    async def test_syntax_error_is_reported_and_run_goes_on(self, memory_theme):
        fs = memory_theme({
            "snippets/a.liquid": "ok\n{% if a %}",
            "snippets/b.liquid": BLOCK_ID_B,
        })
        result = await check_theme("/theme", fs, checks=[BlockIdUsage])

        a = result.by_file()["/theme/snippets/a.liquid"]
        assert codes(a) == [LIQUID_SYNTAX_ERROR]
        assert a[0].position == Position(3, 3)
        assert "Unclosed tag 'if'" in a[0].message
        assert codes(result.by_file()["/theme/snippets/b.liquid"]) == ["BlockIdUsage"]

    @pytest.mark.asyncio
    async def test_only_liquid_files_are_checked(self, memory_theme):
        fs = memory_theme({
            "snippets/a.liquid": "",
            "templates/index.json": "{}",
            "assets/app.js": "",
            "layout/theme.liquid": "",
        })
        result = await check_theme("/theme", fs, checks=[CountsFiles])

        assert result.files == ["/theme/layout/theme.liquid", "/theme/snippets/a.liquid"]
        assert CountsFiles.seen == ["layout/theme.liquid", "snippets/a.liquid"]

    @pytest.mark.asyncio
    async def test_default_checks(self, memory_theme):
        source = "{% render 'icon' %}{% render 'gone' %}{% if block.id == 'x' %}{% endif %}"
        fs = memory_theme({"snippets/a.liquid": source, "snippets/icon.liquid": ""})
        result = await check_theme("/theme", fs)

        assert codes(result.offenses) == ["MissingTemplate", "BlockIdUsage"]
        assert highlights(result.offenses, source) == ["'gone'", "block.id == 'x'"]
        assert result.offenses[0].severity is Severity.ERROR

    @pytest.mark.asyncio
    async def test_missing_root(self, memory_theme):
        fs = memory_theme({"snippets/a.liquid": ""})
        with pytest.raises(ThemeRootNotFoundError, match="/elsewhere"):
            await check_theme("/elsewhere", fs)

    @pytest.mark.asyncio
    async def test_root_that_is_a_file(self, memory_theme):
        fs = memory_theme({"snippets/a.liquid": ""})
        with pytest.raises(ThemeRootNotFoundError):
            await check_theme("/theme/snippets/a.liquid", fs)

    @pytest.mark.asyncio
    async def test_disk_theme(self, disk_theme):
        root, fs = disk_theme({
            "sections/header.liquid": """\
                {% render 'logo' %}
                {{ 'header.css' | asset_url | stylesheet_tag }}
            """,
            "assets/header.css": "",
        })
        result = await check_theme(root, fs)

        assert [o.message for o in result.offenses] == ["'snippets/logo.liquid' does not exist"]
        assert result.offenses[0].uri == f"{root}/sections/header.liquid"


class TestConfiguration:

    @pytest.mark.asyncio
    async def test_severity_override(self, memory_theme):
        fs = memory_theme({"snippets/a.liquid": BLOCK_ID_B})
        result = await check_theme("/theme", fs, config={"BlockIdUsage": {"severity": "error"}})

        assert [o.severity for o in result.offenses] == [Severity.ERROR]

    @pytest.mark.asyncio
    async def test_invalid_severity_disables_only_that_check(self, memory_theme):
        fs = memory_theme({"snippets/a.liquid": BLOCK_ID_B + "{% render 'gone' %}"})
        result = await check_theme("/theme", fs, config={"BlockIdUsage": {"severity": "fatal"}})

        assert codes(result.offenses) == [CONFIG_ERROR, "MissingTemplate"]
        config_offense = result.offenses[0]
        assert config_offense.uri == "/theme/.theme-check.yml"
        assert config_offense.message.startswith("Invalid configuration for BlockIdUsage: BlockIdUsage.severity:")

    @pytest.mark.asyncio
    async def test_unknown_option_key(self, memory_theme):
        fs = memory_theme({"snippets/a.liquid": BLOCK_ID_B})
        result = await check_theme("/theme", fs, config={
            "BlockIdUsage": {"colour": "red"},
            "MissingTemplate": {"ignore_missng": []},
        })

        assert codes(result.offenses) == [CONFIG_ERROR, CONFIG_ERROR]
        messages = sorted(o.message for o in result.offenses)
        assert "unknown key(s): ['colour']" in messages[0]
        assert "unknown key(s): ['ignore_missng']" in messages[1]

    @pytest.mark.asyncio
    async def test_unknown_check_code_is_ignored(self, memory_theme):
        fs = memory_theme({"snippets/a.liquid": BLOCK_ID_B})
        result = await check_theme("/theme", fs, config={"NoSuchCheck": {"enabled": False}})

        assert codes(result.offenses) == ["BlockIdUsage"]

    @pytest.mark.asyncio
    async def test_yaml_file_disables_check(self, memory_theme):
        fs = memory_theme({
            ".theme-check.yml": "BlockIdUsage:\n  enabled: false\n",
            "snippets/a.liquid": BLOCK_ID_B,
        })
        result = await check_theme("/theme", fs)

        assert result.offenses == []

    @pytest.mark.asyncio
    async def test_invalid_yaml_falls_back_to_defaults(self, memory_theme):
        fs = memory_theme({
            ".theme-check.yml": "BlockIdUsage: [\n",
            "snippets/a.liquid": BLOCK_ID_B,
        })
        result = await check_theme("/theme", fs)

        assert codes(result.offenses) == [CONFIG_ERROR, "BlockIdUsage"]
        assert result.offenses[0].message.startswith("Invalid YAML")

    @pytest.mark.asyncio
    async def test_ignore_patterns(self, memory_theme):
        fs = memory_theme({
            ".theme-check.yml": "ignore:\n  - snippets/vendor/\n  - '*.skip.liquid'\n",
            "snippets/vendor/lib.liquid": BLOCK_ID_B,
            "snippets/a.skip.liquid": BLOCK_ID_B,
            "snippets/a.liquid": BLOCK_ID_B,
        })
        result = await check_theme("/theme", fs)

        assert result.files == ["/theme/snippets/a.liquid"]
        assert len(result.offenses) == 1

    @pytest.mark.asyncio
    async def test_ignore_must_be_a_list(self, memory_theme):
        fs = memory_theme({"snippets/a.liquid": BLOCK_ID_B})
        result = await check_theme("/theme", fs, config={"ignore": "snippets/*"})

        assert codes(result.offenses) == [CONFIG_ERROR, "BlockIdUsage"]
        assert "ignore" in result.offenses[0].message


class TestCancellation:

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, memory_theme):
        token = CancellationToken()
        token.cancel()
        fs = memory_theme({"snippets/a.liquid": BLOCK_ID_B})

        with pytest.raises(RunCancelledError):
            await check_theme("/theme", fs, cancellation=token)

    @pytest.mark.asyncio
    async def test_cancelled_during_run_returns_nothing(self, memory_theme):
        token = CancellationToken()
        visited = []

        class CancelsAfterFirstFile(CheckDefinition):
            code = "CancelsAfterFirstFile"

            def handlers(self):
                return {ON_CODE_PATH_END: self.on_end}

            async def on_end(self, document):
                visited.append(self.context.file.relative_path)
                token.cancel()

        fs = memory_theme({"snippets/a.liquid": "", "snippets/b.liquid": ""})
        with pytest.raises(RunCancelledError, match="check run"):
            await check_theme("/theme", fs, checks=[CancelsAfterFirstFile], cancellation=token)

        assert visited == ["snippets/a.liquid"]


class TestCheckSource:

    @pytest.mark.asyncio
    async def test_single_document(self):
        source = "{% case block.id %}{% when '1' %}{% endcase %}"
        offenses = await check_source(source, [BlockIdUsage])

        assert highlights(offenses, source) == ["block.id"]
        assert offenses[0].uri == "snippets/source.liquid"

    @pytest.mark.asyncio
    async def test_without_file_system_missing_template_is_silent(self):
        assert await check_source("{% render 'anything' %}", [MissingTemplate]) == []

    @pytest.mark.asyncio
    async def test_with_file_system(self, memory_theme):
        fs = memory_theme({"snippets/here.liquid": ""})
        source = "{% render 'here' %}{% render 'gone' %}"
        offenses = await check_source(source, [MissingTemplate], fs=fs, root="/theme")

        assert highlights(offenses, source) == ["'gone'"]

    @pytest.mark.asyncio
    async def test_config_override(self):
        offenses = await check_source(BLOCK_ID_B, [BlockIdUsage], config={"BlockIdUsage": {"severity": 2}})
        assert [o.severity for o in offenses] == [Severity.INFO]

    @pytest.mark.asyncio
    async def test_context_reads_other_theme_files(self, memory_theme):
        fs = memory_theme({"snippets/x.liquid": "hello"})
        offenses = await check_source("abc", [ReadsSibling], fs=fs, root="/theme")

        assert [o.message for o in offenses] == ["sibling says hello"]

    @pytest.mark.asyncio
    async def test_context_read_of_missing_file(self, memory_theme):
        fs = memory_theme({"snippets/y.liquid": "hello"})
        offenses = await check_source("abc", [ReadsSibling], fs=fs, root="/theme")

        assert [o.message for o in offenses] == ["no sibling"]

    @pytest.mark.asyncio
    async def test_context_read_without_file_system(self):
        offenses = await check_source("abc", [ReadsSibling])
        assert [o.message for o in offenses] == ["no sibling"]
