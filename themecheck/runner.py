"""
The check pass.

For every Liquid file of the theme: read it, parse it, build the dispatch
table from the handlers of the active checks and visit the tree. Problems
scoped to one file or one check (syntax errors, failing handlers, invalid
check settings) become offenses; only cancellation stops the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type

from .cancellation import CancellationToken
from .checks.base import CheckDefinition
from .checks.context import Context, SourceFile
from .checks.registry import CheckRegistry, default_registry
from .config import ConfigLoadError, ThemeCheckConfig, config_uri, load_config, resolve_settings
from .fs import AbstractFileSystem, build_ignore_spec, ensure_theme_root, paths, walk_files
from .liquid import LiquidParseError, parse_liquid
from .liquid.nodes import LiquidNode
from .offenses import ENGINE_ORDER, OffenseCollector, config_error, internal_error, syntax_error
from .run_context import ActiveCheck, RunContext
from .types import Offense, Position
from .visitor import BoundHandler, DispatchTable, Visitor

logger = logging.getLogger(__name__)

LIQUID_SUFFIXES = (".liquid",)


@dataclass
class CheckResult:
    """Offenses of one run, ordered per file (files by uri)."""
    offenses: List[Offense] = field(default_factory=list)
    #: Files that were checked, in check order
    files: List[str] = field(default_factory=list)

    def by_file(self) -> Dict[str, List[Offense]]:
        grouped: Dict[str, List[Offense]] = {}
        for offense in self.offenses:
            grouped.setdefault(offense.uri, []).append(offense)
        return grouped


def _registry_for(checks: Optional[Sequence[Type[CheckDefinition]]]) -> CheckRegistry:
    if checks is None:
        return default_registry
    registry = CheckRegistry()
    for check in checks:
        registry.register(check)
    return registry


def activate_checks(registry: CheckRegistry, config: ThemeCheckConfig, collector: OffenseCollector) -> List[ActiveCheck]:
    """
    Validate the settings of every registered check.

    A check with invalid settings gets one ConfigError offense and is left
    out of the run; disabled checks are left out silently.
    """
    active: List[ActiveCheck] = []
    for order, definition in enumerate(registry):
        raw = config.checks.get(definition.code)
        try:
            settings = resolve_settings(definition.code, definition.severity, definition.options_type(), raw)
        except ConfigLoadError as e:
            logger.warning("Check %s skipped: invalid configuration: %s", definition.code, e)
            collector.add(config_error(config.uri, f"Invalid configuration for {definition.code}: {e}"), order)
            continue
        if not settings.enabled:
            logger.debug("Check %s disabled by configuration", definition.code)
            continue
        active.append(ActiveCheck(definition=definition, settings=settings, order=order))

    for code in config.checks:
        if code not in registry:
            logger.warning("Unknown check '%s' in %s, ignored", code, config.uri)
    return active


async def check_file(run: RunContext, file: SourceFile) -> None:
    """Run the active checks of *run* over one file."""
    collector = run.collector
    try:
        document = parse_liquid(file.text)
    except LiquidParseError as e:
        logger.debug("Syntax error in %s: %s", file.uri, e)
        collector.add(syntax_error(file.uri, str(e), e.position), ENGINE_ORDER)
        return

    table = DispatchTable()
    for check in run.checks:
        context = Context(
            check_code=check.code,
            severity=check.settings.severity,
            order=check.order,
            file=file,
            options=check.settings.options,
            fs=run.fs,
            root=run.root,
            sink=collector.add,
        )
        try:
            table.add(check.code, check.order, check.definition.create(context))
        except Exception as e:
            logger.warning("Check %s could not start on %s: %r", check.code, file.uri, e)
            collector.add(internal_error(check.code, file.uri, Position(0, 0), e), check.order)

    if not table:
        return

    def on_error(handler: BoundHandler, node: LiquidNode, error: BaseException) -> None:
        collector.add(internal_error(handler.check_code, file.uri, node.position, error), handler.order)

    await Visitor(table, on_error).visit(document)


async def check_theme(
    root: str,
    fs: AbstractFileSystem,
    config: Optional[Mapping[str, Any]] = None,
    checks: Optional[Sequence[Type[CheckDefinition]]] = None,
    cancellation: Optional[CancellationToken] = None,
) -> CheckResult:
    """
    Check every Liquid file of the theme at *root*.

    Args:
        root: Theme root as understood by *fs*
        fs: File system provider
        config: Config mapping used instead of the theme's ``.theme-check.yml``
        checks: Checks to run instead of the built-in ones, in tie-break order
        cancellation: Checked at every file boundary

    Raises:
        ThemeRootNotFoundError: If *root* is not a directory
        RunCancelledError: If the run was cancelled; no partial result is returned
    """
    root = paths.normalize(root)
    await ensure_theme_root(fs, root)
    collector = OffenseCollector()
    run_config = await load_config(fs, root, config)
    if run_config.load_error is not None:
        collector.add(config_error(run_config.uri, run_config.load_error), ENGINE_ORDER)

    registry = _registry_for(checks)
    run = RunContext(
        root=root,
        fs=fs,
        config=run_config,
        collector=collector,
        checks=activate_checks(registry, run_config, collector),
        cancellation=cancellation,
    )
    logger.debug("Check run on %s: %s", root, [c.code for c in run.checks])

    files = await walk_files(fs, root, suffixes=LIQUID_SUFFIXES, ignore=build_ignore_spec(run_config.ignore))
    checked: List[str] = []
    for uri in files:
        run.check_cancelled("check run")
        try:
            text = await fs.read_file(uri)
        except FileNotFoundError:
            logger.warning("Skipping %s: file disappeared", uri)
            continue
        await check_file(run, SourceFile(uri=uri, text=text, relative_path=paths.relative(root, uri)))
        checked.append(uri)

    run.check_cancelled("check run")
    return CheckResult(offenses=collector.offenses(), files=checked)


async def check_source(
    text: str,
    checks: Optional[Sequence[Type[CheckDefinition]]] = None,
    *,
    uri: str = "snippets/source.liquid",
    config: Optional[Mapping[str, Any]] = None,
    fs: Optional[AbstractFileSystem] = None,
    root: str = "",
) -> List[Offense]:
    """
    Check a single in-memory document.

    Without *fs* checks see no theme around the file (cross-file lookups
    report nothing exists and checks that need the theme opt out).
    """
    collector = OffenseCollector()
    run_config = ThemeCheckConfig(uri=config_uri(root))
    if config is not None:
        try:
            run_config = ThemeCheckConfig.from_mapping(config, run_config.uri)
        except ConfigLoadError as e:
            collector.add(config_error(run_config.uri, str(e)), ENGINE_ORDER)

    registry = _registry_for(checks)
    run = RunContext(
        root=paths.normalize(root),
        fs=fs,
        config=run_config,
        collector=collector,
        checks=activate_checks(registry, run_config, collector),
    )
    await check_file(run, SourceFile(uri=uri, text=text, relative_path=paths.relative(root, uri)))
    return collector.offenses()


__all__ = ["CheckResult", "check_theme", "check_source", "check_file", "activate_checks"]
