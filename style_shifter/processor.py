"""Theme override processing.

``CSSProcessor`` scans style sheets for ``/*![expression]*/`` markers,
resolves each expression against a theme and publishes one override style
block per namespace::

    processor = CSSProcessor("demo", sources=InlineStyleSheets({"app.css": css}))
    processor.add_theme(Theme("demo", "dark", {"bg": "#000"}))
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from style_shifter.expressions import ExpressionEvaluator
from style_shifter.functions import FunctionRegistry, ThemeFunction
from style_shifter.logger import get_logger
from style_shifter.overrides import Override, OverrideStore
from style_shifter.publisher import MemoryPublisher, StylePublisher, block_id_for
from style_shifter.scanner import RuleScanner, SubstringRuleScanner
from style_shifter.scoping import SelectorScoper, custom_scope
from style_shifter.sources import InlineStyleSheets, StyleSheetFetchError, StyleSheetSource
from style_shifter.theme import Theme
from style_shifter.variables import GLOBAL_VARIABLES, VariableScopes, VariableStore

logger = get_logger(__name__)

OverrideProcessor = Callable[[Theme, Override], str | None]


class CSSProcessor:
    """Builds and publishes theme-scoped overrides for one namespace.

    Overrides accumulate across every theme added to the same processor.
    For a given scoped rule and property the first override recorded wins.
    """

    def __init__(
        self,
        namespace: str,
        preprocessors: Iterable[OverrideProcessor] = (),
        postprocessors: Iterable[OverrideProcessor] = (),
        *,
        sources: StyleSheetSource | None = None,
        publisher: StylePublisher | None = None,
        global_variables: VariableStore | None = None,
        scanner: RuleScanner | None = None,
    ) -> None:
        """Initialize the processor.

        Args:
            namespace: First segment of every property path this processor answers.
            preprocessors: Hooks run on each new override, first; a non-None
                return replaces the override value.
            postprocessors: Hooks run after the preprocessors, same contract.
            sources: Where style sheets come from.
            publisher: Where the synthesized block goes.
            global_variables: Store shared with other processors; defaults to
                the process-wide store.
            scanner: Marker and rule locator.
        """
        self.namespace = namespace
        self.preprocessors: list[OverrideProcessor] = list(preprocessors)
        self.postprocessors: list[OverrideProcessor] = list(postprocessors)
        self.sources: StyleSheetSource = sources if sources is not None else InlineStyleSheets()
        self.publisher: StylePublisher = publisher if publisher is not None else MemoryPublisher()
        self.scanner: RuleScanner = scanner if scanner is not None else SubstringRuleScanner()
        self.variables = VariableScopes(shared=global_variables if global_variables is not None else GLOBAL_VARIABLES)
        self.scoper = SelectorScoper()
        self.overrides = OverrideStore()
        self._scanned_themes: set[str] = set()

        self.functions = FunctionRegistry()
        self.functions.register("local", self._local)
        self.functions.register("global", self._global)
        self.functions.register("setRuleScope", self._set_rule_scope)
        self.evaluator = ExpressionEvaluator(self.functions, self.variables, self.scanner.extract_value)

    @property
    def block_id(self) -> str:
        """Identifier of the style block this processor publishes."""
        return block_id_for(self.namespace)

    def register_function(self, name: str, fn: ThemeFunction) -> None:
        """Register a marker function, replacing any function of that name.

        Args:
            name: Name used in marker expressions.
            fn: Callable taking (expression, theme, source, position, args).
        """
        self.functions.register(name, fn)

    def add_theme(self, theme: Theme) -> None:
        """Scan every style sheet for a theme and publish the overrides.

        A theme already scanned by this processor is not scanned again, but
        the accumulated overrides are still republished.

        Args:
            theme: Theme to add.
        """
        if theme.name in self._scanned_themes:
            logger.debug(f"Theme {theme.name} already scanned for namespace {self.namespace}")
        else:
            recorded = 0
            for href in self.sources.hrefs():
                text = self._fetch(href)
                if text:
                    recorded += self.scan(text, theme)
            self._scanned_themes.add(theme.name)
            logger.info(f"Scanned theme {theme.name} for namespace {self.namespace}: {recorded} overrides")

        if len(self.overrides) > 0:
            self.publisher.publish(self.block_id, self.synthesize(theme))

    def has_scanned(self, theme_name: str) -> bool:
        """Check whether a theme has already been scanned."""
        return theme_name in self._scanned_themes

    def scan(self, source: str, theme: Theme) -> int:
        """Record overrides for every marker in one style sheet.

        Args:
            source: Style-sheet text.
            theme: Theme the markers are resolved against.

        Returns:
            Number of overrides recorded.
        """
        recorded = 0
        for marker in self.scanner.find_markers(source):
            value = self.evaluator.evaluate(marker.expression, theme, source, marker.start)
            if value is None:
                continue
            context = self.scanner.rule_context(source, marker.start)
            if not context.is_valid:
                logger.debug(f"Marker {marker.expression!r} at {marker.start} is not attached to a declaration")
                continue
            override = Override(
                rule=self.scoper.scope(context.rule_name, theme.name),
                prop=context.prop,
                value=value,
                key=marker.key,
                important=context.important,
            )
            self._run_hooks(theme, override)
            self.overrides.record(override)
            recorded += 1
        return recorded

    def evaluate_expression(self, expression: str, theme: Theme, source: str = "", position: int = 0) -> str | None:
        """Resolve one marker expression.

        Args:
            expression: Marker expression text.
            theme: Active theme.
            source: Style-sheet text the marker came from.
            position: Offset of the marker in ``source``.

        Returns:
            The resolved text, or None for "no result".
        """
        return self.evaluator.evaluate(expression, theme, source, position)

    def extract_value(self, source: str, position: int) -> str | None:
        """Read the original declaration value following the marker at ``position``."""
        return self.scanner.extract_value(source, position)

    def synthesize(self, theme: Theme | None = None) -> str:
        """Render the accumulated overrides.

        Args:
            theme: Theme whose fonts are rendered as ``@font-face`` blocks.

        Returns:
            The override style sheet.
        """
        return self.overrides.synthesize(theme.get_fonts() if theme is not None else None)

    def _fetch(self, href: str) -> str | None:
        try:
            return self.sources.fetch(href)
        except StyleSheetFetchError as exc:
            logger.warning(f"Skipping style sheet: {exc}")
        except Exception:
            logger.exception(f"Unexpected error fetching style sheet {href}")
        return None

    def _run_hooks(self, theme: Theme, override: Override) -> None:
        for hook in (*self.preprocessors, *self.postprocessors):
            try:
                result = hook(theme, override)
            except Exception:
                logger.exception(f"Override hook failed for {override.rule} {override.prop}")
                continue
            if result is not None:
                override.value = result

    def _local(self, expression: str, theme: Theme, source: str, position: int, args: list[object]) -> object | None:
        return _access_store(self.variables.local, args)

    def _global(self, expression: str, theme: Theme, source: str, position: int, args: list[object]) -> object | None:
        return _access_store(self.variables.shared, args)

    def _set_rule_scope(
        self, expression: str, theme: Theme, source: str, position: int, args: list[object]
    ) -> object | None:
        if not args or args[0] is None:
            return None
        rule_name = self.scanner.rule_name_at(source, position)
        if not rule_name:
            return None
        mode = str(args[1]) if len(args) > 1 and args[1] is not None else None
        scoped = custom_scope(rule_name, str(args[0]), theme.name, mode)
        if scoped is not None:
            self.scoper.register(theme.name, rule_name, scoped)
        return None


def _access_store(store: VariableStore, args: list[object]) -> object | None:
    """Read a variable with one argument, write it with two.

    Reads of unset variables give an empty string; writes give no result.
    """
    if len(args) == 1:
        return store.get(str(args[0]), "")
    if len(args) == 2:
        store.set(str(args[0]), args[1])
    return None
