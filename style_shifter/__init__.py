"""Expression-based theme overrides for style sheets."""

from style_shifter.cascade import CASCADES, CascadeRegistry
from style_shifter.expressions import ExpressionEvaluator, ExpressionSyntaxError
from style_shifter.functions import BUILTIN_FUNCTIONS, FunctionRegistry
from style_shifter.overrides import Override, OverrideStore
from style_shifter.processor import CSSProcessor
from style_shifter.publisher import FilePublisher, MemoryPublisher, block_id_for
from style_shifter.scanner import RuleContext, SubstringRuleScanner
from style_shifter.scoping import SelectorScoper
from style_shifter.sources import HttpStyleSheets, InlineStyleSheets, StyleSheetFetchError
from style_shifter.theme import Theme
from style_shifter.variables import GLOBAL_VARIABLES, VariableStore

__all__ = [
    "BUILTIN_FUNCTIONS",
    "CASCADES",
    "GLOBAL_VARIABLES",
    "CSSProcessor",
    "CascadeRegistry",
    "ExpressionEvaluator",
    "ExpressionSyntaxError",
    "FilePublisher",
    "FunctionRegistry",
    "HttpStyleSheets",
    "InlineStyleSheets",
    "MemoryPublisher",
    "Override",
    "OverrideStore",
    "RuleContext",
    "SelectorScoper",
    "StyleSheetFetchError",
    "SubstringRuleScanner",
    "Theme",
    "VariableStore",
    "block_id_for",
]
