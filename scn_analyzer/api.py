"""Public analyzer contract consumed by the isolated worker."""

from scn_analyzer.formatter import format_project, is_symbol_visible, symbol_stats
from scn_analyzer.globs import is_included
from scn_analyzer.impact import cost_impact
from scn_analyzer.languages import initialize_parser, is_initialized, language_for_path
from scn_analyzer.models import CodeSymbol, FileContent, LanguageHandle, ProjectAnalysis, SourceFile
from scn_analyzer.project import analyze_project, parse_files_input
from scn_analyzer.samples import DEFAULT_FILES, default_files_json
from scn_analyzer.tokens import count_tokens

__all__ = [
    "CodeSymbol",
    "DEFAULT_FILES",
    "FileContent",
    "LanguageHandle",
    "ProjectAnalysis",
    "SourceFile",
    "analyze_project",
    "cost_impact",
    "count_tokens",
    "default_files_json",
    "format_project",
    "initialize_parser",
    "is_included",
    "is_initialized",
    "is_symbol_visible",
    "language_for_path",
    "parse_files_input",
    "symbol_stats",
]
