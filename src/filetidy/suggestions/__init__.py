"""Rule-free organization suggestions."""

from .errors import SuggestionProviderError
from .heuristics import (
    SUGGESTION_RULE_ID,
    HeuristicSuggester,
    detect_duplicates,
    is_already_organized,
    match_smart_pattern,
    propose_changes,
    suggest_renames,
    suggestions_to_changes,
)
from .models import (
    DuplicateGroup,
    FolderAnalysis,
    FolderSummary,
    RenameSuggestion,
    SuggestedFolder,
    Suggestion,
    SuggestionBatch,
)
from .providers import (
    BatchedSuggestionProvider,
    FallbackSuggestionProvider,
    ProgressCallback,
    SuggestionProgress,
    SuggestionProvider,
)
from .structure import (
    apply_structure_to_files,
    create_compact_summary,
    generate_heuristic_structure,
    structure_prompt_summary,
)

__all__ = [
    "BatchedSuggestionProvider",
    "DuplicateGroup",
    "FallbackSuggestionProvider",
    "FolderAnalysis",
    "FolderSummary",
    "HeuristicSuggester",
    "ProgressCallback",
    "RenameSuggestion",
    "SUGGESTION_RULE_ID",
    "SuggestedFolder",
    "Suggestion",
    "SuggestionBatch",
    "SuggestionProgress",
    "SuggestionProvider",
    "SuggestionProviderError",
    "apply_structure_to_files",
    "create_compact_summary",
    "detect_duplicates",
    "generate_heuristic_structure",
    "is_already_organized",
    "match_smart_pattern",
    "propose_changes",
    "structure_prompt_summary",
    "suggest_renames",
    "suggestions_to_changes",
]
