"""
Sound Change Module

The Sound Change Applier: ordered regex rules that evolve words, the rule
editor, saved presets, batch apply and undo history.
"""

from .engine import (
    SoundChangeEngine,
    DEFAULT_RULE_TIMEOUT,
    TEMPLATE_SYNTAX_PYTHON,
    TEMPLATE_SYNTAX_DOLLAR,
    dollar_template_to_host,
    get_default_engine,
    apply,
    apply_to_batch,
)
from .editor import RuleSetEditor
from .presets import (
    PresetStore,
    JsonPresetStore,
    preset_from,
    rules_from_preset,
    export_presets,
    import_presets,
    import_presets_into,
    get_preset_store,
)
from .batch import SoundChangeApplier, BatchApplyResult
from .history import SoundChangeHistory, SoundChangeHistoryEntry

__all__ = [
    # Engine
    'SoundChangeEngine',
    'DEFAULT_RULE_TIMEOUT',
    'TEMPLATE_SYNTAX_PYTHON',
    'TEMPLATE_SYNTAX_DOLLAR',
    'dollar_template_to_host',
    'get_default_engine',
    'apply',
    'apply_to_batch',
    # Editor
    'RuleSetEditor',
    # Presets
    'PresetStore',
    'JsonPresetStore',
    'preset_from',
    'rules_from_preset',
    'export_presets',
    'import_presets',
    'import_presets_into',
    'get_preset_store',
    # Batch
    'SoundChangeApplier',
    'BatchApplyResult',
    # History
    'SoundChangeHistory',
    'SoundChangeHistoryEntry',
]
