"""
Unit Tests Module

Contains unit tests for individual components:
- test_sound_change_engine: Rule application and diagnostics
- test_rule_editor: Rule set editing
- test_presets: Preset stores and exchange files
- test_batch: Apply-to-all, cancellation and undo
- test_history: Batch history persistence
- test_config: Configuration and runtime paths
"""
