"""
Application Layer - Business Logic

Modules:
- sound_change: Sound Change Applier engine, rule editor, presets, batch apply
- library_manager: Word exchange (JSON import/export)
"""
