"""
Integration Tests Module

Contains integration tests for component interactions:
- test_database_connection: Engine setup and schema upgrades
- test_database_presets: Presets stored in SQLite
- test_word_repository: Evolving stored words
- test_exporter: Word JSON export and import
- test_cli: Command line workflows
"""
