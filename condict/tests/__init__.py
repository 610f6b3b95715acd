"""
Tests Module

Contains test suites for all application layers:
- unit: Unit tests for individual components
- integration: Database and command line workflows
"""
