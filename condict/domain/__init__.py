"""
Domain Layer - Core Business Entities

This layer defines the entities the rest of the application works with and
carries no dependency on persistence or UI code.

Modules:
- models: Sound change rules and presets, dictionary words
- exceptions: Domain-specific exceptions
"""
