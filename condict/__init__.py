"""
ConDict - Constructed Language Dictionary Manager

A layered application for cataloguing the words of a constructed language,
organising them into libraries and folders, and evolving them with the
Sound Change Applier.

Architecture:
- Application Layer: sound change engine, rule editor, presets, batch apply
- Domain Layer: core entities and exceptions
- Infrastructure Layer: SQLAlchemy persistence for words and presets
"""

__version__ = "1.1.0"
__author__ = "ConDict Team"
__description__ = "Constructed Language Dictionary Manager"
