"""
Core Module - Application Configuration

Contains core application components:
- config: Configuration management with JSON storage
"""
