"""
Storage subsystem.

Components:
- backends.py: key -> text collections (SQLite file per collection, in-memory)
- codec.py: entity <-> JSON text
- autosave.py: debounced flush scheduler and timer factories
- entity_store.py: generic keyed JSON-document store built on the three above
"""
