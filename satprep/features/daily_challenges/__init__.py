"""
Daily challenge engine.

Each visitor gets three challenges of distinct types per UTC day. Practice
sessions push progress updates; completing all three unlocks a one-time bonus.
Stores are swappable (in-memory or SQL) behind the same interface.
"""
