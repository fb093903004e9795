"""
Nostr Event Restore Service test suite.

This package contains:
- unit/: Unit tests (no database or network)
- integration/: HTTP routes end to end with fake archive and relays
"""
