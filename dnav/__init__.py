"""D-NAV decision intake: surfaces decision candidates from business documents."""

__version__ = "0.1.0"
