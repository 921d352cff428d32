"""Language server for Vectric Lua gadgets."""

__version__ = "0.3.0"
