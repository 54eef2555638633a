"""Symbol table for the math language: maps identifier names to handles (stable indices) and holds the current value
of every handle. Single-owner, so there is no locking.
"""

import math
from dataclasses import dataclass

from mathlang.lang.error import DuplicateDeclaration, UndeclaredIdentifier


STDLIB = {"pi": math.pi, "e": math.e}


@dataclass
class Symbol:
    name: str
    value: float = 0.0


class SymbolTable:
    """Arena of Symbols; a handle is the index of its Symbol. Handles stay valid until truncate drops them."""

    def __init__(self):
        self.symbols = []
        self.handles = {}  # dict of name: handle, insertion-ordered

    def insert(self, name, value=0.0):
        """Inserts name with value and returns its new handle. Raises DuplicateDeclaration if name exists."""
        if name in self.handles:
            raise DuplicateDeclaration(name)

        handle = len(self.symbols)
        self.symbols.append(Symbol(name, float(value)))
        self.handles[name] = handle
        return handle

    def find(self, name):
        """Returns handle of name. Raises UndeclaredIdentifier if name was never inserted."""
        try:
            return self.handles[name]
        except KeyError:
            raise UndeclaredIdentifier(name) from None

    def get_value(self, handle):
        return self.symbols[handle].value

    def set_value(self, handle, value):
        self.symbols[handle].value = float(value)

    def get_name(self, handle):
        return self.symbols[handle].name

    def truncate(self, length):
        """Forgets every symbol inserted after the first length, so their names can be declared again."""
        for symbol in self.symbols[length:]:
            del self.handles[symbol.name]
        del self.symbols[length:]

    def iter(self):
        """Yields (name, value) pairs in insertion order."""
        for symbol in self.symbols:
            yield symbol.name, symbol.value

    def __iter__(self):
        return self.iter()

    def __len__(self):
        return len(self.symbols)

    def __contains__(self, name):
        return name in self.handles

    def __repr__(self):
        return f"SymbolTable({dict(self.iter())})"


def load_stdlib(table):
    """Standard library initialization: binds pi and e in table. Called on every fresh session table."""
    for name, value in STDLIB.items():
        table.insert(name, value)
    return table
