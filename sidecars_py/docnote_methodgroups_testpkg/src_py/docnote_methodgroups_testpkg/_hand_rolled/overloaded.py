"""This contains ``typing.overload``-decorated functions for testing
overload collection.
"""
from typing import overload


@overload
def combine(a: int, b: int) -> int: ...
@overload
def combine(a: str, b: str) -> str: ...
def combine(a, b):
    return a + b


def plain(a: int, b: str = '', *, flag: bool = False) -> None:
    """Keyword-only parameters must not be part of the shape."""


def unannotated(a, b):
    """Unannotated parameters must show up as ``Any``."""


class Widget:

    @overload
    def resize(self, size: int) -> None: ...
    @overload
    def resize(self, width: int, height: int) -> None: ...
    def resize(self, *args):
        """Overloads on methods include the receiver slot."""

    @staticmethod
    def build(size: int) -> 'Widget':
        return Widget()
