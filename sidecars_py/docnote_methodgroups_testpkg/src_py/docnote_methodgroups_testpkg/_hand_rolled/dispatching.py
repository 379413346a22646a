"""This contains singledispatch functions for testing implementation
collection and grouping.
"""
from functools import singledispatch
from functools import singledispatchmethod


@singledispatch
def describe(value) -> str:
    """The fallback implementation; this is registered for ``object``.
    """
    return 'object'


@describe.register
def _(value: int) -> str:
    return 'int'


@describe.register(str)
@describe.register(bytes)
def _(value) -> str:
    """This is registered for two types, so it results in two records
    sharing a single defining location.
    """
    return 'text'


class Scaler:

    @singledispatchmethod
    def scale(self, factor) -> str:
        return 'object'

    @scale.register
    def _(self, factor: int) -> str:
        return 'int'

    @scale.register
    def _(self, factor: float) -> str:
        return 'float'
