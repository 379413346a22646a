"""This registers an implementation for a singledispatch function
defined in a different module, so that module filtering has something
to filter out.
"""
from docnote_methodgroups_testpkg._hand_rolled.dispatching import describe


@describe.register
def _(value: float) -> str:
    return 'float'
