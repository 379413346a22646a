from __future__ import annotations

import inspect
import site
import sysconfig
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from typing import Annotated
from typing import Any

from docnote import Note

from docnote_methodgroups.signatures import Shape


@dataclass(slots=True, frozen=True, order=True)
class SourceLocation:
    """A defining location. Ordering is by file path first (compared
    as strings), and then by line number; the module is carried along
    for source linking, but ignored for both ordering and equality.
    """
    module: str = field(compare=False)
    file: str
    line: int

    @property
    def group_key(self) -> tuple[str, int]:
        return (self.file, self.line)


def compare_locations(a: SourceLocation, b: SourceLocation) -> int:
    """Three-way comparison of two locations: -1 if ``a`` sorts before
    ``b``, 1 if after, and 0 if they're the same defining site.
    """
    if a.group_key < b.group_key:
        return -1
    if a.group_key > b.group_key:
        return 1
    return 0


@dataclass(slots=True, frozen=True)
class ImplementationRecord:
    """One concrete implementation of a callable. These are read from
    an ``ImplementationSource``; they're never created or modified by
    the grouping pipeline itself.
    """
    callable_name: Annotated[
        str,
        Note('The qualified name of the callable this implements.')]
    file: str
    line: Annotated[
        int,
        Note('''The first line of the definition. This is 0 when the
            source location is unknown, for example for builtins.''')]
    module: Annotated[
        str,
        Note('The ``__module__`` of the implementation.')]
    signature: Annotated[
        Shape,
        Note('''The parameter types, as declared. If ``has_receiver`` is
            set, the first of these is the receiver slot.''')]
    has_receiver: bool = False
    params: Annotated[
            inspect.Signature | None,
            Note('''Opaque parameter metadata, for use by formatters. This
                is excluded from comparisons.''')
        ] = field(default=None, compare=False)

    @property
    def comparable_signature(self) -> Shape:
        """The signature with the receiver slot (if any) stripped, ie,
        the part of the signature that can be compared against a
        ``SignatureClass``.
        """
        if self.has_receiver:
            return self.signature[1:]
        return self.signature

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(
            module=self.module,
            file=self.file,
            line=self.line)


def record_from_callable(
        implementation: Any,
        *,
        callable_name: str,
        signature: Shape,
        has_receiver: bool = False,
        ) -> ImplementationRecord:
    """Creates a record for a python-level implementation, reading its
    location from the code object (where available).
    """
    # Unwrap decorators (ex functools.wraps) so that we get the location
    # of the actual definition, and not the wrapper
    unwrapped = inspect.unwrap(implementation)
    code = getattr(unwrapped, '__code__', None)
    if code is None:
        file = ''
        line = 0
    else:
        file = code.co_filename
        line = code.co_firstlineno

    try:
        params = inspect.signature(unwrapped)
    except (TypeError, ValueError):
        params = None

    return ImplementationRecord(
        callable_name=callable_name,
        file=file,
        line=line,
        module=getattr(unwrapped, '__module__', None) or '',
        signature=signature,
        has_receiver=has_receiver,
        params=params)


def _default_install_prefixes() -> list[str]:
    prefixes = {
        sysconfig.get_paths()['purelib'],
        sysconfig.get_paths()['platlib'],
        *site.getsitepackages()}
    if site.ENABLE_USER_SITE:
        prefixes.add(site.getusersitepackages())
    # Longest first, so that nested prefixes win
    return sorted(prefixes, key=len, reverse=True)


def clean_path(path: str, prefixes: Sequence[str] | None = None) -> str:
    """Removes the installation prefix (by default, any of the
    site-packages directories) from ``path``, if it has one, for
    display purposes. Paths outside of all prefixes are returned
    unchanged.
    """
    if prefixes is None:
        prefixes = _default_install_prefixes()

    for prefix in prefixes:
        prefix = prefix.rstrip('/\\')
        if not prefix:
            continue
        for separator in ('/', '\\'):
            if path.startswith(prefix + separator):
                return path[len(prefix) + 1:]

    return path
