from __future__ import annotations

import functools
from typing import Any

from docnote_methodgroups.records import ImplementationRecord
from docnote_methodgroups.records import SourceLocation
from docnote_methodgroups.records import clean_path
from docnote_methodgroups.records import compare_locations
from docnote_methodgroups.records import record_from_callable

from docnote_methodgroups_testpkg._hand_rolled import overloaded


class TestSourceLocation:

    def test_ordering(self):
        """Locations must sort by file first, then numerically by line
        (ie, 3 before 10), ignoring the module entirely.
        """
        locations = [
            SourceLocation(module='z', file='mod/b.py', line=1),
            SourceLocation(module='a', file='mod/a.py', line=10),
            SourceLocation(module='m', file='mod/a.py', line=3),]

        retval = sorted(locations)

        assert [(loc.file, loc.line) for loc in retval] == [
            ('mod/a.py', 3), ('mod/a.py', 10), ('mod/b.py', 1)]

    def test_equality_ignores_module(self):
        assert SourceLocation(module='a', file='f.py', line=1) \
            == SourceLocation(module='b', file='f.py', line=1)

    def test_compare_locations(self):
        first = SourceLocation(module='m', file='a.py', line=3)
        second = SourceLocation(module='m', file='a.py', line=10)
        third = SourceLocation(module='m', file='b.py', line=1)

        assert compare_locations(first, second) == -1
        assert compare_locations(third, second) == 1
        assert compare_locations(first, first) == 0


class TestImplementationRecord:

    def test_comparable_signature_strips_receiver(self):
        record = ImplementationRecord(
            callable_name='Widget.resize',
            file='widget.py',
            line=4,
            module='widgets',
            signature=(Any, int),
            has_receiver=True)

        assert record.comparable_signature == (int,)

    def test_comparable_signature_without_receiver(self):
        record = ImplementationRecord(
            callable_name='combine',
            file='combine.py',
            line=4,
            module='combining',
            signature=(int, int))

        assert record.comparable_signature == (int, int)

    def test_location(self):
        record = ImplementationRecord(
            callable_name='combine',
            file='combine.py',
            line=4,
            module='combining',
            signature=())

        assert record.location == SourceLocation(
            module='combining', file='combine.py', line=4)
        assert record.location.module == 'combining'


class TestRecordFromCallable:

    def test_python_function(self):
        """Records for python functions must take their location from
        the code object, and their module from ``__module__``.
        """
        record = record_from_callable(
            overloaded.plain,
            callable_name='plain',
            signature=(int, str))

        assert record.file == overloaded.plain.__code__.co_filename
        assert record.line == overloaded.plain.__code__.co_firstlineno
        assert record.module == overloaded.__name__
        assert record.params is not None
        assert list(record.params.parameters) == ['a', 'b', 'flag']

    def test_wrapped_function(self):
        """Decorated functions must report the location of the wrapped
        definition, not of the wrapper.
        """
        @functools.wraps(overloaded.plain)
        def wrapper(*args, **kwargs):
            return overloaded.plain(*args, **kwargs)

        record = record_from_callable(
            wrapper, callable_name='plain', signature=())

        assert record.line == overloaded.plain.__code__.co_firstlineno

    def test_builtin(self):
        """Builtins have no code object, so they must get an empty
        file and a zero line instead of failing.
        """
        record = record_from_callable(
            len, callable_name='len', signature=(Any,))

        assert record.file == ''
        assert record.line == 0
        assert record.module == 'builtins'


class TestCleanPath:

    def test_strips_prefix(self):
        retval = clean_path(
            '/venv/lib/site-packages/pkg/mod.py',
            prefixes=['/venv/lib/site-packages'])

        assert retval == 'pkg/mod.py'

    def test_trailing_separator_on_prefix(self):
        retval = clean_path(
            '/venv/lib/site-packages/pkg/mod.py',
            prefixes=['/venv/lib/site-packages/'])

        assert retval == 'pkg/mod.py'

    def test_partial_directory_name_not_stripped(self):
        """A prefix must only match whole directory names."""
        retval = clean_path(
            '/venv/lib/site-packages-old/pkg/mod.py',
            prefixes=['/venv/lib/site-packages'])

        assert retval == '/venv/lib/site-packages-old/pkg/mod.py'

    def test_default_prefixes(self):
        """Paths outside of any installation prefix must be returned
        unchanged when using the default prefixes.
        """
        assert clean_path('relative/mod.py') == 'relative/mod.py'
