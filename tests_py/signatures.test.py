from __future__ import annotations

from typing import Any
from typing import Never
from typing import Union

import pytest

from docnote_methodgroups.signatures import AnyOfSignatures
from docnote_methodgroups.signatures import SignatureSentinel
from docnote_methodgroups.signatures import SingleSignature
from docnote_methodgroups.signatures import as_signature_class
from docnote_methodgroups.signatures import expand_signatures
from docnote_methodgroups.signatures import is_subshape
from docnote_methodgroups.signatures import signature_matches


class TestAsSignatureClass:

    def test_tuple_alias(self):
        assert as_signature_class(tuple[int, str]) == SingleSignature(
            (int, str))

    def test_empty_tuple_alias(self):
        assert as_signature_class(tuple[()]) == SingleSignature(())

    def test_plain_tuple(self):
        assert as_signature_class((int, str)) == SingleSignature((int, str))

    def test_union_of_tuples(self):
        """Unions of tuple aliases must become unions of signatures,
        for both the ``|`` syntax and ``typing.Union``.
        """
        expected = AnyOfSignatures((
            SingleSignature((int,)),
            SingleSignature((int, str)),))

        assert as_signature_class(tuple[int] | tuple[int, str]) == expected
        assert as_signature_class(
            Union[tuple[int], tuple[int, str]]) == expected  # noqa: UP007

    def test_union_of_plain_types(self):
        """A union of non-tuple types is a single parameter whose type
        is the union, not a union of signatures.
        """
        retval = as_signature_class(int | str)

        assert retval == SingleSignature((int | str,))

    @pytest.mark.parametrize('empty', [None, Never, SignatureSentinel.MATCH_ALL])
    def test_match_all(self, empty):
        assert as_signature_class(empty) is SignatureSentinel.MATCH_ALL

    def test_bare_type(self):
        assert as_signature_class(int) == SingleSignature((int,))

    def test_passthrough(self):
        signature_class = SingleSignature((int,))
        assert as_signature_class(signature_class) is signature_class

    def test_variadic_tuple(self):
        with pytest.raises(TypeError):
            as_signature_class(tuple[int, ...])


class TestAnyOfSignatures:

    def test_rejects_non_signatures(self):
        with pytest.raises(TypeError):
            AnyOfSignatures((SingleSignature((int,)), (str,)))  # type: ignore


class TestExpandSignatures:

    def test_single(self):
        assert expand_signatures(SingleSignature((int,))) == ((int,),)

    def test_union_flattened_and_deduplicated(self):
        """Nested unions must be flattened, keeping the first-seen
        order and dropping duplicates.
        """
        signature_class = AnyOfSignatures((
            SingleSignature((int,)),
            AnyOfSignatures((
                SingleSignature((str,)),
                SingleSignature((int,)),)),
            SingleSignature((bytes, bytes)),))

        assert expand_signatures(signature_class) == (
            (int,), (str,), (bytes, bytes))

    def test_match_all(self):
        assert expand_signatures(SignatureSentinel.MATCH_ALL) == ()

    def test_not_a_signature_class(self):
        with pytest.raises(TypeError):
            expand_signatures((int,))  # type: ignore


class TestSignatureMatches:

    def test_exact_member(self):
        signature_class = as_signature_class(tuple[int] | tuple[str])

        assert signature_matches((str,), signature_class, exact=True)

    def test_exact_requires_equality(self):
        """Exact matching must not accept subtypes."""
        signature_class = as_signature_class(tuple[int])

        assert not signature_matches((bool,), signature_class, exact=True)

    def test_loose_accepts_anything(self):
        signature_class = as_signature_class(tuple[int])

        assert signature_matches((bytes, bytes), signature_class, exact=False)

    @pytest.mark.parametrize('exact', [True, False])
    def test_match_all(self, exact):
        assert signature_matches(
            (object, int), SignatureSentinel.MATCH_ALL, exact=exact)


class TestIsSubshape:

    def test_subclasses(self):
        assert is_subshape((bool, int), (int, object))

    def test_arity_mismatch(self):
        assert not is_subshape((int,), (int, int))

    def test_any(self):
        assert is_subshape((bytes,), (Any,))

    def test_declared_union(self):
        assert is_subshape((str,), (int | str,))
        assert not is_subshape((bytes,), (int | str,))

    def test_query_union(self):
        """A union query only fits if every member fits."""
        assert is_subshape((bool | int,), (int,))
        assert not is_subshape((int | str,), (int,))

    def test_none(self):
        assert is_subshape((None,), (int | None,))

    def test_parameterized_generics(self):
        """Parameterized generics are compared by their origin only."""
        assert is_subshape((list[int],), (list[str],))
        assert not is_subshape((list[int],), (dict[str, int],))

    def test_unrelated(self):
        assert not is_subshape((str,), (int,))
