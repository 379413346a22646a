from __future__ import annotations

from typing import Any

from docnote_methodgroups.records import ImplementationRecord
from docnote_methodgroups.signatures import AnyOfSignatures
from docnote_methodgroups.signatures import SignatureClass
from docnote_methodgroups.signatures import SignatureSentinel
from docnote_methodgroups.signatures import SingleSignature
from docnote_methodgroups.sources import ImplementationSource


def collect_implementations(
        source: ImplementationSource,
        func: Any,
        signature_class: SignatureClass,
        ) -> list[ImplementationRecord]:
    """Collects all of the implementations of ``func`` matching the
    signature class. Unions are collected alternative-by-alternative,
    in order, and concatenated; this means the same record can appear
    more than once. That's expected: grouping by location absorbs the
    duplicates.

    ``UnknownCallable`` from the source propagates; no matches is an
    empty list.
    """
    results: list[ImplementationRecord] = []
    _collect_into(results, source, func, signature_class)
    return results


def _collect_into(
        results: list[ImplementationRecord],
        source: ImplementationSource,
        func: Any,
        signature_class: SignatureClass,
        ) -> None:
    if signature_class is SignatureSentinel.MATCH_ALL:
        results.extend(source.all_implementations(func))
    elif isinstance(signature_class, AnyOfSignatures):
        for alternative in signature_class.alternatives:
            _collect_into(results, source, func, alternative)
    elif isinstance(signature_class, SingleSignature):
        results.extend(
            source.implementations_matching(func, signature_class.shape))
    else:
        raise TypeError('Not a signature class!', signature_class)
