from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from types import ModuleType
from typing import Annotated
from typing import Any
from typing import overload

from docnote import Note

from docnote_methodgroups._utils import group_by
from docnote_methodgroups.collection import collect_implementations
from docnote_methodgroups.records import ImplementationRecord
from docnote_methodgroups.records import SourceLocation
from docnote_methodgroups.signatures import SignatureClass
from docnote_methodgroups.signatures import SignatureSentinel
from docnote_methodgroups.signatures import as_signature_class
from docnote_methodgroups.signatures import expand_signatures
from docnote_methodgroups.sources import ImplementationSource

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ImplementationGroup(Sequence[ImplementationRecord]):
    """All of the (filtered) implementations sharing a single defining
    location. Groups are never empty.
    """
    location: SourceLocation
    records: tuple[ImplementationRecord, ...]

    def __post_init__(self):
        if not self.records:
            raise ValueError('Implementation groups cannot be empty!', self)

    @property
    def representative(self) -> ImplementationRecord:
        return self.records[0]

    @overload
    def __getitem__(self, index: int) -> ImplementationRecord: ...
    @overload
    def __getitem__(
            self, index: slice) -> tuple[ImplementationRecord, ...]: ...
    def __getitem__(self, index):
        return self.records[index]

    def __len__(self) -> int:
        return len(self.records)


def method_groups(
        source: ImplementationSource,
        func: Any,
        signature_class: Annotated[
                SignatureClass | Any,
                Note('''Anything accepted by ``as_signature_class``, for
                    example ``tuple[int] | tuple[int, str]``.''')],
        module: Annotated[
                ModuleType | str,
                Note('''Only implementations whose owning module is this one
                    are kept.''')],
        *,
        exact: Annotated[
                bool,
                Note('''If True, implementations must also have a (receiver-
                    stripped) signature that literally appears in the
                    signature class. If False, module alone decides.''')
            ] = True
        ) -> list[ImplementationGroup]:
    """Groups all the implementations of ``func`` by defining location,
    filtered by module (and, if ``exact``, by signature), and sorted by
    location. Empty groups are dropped.

    Raises ``UnknownCallable`` if the source can't resolve ``func``.
    """
    signature_class = as_signature_class(signature_class)
    module_name = module.__name__ if isinstance(module, ModuleType) else module
    records = collect_implementations(source, func, signature_class)
    logger.debug(
        'Collected %s implementation records for %s', len(records), func)

    match_all = signature_class is SignatureSentinel.MATCH_ALL
    shapes = expand_signatures(signature_class)

    groups: list[ImplementationGroup] = []
    for _, members in group_by(
        records, lambda record: record.location.group_key
    ):
        kept = tuple(
            record for record in members
            if record.module == module_name
            and (
                not exact
                or match_all
                or record.comparable_signature in shapes))
        if kept:
            groups.append(ImplementationGroup(kept[0].location, kept))

    groups.sort(key=lambda group: group.representative.location)
    return groups
