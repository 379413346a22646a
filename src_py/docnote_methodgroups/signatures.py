from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import NoneType
from types import UnionType
from typing import Annotated
from typing import Any
from typing import Literal
from typing import Never
from typing import NoReturn
from typing import Union
from typing import get_args as get_type_args
from typing import get_origin

from docnote import Note

logger = logging.getLogger(__name__)

type Shape = tuple[Any, ...]


class SignatureSentinel(Enum):
    MATCH_ALL = 'match_all'


@dataclass(slots=True, frozen=True)
class SingleSignature:
    """A single parameter shape, ie, the tuple of parameter types of
    one concrete overload.
    """
    shape: Annotated[
        Shape,
        Note('''The positional parameter types, **excluding** any receiver
            (``self`` or ``cls``) slot.''')]


@dataclass(slots=True, frozen=True)
class AnyOfSignatures:
    """A union of alternative signatures. Matching is satisfied by any
    one of the alternatives; collection visits them in order.
    """
    alternatives: tuple[SingleSignature | AnyOfSignatures, ...]

    def __post_init__(self):
        for alternative in self.alternatives:
            if not isinstance(alternative, (SingleSignature, AnyOfSignatures)):
                raise TypeError(
                    'Union alternatives must themselves be signatures!',
                    alternative)


type SignatureClass = (
    SingleSignature
    | AnyOfSignatures
    | Literal[SignatureSentinel.MATCH_ALL])


def as_signature_class(obj: Any) -> SignatureClass:
    """Converts the passed object into a ``SignatureClass``. This
    accepts (in addition to existing signature classes):
    ++  ``None``, ``Never`` and ``NoReturn``, which are all treated as
        the empty union, and therefore match everything
    ++  ``tuple[A, B]`` aliases and plain tuples of types, which become
        single signatures
    ++  unions of tuple aliases, eg ``tuple[int] | tuple[str, str]``,
        which become ``AnyOfSignatures``
    ++  anything else (including unions of plain types, ex
        ``int | str``), which is treated as a single-parameter shape
    """
    if isinstance(obj, (SingleSignature, AnyOfSignatures)):
        return obj
    if obj is SignatureSentinel.MATCH_ALL:
        return obj
    if obj is None or obj is Never or obj is NoReturn:
        return SignatureSentinel.MATCH_ALL
    if isinstance(obj, tuple):
        return SingleSignature(obj)

    origin = get_origin(obj)
    if origin is tuple:
        args = get_type_args(obj)
        if Ellipsis in args:
            raise TypeError(
                'Variadic tuple types cannot be used as signatures!', obj)
        return SingleSignature(args)

    if origin is Union or origin is UnionType:
        members = get_type_args(obj)
        if all(get_origin(member) is tuple for member in members):
            return AnyOfSignatures(
                tuple(as_signature_class(member) for member in members))

    return SingleSignature((obj,))


def expand_signatures(signature_class: SignatureClass) -> tuple[Shape, ...]:
    """Expands the signature class into the shapes it contains. Nested
    unions are flattened and duplicates are removed, preserving the
    order in which each shape first appeared. ``MATCH_ALL`` expands to
    an empty tuple; it doesn't enumerate anything, it matches
    everything.
    """
    if signature_class is SignatureSentinel.MATCH_ALL:
        return ()
    if isinstance(signature_class, SingleSignature):
        return (signature_class.shape,)
    if isinstance(signature_class, AnyOfSignatures):
        # Note: shapes might contain unhashable generic aliases, so we
        # can't use a set for deduplication
        shapes: list[Shape] = []
        for alternative in signature_class.alternatives:
            for shape in expand_signatures(alternative):
                if shape not in shapes:
                    shapes.append(shape)
        return tuple(shapes)

    raise TypeError('Not a signature class!', signature_class)


def signature_matches(
        candidate: Shape,
        signature_class: SignatureClass,
        *,
        exact: Annotated[
                bool,
                Note('''When True, the candidate must be structurally equal
                    to one of the expanded shapes. When False, shape is not
                    considered at all; callers are expected to restrict by
                    owning module instead.''')]
        ) -> bool:
    if signature_class is SignatureSentinel.MATCH_ALL:
        return True
    if not exact:
        return True

    return candidate in expand_signatures(signature_class)


def is_subshape(query: Shape, declared: Shape) -> bool:
    """Returns True if a call with parameters of the ``query`` types
    would be accepted by an implementation declaring the ``declared``
    parameter types. This is a positional approximation of overload
    resolution: arities must match, and each query type must be
    ``Any``, equal to, a subclass of, or a member of a union within its
    declared counterpart.
    """
    if len(query) != len(declared):
        return False

    return all(
        _is_subtype(query_type, declared_type)
        for query_type, declared_type in zip(query, declared, strict=True))


def _is_subtype(query_type: Any, declared_type: Any) -> bool:  # noqa: PLR0911
    if declared_type is Any or query_type == declared_type:
        return True
    if declared_type is None:
        declared_type = NoneType
    if query_type is None:
        query_type = NoneType

    declared_origin = get_origin(declared_type)
    if declared_origin is Union or declared_origin is UnionType:
        return any(
            _is_subtype(query_type, member)
            for member in get_type_args(declared_type))

    query_origin = get_origin(query_type)
    if query_origin is Union or query_origin is UnionType:
        return all(
            _is_subtype(member, declared_type)
            for member in get_type_args(query_type))

    # Parameterized generics (ex ``list[int]``) can only be checked
    # against their origin; the parameters are ignored.
    if declared_origin is not None:
        declared_type = declared_origin
    if query_origin is not None:
        query_type = query_origin

    try:
        return issubclass(query_type, declared_type)
    except TypeError:
        logger.debug(
            'Cannot compare %r against %r as types; treating as unrelated.',
            query_type, declared_type)
        return False
