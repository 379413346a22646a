from __future__ import annotations

import inspect
import logging
import sys
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from functools import singledispatchmethod
from typing import Annotated
from typing import Any
from typing import Protocol
from typing import get_overloads
from typing import get_type_hints

from docnote import Note

from docnote_methodgroups.exceptions import UnknownCallable
from docnote_methodgroups.records import ImplementationRecord
from docnote_methodgroups.records import record_from_callable
from docnote_methodgroups.signatures import Shape
from docnote_methodgroups.signatures import is_subshape

logger = logging.getLogger(__name__)

_POSITIONAL_KINDS = frozenset({
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD})


class ImplementationSource(Protocol):
    """Implementation sources adapt some registry of implementations
    (singledispatch registries, ``typing.overload`` registrations, or
    something supplied by the host application) into records. Sources
    are only ever read from.
    """

    def all_implementations(self, func: Any) -> list[ImplementationRecord]:
        """Returns every known implementation of ``func``. Raises
        ``UnknownCallable`` if ``func`` can't be resolved.
        """
        ...

    def implementations_matching(
            self,
            func: Any,
            shape: Shape
            ) -> list[ImplementationRecord]:
        """Returns the implementations of ``func`` that would accept
        arguments of the types in ``shape``, as decided by whatever
        overload resolution the source's runtime uses. Raises
        ``UnknownCallable`` if ``func`` can't be resolved, but returns
        an empty list if nothing matches.
        """
        ...


@dataclass(slots=True)
class StaticImplementationSource:
    """An implementation source backed by precomputed records, for
    example ones extracted by a host application ahead of time.
    """
    registry: Annotated[
        Mapping[Any, Sequence[ImplementationRecord]],
        Note('''Maps callable identities (the objects themselves, or their
            names -- whatever the caller will pass to the pipeline) to
            their records, in registration order.''')]

    def all_implementations(self, func: Any) -> list[ImplementationRecord]:
        # Unhashable callables can't be registry keys, so they're just as
        # unknown as missing ones
        try:
            return list(self.registry[func])
        except (KeyError, TypeError):
            raise UnknownCallable('No implementations registered!', func)

    def implementations_matching(
            self,
            func: Any,
            shape: Shape
            ) -> list[ImplementationRecord]:
        return [
            record for record in self.all_implementations(func)
            if is_subshape(shape, record.comparable_signature)]


@dataclass(slots=True)
class SingledispatchSource:
    """Reads the implementations of ``functools.singledispatch``
    functions. Each registered type becomes its own record, so a single
    implementation registered for several types (or for a union) shows
    up as several records sharing one location.

    Note that ``singledispatchmethod`` must be passed as the raw
    descriptor, ie, taken from the class ``__dict__`` and ^^not^^ via
    getattr on the class.
    """

    def all_implementations(self, func: Any) -> list[ImplementationRecord]:
        dispatcher = _get_dispatcher(func)
        callable_name = _get_callable_name(dispatcher)
        return [
            record_from_callable(
                implementation,
                callable_name=callable_name,
                signature=(dispatch_type,))
            for dispatch_type, implementation
            in dispatcher.registry.items()]

    def implementations_matching(
            self,
            func: Any,
            shape: Shape
            ) -> list[ImplementationRecord]:
        dispatcher = _get_dispatcher(func)
        # Singledispatch only ever looks at the first argument.
        if len(shape) != 1:
            return []

        query_type, = shape
        if not isinstance(query_type, type):
            logger.debug(
                'Singledispatch can only resolve classes; skipping %r for %s',
                query_type, dispatcher)
            return []

        implementation = dispatcher.dispatch(query_type)
        callable_name = _get_callable_name(dispatcher)
        return [
            record_from_callable(
                candidate,
                callable_name=callable_name,
                signature=(dispatch_type,))
            for dispatch_type, candidate in dispatcher.registry.items()
            if candidate is implementation
            and is_subshape((query_type,), (dispatch_type,))]


def _get_dispatcher(func: Any) -> Any:
    if isinstance(func, singledispatchmethod):
        func = func.dispatcher

    if not (hasattr(func, 'registry') and hasattr(func, 'dispatch')):
        raise UnknownCallable('Not a singledispatch function!', func)

    return func


@dataclass(slots=True)
class OverloadSource:
    """Reads the ``typing.overload`` signatures of a function. If the
    function has no overloads, its implementation is treated as the
    only one.

    Matching is done with ``is_subshape`` against the declared
    (positional) parameter annotations, since python has no native
    overload resolution to defer to. Unannotated parameters are treated
    as ``Any``.
    """
    receiver: Annotated[
            bool | None,
            Note('''Whether the first positional parameter of the callables
                is a receiver (``self`` or ``cls``). None infers this from
                the kind of method: classmethods and bound methods always
                have one, staticmethods never do, and other functions are
                looked up on the class named by their qualname.''')
        ] = None

    def all_implementations(self, func: Any) -> list[ImplementationRecord]:
        has_receiver = self.receiver
        if isinstance(func, classmethod) or inspect.ismethod(func):
            func = func.__func__
            if has_receiver is None:
                has_receiver = True
        elif isinstance(func, staticmethod):
            func = func.__func__
            if has_receiver is None:
                has_receiver = False

        if not callable(func):
            raise UnknownCallable('Not a callable!', func)
        if has_receiver is None:
            has_receiver = _infer_receiver(func)

        try:
            overloads = get_overloads(func)
        except AttributeError:
            logger.debug(
                'Failed to check overloads for %s. This is usually because '
                + 'it was a stdlib object without a __module__ attribute.',
                func)
            overloads = []

        callable_name = _get_callable_name(func)
        return [
            record_from_callable(
                implementation,
                callable_name=callable_name,
                signature=_declared_shape(implementation),
                has_receiver=has_receiver)
            for implementation in (overloads or [func])]

    def implementations_matching(
            self,
            func: Any,
            shape: Shape
            ) -> list[ImplementationRecord]:
        return [
            record for record in self.all_implementations(func)
            if is_subshape(shape, record.comparable_signature)]


def _declared_shape(implementation: Any) -> Shape:
    try:
        raw_sig = inspect.signature(implementation)
    except (TypeError, ValueError) as exc:
        raise UnknownCallable(
            'Cannot extract a signature!', implementation) from exc

    try:
        annotations = get_type_hints(implementation)
    except Exception as exc:
        logger.info(
            'Failed to get type hints for %s; treating its parameters as '
            + 'Any. This usually indicates an unresolvable forward reference.',
            implementation, exc_info=exc)
        annotations = {}

    return tuple(
        annotations.get(name, Any)
        for name, param in raw_sig.parameters.items()
        if param.kind in _POSITIONAL_KINDS)


def _infer_receiver(func: Any) -> bool:
    """Infers whether ``func`` takes a receiver as its first positional
    parameter. Where the owning class can be found via the qualname,
    the raw class attribute decides (staticmethods don't have one).
    Otherwise, we fall back to the conventional ``self``/``cls`` names.
    """
    qualname = getattr(func, '__qualname__', '')
    *parents, name = qualname.split('.')
    if not parents or parents[-1] == '<locals>':
        return False

    owner = _find_owner(func, parents)
    if owner is not None:
        try:
            raw_attr = inspect.getattr_static(owner, name)
        except AttributeError:
            raw_attr = None

        if isinstance(raw_attr, staticmethod):
            return False
        if raw_attr is not None:
            return True

    try:
        params = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError):
        return False

    return (
        bool(params)
        and params[0].kind in _POSITIONAL_KINDS
        and params[0].name in {'self', 'cls'})


def _find_owner(func: Any, parents: list[str]) -> type | None:
    # Classes defined inside functions can't be reached by name
    if '<locals>' in parents:
        return None

    owner: Any = sys.modules.get(getattr(func, '__module__', None) or '')
    for parent_name in parents:
        owner = getattr(owner, parent_name, None)
        if owner is None:
            return None

    return owner if isinstance(owner, type) else None


def _get_callable_name(func: Any) -> str:
    qualname = getattr(func, '__qualname__', None)
    if qualname is None:
        return repr(func)

    module = getattr(func, '__module__', None)
    if module:
        return f'{module}.{qualname}'
    return qualname
