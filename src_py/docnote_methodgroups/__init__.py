from docnote_methodgroups._utils import group_by
from docnote_methodgroups.collection import collect_implementations
from docnote_methodgroups.exceptions import UnknownCallable
from docnote_methodgroups.grouping import ImplementationGroup
from docnote_methodgroups.grouping import method_groups
from docnote_methodgroups.records import ImplementationRecord
from docnote_methodgroups.records import SourceLocation
from docnote_methodgroups.records import clean_path
from docnote_methodgroups.records import compare_locations
from docnote_methodgroups.signatures import AnyOfSignatures
from docnote_methodgroups.signatures import SignatureClass
from docnote_methodgroups.signatures import SignatureSentinel
from docnote_methodgroups.signatures import SingleSignature
from docnote_methodgroups.signatures import as_signature_class
from docnote_methodgroups.signatures import expand_signatures
from docnote_methodgroups.signatures import signature_matches
from docnote_methodgroups.sourcelinks import LinkerConfig
from docnote_methodgroups.sourcelinks import SourceLinker
from docnote_methodgroups.sourcelinks import resolve_url
from docnote_methodgroups.sources import ImplementationSource
from docnote_methodgroups.sources import OverloadSource
from docnote_methodgroups.sources import SingledispatchSource
from docnote_methodgroups.sources import StaticImplementationSource

MATCH_ALL = SignatureSentinel.MATCH_ALL

__all__ = [
    'MATCH_ALL',
    'AnyOfSignatures',
    'ImplementationGroup',
    'ImplementationRecord',
    'ImplementationSource',
    'LinkerConfig',
    'OverloadSource',
    'SignatureClass',
    'SignatureSentinel',
    'SingleSignature',
    'SingledispatchSource',
    'SourceLinker',
    'SourceLocation',
    'StaticImplementationSource',
    'UnknownCallable',
    'as_signature_class',
    'clean_path',
    'collect_implementations',
    'compare_locations',
    'expand_signatures',
    'group_by',
    'method_groups',
    'resolve_url',
    'signature_matches',
]
