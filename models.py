#!/usr/bin/env python3
"""
Records extracted from the API documentation pages.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

URLENCODED = "urlencoded"


@dataclass(frozen=True)
class Parameter:
    """One documented request input (query, path or form field)"""
    key: str = ""
    type_annotation: str = ""  # "<number>", "<string>", ...
    description: str = ""


@dataclass(frozen=True)
class BodyDescriptor:
    """Form parameters of a request, sent url-encoded"""
    urlencoded: Tuple[Parameter, ...] = ()
    mode: str = URLENCODED


@dataclass(frozen=True)
class ExtractedFields:
    """Raw output of the field extractor for one page"""
    name: str = ""
    description: str = ""
    method: str = ""
    url: str = ""
    query_params: List[Parameter] = field(default_factory=list)
    path_params: List[Parameter] = field(default_factory=list)
    body_params: List[Parameter] = field(default_factory=list)


@dataclass(frozen=True)
class EndpointRecord:
    """A single documented API operation, ready for the collection"""
    name: str
    description: str
    method: str
    url: str
    path_segments: Tuple[str, ...]
    query_params: Tuple[Parameter, ...]
    path_params: Tuple[Parameter, ...]
    body: BodyDescriptor
    source_url: str = ""
    discovery_index: int = 0
