#!/usr/bin/env python3
"""
Endpoint assembly: extractor output -> EndpointRecord.
"""

import logging

from models import BodyDescriptor, EndpointRecord, ExtractedFields
from utils.path_handler import PathParameterHandler

logger = logging.getLogger(__name__)


def assemble_endpoint(fields: ExtractedFields,
                      source_url: str = "",
                      discovery_index: int = 0) -> EndpointRecord:
    """
    Build the immutable record for one endpoint page.

    The raw URL is kept as-is; path_segments is the same URL split on "/"
    without the leading empty segment.
    """
    logger.info(f"{fields.name} -> {fields.method} {fields.url}")

    missing = PathParameterHandler.undocumented_variables(
        fields.url, [p.key for p in fields.path_params]
    )
    if missing:
        logger.debug(f"{source_url or fields.name}: undocumented path variables {missing}")

    return EndpointRecord(
        name=fields.name,
        description=fields.description,
        method=fields.method,
        url=fields.url,
        path_segments=PathParameterHandler.split_segments(fields.url),
        query_params=tuple(fields.query_params),
        path_params=tuple(fields.path_params),
        body=BodyDescriptor(urlencoded=tuple(fields.body_params)),
        source_url=source_url,
        discovery_index=discovery_index,
    )
