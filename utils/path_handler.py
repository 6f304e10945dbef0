#!/usr/bin/env python3
"""
Path handling for documented endpoint URLs.

The documentation writes URLs as "/api/v2/issues/:issueIdOrKey". Postman
wants the path as a list of segments, and path variables can show up in a
few notations:
- Express/Postman style: :parameter
- OpenAPI style: {parameter}
- Postman double-brace: {{parameter}}
"""

import re
import logging
from typing import List, Tuple
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class PathParameter:
    """Represents a path variable found in a URL template."""
    name: str
    original_format: str  # The original string like ':id' or '{id}' or '{{id}}'
    position: int  # Position in the path for ordering


class PathParameterHandler:
    """
    Splits documented URLs into Postman path segments and lists their variables.
    """

    # Each pattern captures the variable name in group 1.
    # Double-brace must come before single-brace so "{{id}}" is not read as "{id}".
    PARAMETER_PATTERNS = [
        r'\{\{([a-zA-Z0-9_]+)\}\}',
        r'\{([a-zA-Z0-9_]+)\}',
        r'(?<![^/]):([a-zA-Z0-9_]+)',
    ]

    @staticmethod
    def split_segments(url: str) -> Tuple[str, ...]:
        """
        Split a raw URL path on "/" and drop the first segment.

        The first segment is the empty string in front of the leading "/":
        "/api/v2/issues" -> ("api", "v2", "issues"). An empty URL gives ().
        """
        if not url:
            return ()
        return tuple(url.split("/")[1:])

    @classmethod
    def extract_parameters(cls, path_template: str) -> List[PathParameter]:
        """
        Extract all variables from a path template, regardless of notation.

        Args:
            path_template: URL path template with variables

        Returns:
            PathParameter objects ordered by position in the path
        """
        parameters = []
        covered: List[Tuple[int, int]] = []

        for pattern in cls.PARAMETER_PATTERNS:
            for match in re.finditer(pattern, path_template):
                start, end = match.span()
                if any(start < c_end and c_start < end for c_start, c_end in covered):
                    continue
                covered.append((start, end))
                parameters.append(PathParameter(
                    name=match.group(1),
                    original_format=match.group(0),
                    position=start
                ))

        parameters.sort(key=lambda p: p.position)
        return parameters

    @classmethod
    def undocumented_variables(cls, path_template: str, documented: List[str]) -> List[str]:
        """Variables present in the path template but missing from `documented`."""
        known = set(documented)
        return [p.name for p in cls.extract_parameters(path_template) if p.name not in known]
