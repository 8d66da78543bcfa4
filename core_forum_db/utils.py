# core_forum_db/utils.py
"""
Utility functions for query building and result handling
"""
import logging
import re
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from .constants import IDENTIFIER_PATTERN
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\$(\d+)")


def placeholder(index: int) -> str:
    """Positional placeholder for a 1-based parameter index"""
    return f"${index}"


def validate_identifier(name: str, pattern: str = IDENTIFIER_PATTERN) -> None:
    """
    Validate a name that will be interpolated into SQL
    Raises ValidationError if invalid
    """
    if not name:
        raise ValidationError("Identifier cannot be empty")

    if not re.match(pattern, name):
        raise ValidationError(
            f"Invalid identifier '{name}'. "
            f"Must match pattern: {pattern}",
            field=name,
        )


def safe_identifier(name: str, pattern: str = IDENTIFIER_PATTERN) -> str:
    """
    Get safe identifier with validation
    Returns validated name
    """
    validate_identifier(name, pattern)
    return name


def rows_to_dicts(rows: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    Convert driver rows to a list of dictionaries
    Handles asyncpg records, SQLAlchemy rows and plain mappings
    """
    if rows is None:
        return []

    result = []
    for row in rows:
        mapping = getattr(row, "_mapping", None)
        result.append(dict(mapping) if mapping is not None else dict(row))
    return result


def to_named_params(sql: str, params: Sequence[Any], prefix: str = "p") -> Tuple[str, Dict[str, Any]]:
    """
    Rewrite ``$n`` placeholders to ``:p_n`` named binds

    Args:
        sql: Statement using positional placeholders
        params: Positional parameters, ``params[n-1]`` binds ``$n``
        prefix: Bind name prefix

    Returns:
        Tuple of rewritten SQL and the bind dictionary
    """
    named_sql = PLACEHOLDER_PATTERN.sub(lambda m: f":{prefix}_{m.group(1)}", sql)
    binds = {f"{prefix}_{index}": value for index, value in enumerate(params, start=1)}
    return named_sql, binds
