# core_forum_db/clauses.py
"""
Clause builders for positionally-parameterized SQL

Every builder is a pure function: it returns a SQL fragment together with the
parameters that fragment binds, numbering placeholders from the offset it is
given. Values are never interpolated into the SQL text.
"""
from typing import Any, List, Optional, Sequence

from .types import (
    Clause, FilterCondition, FilterOperator, OrderSpec, PaginationRequest, SearchSpec
)
from .utils import placeholder


class WhereClauseBuilder:
    """Builder for WHERE clauses with operator support"""

    # Operator to SQL comparison token mapping
    OPERATOR_MAP = {
        FilterOperator.EQ: "=",
        FilterOperator.NEQ: "!=",
        FilterOperator.GT: ">",
        FilterOperator.GTE: ">=",
        FilterOperator.LT: "<",
        FilterOperator.LTE: "<=",
        FilterOperator.LIKE: "LIKE",
        FilterOperator.IN: "IN",
        FilterOperator.NIN: "NOT IN",
    }

    @classmethod
    def build(cls, filters: Optional[Sequence[FilterCondition]], param_offset: int = 0) -> Clause:
        """
        Build WHERE clause from filter conditions

        Args:
            filters: Conditions joined with AND, in order
            param_offset: Number of parameters already bound before this clause

        Returns:
            Clause with ``WHERE ...`` (or empty) and its parameters
        """
        if not filters:
            return Clause("", [])

        conditions: List[str] = []
        params: List[Any] = []

        for condition in filters:
            fragment = cls._build_condition(condition, param_offset + len(params) + 1)
            if fragment is None:
                continue
            conditions.append(fragment)
            if condition.operator.is_list_operator:
                params.extend(condition.value)
            else:
                params.append(condition.value)

        if not conditions:
            return Clause("", [])
        return Clause(f"WHERE {' AND '.join(conditions)}", params)

    @classmethod
    def _build_condition(cls, condition: FilterCondition, next_index: int) -> Optional[str]:
        """Build one condition; None means the condition is dropped"""
        token = cls.OPERATOR_MAP[condition.operator]

        if condition.operator.is_list_operator:
            # Empty IN / NOT IN lists are omitted
            if not condition.value:
                return None
            placeholders = ", ".join(
                placeholder(next_index + i) for i in range(len(condition.value))
            )
            return f"{condition.field} {token} ({placeholders})"

        return f"{condition.field} {token} {placeholder(next_index)}"


def build_where_clause(filters: Optional[Sequence[FilterCondition]], param_offset: int = 0) -> Clause:
    """Public interface for building WHERE clauses"""
    return WhereClauseBuilder.build(filters, param_offset)


def build_search_clause(search: Optional[SearchSpec], param_offset: int = 0) -> Clause:
    """
    Build the search fragment ``(f1 LIKE $k OR f2 LIKE $k ...)``

    Every field shares the single ``%query%`` parameter, so exactly one
    parameter is bound however many fields are searched.
    """
    if search is None or not search.fields:
        return Clause("", [])

    pattern = f"%{search.query}%"
    shared = placeholder(param_offset + 1)
    conditions = [f"{field} LIKE {shared}" for field in search.fields]
    return Clause(f"({' OR '.join(conditions)})", [pattern])


def build_order_clause(order: Optional[Sequence[OrderSpec]]) -> str:
    """Build ORDER BY clause, keeping caller order as tie-break priority"""
    if not order:
        return ""

    parts = [f"{spec.field} {spec.direction.value.upper()}" for spec in order]
    return f"ORDER BY {', '.join(parts)}"


def build_pagination_clause(pagination: PaginationRequest, param_offset: int = 0) -> Clause:
    """Build ``LIMIT $k OFFSET $k+1`` with ``[limit, offset]``"""
    return Clause(
        f"LIMIT {placeholder(param_offset + 1)} OFFSET {placeholder(param_offset + 2)}",
        [pagination.limit, pagination.offset],
    )
