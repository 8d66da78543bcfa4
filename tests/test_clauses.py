"""
Tests for clause builders
"""
import re

import pytest

from core_forum_db import (
    FilterCondition,
    FilterOperator,
    OrderSpec,
    PaginationRequest,
    SearchSpec,
    WhereClauseBuilder,
    build_order_clause,
    build_pagination_clause,
    build_search_clause,
    build_where_clause,
)


def placeholders_in(sql):
    return [int(n) for n in re.findall(r"\$(\d+)", sql)]


class TestWhereClause:
    """Test WHERE clause from filters"""

    def test_empty_filters(self):
        """Empty or missing filters produce no clause"""
        assert build_where_clause([]) == ("", [])
        assert build_where_clause(None) == ("", [])

    @pytest.mark.parametrize("operator,token", [
        ("eq", "="),
        ("neq", "!="),
        ("gt", ">"),
        ("gte", ">="),
        ("lt", "<"),
        ("lte", "<="),
        ("like", "LIKE"),
    ])
    def test_scalar_operators(self, operator, token):
        """Scalar operators consume one slot each"""
        clause, params = build_where_clause([FilterCondition("score", operator, 5)])

        assert clause == f"WHERE score {token} $1"
        assert params == [5]

    def test_conditions_joined_with_and(self, sample_filters):
        """Test conditions are joined with AND in order"""
        clause, params = build_where_clause(sample_filters)

        assert clause == "WHERE status = $1 AND age >= $2"
        assert params == ["active", 18]

    def test_in_expands_one_placeholder_per_element(self):
        """Test IN binds one placeholder per element"""
        clause, params = build_where_clause([
            FilterCondition("id", "in", [3, 1, 2]),
            FilterCondition("status", "eq", "open"),
        ])

        assert clause == "WHERE id IN ($1, $2, $3) AND status = $4"
        assert params == [3, 1, 2, "open"]

    def test_nin_with_offset(self):
        """Test NOT IN numbering starts after the offset"""
        clause, params = build_where_clause(
            [FilterCondition("category_id", FilterOperator.NIN, ("a", "b"))],
            param_offset=4,
        )

        assert clause == "WHERE category_id NOT IN ($5, $6)"
        assert params == ["a", "b"]

    def test_empty_in_list_is_dropped(self):
        """An empty IN list is silently omitted"""
        clause, params = build_where_clause([
            FilterCondition("id", "in", []),
            FilterCondition("status", "eq", "open"),
        ])

        assert clause == "WHERE status = $1"
        assert params == ["open"]

    def test_only_empty_in_lists_yield_no_clause(self):
        """Test only empty lists produce no clause"""
        clause, params = build_where_clause([FilterCondition("id", "nin", [])])

        assert clause == ""
        assert params == []

    def test_placeholders_contiguous_from_offset(self):
        """Test placeholders are contiguous from offset + 1"""
        filters = [
            FilterCondition("a", "eq", 1),
            FilterCondition("b", "in", [2, 3, 4]),
            FilterCondition("c", "lt", 5),
            FilterCondition("d", "nin", [6, 7]),
        ]

        clause, params = build_where_clause(filters, param_offset=2)

        numbers = placeholders_in(clause)
        assert numbers == list(range(3, 3 + len(params)))
        assert params == [1, 2, 3, 4, 5, 6, 7]

    def test_builder_is_pure(self, sample_filters):
        """Identical input yields identical output"""
        first = build_where_clause(sample_filters, 1)
        second = build_where_clause(sample_filters, 1)

        assert first == second
        assert first.params is not second.params

    def test_operator_map_is_closed(self):
        """Test every operator has a SQL token"""
        assert set(WhereClauseBuilder.OPERATOR_MAP) == set(FilterOperator)


class TestFilterCondition:
    """Test filter condition validation"""

    def test_unknown_operator_rejected(self):
        """Test unknown operators are rejected"""
        with pytest.raises(ValueError):
            FilterCondition("status", "between", [1, 2])

    def test_string_operator_coerced(self):
        """Test string operators become FilterOperator members"""
        assert FilterCondition("status", "eq", "x").operator is FilterOperator.EQ

    def test_in_requires_list(self):
        """Test IN rejects a scalar value"""
        with pytest.raises(ValueError):
            FilterCondition("id", "in", 5)


class TestSearchClause:
    """Test search clause"""

    def test_single_shared_parameter(self):
        """Every field reuses the same slot"""
        clause, params = build_search_clause(
            SearchSpec("john", ["username", "email", "name"]),
            param_offset=0,
        )

        assert clause == "(username LIKE $1 OR email LIKE $1 OR name LIKE $1)"
        assert params == ["%john%"]

    def test_offset_applied(self):
        """Test the shared slot follows the offset"""
        clause, params = build_search_clause(SearchSpec("rust", ["title"]), param_offset=3)

        assert clause == "(title LIKE $4)"
        assert params == ["%rust%"]

    def test_no_fields(self):
        """Test no fields or no search produce no clause"""
        assert build_search_clause(SearchSpec("john", [])) == ("", [])
        assert build_search_clause(None) == ("", [])


class TestOrderClause:
    """Test ORDER BY clause"""

    def test_caller_order_preserved(self):
        """Test fields keep the caller's order"""
        clause = build_order_clause([
            OrderSpec("created_at", "desc"),
            OrderSpec("name", "asc"),
        ])

        assert clause == "ORDER BY created_at DESC, name ASC"

    def test_default_direction(self):
        """Test direction defaults to ASC"""
        assert build_order_clause([OrderSpec("id")]) == "ORDER BY id ASC"

    def test_empty(self):
        """Test empty ordering produces no clause"""
        assert build_order_clause([]) == ""
        assert build_order_clause(None) == ""

    def test_invalid_direction(self):
        """Test unknown directions are rejected"""
        with pytest.raises(ValueError):
            OrderSpec("id", "sideways")


class TestPaginationClause:
    """Test LIMIT / OFFSET clause"""

    def test_limit_and_offset(self):
        """Test LIMIT and OFFSET bind limit then offset"""
        clause, params = build_pagination_clause(PaginationRequest(page=3, per_page=10), param_offset=2)

        assert clause == "LIMIT $3 OFFSET $4"
        assert params == [10, 20]

    def test_first_page(self):
        """Test the first page has offset 0"""
        assert build_pagination_clause(PaginationRequest(page=1, per_page=20)) == ("LIMIT $1 OFFSET $2", [20, 0])

    @pytest.mark.parametrize("page,per_page", [(0, 10), (1, 0), (-1, 5)])
    def test_invalid_request(self, page, per_page):
        """Test invalid page or per_page is rejected"""
        with pytest.raises(ValueError):
            PaginationRequest(page=page, per_page=per_page)
