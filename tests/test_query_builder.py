"""Tests for the query builder and GraphQL text generation."""

import pytest

from aem_headless.core.query import (
    Filter,
    GraphQlQuery,
    Operator,
    PaginationType,
    SimpleField,
    SortBy,
    SortingOrder,
    SubSelection,
    VarType,
)
from aem_headless.core.query_builder import (
    filter_value,
    filter_variable,
    ignore_case,
    sensitiveness,
    sub_selection,
)


def article_builder():
    return (
        GraphQlQuery.builder()
        .content_fragment_model_name("article")
        .field("_path")
        .field("title")
        .field(sub_selection("authorFragment").field("firstName").field("lastName"))
        .sort_by("title ASC", "_path DESC")
    )


def adventure_builder():
    return (
        GraphQlQuery.builder()
        .content_fragment_model_name("adventure")
        .field("_path")
        .sort_by("title", order=SortingOrder.ASC)
    )


class TestQueryGeneration:
    """Tests for generate_query()."""

    def test_simple_query(self):
        query = article_builder().build()

        assert query.generate_query() == (
            "query  { \n"
            "  articleList(sort: \"title ASC, _path DESC\") {\n"
            "    items {\n"
            "      _path\n"
            "      title\n"
            "      authorFragment{firstName lastName}\n"
            "    }\n"
            "  }\n"
            "}\n"
        )

    def test_query_without_arguments(self):
        query = GraphQlQuery.builder().content_fragment_model_name("article").field("title").build()

        assert query.generate_query() == "query  { \n  articleList {\n    items {\n      title\n    }\n  }\n}\n"

    def test_static_filter(self):
        query = (
            adventure_builder()
            .field("title")
            .field("price", filter_value(Operator.LOWER, 154))
            .build()
        )

        assert query.generate_query() == (
            "query  { \n"
            "  adventureList(sort: \"title ASC\", filter: {\n"
            "price: { _expressions: [ { _operator: LOWER, value: 154}]}\n"
            "}) {\n"
            "    items {\n"
            "      _path\n"
            "      title\n"
            "      price\n"
            "    }\n"
            "  }\n"
            "}\n"
        )

    def test_filters_with_options(self):
        query = (
            adventure_builder()
            .field("title", filter_value(Operator.CONTAINS, "gastronomic", ignore_case()))
            .field("price", filter_value(Operator.LOWER, 154, sensitiveness(0.1)))
            .build()
        )

        assert (
            "filter: {\n"
            "title: { _expressions: [ { _operator: CONTAINS, _ignoreCase: true, value: \"gastronomic\"}]},\n"
            "price: { _expressions: [ { _operator: LOWER, _sensitiveness: 0.1, value: 154}]}\n"
            "}"
        ) in query.generate_query()

    def test_variable_filter_declares_variable(self):
        query = (
            adventure_builder()
            .field("price", filter_variable(Operator.LOWER, VarType.FLOAT, "priceThreshold"))
            .build()
        )
        text = query.generate_query()

        assert text.startswith("query ($priceThreshold: Float) { \n")
        assert "price: { _expressions: [ { _operator: LOWER, value: $priceThreshold}]}" in text

    def test_filter_without_selecting_field(self):
        query = adventure_builder().filter("price", Operator.GREATER_EQUAL, 100).build()
        text = query.generate_query()

        assert "price: { _expressions: [ { _operator: GREATER_EQUAL, value: 100}]}" in text
        assert "      price\n" not in text

    def test_builder_filter_variable_with_type_name(self):
        query = (
            adventure_builder()
            .filter_variable("tripLength", Operator.EQUALS, "String", "length")
            .build()
        )

        assert query.generate_query().startswith("query ($length: String) { \n")

    def test_boolean_and_string_literals(self):
        query = (
            adventure_builder()
            .filter("featured", Operator.EQUALS, True)
            .filter("title", Operator.EQUALS, 'say "hi"')
            .build()
        )
        text = query.generate_query()

        assert "featured: { _expressions: [ { _operator: EQUALS, value: true}]}" in text
        assert 'title: { _expressions: [ { _operator: EQUALS, value: "say \\"hi\\""}]}' in text

    def test_generic_filter(self):
        query = adventure_builder().field("title").use_filter().build()

        assert query.generate_query().startswith(
            "query ($filter: AdventureModelFilter) { \n"
            "  adventureList(sort: \"title ASC\", filter: $filter) {"
        )

    def test_explicit_filters_take_precedence_over_generic_filter(self):
        query = adventure_builder().use_filter().filter("price", Operator.LOWER, 10).build()
        text = query.generate_query()

        assert "$filter" not in text
        assert "price: { _expressions: [ { _operator: LOWER, value: 10}]}" in text

    def test_cursor_pagination(self):
        query = article_builder().paginated().build()

        assert query.generate_query() == (
            "query ($after: String, $first: Int) { \n"
            "  articlePaginated(after: $after, first: $first, sort: \"title ASC, _path DESC\") {\n"
            "    edges { node {\n"
            "      _path\n"
            "      title\n"
            "      authorFragment{firstName lastName}\n"
            "    }}\n"
            "    pageInfo { hasNextPage endCursor }\n"
            "  }\n"
            "}\n"
        )

    def test_offset_pagination(self):
        query = article_builder().paginated(PaginationType.OFFSET_LIMIT).build()

        assert query.generate_query().startswith(
            "query ($offset: Int, $limit: Int) { \n"
            "  articleList(offset: $offset, limit: $limit, sort: \"title ASC, _path DESC\") {\n"
            "    items {\n"
        )

    def test_pagination_with_variable_filter(self):
        query = (
            adventure_builder()
            .field("price", filter_variable(Operator.LOWER, VarType.INT, "max"))
            .paginated()
            .build()
        )

        assert query.generate_query().startswith(
            "query ($after: String, $first: Int, $max: Int) { \n"
            "  adventurePaginated(after: $after, first: $first, sort: \"title ASC\", filter: {\n"
        )

    def test_generate_is_repeatable(self):
        query = article_builder().paginated().build()

        assert query.generate_query() == query.generate_query()

    def test_generate_shortcut(self):
        assert article_builder().generate() == article_builder().build().generate_query()


class TestQueryBuilder:
    """Tests for builder state and validation."""

    def test_builder_is_single_use(self):
        builder = article_builder()
        builder.build()

        with pytest.raises(RuntimeError, match="only be used to create one query"):
            builder.build()
        with pytest.raises(RuntimeError):
            builder.field("other")

    def test_model_name_required(self):
        with pytest.raises(ValueError, match="model name"):
            GraphQlQuery.builder().field("title").build()

    def test_explicit_order_needs_single_field(self):
        with pytest.raises(ValueError):
            GraphQlQuery.builder().sort_by("a", "b", order=SortingOrder.DESC)

    def test_built_query_contents(self):
        query = article_builder().paginated().build()

        assert query.content_fragment_model_name == "article"
        assert query.pagination_type is PaginationType.CURSOR
        assert query.fields[0] == SimpleField("_path")
        assert query.sort_by == (SortBy("title"), SortBy("_path", SortingOrder.DESC))
        assert query.filters == ()
        assert not query.declare_model_filter

    def test_query_is_frozen(self):
        query = article_builder().build()

        with pytest.raises(AttributeError):
            query.content_fragment_model_name = "other"

    def test_model_filter_type(self):
        query = GraphQlQuery.builder().content_fragment_model_name("adventure").build()

        assert query.model_filter_type == "AdventureModelFilter"

    def test_filter_binds_once(self):
        shared = filter_value(Operator.EQUALS, "x")
        builder = GraphQlQuery.builder().content_fragment_model_name("a").field("title", shared)

        assert shared.field_name == "title"
        with pytest.raises(RuntimeError, match="already bound"):
            builder.field("other", shared)


class TestFilter:
    """Tests for filter expressions."""

    def test_needs_value_or_variable(self):
        with pytest.raises(ValueError):
            Filter(Operator.EQUALS)

    def test_rejects_value_and_variable(self):
        with pytest.raises(ValueError):
            Filter(Operator.EQUALS, value=1, var_name="x", var_type=VarType.INT)

    def test_variable_needs_type(self):
        with pytest.raises(ValueError, match="declared type"):
            Filter(Operator.EQUALS, var_name="x")

    def test_var_type_name(self):
        assert filter_variable(Operator.AT, VarType.DATE, "d").var_type_name == "Date"
        assert filter_variable(Operator.AT, "Calendar", "d").var_type_name == "Calendar"

    def test_unbound_filter_has_no_field(self):
        assert filter_value(Operator.EQUALS, 1).field_name is None


class TestSortBy:
    """Tests for sort clauses."""

    def test_parse_defaults_to_ascending(self):
        assert SortBy.parse("title") == SortBy("title", SortingOrder.ASC)

    def test_parse_order(self):
        assert SortBy.parse("title desc") == SortBy("title", SortingOrder.DESC)

    def test_parse_invalid_order(self):
        with pytest.raises(ValueError):
            SortBy.parse("title UPWARDS")

    def test_str(self):
        assert str(SortBy("_path", SortingOrder.DESC)) == "_path DESC"


class TestSubSelection:
    """Tests for the field tree."""

    def test_nested_fragment(self):
        author = sub_selection("author")
        author.field("name")
        author.sub_selection("address").field("city").field("zip")

        assert author.to_query_fragment() == "author{name address{city zip}}"

    def test_simple_field_fragment(self):
        assert SimpleField("title").to_query_fragment() == "title"

    def test_cannot_contain_itself(self):
        node = SubSelection("node")

        with pytest.raises(ValueError, match="itself"):
            node.field(node)

    def test_single_parent(self):
        child = SubSelection("child")
        SubSelection("first").field(child)

        with pytest.raises(ValueError, match="another selection"):
            SubSelection("second").field(child)

    def test_cannot_contain_ancestor(self):
        root = SubSelection("root")
        leaf = root.sub_selection("middle").sub_selection("leaf")

        with pytest.raises(ValueError, match="cannot contain itself"):
            leaf.field(root)
        assert root.to_query_fragment() == "root{middle{leaf{}}}"

    def test_query_field_has_single_parent(self):
        author = sub_selection("author").field("name")
        GraphQlQuery.builder().content_fragment_model_name("article").field(author)

        with pytest.raises(ValueError, match="another selection"):
            SubSelection("wrap").field(author)

    def test_child_cannot_become_query_field(self):
        author = sub_selection("author").field("name")
        SubSelection("wrap").field(author)

        with pytest.raises(ValueError, match="another selection"):
            GraphQlQuery.builder().content_fragment_model_name("article").field(author)
