import pytest

from services.query_composer import ComposedQuery, Predicate, compose, optional, placeholders
from services.reports import STUDENT_PERFORMANCE_SQL, STUDENTS_IN_COURSES_SQL

TEMPLATE = """
SELECT * FROM students s
WHERE 1=1
{filters}
HAVING AVG(x) >= :min_gpa
"""


def test_placeholders_ignore_colons_inside_literals():
    sql = "SELECT CONCAT('A:', n, ' ') FROM t WHERE a = :a AND b = :b AND c = :a"
    assert placeholders(sql) == ("a", "b")


def test_optional_predicate_omitted_keeps_single_param():
    query = compose(TEMPLATE, predicates=[optional("AND s.grade = :grade", "grade", None)], min_gpa=3.0)

    assert query.param_order == ("min_gpa",)
    assert ":grade" not in query.sql
    assert "{filters}" not in query.sql


def test_optional_predicate_included_before_template_params():
    query = compose(TEMPLATE, predicates=[optional("AND s.grade = :grade", "grade", "10")], min_gpa=3.0)

    assert query.param_order == ("grade", "min_gpa")
    assert query.params == {"grade": "10", "min_gpa": 3.0}
    assert "AND s.grade = :grade" in query.sql


def test_blank_optional_value_is_not_a_filter():
    assert not optional("AND s.grade = :grade", "grade", "").included


def test_multiple_predicates_keep_declared_order():
    template = "SELECT 1 WHERE 1=1 {filters} AND z = :z"
    query = compose(
        template,
        predicates=[
            Predicate("AND b = :b", "b", 2),
            Predicate("AND skipped = :skipped", "skipped", None),
            Predicate("AND a = :a", "a", 1),
        ],
        z=0,
    )
    assert query.param_order == ("b", "a", "z")
    assert query.sql.index(":b") < query.sql.index(":a")


def test_user_value_never_reaches_sql_text():
    payload = "10; DROP TABLE students"
    query = compose(TEMPLATE, predicates=[optional("AND s.grade = :grade", "grade", payload)], min_gpa=0)

    assert payload not in query.sql
    assert query.params["grade"] == payload


def test_missing_parameter_is_rejected():
    with pytest.raises(ValueError, match="missing"):
        compose(TEMPLATE)


def test_unused_parameter_is_rejected():
    with pytest.raises(ValueError, match="unused"):
        compose("SELECT 1", extra=1)


def test_predicate_must_bind_its_own_name():
    with pytest.raises(ValueError):
        compose(TEMPLATE, predicates=[Predicate("AND s.grade = :other", "grade", "9")], min_gpa=0)


def test_predicate_without_slot_is_rejected():
    with pytest.raises(ValueError, match="slot"):
        compose("SELECT 1 WHERE a = :a", predicates=[Predicate("AND b = :b", "b", 1)], a=1)


def test_expanding_parameters_render_in_clause():
    query = compose(
        STUDENTS_IN_COURSES_SQL,
        expanding=["count_course_ids", "course_ids"],
        count_course_ids=["1", "2"],
        course_ids=["1", "2"],
    )
    clause = query.to_clause()

    assert isinstance(query, ComposedQuery)
    assert set(clause._bindparams) == {"count_course_ids", "course_ids"}
    assert all(clause._bindparams[name].expanding for name in query.expanding)


def test_expanding_name_must_be_bound():
    with pytest.raises(ValueError, match="expanding"):
        compose("SELECT 1 WHERE a IN :a", expanding=["b"], a=[1])


def test_performance_template_has_single_filters_slot():
    assert STUDENT_PERFORMANCE_SQL.count("{filters}") == 1
    assert set(placeholders(STUDENT_PERFORMANCE_SQL)) == {"min_gpa"}
