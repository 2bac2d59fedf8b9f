import math
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from playsql_engine import Column, SQLEngine, Table, cast_value
from playsql_engine.executor import MISSING, compare_values, loose_equals, next_auto_value, to_number


def test_cast_value_literals():
    assert cast_value("'Ana'") == "Ana"
    assert cast_value("''") == ""
    assert cast_value("NULL") is None
    assert cast_value("True") is True
    assert cast_value("false") is False
    assert cast_value("42") == 42
    assert isinstance(cast_value("42"), int)
    assert cast_value("-3.5") == -3.5
    assert cast_value("1e3") == 1000.0
    assert cast_value("pending") == "pending"


def test_cast_value_quoted_keywords_stay_strings():
    assert cast_value("'null'") == "null"
    assert cast_value("'12'") == "12"


def test_cast_value_does_not_unescape_quotes():
    assert cast_value("'O''Brien'") == "O''Brien"


def test_cast_value_rejects_non_finite_numbers():
    assert cast_value("1e999") == "1e999"


def test_to_number_follows_loose_coercion():
    assert to_number(None) == 0
    assert to_number(True) == 1
    assert to_number(" 12 ") == 12
    assert to_number("") == 0
    assert math.isnan(to_number("abc"))
    assert math.isnan(to_number(MISSING))


def test_loose_equals():
    assert loose_equals(1, "1")
    assert loose_equals(True, 1)
    assert loose_equals(None, MISSING)
    assert not loose_equals(None, 0)
    assert not loose_equals("true", True)
    assert not loose_equals("a", "A")


def test_compare_values_mixed_types():
    assert compare_values(1, 2) == -1
    assert compare_values("b", "a") == 1
    assert compare_values("10", 9) == 1
    # Two strings compare lexically, not numerically.
    assert compare_values("10", "9") == -1
    assert compare_values("abc", 1) == 0
    assert compare_values(MISSING, 1) == 0
    assert compare_values(None, 1) == -1


def test_next_auto_value_floors_at_zero():
    assert next_auto_value([], "id") == 1
    assert next_auto_value([{"id": -5}], "id") == 1
    assert next_auto_value([{"id": 2.0}], "id") == 3


def _scores():
    return [
        Table(
            id="t",
            name="scores",
            columns=[Column("id", "INT"), Column("score", "TEXT")],
            rows=[{"id": 1, "score": "10"}, {"id": 2, "score": 9}, {"id": 3, "score": None}, {"id": 4}],
        )
    ]


def test_where_ordering_coerces_like_the_playground():
    data = SQLEngine(_scores()).execute("SELECT id FROM scores WHERE score > 5").results[0].data
    assert data == [{"id": 1}, {"id": 2}]

    data = SQLEngine(_scores()).execute("SELECT id FROM scores WHERE score >= 0").results[0].data
    # NULL counts as 0 in ordering, a missing key never matches.
    assert data == [{"id": 1}, {"id": 2}, {"id": 3}]

    data = SQLEngine(_scores()).execute("SELECT id FROM scores WHERE score < '9'").results[0].data
    assert data == [{"id": 1}, {"id": 3}]


def test_where_null_equality():
    data = SQLEngine(_scores()).execute("SELECT id FROM scores WHERE score = NULL").results[0].data
    assert data == [{"id": 3}, {"id": 4}]

    data = SQLEngine(_scores()).execute("SELECT id FROM scores WHERE score <> null").results[0].data
    assert data == [{"id": 1}, {"id": 2}]


def test_where_unquoted_word_is_a_string_literal():
    tables = [Table(id="t", name="t", columns=[Column("estado", "TEXT")], rows=[{"estado": "activo"}, {"estado": "baja"}])]
    data = SQLEngine(tables).execute("SELECT * FROM t WHERE estado = activo").results[0].data
    assert data == [{"estado": "activo"}]


def test_unquoted_date_and_email_are_raw_string_literals():
    tables = [Table(id="t", name="t", columns=[Column("v", "TEXT")], rows=[{"v": "2024-01-01"}, {"v": "x"}])]
    outcome = SQLEngine(tables).execute(
        "SELECT * FROM t WHERE v = 2024-01-01;"
        "INSERT INTO t (v) VALUES (2024-01-01), (a@b.com);"
        "SELECT * FROM t WHERE v = a@b.com"
    )
    assert [r.success for r in outcome.results] == [True, True, True]
    assert outcome.results[0].data == [{"v": "2024-01-01"}]
    assert outcome.updated_tables[0].rows[-2:] == [{"v": "2024-01-01"}, {"v": "a@b.com"}]
    assert outcome.results[2].data == [{"v": "a@b.com"}]
