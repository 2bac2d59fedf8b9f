import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from playsql_engine import Column, EngineSettings, SQLEngine, Table


def _usuarios():
    return [
        Table(
            id="t1",
            name="usuarios",
            columns=[
                Column(name="id", data_type="INT", is_primary=True, auto_increment=True),
                Column(name="nombre", data_type="TEXT"),
            ],
            rows=[{"id": 1, "nombre": "Lucas Roman"}, {"id": 2, "nombre": "Ana"}],
            position={"x": 10, "y": 20},
        )
    ]


def test_alter_table_add_column_backfills_none():
    outcome = SQLEngine(_usuarios()).execute("ALTER TABLE usuarios ADD COLUMN email VARCHAR(120)")
    result = outcome.results[0]
    assert result.success is True
    assert result.message == "Column 'email' added"

    table = outcome.updated_tables[0]
    assert [col.name for col in table.columns] == ["id", "nombre", "email"]
    assert table.columns[-1].data_type == "VARCHAR(120)"
    assert all(row["email"] is None for row in table.rows)


def test_alter_table_add_existing_column_fails():
    result = SQLEngine(_usuarios()).execute("ALTER TABLE usuarios ADD COLUMN NOMBRE TEXT").results[0]
    assert result.success is False
    assert "already exists" in result.error


def test_alter_table_rename_column_moves_values():
    outcome = SQLEngine(_usuarios()).execute(
        "ALTER TABLE usuarios RENAME COLUMN nombre TO name; SELECT name FROM usuarios;"
    )
    assert [r.success for r in outcome.results] == [True, True]
    assert outcome.results[1].data == [{"name": "Lucas Roman"}, {"name": "Ana"}]

    table = outcome.updated_tables[0]
    assert [col.name for col in table.columns] == ["id", "name"]
    assert all("nombre" not in row for row in table.rows)
    assert list(table.rows[0].keys()) == ["id", "name"]


def test_alter_table_rename_missing_column_fails():
    result = SQLEngine(_usuarios()).execute("ALTER TABLE usuarios RENAME COLUMN apodo TO alias").results[0]
    assert result.success is False
    assert "Column 'apodo' does not exist" in result.error


def test_alter_table_rename_onto_existing_column_fails():
    result = SQLEngine(_usuarios()).execute("ALTER TABLE usuarios RENAME COLUMN nombre TO id").results[0]
    assert result.success is False
    assert "Column 'id' already exists" in result.error


def test_alter_table_unsupported_form():
    result = SQLEngine(_usuarios()).execute("ALTER TABLE usuarios DROP COLUMN nombre").results[0]
    assert result.success is False
    assert result.error == "ALTER TABLE syntax not supported"


def test_drop_table():
    outcome = SQLEngine(_usuarios()).execute("DROP TABLE Usuarios; SELECT * FROM usuarios")
    assert outcome.results[0].success is True
    assert outcome.results[0].message == "Table 'usuarios' dropped"
    assert outcome.results[1].success is False
    assert "not found" in outcome.results[1].error
    assert outcome.updated_tables == []


def test_drop_missing_table_fails():
    result = SQLEngine([]).execute("DROP TABLE usuarios").results[0]
    assert result.success is False
    assert "Table 'usuarios' not found" in result.error


def test_create_table_defaults():
    outcome = SQLEngine([]).execute(
        "CREATE TABLE Pedidos (id SERIAL PRIMARY KEY, total DECIMAL(10,2) NOT NULL, usuario_id INT REFERENCES usuarios(id))"
    )
    assert outcome.results[0].message == "Table 'pedidos' created"

    table = outcome.updated_tables[0]
    assert table.name == "pedidos"
    assert table.id.startswith("t-")
    assert table.rows == []
    assert table.position == {"x": 100, "y": 100}

    id_col, total_col, user_col = table.columns
    assert id_col.is_primary and id_col.auto_increment
    assert total_col.data_type == "DECIMAL(10,2)"
    assert total_col.not_null is True
    assert user_col.is_foreign_key is True
    assert user_col.references == {"table": "usuarios", "column": "id"}


def test_create_table_with_bare_references_succeeds():
    outcome = SQLEngine([]).execute("CREATE TABLE pedidos (id INT PRIMARY KEY, uid INT REFERENCES usuarios)")
    assert outcome.results[0].success is True

    uid = outcome.updated_tables[0].columns[1]
    assert uid.is_foreign_key is False
    assert uid.references is None


def test_create_table_uses_settings():
    settings = EngineSettings(default_position={"x": 5, "y": 6}, table_id_prefix="tbl-")
    table = SQLEngine([], settings=settings).execute("CREATE TABLE t (id INT)").updated_tables[0]
    assert table.position == {"x": 5, "y": 6}
    assert table.id.startswith("tbl-")


def test_create_tables_get_distinct_ids():
    tables = SQLEngine([]).execute("CREATE TABLE a (id INT); CREATE TABLE b (id INT); CREATE TABLE c (id INT)").updated_tables
    assert len({table.id for table in tables}) == 3


def test_create_existing_table_fails_case_insensitive():
    result = SQLEngine(_usuarios()).execute("CREATE TABLE USUARIOS (id INT)").results[0]
    assert result.success is False
    assert "already exists" in result.error


def test_create_table_duplicate_column_fails():
    result = SQLEngine([]).execute("CREATE TABLE t (id INT, ID TEXT)").results[0]
    assert result.success is False
    assert "Duplicate column 'id'" in result.error


def test_ddl_keeps_table_id_and_position():
    outcome = SQLEngine(_usuarios()).execute(
        "ALTER TABLE usuarios ADD COLUMN edad INT; ALTER TABLE usuarios RENAME COLUMN edad TO age"
    )
    table = outcome.updated_tables[0]
    assert table.id == "t1"
    assert table.position == {"x": 10, "y": 20}
