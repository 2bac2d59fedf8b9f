from playsql_engine import SQLEngine, Table
from playsql_engine.schema import Column


def run_demo() -> None:
    tables = [
        Table(
            id="t1",
            name="usuarios",
            columns=[
                Column(name="id", data_type="INT", is_primary=True, auto_increment=True),
                Column(name="nombre", data_type="TEXT"),
            ],
            rows=[{"id": 1, "nombre": "Lucas Roman"}],
        )
    ]

    outcome = SQLEngine(tables).execute(
        """
        -- seed a few more users
        INSERT INTO usuarios (nombre) VALUES ('Ana'), ('Bruno');
        ALTER TABLE usuarios ADD COLUMN activo BOOLEAN;
        UPDATE usuarios SET activo = TRUE WHERE id >= 2;
        SELECT * FROM usuarios ORDER BY id DESC;
        DELETE FROM nope;
        """
    )
    for result in outcome.results:
        status = "ok" if result.success else "failed"
        print(f"[{status}] {result.statement}")
        print(f"  {result.message if result.success else result.error}")
        for row in result.data or []:
            print(f"  {row}")

    # The engine worked on a copy; committing is the caller's job.
    tables = outcome.updated_tables
    print("Committed tables:", [(t.name, len(t.rows)) for t in tables])


if __name__ == "__main__":
    run_demo()
