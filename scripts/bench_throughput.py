import time

from playsql_engine import SQLEngine


def main() -> None:
    n = 2000
    engine = SQLEngine([])
    engine.execute("CREATE TABLE bench (id INT PRIMARY KEY AUTOINCREMENT, v TEXT)")

    start = time.perf_counter()
    engine.execute(";".join(f"INSERT INTO bench (v) VALUES ('x{i}')" for i in range(n)))
    insert_seconds = time.perf_counter() - start

    start = time.perf_counter()
    engine.execute(";".join(f"SELECT id FROM bench WHERE id = {i}" for i in range(1, n + 1)))
    select_seconds = time.perf_counter() - start

    print(f"Statements per phase: {n}")
    print(f"INSERT statements/s: {n / insert_seconds:.2f}")
    print(f"SELECT statements/s: {n / select_seconds:.2f}")
    print(f"TOTAL statements/s: {2 * n / (insert_seconds + select_seconds):.2f}")


if __name__ == "__main__":
    main()
