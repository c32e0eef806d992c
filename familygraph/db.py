"""KuzuDB embedded graph database connection."""
import logging
import kuzu

from .config import DB_PATH

logger = logging.getLogger(__name__)

_database = None


def get_database():
    global _database
    if _database is None:
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        _database = kuzu.Database(str(DB_PATH))
        _init_schema(_database)
        logger.info("Opened family graph database at %s", DB_PATH)
    return _database


def _init_schema(db):
    conn = kuzu.Connection(db)

    # ── Trees and people ──
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS FamilyTree("
        "id STRING, name STRING, created_at STRING, "
        "PRIMARY KEY(id))"
    )
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS Person("
        "id STRING, display_name STRING, gender STRING, "
        "avatar STRING, status STRING, tree_id STRING, created_at STRING, "
        "PRIMARY KEY(id))"
    )

    # ── Directed assertions: from is the relation_type of to ──
    conn.execute(
        "CREATE REL TABLE IF NOT EXISTS RELATES_TO("
        "FROM Person TO Person, id STRING, relation_type STRING, "
        "asserted_by STRING, seq INT64, created_at STRING)"
    )


def get_conn():
    db = get_database()
    conn = kuzu.Connection(db)
    try:
        yield conn
    finally:
        pass
