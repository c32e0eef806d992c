"""Trees, people and relationship assertions stored in KuzuDB."""
import logging
import uuid
from datetime import datetime, timezone

import kuzu

from .models import Person, RelationshipAssertion
from .vocabulary import Gender, RelationKind, reciprocal_of

logger = logging.getLogger(__name__)

PERSON_FIELDS = "p.id, p.display_name, p.gender, p.avatar, p.status, p.tree_id, p.created_at"
UPDATABLE_PERSON_FIELDS = ("display_name", "gender", "avatar", "status")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _person_row(row) -> dict:
    return {
        "id": row[0],
        "display_name": row[1],
        "gender": row[2] or Gender.UNKNOWN.value,
        "avatar": row[3] or None,
        "status": row[4] or None,
        "tree_id": row[5],
        "created_at": row[6],
    }


def _rel_row(row) -> dict:
    return {
        "id": row[0],
        "from_person_id": row[1],
        "to_person_id": row[2],
        "relation_type": row[3],
        "asserted_by": row[4] or None,
        "seq": row[5],
        "created_at": row[6],
    }


# ── Trees ──

def create_tree(conn: kuzu.Connection, name: str) -> dict:
    tid = str(uuid.uuid4())
    now = _now()
    conn.execute(
        "CREATE (t:FamilyTree {id: $id, name: $name, created_at: $ts})",
        {"id": tid, "name": name, "ts": now}
    )
    logger.info("Created family tree %s (%s)", tid, name)
    return {"id": tid, "name": name, "created_at": now}


def get_tree(conn: kuzu.Connection, tree_id: str) -> dict | None:
    result = conn.execute(
        "MATCH (t:FamilyTree) WHERE t.id = $id RETURN t.id, t.name, t.created_at",
        {"id": tree_id}
    )
    if result.has_next():
        row = result.get_next()
        return {"id": row[0], "name": row[1], "created_at": row[2]}
    return None


def list_trees(conn: kuzu.Connection) -> list[dict]:
    result = conn.execute(
        "MATCH (t:FamilyTree) RETURN t.id, t.name, t.created_at ORDER BY t.name"
    )
    trees = []
    while result.has_next():
        row = result.get_next()
        trees.append({"id": row[0], "name": row[1], "created_at": row[2]})
    return trees


def delete_tree(conn: kuzu.Connection, tree_id: str):
    """Delete a tree with all its people and their relationships."""
    conn.execute(
        "MATCH (p:Person) WHERE p.tree_id = $tid DETACH DELETE p",
        {"tid": tree_id}
    )
    conn.execute(
        "MATCH (t:FamilyTree) WHERE t.id = $tid DELETE t",
        {"tid": tree_id}
    )
    logger.info("Deleted family tree %s", tree_id)


# ── People ──

def create_person(conn: kuzu.Connection, display_name: str, gender: str = "unknown",
                  avatar: str | None = None, status: str | None = None,
                  tree_id: str = "") -> dict:
    display_name = (display_name or "").strip()
    if not display_name:
        raise ValueError("display_name is required")
    pid = str(uuid.uuid4())
    now = _now()
    conn.execute(
        "CREATE (p:Person {id: $id, display_name: $name, gender: $gender, "
        "avatar: $avatar, status: $status, tree_id: $tid, created_at: $ts})",
        {"id": pid, "name": display_name, "gender": Gender.parse(gender).value,
         "avatar": avatar or "", "status": status or "", "tid": tree_id, "ts": now}
    )
    return {
        "id": pid, "display_name": display_name, "gender": Gender.parse(gender).value,
        "avatar": avatar or None, "status": status or None,
        "tree_id": tree_id, "created_at": now,
    }


def get_person(conn: kuzu.Connection, person_id: str, tree_id: str | None = None) -> dict | None:
    result = conn.execute(
        f"MATCH (p:Person) WHERE p.id = $id RETURN {PERSON_FIELDS}",
        {"id": person_id}
    )
    if not result.has_next():
        return None
    person = _person_row(result.get_next())
    if tree_id is not None and person["tree_id"] != tree_id:
        return None
    return person


def list_people(conn: kuzu.Connection, tree_id: str) -> list[dict]:
    result = conn.execute(
        f"MATCH (p:Person) WHERE p.tree_id = $tid RETURN {PERSON_FIELDS} "
        "ORDER BY p.display_name",
        {"tid": tree_id}
    )
    people = []
    while result.has_next():
        people.append(_person_row(result.get_next()))
    return people


def update_person(conn: kuzu.Connection, person_id: str, **fields) -> dict | None:
    changes = {k: v for k, v in fields.items() if k in UPDATABLE_PERSON_FIELDS and v is not None}
    if "gender" in changes:
        changes["gender"] = Gender.parse(changes["gender"]).value
    if "display_name" in changes:
        changes["display_name"] = changes["display_name"].strip()
        if not changes["display_name"]:
            raise ValueError("display_name cannot be empty")
    if changes:
        assignments = ", ".join(f"p.{k} = ${k}" for k in changes)
        conn.execute(
            f"MATCH (p:Person) WHERE p.id = $id SET {assignments}",
            {"id": person_id, **changes}
        )
    return get_person(conn, person_id)


def delete_person(conn: kuzu.Connection, person_id: str):
    """Delete a person and every relationship touching them."""
    conn.execute("MATCH (p:Person) WHERE p.id = $id DETACH DELETE p", {"id": person_id})


# ── Relationships ──

def _next_seq(conn: kuzu.Connection) -> int:
    result = conn.execute("MATCH (:Person)-[r:RELATES_TO]->(:Person) RETURN max(r.seq)")
    current = result.get_next()[0] if result.has_next() else None
    return (current or 0) + 1


def _insert_relationship(conn, from_id, to_id, kind: RelationKind, asserted_by) -> dict:
    rid = str(uuid.uuid4())
    seq = _next_seq(conn)
    now = _now()
    conn.execute(
        "MATCH (a:Person), (b:Person) WHERE a.id = $from_id AND b.id = $to_id "
        "CREATE (a)-[:RELATES_TO {id: $id, relation_type: $rt, asserted_by: $by, "
        "seq: $seq, created_at: $ts}]->(b)",
        {"from_id": from_id, "to_id": to_id, "id": rid, "rt": kind.value,
         "by": asserted_by or "", "seq": seq, "ts": now}
    )
    return {
        "id": rid, "from_person_id": from_id, "to_person_id": to_id,
        "relation_type": kind.value, "asserted_by": asserted_by or None,
        "seq": seq, "created_at": now,
    }


def create_relationship(conn: kuzu.Connection, from_id: str, to_id: str, relation_type: str,
                        asserted_by: str | None = None, tree_id: str | None = None,
                        reciprocal: bool = False) -> dict:
    """Record "from is the relation_type of to".

    With ``reciprocal=True`` the opposite assertion is recorded as well, using
    the gender of ``to`` to pick its label.
    """
    kind = RelationKind.parse(relation_type)
    if kind is None:
        raise ValueError(f"Unknown relationship type: {relation_type!r}")
    if from_id == to_id:
        raise ValueError("A person cannot be related to themselves")

    source = get_person(conn, from_id, tree_id=tree_id)
    target = get_person(conn, to_id, tree_id=tree_id)
    if source is None or target is None:
        raise ValueError("Both people must exist in this tree")
    if source["tree_id"] != target["tree_id"]:
        raise ValueError("People belong to different trees")

    rel = _insert_relationship(conn, from_id, to_id, kind, asserted_by)
    if reciprocal:
        # the reverse label describes ``to`` as seen from ``from``
        back = reciprocal_of(kind, Gender.parse(target["gender"]), Gender.parse(source["gender"]))
        rel["reciprocal"] = _insert_relationship(conn, to_id, from_id, back, asserted_by)
        logger.info("Recorded %s is %s of %s (and %s back)", from_id, kind.value, to_id, back.value)
    return rel


def get_relationship(conn: kuzu.Connection, rel_id: str) -> dict | None:
    result = conn.execute(
        "MATCH (a:Person)-[r:RELATES_TO]->(b:Person) WHERE r.id = $id "
        "RETURN r.id, a.id, b.id, r.relation_type, r.asserted_by, r.seq, r.created_at",
        {"id": rel_id}
    )
    if result.has_next():
        return _rel_row(result.get_next())
    return None


def list_relationships(conn: kuzu.Connection, tree_id: str) -> list[dict]:
    """All assertions in a tree, in recording order."""
    result = conn.execute(
        "MATCH (a:Person)-[r:RELATES_TO]->(b:Person) "
        "WHERE a.tree_id = $tid AND b.tree_id = $tid "
        "RETURN r.id, a.id, b.id, r.relation_type, r.asserted_by, r.seq, r.created_at "
        "ORDER BY r.seq",
        {"tid": tree_id}
    )
    rels = []
    while result.has_next():
        rels.append(_rel_row(result.get_next()))
    return rels


def delete_relationship(conn: kuzu.Connection, rel_id: str):
    conn.execute(
        "MATCH (:Person)-[r:RELATES_TO]->(:Person) WHERE r.id = $id DELETE r",
        {"id": rel_id}
    )


# ── Engine input ──

def load_roster(conn: kuzu.Connection, tree_id: str):
    """People and assertions of one tree as plain engine records."""
    people = [
        Person(
            person_id=p["id"], display_name=p["display_name"], gender=p["gender"],
            avatar=p["avatar"], status=p["status"],
        )
        for p in list_people(conn, tree_id)
    ]
    assertions = [
        RelationshipAssertion(
            from_id=r["from_person_id"], to_id=r["to_person_id"],
            relation_type=r["relation_type"], asserted_by=r["asserted_by"],
        )
        for r in list_relationships(conn, tree_id)
    ]
    return people, assertions
