"""Legacy CSV/TXT family files -> roster, assertions and KuzuDB rows.

File layout (one assertion per row, ``#`` comments allowed)::

    Person 1,Relation,Person 2,Gender,Details
    Grandpa,Earliest Ancestor,,M,The patriarch
    Dad,Son,Grandpa,M,

"Person 1 is the Relation of Person 2"; Gender belongs to Person 1.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import kuzu
import pandas as pd

from . import crud
from .models import Person, RelationshipAssertion
from .vocabulary import Gender, RelationKind

logger = logging.getLogger(__name__)

ROOT_MARKER = "earliest ancestor"
COLUMNS = ["Person 1", "Relation", "Person 2", "Gender", "Details"]


@dataclass(frozen=True)
class LegacyRow:
    line: int
    person1: str
    relation: str
    person2: Optional[str] = None
    gender: Optional[str] = None
    details: Optional[str] = None


def _cell(value) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    if text == "" or text.lower() in ("none", "nan"):
        return None
    return text


def read_legacy_rows(source) -> List[LegacyRow]:
    """
    Reads a path or file-like object.
    Supports comment lines starting with '#'.
    """
    df = pd.read_csv(source, comment="#", dtype=str, skipinitialspace=True)
    df.columns = [str(c).strip() for c in df.columns]

    required = {"Person 1", "Relation"}
    missing = required - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {sorted(missing)}")

    rows: List[LegacyRow] = []
    for i, r in df.iterrows():
        line = int(i) + 2  # header is line 1
        person1 = _cell(r.get("Person 1"))
        relation = _cell(r.get("Relation"))
        if person1 is None and relation is None:
            continue
        if person1 is None:
            raise ValueError(f"Line {line}: Person 1 is required")
        if relation is None:
            raise ValueError(f"Line {line}: Relation is required")

        gender = _cell(r.get("Gender")) if "Gender" in df.columns else None
        if gender and Gender.parse(gender) is Gender.UNKNOWN and gender.upper() not in ("U", "UNKNOWN"):
            raise ValueError(f"Line {line}: Gender must be M/F/U (got {gender!r})")

        rows.append(LegacyRow(
            line=line,
            person1=person1,
            relation=relation,
            person2=_cell(r.get("Person 2")) if "Person 2" in df.columns else None,
            gender=gender,
            details=_cell(r.get("Details")) if "Details" in df.columns else None,
        ))
    return rows


def normalize_person(raw_value: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Returns:
      person_id     -> internal unique key (full raw string)
      display_name  -> 'Base (Nick)' for 'Base\\n(Nick)' names, else the raw name
    """
    if raw_value is None or pd.isna(raw_value):
        return None, None

    raw = str(raw_value).strip()
    if raw == "" or raw.lower() in ("none", "nan"):
        return None, None

    # explicit '\n(NickName)' or an actual newline
    for sep in ("\\n(", "\n("):
        if sep in raw:
            base, rest = raw.split(sep, 1)
            return raw, f"{base.strip()} ({rest.rstrip(')').strip()})"

    return raw, " ".join(raw.split())


def rows_to_records(rows: List[LegacyRow]):
    """Roster, ``(line, assertion)`` pairs, suggested roots and per-line errors."""
    people: Dict[str, Person] = {}
    genders: Dict[str, Gender] = {}
    assertions: List[Tuple[int, RelationshipAssertion]] = []
    roots: List[str] = []
    errors: List[dict] = []

    def remember(raw: Optional[str]) -> Optional[str]:
        pid, name = normalize_person(raw)
        if pid and pid not in people:
            people[pid] = Person(person_id=pid, display_name=name)
        return pid

    for row in rows:
        p1 = remember(row.person1)
        p2 = remember(row.person2)
        if row.gender:
            genders[p1] = Gender.parse(row.gender)

        if row.relation.strip().lower() == ROOT_MARKER:
            if p1 not in roots:
                roots.append(p1)
            continue

        kind = RelationKind.parse(row.relation)
        if kind is None:
            errors.append({"line": row.line, "type": "unknown_relation",
                           "message": f"Unknown relation {row.relation!r}"})
            continue
        if not p2:
            errors.append({"line": row.line, "type": "missing_person",
                           "message": f"{row.relation} needs a Person 2"})
            continue
        assertions.append((row.line, RelationshipAssertion(p1, p2, kind.value)))

    roster = [
        Person(p.person_id, p.display_name, genders.get(p.person_id, Gender.UNKNOWN))
        for p in people.values()
    ]
    return roster, assertions, roots, errors


def import_rows(conn: kuzu.Connection, tree_id: str, rows: List[LegacyRow],
                asserted_by: str | None = None) -> dict:
    """Create the people and relationships of ``rows`` inside ``tree_id``."""
    roster, assertions, roots, errors = rows_to_records(rows)
    if not roster:
        return {"people": 0, "relationships": 0, "roots": [],
                "errors": errors or [{"line": 0, "type": "empty", "message": "No data rows found"}]}

    ids: Dict[str, str] = {}
    for person in roster:
        created = crud.create_person(conn, person.display_name, person.gender.value, tree_id=tree_id)
        ids[person.person_id] = created["id"]

    rel_count = 0
    for line, a in assertions:
        try:
            crud.create_relationship(conn, ids[a.from_id], ids[a.to_id], a.relation_type,
                                     asserted_by=asserted_by, tree_id=tree_id)
            rel_count += 1
        except ValueError as e:
            errors.append({"line": line, "type": "rejected", "message": str(e)})

    logger.info("Imported %d people and %d relationships into tree %s",
                len(roster), rel_count, tree_id)
    return {
        "people": len(roster),
        "relationships": rel_count,
        "roots": [ids[r] for r in roots if r in ids],
        "errors": errors,
    }
