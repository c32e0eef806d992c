"""Relationship vocabulary: kinds, categories, display groups and reciprocals.

An assertion ``(a, b, kind)`` reads "a is the <kind> of b". The reciprocal is
the kind that describes b as seen from a, which depends on b's gender (and for
spouses, on a's gender when b's is not known).
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, List, Optional


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value) -> "Gender":
        if isinstance(value, Gender):
            return value
        raw = (str(value) if value is not None else "").strip().lower()
        if raw in ("m", "male", "man", "boy"):
            return cls.MALE
        if raw in ("f", "female", "woman", "girl"):
            return cls.FEMALE
        return cls.UNKNOWN


class Category(str, enum.Enum):
    ANCESTOR = "ancestor"
    DESCENDANT = "descendant"
    LATERAL = "lateral"

    def inverse(self) -> "Category":
        if self is Category.ANCESTOR:
            return Category.DESCENDANT
        if self is Category.DESCENDANT:
            return Category.ANCESTOR
        return Category.LATERAL


class NodeGroup(str, enum.Enum):
    FAMILY = "family"
    FRIEND = "friend"
    MENTOR = "mentor"
    CULTURAL = "cultural"
    OTHER = "other"


class RelationKind(str, enum.Enum):
    FATHER = "father"
    MOTHER = "mother"
    PARENT = "parent"
    SON = "son"
    DAUGHTER = "daughter"
    CHILD = "child"
    BROTHER = "brother"
    SISTER = "sister"
    SIBLING = "sibling"
    HUSBAND = "husband"
    WIFE = "wife"
    SPOUSE = "spouse"
    GRANDFATHER = "grandfather"
    GRANDMOTHER = "grandmother"
    GRANDPARENT = "grandparent"
    GRANDSON = "grandson"
    GRANDDAUGHTER = "granddaughter"
    GRANDCHILD = "grandchild"
    UNCLE = "uncle"
    AUNT = "aunt"
    PIBLING = "pibling"
    NEPHEW = "nephew"
    NIECE = "niece"
    NIBLING = "nibling"
    COUSIN = "cousin"
    FRIEND = "friend"
    MENTOR = "mentor"
    MENTEE = "mentee"
    NEIGHBOR = "neighbor"
    OTHER = "other"

    @classmethod
    def parse(cls, value) -> Optional["RelationKind"]:
        """Case-insensitive lookup that also understands legacy aliases.

        Returns None for strings outside the vocabulary.
        """
        if isinstance(value, RelationKind):
            return value
        if value is None:
            return None
        raw = str(value).strip().lower().replace("-", " ").replace("_", " ")
        raw = " ".join(raw.split())
        if not raw:
            return None
        alias = ALIASES.get(raw)
        if alias is not None:
            return alias
        try:
            return cls(raw)
        except ValueError:
            return None


ALIASES: Dict[str, RelationKind] = {
    "dad": RelationKind.FATHER,
    "mom": RelationKind.MOTHER,
    "mum": RelationKind.MOTHER,
    "parent of": RelationKind.PARENT,
    "child of": RelationKind.CHILD,
    "sibling of": RelationKind.SIBLING,
    "spouse of": RelationKind.SPOUSE,
    "partner": RelationKind.SPOUSE,
    "grandma": RelationKind.GRANDMOTHER,
    "grandpa": RelationKind.GRANDFATHER,
    "teacher": RelationKind.MENTOR,
    "guide": RelationKind.MENTOR,
    "student": RelationKind.MENTEE,
    "cultural": RelationKind.NEIGHBOR,
    "community": RelationKind.NEIGHBOR,
    "neighbour": RelationKind.NEIGHBOR,
}

K = RelationKind

CATEGORIES: Dict[RelationKind, Category] = {
    K.FATHER: Category.ANCESTOR,
    K.MOTHER: Category.ANCESTOR,
    K.PARENT: Category.ANCESTOR,
    K.GRANDFATHER: Category.ANCESTOR,
    K.GRANDMOTHER: Category.ANCESTOR,
    K.GRANDPARENT: Category.ANCESTOR,
    K.UNCLE: Category.ANCESTOR,
    K.AUNT: Category.ANCESTOR,
    K.PIBLING: Category.ANCESTOR,
    K.SON: Category.DESCENDANT,
    K.DAUGHTER: Category.DESCENDANT,
    K.CHILD: Category.DESCENDANT,
    K.GRANDSON: Category.DESCENDANT,
    K.GRANDDAUGHTER: Category.DESCENDANT,
    K.GRANDCHILD: Category.DESCENDANT,
    K.NEPHEW: Category.DESCENDANT,
    K.NIECE: Category.DESCENDANT,
    K.NIBLING: Category.DESCENDANT,
    K.BROTHER: Category.LATERAL,
    K.SISTER: Category.LATERAL,
    K.SIBLING: Category.LATERAL,
    K.HUSBAND: Category.LATERAL,
    K.WIFE: Category.LATERAL,
    K.SPOUSE: Category.LATERAL,
    K.COUSIN: Category.LATERAL,
    K.FRIEND: Category.LATERAL,
    K.MENTOR: Category.LATERAL,
    K.MENTEE: Category.LATERAL,
    K.NEIGHBOR: Category.LATERAL,
    K.OTHER: Category.LATERAL,
}

GROUPS: Dict[RelationKind, NodeGroup] = {
    **{k: NodeGroup.FAMILY for k in CATEGORIES},
    K.FRIEND: NodeGroup.FRIEND,
    K.MENTOR: NodeGroup.MENTOR,
    K.MENTEE: NodeGroup.MENTOR,
    K.NEIGHBOR: NodeGroup.CULTURAL,
    K.OTHER: NodeGroup.OTHER,
}

# Gender implied by the kind itself ("father" is male).
IMPLIED_GENDER: Dict[RelationKind, Gender] = {
    K.FATHER: Gender.MALE, K.SON: Gender.MALE, K.BROTHER: Gender.MALE,
    K.HUSBAND: Gender.MALE, K.GRANDFATHER: Gender.MALE, K.GRANDSON: Gender.MALE,
    K.UNCLE: Gender.MALE, K.NEPHEW: Gender.MALE,
    K.MOTHER: Gender.FEMALE, K.DAUGHTER: Gender.FEMALE, K.SISTER: Gender.FEMALE,
    K.WIFE: Gender.FEMALE, K.GRANDMOTHER: Gender.FEMALE,
    K.GRANDDAUGHTER: Gender.FEMALE, K.AUNT: Gender.FEMALE, K.NIECE: Gender.FEMALE,
}


@dataclass(frozen=True)
class ReciprocalEntry:
    male: RelationKind
    female: RelationKind
    generic: RelationKind

    def for_gender(self, gender: Gender) -> Optional[RelationKind]:
        if gender is Gender.MALE:
            return self.male
        if gender is Gender.FEMALE:
            return self.female
        return None

    @property
    def gendered(self) -> bool:
        return self.male is not self.female


def _entry(male, female=None, generic=None) -> ReciprocalEntry:
    return ReciprocalEntry(male, female or male, generic or male)


_TO_CHILD = _entry(K.SON, K.DAUGHTER, K.CHILD)
_TO_PARENT = _entry(K.FATHER, K.MOTHER, K.PARENT)
_TO_SIBLING = _entry(K.BROTHER, K.SISTER, K.SIBLING)
_TO_SPOUSE = _entry(K.HUSBAND, K.WIFE, K.SPOUSE)
_TO_GRANDCHILD = _entry(K.GRANDSON, K.GRANDDAUGHTER, K.GRANDCHILD)
_TO_GRANDPARENT = _entry(K.GRANDFATHER, K.GRANDMOTHER, K.GRANDPARENT)
_TO_NIBLING = _entry(K.NEPHEW, K.NIECE, K.NIBLING)
_TO_PIBLING = _entry(K.UNCLE, K.AUNT, K.PIBLING)

RECIPROCALS: Dict[RelationKind, ReciprocalEntry] = {
    K.FATHER: _TO_CHILD,
    K.MOTHER: _TO_CHILD,
    K.PARENT: _TO_CHILD,
    K.SON: _TO_PARENT,
    K.DAUGHTER: _TO_PARENT,
    K.CHILD: _TO_PARENT,
    K.BROTHER: _TO_SIBLING,
    K.SISTER: _TO_SIBLING,
    K.SIBLING: _TO_SIBLING,
    K.HUSBAND: _TO_SPOUSE,
    K.WIFE: _TO_SPOUSE,
    K.SPOUSE: _TO_SPOUSE,
    K.GRANDFATHER: _TO_GRANDCHILD,
    K.GRANDMOTHER: _TO_GRANDCHILD,
    K.GRANDPARENT: _TO_GRANDCHILD,
    K.GRANDSON: _TO_GRANDPARENT,
    K.GRANDDAUGHTER: _TO_GRANDPARENT,
    K.GRANDCHILD: _TO_GRANDPARENT,
    K.UNCLE: _TO_NIBLING,
    K.AUNT: _TO_NIBLING,
    K.PIBLING: _TO_NIBLING,
    K.NEPHEW: _TO_PIBLING,
    K.NIECE: _TO_PIBLING,
    K.NIBLING: _TO_PIBLING,
    K.COUSIN: _entry(K.COUSIN),
    K.FRIEND: _entry(K.FRIEND),
    K.MENTOR: _entry(K.MENTEE),
    K.MENTEE: _entry(K.MENTOR),
    K.NEIGHBOR: _entry(K.NEIGHBOR),
    K.OTHER: _entry(K.OTHER),
}

# Spouse kinds resolve an unknown partner gender from the asking side.
SPOUSE_BY_SOURCE_GENDER: Dict[Gender, RelationKind] = {
    Gender.MALE: K.WIFE,
    Gender.FEMALE: K.HUSBAND,
}

SPOUSE_KINDS = frozenset({K.HUSBAND, K.WIFE, K.SPOUSE})


@dataclass(frozen=True)
class Reciprocal:
    kind: RelationKind
    low_confidence: bool = False


def category_of(kind: RelationKind) -> Category:
    return CATEGORIES[kind]


def group_of(kind: RelationKind) -> NodeGroup:
    return GROUPS[kind]


def implied_gender(kind: RelationKind) -> Gender:
    return IMPLIED_GENDER.get(kind, Gender.UNKNOWN)


def relationship_types() -> List[str]:
    """Kinds offered by pickers, generic fallbacks excluded."""
    hidden = {K.PARENT, K.CHILD, K.SIBLING, K.SPOUSE, K.GRANDPARENT,
              K.GRANDCHILD, K.PIBLING, K.NIBLING}
    return [k.value for k in RelationKind if k not in hidden]


def resolve_reciprocal(
    kind: RelationKind,
    target_gender: Gender = Gender.UNKNOWN,
    source_gender: Optional[Gender] = None,
) -> Reciprocal:
    """Reciprocal of ``kind`` plus whether the generic fallback was needed."""
    entry = RECIPROCALS[kind]
    resolved = entry.for_gender(Gender.parse(target_gender))
    if resolved is not None:
        return Reciprocal(resolved)
    if not entry.gendered:
        return Reciprocal(entry.generic)

    if kind in SPOUSE_KINDS:
        asking = Gender.parse(source_gender)
        if asking is Gender.UNKNOWN:
            asking = implied_gender(kind)
        by_source = SPOUSE_BY_SOURCE_GENDER.get(asking)
        if by_source is not None:
            return Reciprocal(by_source)

    return Reciprocal(entry.generic, low_confidence=True)


def reciprocal_of(
    kind: RelationKind,
    target_gender: Gender = Gender.UNKNOWN,
    source_gender: Optional[Gender] = None,
) -> RelationKind:
    return resolve_reciprocal(kind, target_gender, source_gender).kind
