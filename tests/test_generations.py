"""Tests for familygraph/layouts/generations.py: rooted BFS generation layout."""
import pytest

from familygraph.assembler import assemble
from familygraph.config import TreeLayoutSettings
from familygraph.layouts.generations import layout_generations
from familygraph.models import IssueKind
from tests.conftest import people, rel

SETTINGS = TreeLayoutSettings(row_height=100.0, spacing=50.0)


@pytest.fixture
def three_generations():
    """Grandpa -> Dad -> (Kid1, Kid2), Dad + Mom spouses, Uncle brother of Dad."""
    return assemble(
        people(("Grandpa", "male"), ("Dad", "male"), ("Mom", "female"),
               ("Kid1", "female"), ("Kid2", "male"), ("Uncle", "male")),
        [
            rel("Grandpa", "Dad", "father"),
            rel("Dad", "Kid1", "father"),
            rel("Kid2", "Dad", "son"),
            rel("Dad", "Mom", "husband"),
            rel("Uncle", "Dad", "brother"),
        ],
    )


class TestGenerations:
    def test_root_only(self):
        g = assemble(people(("P1", None)), [])
        result = layout_generations(g, "P1", SETTINGS)
        assert list(result.positions) == ["P1"]
        assert result.positions["P1"].generation == 0
        assert result.issues == ()

    def test_generation_steps(self, three_generations):
        gens = layout_generations(three_generations, "Dad", SETTINGS).generations
        assert gens == {
            "Dad": 0, "Grandpa": -1, "Kid1": 1, "Kid2": 1, "Mom": 0, "Uncle": 0,
        }

    def test_root_elsewhere(self, three_generations):
        gens = layout_generations(three_generations, "Kid1", SETTINGS).generations
        assert gens["Kid1"] == 0
        assert gens["Dad"] == -1
        assert gens["Grandpa"] == -2
        assert gens["Kid2"] == 0

    def test_rows_use_row_height(self, three_generations):
        pos = layout_generations(three_generations, "Dad", SETTINGS).positions
        for p in pos.values():
            assert p.y == p.generation * SETTINGS.row_height

    def test_lateral_chain_scenario(self):
        g = assemble(
            people(("A", "male"), ("B", "male"), ("C", "male")),
            [rel("A", "B", "brother"), rel("B", "C", "brother"), rel("A", "C", "cousin")],
        )
        gens = layout_generations(g, "A", SETTINGS).generations
        assert gens == {"A": 0, "B": 0, "C": 0}

    def test_first_write_wins(self):
        # X is reachable as Root's cousin (gen 0) and as Kid's child (gen 2);
        # the cousin edge is walked first from the root
        g = assemble(
            people(("Root", "male"), ("Kid", "male"), ("X", "male")),
            [rel("Root", "X", "cousin"), rel("Root", "Kid", "father"), rel("Kid", "X", "father")],
        )
        gens = layout_generations(g, "Root", SETTINGS).generations
        assert gens["X"] == 0
        assert gens["Kid"] == 1

    def test_cycles_terminate(self):
        g = assemble(
            people(("A", "male"), ("B", "male"), ("C", "male")),
            [rel("A", "B", "father"), rel("B", "C", "father"), rel("C", "A", "father")],
        )
        result = layout_generations(g, "A", SETTINGS)
        assert set(result.positions) == {"A", "B", "C"}

    def test_unreachable_people_omitted(self):
        g = assemble(
            people(("A", "male"), ("B", "male"), ("Loner", None)),
            [rel("A", "B", "brother")],
        )
        result = layout_generations(g, "A", SETTINGS)
        assert "Loner" not in result.positions
        assert result.issues == ()

    def test_unknown_root(self):
        g = assemble(people(("A", "male")), [])
        result = layout_generations(g, "missing", SETTINGS)
        assert result.positions == {}
        assert [i.kind for i in result.issues] == [IssueKind.UNREACHABLE_ROOT]


class TestPlacement:
    def test_children_centered_under_parent(self):
        g = assemble(
            people(("P", "male"), ("C1", "male"), ("C2", "female"), ("C3", "male")),
            [rel("P", "C1", "father"), rel("P", "C2", "father"), rel("P", "C3", "father")],
        )
        pos = layout_generations(g, "P", SETTINGS).positions
        xs = [pos[c].x for c in ("C1", "C2", "C3")]
        assert xs == [-50.0, 0.0, 50.0]
        assert pos["P"].x == 0.0

    def test_laterals_on_both_sides(self):
        g = assemble(
            people(("Me", "male"), ("Bro", "male"), ("Sis", "female")),
            [rel("Bro", "Me", "brother"), rel("Sis", "Me", "sister")],
        )
        pos = layout_generations(g, "Me", SETTINGS).positions
        assert pos["Bro"].x == -50.0
        assert pos["Me"].x == 0.0
        assert pos["Sis"].x == 50.0

    def test_rows_never_overlap(self, three_generations):
        pos = layout_generations(three_generations, "Dad", SETTINGS).positions
        rows = {}
        for pid, p in pos.items():
            rows.setdefault(p.generation, []).append(p.x)
        for xs in rows.values():
            xs.sort()
            for a, b in zip(xs, xs[1:]):
                assert b - a >= SETTINGS.spacing

    def test_deterministic(self, three_generations):
        first = layout_generations(three_generations, "Dad", SETTINGS)
        second = layout_generations(three_generations, "Dad", SETTINGS)
        assert first.positions == second.positions
        assert list(first.positions) == list(second.positions)

    def test_to_nodes(self, three_generations):
        nodes = layout_generations(three_generations, "Dad", SETTINGS).to_nodes()
        assert nodes[0].person_id == "Dad"
        assert nodes[0].generation == 0
