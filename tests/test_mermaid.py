"""
Test Suite for Mermaid Generation

Tests the chart text drawn from state links:
- Header with theme variables and direction
- Node shapes, arrows and edge labels
- Subgraphs for chart groups
- Pathway charts
"""

import json

import pytest

from machi import Entry, Fork, build_tree
from machi.graph import (
    DARK_THEME,
    LIGHT_THEME,
    generate_mermaid,
    generate_mermaid_from_pathways,
    get_pathways_to_state,
)
from machi.graph.mermaid import chart_id


STATES = [
    Entry("E1", ["hasE1"]),
    Fork("F1", ["isF1"], [Entry("E2", ["hasE2"])]),
    Entry("E3", []),
]


@pytest.fixture
def lines():
    return generate_mermaid(STATES).splitlines()


class TestHeader:
    """The init directive and graph direction."""

    def test_init_directive_carries_theme_variables(self, lines):
        assert lines[0].startswith("%%{init: ")
        assert lines[0].endswith("}%%")
        init = json.loads(lines[0][len("%%{init: "):-len("}%%")])
        assert init["theme"] == "base"
        assert init["themeVariables"]["primaryColor"] == DARK_THEME.primary_color
        assert init["themeVariables"]["darkMode"] is True

    def test_vertical_by_default(self, lines):
        assert lines[1] == "graph TD"

    def test_horizontal(self):
        assert generate_mermaid(STATES, direction="horizontal").splitlines()[1] == "graph LR"

    def test_light_theme(self):
        header = generate_mermaid(STATES, theme=LIGHT_THEME).splitlines()[0]
        assert LIGHT_THEME.background in header
        assert '"darkMode":false' in header


class TestLinks:
    """Edges between nodes."""

    def test_one_line_per_link(self, lines):
        assert len(lines) == 2 + 4

    def test_entry_done_edge(self, lines):
        assert '-->' in lines[2]
        assert '|hasE1 is true|' in lines[2]
        assert lines[2].startswith("e1_")

    def test_forks_are_diamonds(self, lines):
        tree = build_tree(STATES)
        fork = tree.find_by_name("F1")[0]
        assert f'{chart_id(fork)}{{"F1"}}' in lines[3]

    def test_skipped_edge_is_dotted(self, lines):
        skipped = lines[-1]
        assert " -.-> " in skipped
        assert "|isF1 is false|" in skipped

    def test_several_conditions_are_joined(self):
        text = generate_mermaid([Entry("A", ["hasA", "hasB"]), Entry("B", [])])
        assert "|hasA and hasB are true|" in text

    def test_lambda_conditions_are_unknown(self):
        text = generate_mermaid([Entry("A", [lambda ctx: True]), Entry("B", [])])
        assert "|unknown is true|" in text

    def test_named_functions_use_their_name(self):
        def has_a(ctx):
            return True

        assert "|has_a is true|" in generate_mermaid([Entry("A", [has_a]), Entry("B", [])])

    def test_quotes_in_labels_are_escaped(self):
        text = generate_mermaid([Entry('Say "hi"', ["said"]), Entry("B", [])])
        assert '"Say #quot;hi#quot;"' in text

    def test_chart_ids_differ_for_same_label(self):
        tree = build_tree([Fork("A", [], [Entry("X")]), Fork("B", [], [Entry("X")])])
        first, second = tree.find_by_id("X")
        assert chart_id(first) != chart_id(second)
        assert chart_id(first).startswith("x_")


class TestGroupsAndPathways:
    """Subgraphs and pathway charts."""

    def test_chart_group_becomes_subgraph(self):
        states = [Fork("F", ["f"], [Entry("A", ["a"])], chart_group="Sign up"), Entry("B", [])]
        lines = generate_mermaid(states).splitlines()
        assert "subgraph sign_up [Sign up]" in lines
        assert "end" in lines
        assert lines.index("subgraph sign_up [Sign up]") < lines.index("end")

    def test_each_pathway_gets_its_own_nodes(self):
        pathways = get_pathways_to_state("E3", STATES)
        text = generate_mermaid_from_pathways(pathways)
        assert "_0[" in text
        assert "_1[" in text
