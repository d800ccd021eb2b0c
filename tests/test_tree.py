import pytest

from sudscript.expression import Expression
from sudscript.messages import MessageLogger, Severity
from sudscript.tree import (
    END_GOTO_LABEL,
    ConditionalContext,
    ConditionalStage,
    NodeType,
    ParsedEdge,
    ParsedNode,
    ParsedTree,
)


def make_tree() -> ParsedTree:
    tree = ParsedTree()
    tree.push_indent(-1, 0, "")
    return tree


def text(speaker="NPC", line="Hello", indent=0, line_no=1) -> ParsedNode:
    return ParsedNode(NodeType.TEXT, indent, line_no, identifier=speaker, text=line)


def start_edge(tree: ParsedTree, node_idx: int, edge: ParsedEdge) -> ParsedEdge:
    node = tree.nodes[node_idx]
    node.edges.append(edge)
    tree.edge_in_progress_node_idx = node_idx
    tree.edge_in_progress_edge_idx = len(node.edges) - 1
    return edge


def test_node_out_of_range_is_none():
    tree = make_tree()
    idx = tree.append_node(text())
    assert tree.node(idx) is tree.nodes[idx]
    assert tree.node(-1) is None
    assert tree.node(idx + 1) is None


def test_sequential_nodes_are_connected():
    tree = make_tree()
    first = tree.append_node(text(line="One"))
    second = tree.append_node(text(line="Two"))
    edge = tree.nodes[first].edges[0]
    assert (edge.source_node_idx, edge.target_node_idx) == (first, second)
    assert tree.nodes[second].parent_node_idx == first
    assert tree.indent_level_stack[-1].last_node_idx == second


def test_choice_path_from_indent_stack():
    tree = make_tree()
    assert tree.current_choice_path() == "/"
    tree.push_indent(-1, 1, "C001")
    assert tree.current_choice_path() == "/C001/"
    tree.pop_indent()
    assert tree.current_choice_path() == "/"


def test_conditional_path_nests_outermost_first():
    tree = make_tree()
    assert tree.current_conditional_path() == "/"
    tree.conditional_blocks.append(ConditionalContext(0, -1, ConditionalStage.IF, "outer"))
    tree.conditional_blocks.append(ConditionalContext(1, 0, ConditionalStage.IF, "inner"))
    tree.current_conditional_block_idx = 1
    assert tree.current_conditional_path() == "/outer/inner/"


def test_edge_in_progress_gets_target_and_is_cleared():
    tree = make_tree()
    choice = tree.append_node(ParsedNode(NodeType.CHOICE))
    edge = start_edge(tree, choice, ParsedEdge(choice, -1, 2, text="Pick me"))
    assert tree.edge_in_progress() is edge
    tree.push_indent(choice, 1, "C001")
    child = tree.append_node(text(indent=1))
    assert edge.target_node_idx == child
    assert tree.nodes[child].parent_node_idx == choice
    assert tree.nodes[child].choice_path == "/C001/"
    assert tree.edge_in_progress() is None


def test_text_is_not_auto_connected_to_choice():
    tree = make_tree()
    choice = tree.append_node(ParsedNode(NodeType.CHOICE))
    after = tree.append_node(text())
    assert tree.nodes[choice].edges == []
    assert tree.nodes[after].parent_node_idx == -1


def test_select_is_auto_connected_to_choice_and_blocks_fallthrough():
    tree = make_tree()
    choice = tree.append_node(ParsedNode(NodeType.CHOICE))
    select = tree.append_node(ParsedNode(NodeType.SELECT))
    assert tree.nodes[choice].edges[0].target_node_idx == select
    assert tree.nodes[select].allow_fallthrough is False


def test_choice_under_selects_disables_their_fallthrough():
    tree = make_tree()
    outer = tree.append_node(ParsedNode(NodeType.SELECT))
    inner = tree.append_node(ParsedNode(NodeType.SELECT))
    assert tree.nodes[outer].allow_fallthrough is True
    tree.append_node(ParsedNode(NodeType.CHOICE))
    assert tree.nodes[inner].allow_fallthrough is False
    assert tree.nodes[outer].allow_fallthrough is False


def test_threshold_indent_shrinks_to_smallest_node_indent():
    tree = make_tree()
    tree.push_indent(-1, 4, "C001")
    tree.append_node(text(indent=2))
    assert tree.indent_level_stack[-1].threshold_indent == 2


def test_is_last_node_of_type():
    tree = make_tree()
    tree.append_node(text())
    assert tree.is_last_node_of_type(NodeType.TEXT)
    assert not tree.is_last_node_of_type(NodeType.CHOICE)


def test_pending_labels_point_to_next_node():
    tree = make_tree()
    tree.pending_goto_labels.extend(["start", "again"])
    idx = tree.append_node(text())
    assert tree.goto_target_node_index("start") == idx
    assert tree.goto_target_node_index("again") == idx
    assert tree.pending_goto_labels == []
    assert tree.goto_target_node_index("missing") == -1


def test_aliases_resolve_through_connect():
    tree = make_tree()
    tree.pending_goto_labels.append("target")
    idx = tree.append_node(text())
    tree.aliased_goto_labels["alias"] = "target"
    assert tree.goto_target_node_index("alias") == idx
    tree.connect_remaining_nodes("script", None, True)
    assert tree.aliased_goto_labels == {}
    assert tree.goto_label_list["alias"] == idx


def test_find_last_choice_node():
    tree = make_tree()
    tree.append_node(text())
    choice = tree.append_node(ParsedNode(NodeType.CHOICE))
    assert tree.find_last_choice_node(0) == choice
    tree.append_node(text())
    assert tree.find_last_choice_node(0) == -1


def test_find_choice_after_text_node():
    tree = make_tree()
    first = tree.append_node(text())
    tree.append_node(ParsedNode(NodeType.SET_VARIABLE, identifier="x"))
    choice = tree.append_node(ParsedNode(NodeType.CHOICE))
    assert tree.find_choice_after_text_node(first) == choice

    other = make_tree()
    a = other.append_node(text())
    other.append_node(text())
    assert other.find_choice_after_text_node(a) == -1


def test_ensure_choice_inserted_above_select():
    tree = make_tree()
    line = tree.append_node(text())
    select = tree.append_node(ParsedNode(NodeType.SELECT))
    edge = start_edge(tree, select, ParsedEdge(select, -1, 3, condition=Expression.parse("{x} == 1")))

    tree.ensure_choice_node_exists_above_select(0, 3)

    choice_idx = line + 1
    new_select_idx = choice_idx + 1
    assert tree.nodes[choice_idx].node_type is NodeType.CHOICE
    assert tree.nodes[line].edges[0].target_node_idx == choice_idx
    assert tree.nodes[choice_idx].edges[0].target_node_idx == new_select_idx
    assert tree.nodes[new_select_idx].parent_node_idx == choice_idx
    assert tree.nodes[new_select_idx].edges[0].source_node_idx == new_select_idx
    assert tree.edge_in_progress() is edge


def test_ensure_choice_noop_when_parent_not_select():
    tree = make_tree()
    tree.append_node(text())
    before = list(tree.nodes)
    tree.ensure_choice_node_exists_above_select(0, 2)
    assert tree.nodes == before


def test_select_missing_else_path():
    tree = make_tree()
    select = ParsedNode(NodeType.SELECT)
    tree.nodes.append(select)
    tree.nodes.append(text())
    select.edges.append(ParsedEdge(0, 1, 1, condition=Expression.parse("{x} == 1")))
    assert tree.select_node_is_missing_else_path(select)
    select.edges.append(ParsedEdge(0, 1, 2))
    assert not tree.select_node_is_missing_else_path(select)


def test_select_leading_to_choice_needs_no_else():
    tree = make_tree()
    select = ParsedNode(NodeType.SELECT)
    tree.nodes.extend([select, ParsedNode(NodeType.CHOICE)])
    select.edges.append(ParsedEdge(0, 1, 1, condition=Expression.parse("{x}")))
    assert not tree.select_node_is_missing_else_path(select)


def test_fallthrough_skips_sibling_choice_paths():
    tree = make_tree()
    choice = tree.append_node(ParsedNode(NodeType.CHOICE))
    start_edge(tree, choice, ParsedEdge(choice, -1, 2, text="First"))
    tree.push_indent(choice, 1, "C001")
    first = tree.append_node(text(indent=1, line="A"))
    tree.pop_indent()
    start_edge(tree, choice, ParsedEdge(choice, -1, 4, text="Second"))
    tree.push_indent(choice, 1, "C002")
    second = tree.append_node(text(indent=1, line="B"))
    tree.pop_indent()
    last = tree.append_node(text(line="C"))

    assert tree.find_fallthrough_node_index(first + 1, "/C001/", "/") == last
    tree.connect_remaining_nodes("script", MessageLogger(False), False)
    assert tree.nodes[first].edges[0].target_node_idx == last
    assert tree.nodes[second].edges[0].target_node_idx == last
    assert tree.nodes[last].edges == []


def test_unfinished_choice_edge_falls_through():
    tree = make_tree()
    choice = tree.append_node(ParsedNode(NodeType.CHOICE))
    edge = start_edge(tree, choice, ParsedEdge(choice, -1, 2, text="Empty"))
    tree._clear_edge_in_progress()
    after = tree.append_node(text())
    tree.connect_remaining_nodes("script", None, True)
    assert edge.target_node_idx == after


def test_select_without_else_gets_else_edge():
    tree = make_tree()
    select = tree.append_node(ParsedNode(NodeType.SELECT))
    start_edge(tree, select, ParsedEdge(select, -1, 1, condition=Expression.parse("{x} == 1")))
    tree.conditional_blocks.append(ConditionalContext(select, -1, ConditionalStage.IF, "{x} == 1"))
    tree.current_conditional_block_idx = 0
    inside = tree.append_node(text(line="Inside"))
    tree.current_conditional_block_idx = -1
    tree.indent_level_stack[-1].last_node_idx = -1
    after = tree.append_node(text(line="After"))

    tree.connect_remaining_nodes("script", None, True)
    else_edge = tree.nodes[select].edges[-1]
    assert else_edge.condition.is_empty()
    assert else_edge.target_node_idx == after
    assert tree.nodes[inside].edges[0].target_node_idx == after


def test_unknown_goto_label_warns():
    tree = make_tree()
    tree.append_node(ParsedNode(NodeType.GOTO, 0, 7, identifier="nowhere"))
    logger = MessageLogger(False)
    tree.connect_remaining_nodes("script", logger, False)
    assert len(logger) == 1
    message = logger.messages[0]
    assert message.severity is Severity.WARNING
    assert "nowhere" in message.text
    assert not logger.has_errors()


@pytest.mark.parametrize("silent,label", [(True, "nowhere"), (False, END_GOTO_LABEL)])
def test_goto_without_warning(silent, label):
    tree = make_tree()
    tree.append_node(ParsedNode(NodeType.GOTO, 0, 7, identifier=label))
    logger = MessageLogger(False)
    tree.connect_remaining_nodes("script", logger, silent)
    assert len(logger) == 0


def test_return_never_falls_through():
    tree = make_tree()
    ret = tree.append_node(ParsedNode(NodeType.RETURN))
    tree.indent_level_stack[-1].last_node_idx = -1
    tree.append_node(text())
    tree.connect_remaining_nodes("script", None, True)
    assert tree.nodes[ret].edges == []