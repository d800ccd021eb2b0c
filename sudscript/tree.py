"""The parsed node graph built while reading a script, before it becomes a runtime script."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from .expression import Expression, LiteralValue
from .messages import MessageLogger

END_GOTO_LABEL = "end"
"""Reserved goto label meaning the end of the dialogue."""

TREE_PATH_SEPARATOR = "/"


class NodeType(enum.Enum):
    """Kind of a parsed node."""

    TEXT = "text"
    CHOICE = "choice"
    SELECT = "select"
    SET_VARIABLE = "set_variable"
    GOTO = "goto"
    GOSUB = "gosub"
    RETURN = "return"
    EVENT = "event"


class ConditionalStage(enum.Enum):
    """Which part of an if / random block is being parsed."""

    IF = "if"
    ELSE_IF = "elseif"
    ELSE = "else"
    RANDOM = "random"
    RANDOM_OPTION = "or"


@dataclass
class ParsedEdge:
    """A connection between two parsed nodes; -1 means no node."""

    source_node_idx: int = -1
    target_node_idx: int = -1
    source_line_no: int = 0
    text: str = ""
    text_id: str = ""
    text_metadata: dict[str, str] = field(default_factory=dict)
    condition: Expression = field(default_factory=Expression)


@dataclass
class ParsedNode:
    """A node of the parsed graph.

    ``identifier`` holds the speaker for text, the variable for set, the label
    for goto and gosub, and the event name for events. ``text_id`` holds the
    gosub ID for gosub nodes.
    """

    node_type: NodeType
    original_indent: int = 0
    source_line_no: int = 0
    identifier: str = ""
    text: str = ""
    text_id: str = ""
    text_metadata: dict[str, str] = field(default_factory=dict)
    expression: Expression = field(default_factory=Expression)
    event_args: list[Expression] = field(default_factory=list)
    edges: list[ParsedEdge] = field(default_factory=list)
    parent_node_idx: int = -1
    choice_path: str = ""
    conditional_path: str = ""
    allow_fallthrough: bool = True


@dataclass
class IndentContext:
    """One level of indentation in the tree being built."""

    node_idx: int = -1
    threshold_indent: int = 0
    path_entry: str = ""
    last_node_idx: int = -1
    last_text_node_idx: int = -1


@dataclass
class ConditionalContext:
    """An open if / random block."""

    select_node_idx: int
    previous_block_idx: int
    stage: ConditionalStage
    condition_path_element: str = ""


@dataclass
class ParsedTree:
    """Nodes of one script section plus the state used while building them."""

    nodes: list[ParsedNode] = field(default_factory=list)
    indent_level_stack: list[IndentContext] = field(default_factory=list)
    conditional_blocks: list[ConditionalContext] = field(default_factory=list)
    current_conditional_block_idx: int = -1
    edge_in_progress_node_idx: int = -1
    edge_in_progress_edge_idx: int = -1
    pending_goto_labels: list[str] = field(default_factory=list)
    aliased_goto_labels: dict[str, str] = field(default_factory=dict)
    goto_label_list: dict[str, int] = field(default_factory=dict)

    # ------------------------------------------------------------------ basics

    def node(self, index: int) -> ParsedNode | None:
        """The node at ``index``, or None if there is none."""
        if 0 <= index < len(self.nodes):
            return self.nodes[index]
        return None

    def push_indent(self, node_idx: int, indent: int, path: str) -> IndentContext:
        context = IndentContext(node_idx, indent, path, last_node_idx=node_idx)
        self.indent_level_stack.append(context)
        return context

    def pop_indent(self) -> IndentContext:
        return self.indent_level_stack.pop()

    def edge_in_progress(self) -> ParsedEdge | None:
        """The edge waiting for its target, if any."""
        node = self.node(self.edge_in_progress_node_idx)
        if node is not None and 0 <= self.edge_in_progress_edge_idx < len(node.edges):
            return node.edges[self.edge_in_progress_edge_idx]
        return None

    def _clear_edge_in_progress(self) -> None:
        self.edge_in_progress_node_idx = -1
        self.edge_in_progress_edge_idx = -1

    def current_choice_path(self) -> str:
        """Path of the choice contexts leading to the current point, e.g. ``/C001/``."""
        return "".join(ctx.path_entry + TREE_PATH_SEPARATOR for ctx in self.indent_level_stack)

    def current_conditional_path(self) -> str:
        """Path of the open conditional blocks, outermost first, ending in a separator."""
        elements: list[str] = []
        block_idx = self.current_conditional_block_idx
        while block_idx != -1:
            block = self.conditional_blocks[block_idx]
            # An empty element still gets a separator: it marks an else level
            elements.append(block.condition_path_element)
            block_idx = block.previous_block_idx
        prefix = "".join(TREE_PATH_SEPARATOR + e for e in reversed(elements))
        return prefix + TREE_PATH_SEPARATOR

    # ---------------------------------------------------------------- building

    def append_node(self, node: ParsedNode) -> int:
        """Add ``node``, connect it to its predecessor and return its index."""
        ctx = self.indent_level_stack[-1]
        index = len(self.nodes)
        self.nodes.append(node)
        node.choice_path = self.current_choice_path()
        node.conditional_path = self.current_conditional_path()

        edge = self.edge_in_progress()
        if edge is not None:
            edge.target_node_idx = index
            node.parent_node_idx = edge.source_node_idx
            self.set_fallthrough_for_new_node(node)
            self._clear_edge_in_progress()
        else:
            prev = self.node(ctx.last_node_idx)
            # Never auto-connect onto a choice unless the new node is a select;
            # fallthrough at the end of parsing resolves the rest
            if prev is not None and (
                prev.node_type is not NodeType.CHOICE or node.node_type is NodeType.SELECT
            ):
                prev.edges.append(ParsedEdge(ctx.last_node_idx, index, node.source_line_no))
                node.parent_node_idx = ctx.last_node_idx
            self.set_fallthrough_for_new_node(node)

        for label in self.pending_goto_labels:
            self.goto_label_list[label] = index
        self.pending_goto_labels.clear()

        ctx.last_node_idx = index
        ctx.threshold_indent = min(ctx.threshold_indent, node.original_indent)
        return index

    def is_last_node_of_type(self, node_type: NodeType) -> bool:
        last = self.node(self.indent_level_stack[-1].last_node_idx)
        return last is not None and last.node_type is node_type

    def find_last_choice_node(self, indent_level: int) -> int:
        """Index of an earlier choice node a new choice at this indent may join, or -1."""
        return self._find_last_choice_node(
            indent_level, len(self.nodes) - 1, self.current_conditional_path()
        )

    def _find_last_choice_node(self, indent_level: int, from_index: int, condition_path: str) -> int:
        for i in range(from_index, -1, -1):
            node = self.nodes[i]
            if (
                condition_path.startswith(node.conditional_path)
                and node.node_type is NodeType.TEXT
                and node.original_indent <= indent_level
            ):
                # A parent text node: cannot look back any further
                return -1
            # Only the same conditional path, never one containing it
            if (
                condition_path == node.conditional_path
                and node.node_type is NodeType.CHOICE
                and node.original_indent <= indent_level
            ):
                return i
        return -1

    def find_choice_after_text_node(self, text_node_idx: int) -> int:
        """Follow linear nodes after a text node to a choice; -1 if none is reached."""
        text_node = self.nodes[text_node_idx]
        if len(text_node.edges) != 1 or self.node(text_node.edges[0].target_node_idx) is None:
            return -1
        next_idx = text_node.edges[0].target_node_idx
        while (node := self.node(next_idx)) is not None:
            if node.node_type is NodeType.CHOICE:
                return next_idx
            if node.node_type in (NodeType.SET_VARIABLE, NodeType.GOTO, NodeType.EVENT) and len(
                node.edges
            ) == 1:
                next_idx = node.edges[0].target_node_idx
                continue
            return -1
        return -1

    def ensure_choice_node_exists_above_select(self, indent_level: int, line_no: int) -> None:
        """Make sure a (possibly nested) select being added to has a choice node above it."""
        ctx = self.indent_level_stack[-1]
        edge = self.edge_in_progress()
        parent_idx = edge.source_node_idx if edge is not None else ctx.last_node_idx

        parent = self.node(parent_idx)
        if parent is None or parent.node_type is not NodeType.SELECT:
            return

        top_select_idx = parent_idx
        while (parent := self.node(parent_idx)) is not None and parent.node_type is NodeType.SELECT:
            top_select_idx = parent_idx
            parent_idx = parent.parent_node_idx

        if parent is not None and parent.node_type is NodeType.CHOICE:
            return

        if parent_idx == -1:
            # Top of the chain: hook the top select under the choice after the last text
            top_select = self.node(top_select_idx)
            if top_select is not None and self.node(ctx.last_text_node_idx) is not None:
                choice_idx = self.find_choice_after_text_node(ctx.last_text_node_idx)
                if choice_idx != -1:
                    self.nodes[choice_idx].edges.append(
                        ParsedEdge(choice_idx, top_select_idx, line_no)
                    )
                    top_select.parent_node_idx = choice_idx
            return

        insert_idx = parent_idx + 1
        new_choice = ParsedNode(NodeType.CHOICE, indent_level, line_no)
        self.nodes.insert(insert_idx, new_choice)
        select_node = self.nodes[insert_idx + 1]
        new_choice.edges.append(ParsedEdge(insert_idx, insert_idx + 1, line_no))
        new_choice.parent_node_idx = select_node.parent_node_idx
        new_choice.choice_path = select_node.choice_path
        new_choice.conditional_path = select_node.conditional_path

        def shifted(idx: int) -> int:
            return idx + 1 if idx >= insert_idx else idx

        # Nodes before the insertion keep their indexes, so whatever pointed at
        # the select now points at the new choice
        for node in self.nodes[insert_idx + 1:]:
            node.parent_node_idx = shifted(node.parent_node_idx)
            for e in node.edges:
                e.source_node_idx = shifted(e.source_node_idx)
                e.target_node_idx = shifted(e.target_node_idx)
        for context in self.indent_level_stack:
            context.last_node_idx = shifted(context.last_node_idx)
            context.last_text_node_idx = shifted(context.last_text_node_idx)
        for block in self.conditional_blocks:
            block.select_node_idx = shifted(block.select_node_idx)
        for label, idx in self.goto_label_list.items():
            if idx > insert_idx:
                self.goto_label_list[label] = idx + 1
        self.edge_in_progress_node_idx = shifted(self.edge_in_progress_node_idx)

        select_node.parent_node_idx = insert_idx
        self.set_fallthrough_for_new_node(new_choice)

    def set_fallthrough_for_new_node(self, node: ParsedNode) -> None:
        """Decide whether other nodes may fall through to ``node``."""
        if node.node_type is NodeType.CHOICE:
            # Choices may be fallen through to, but their parent selects may not
            prev_idx = node.parent_node_idx
            while (prev := self.node(prev_idx)) is not None and prev.node_type is NodeType.SELECT:
                prev.allow_fallthrough = False
                prev_idx = prev.parent_node_idx
            return
        parent = self.node(node.parent_node_idx)
        if (
            parent is not None
            and node.node_type is NodeType.SELECT
            and parent.node_type in (NodeType.CHOICE, NodeType.SELECT)
        ):
            # Compound conditionals / choices fall through only to their root
            node.allow_fallthrough = False

    # -------------------------------------------------------------- resolving

    def find_fallthrough_node_index(
        self, start: int, choice_path: str, conditional_path: str
    ) -> int:
        """First node from ``start`` on a choice and conditional path enclosing the given ones."""
        for i, node in enumerate(self.nodes[start:], start=max(start, 0)):
            if (
                node.allow_fallthrough
                and choice_path.startswith(node.choice_path)
                and conditional_path.startswith(node.conditional_path)
            ):
                return i
        return -1

    def goto_target_node_index(self, label: str) -> int:
        """Node a goto label leads to, following one alias; -1 if unknown (or ``end``)."""
        label = self.aliased_goto_labels.get(label, label)
        return self.goto_label_list.get(label, -1)

    def select_node_is_missing_else_path(self, node: ParsedNode) -> bool:
        """True if a select has no unconditional edge and does not lead to choices."""
        if any(edge.condition.is_empty() for edge in node.edges):
            return False
        if node.edges:
            next_idx = node.edges[0].target_node_idx
            while (target := self.node(next_idx)) is not None:
                if target.node_type is NodeType.SELECT:
                    next_idx = target.edges[0].target_node_idx if target.edges else -1
                    continue
                if target.node_type is NodeType.CHOICE:
                    # Selection between choices never gets a fallthrough else
                    return False
                break
        return True

    def connect_remaining_nodes(
        self, name_for_errors: str, logger: MessageLogger | None, silent: bool
    ) -> None:
        """Resolve goto aliases and give dead-end nodes and edges their fallthrough targets."""
        for alias, target in self.aliased_goto_labels.items():
            if target in self.goto_label_list:
                self.goto_label_list[alias] = self.goto_label_list[target]
        self.aliased_goto_labels.clear()

        for i, node in enumerate(self.nodes):
            missing_else = (
                node.node_type is NodeType.SELECT and self.select_node_is_missing_else_path(node)
            )
            if not node.edges or missing_else:
                if node.node_type is NodeType.GOTO:
                    if (
                        node.identifier != END_GOTO_LABEL
                        and self.goto_target_node_index(node.identifier) == -1
                        and not silent
                        and logger is not None
                    ):
                        logger.warning(
                            f"Error in {name_for_errors} line {node.source_line_no}: "
                            f"Goto label '{node.identifier}' was not found, "
                            "references to it will goto End"
                        )
                elif node.node_type is not NodeType.RETURN:
                    # Returns never fall through; gosubs fall through after returning
                    target = self.find_fallthrough_node_index(
                        i + 1, node.choice_path, node.conditional_path
                    )
                    if self.node(target) is not None:
                        node.edges.append(ParsedEdge(i, target, node.source_line_no))
            else:
                for edge in node.edges:
                    if self.node(edge.target_node_idx) is None:
                        target = self.find_fallthrough_node_index(
                            i + 1, node.choice_path, node.conditional_path
                        )
                        edge.target_node_idx = target if self.node(target) is not None else -1


__all__ = [
    "END_GOTO_LABEL",
    "TREE_PATH_SEPARATOR",
    "ConditionalContext",
    "ConditionalStage",
    "IndentContext",
    "LiteralValue",
    "NodeType",
    "ParsedEdge",
    "ParsedNode",
    "ParsedTree",
]