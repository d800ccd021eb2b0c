"""Runtime script structure built from an importer's parsed trees."""

from __future__ import annotations

import enum
import hashlib
from dataclasses import dataclass, field

from .expression import Expression
from .importer import ScriptImporter
from .tree import NodeType, ParsedNode, ParsedTree

CHOICE_SPEAKER_METADATA = "Player (Choice)"
"""Speaker metadata recorded for choice text, so translators know space may be short."""

SPEAKER_METADATA_KEY = "Speaker"


class EdgeType(enum.Enum):
    """How a runtime edge is followed."""

    CONTINUE = "continue"
    DECISION = "decision"
    CONDITION = "condition"
    CHAINED = "chained"


class ScriptNodeType(enum.Enum):
    """Kind of a runtime node."""

    TEXT = "text"
    CHOICE = "choice"
    SELECT = "select"
    SET_VARIABLE = "set_variable"
    EVENT = "event"
    GOSUB = "gosub"
    RETURN = "return"


_NODE_TYPES = {
    NodeType.TEXT: ScriptNodeType.TEXT,
    NodeType.CHOICE: ScriptNodeType.CHOICE,
    NodeType.SELECT: ScriptNodeType.SELECT,
    NodeType.SET_VARIABLE: ScriptNodeType.SET_VARIABLE,
    NodeType.EVENT: ScriptNodeType.EVENT,
    NodeType.GOSUB: ScriptNodeType.GOSUB,
    NodeType.RETURN: ScriptNodeType.RETURN,
}


@dataclass
class StringTable:
    """Localisable source strings keyed by text ID, with per-key metadata."""

    table_id: str = "Strings"
    entries: dict[str, str] = field(default_factory=dict)
    metadata: dict[str, dict[str, str]] = field(default_factory=dict)

    def set_source_string(self, key: str, text: str) -> None:
        self.entries[key] = text

    def set_metadata(self, key: str, meta_key: str, value: str) -> None:
        self.metadata.setdefault(key, {})[meta_key] = value

    def clear(self) -> None:
        """Remove every string and its metadata."""
        self.entries.clear()
        self.metadata.clear()

    def __getitem__(self, key: str) -> str:
        return self.entries[key]

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(eq=False)
class ScriptEdge:
    """A runtime connection; a target of None means the end of the dialogue."""

    target: ScriptNode | None
    edge_type: EdgeType
    source_line_no: int = 0
    condition: Expression = field(default_factory=Expression)
    text: str = ""
    text_id: str = ""


@dataclass(eq=False)
class ScriptNode:
    """A runtime node.

    ``identifier`` is the speaker for text, the variable for set, the event
    name for events and the label for gosubs. ``text_id`` is the string table
    key of text and text literals, and the gosub ID for gosubs.
    """

    node_type: ScriptNodeType
    source_line_no: int = 0
    identifier: str = ""
    text: str = ""
    text_id: str = ""
    expression: Expression = field(default_factory=Expression)
    event_args: list[Expression] = field(default_factory=list)
    edges: list[ScriptEdge] = field(default_factory=list)

    @property
    def speaker_id(self) -> str:
        return self.identifier if self.node_type is ScriptNodeType.TEXT else ""


@dataclass(eq=False)
class Script:
    """A complete imported script ready to be run."""

    name: str
    string_table: StringTable
    nodes: list[ScriptNode] = field(default_factory=list)
    header_nodes: list[ScriptNode] = field(default_factory=list)
    labels: dict[str, int] = field(default_factory=dict)
    header_labels: dict[str, int] = field(default_factory=dict)
    speakers: list[str] = field(default_factory=list)

    @property
    def first_node(self) -> ScriptNode | None:
        return self.nodes[0] if self.nodes else None

    @property
    def first_header_node(self) -> ScriptNode | None:
        return self.header_nodes[0] if self.header_nodes else None

    def node_for_label(self, label: str) -> ScriptNode | None:
        """Body node a label leads to, matched case-insensitively; None if unknown."""
        index = self.labels.get(label.lower(), -1)
        if 0 <= index < len(self.nodes):
            return self.nodes[index]
        return None


def _edge_type(source: ParsedNode, edge_text: str, target: ParsedNode | None) -> EdgeType:
    if source.node_type is NodeType.TEXT:
        if target is not None and target.node_type is NodeType.CHOICE:
            return EdgeType.CHAINED
        return EdgeType.CONTINUE
    if source.node_type is NodeType.CHOICE:
        if not edge_text and target is not None and target.node_type is NodeType.SELECT:
            return EdgeType.CHAINED
        return EdgeType.DECISION
    if source.node_type is NodeType.SELECT:
        return EdgeType.CONDITION
    return EdgeType.CONTINUE


def _create_node(parsed: ParsedNode, table: StringTable) -> ScriptNode:
    node = ScriptNode(
        _NODE_TYPES[parsed.node_type],
        parsed.source_line_no,
        identifier=parsed.identifier,
    )
    if parsed.node_type is NodeType.TEXT:
        table.set_source_string(parsed.text_id, parsed.text)
        table.set_metadata(parsed.text_id, SPEAKER_METADATA_KEY, parsed.identifier)
        for key, value in parsed.text_metadata.items():
            table.set_metadata(parsed.text_id, key, value)
        node.text = parsed.text
        node.text_id = parsed.text_id
    elif parsed.node_type is NodeType.SET_VARIABLE:
        node.expression = parsed.expression
        if parsed.expression.is_text_literal():
            text = str(parsed.expression.literal_value())
            table.set_source_string(parsed.text_id, text)
            node.text = text
            node.text_id = parsed.text_id
    elif parsed.node_type is NodeType.EVENT:
        node.event_args = list(parsed.event_args)
    elif parsed.node_type is NodeType.GOSUB:
        node.text_id = parsed.text_id
    return node


def _populate_from_tree(
    tree: ParsedTree, table: StringTable
) -> tuple[list[ScriptNode], dict[str, int]]:
    # Gotos become plain edges, so every other node's index shifts down past them
    remap: list[int] = []
    nodes: list[ScriptNode] = []
    for parsed in tree.nodes:
        if parsed.node_type is NodeType.GOTO:
            remap.append(-1)
        else:
            remap.append(len(nodes))
            nodes.append(_create_node(parsed, table))

    def runtime_node(parsed_idx: int) -> ScriptNode | None:
        if 0 <= parsed_idx < len(remap) and remap[parsed_idx] != -1:
            return nodes[remap[parsed_idx]]
        return None

    for parsed_idx, parsed in enumerate(tree.nodes):
        if parsed.node_type is NodeType.GOTO:
            continue
        node = nodes[remap[parsed_idx]]
        if not parsed.edges:
            node.edges.append(ScriptEdge(None, EdgeType.CONTINUE, parsed.source_line_no))
            continue
        for in_edge in parsed.edges:
            parsed_target = tree.node(in_edge.target_node_idx)
            edge_type = _edge_type(parsed, in_edge.text, parsed_target)
            target: ScriptNode | None = None
            if parsed_target is not None:
                if parsed_target.node_type is NodeType.GOTO:
                    # -1 means goto end, which leaves no target
                    target = runtime_node(tree.goto_target_node_index(parsed_target.identifier))
                else:
                    target = runtime_node(in_edge.target_node_idx)
            edge = ScriptEdge(
                target, edge_type, in_edge.source_line_no, condition=in_edge.condition
            )
            if in_edge.text_id and in_edge.text:
                table.set_source_string(in_edge.text_id, in_edge.text)
                table.set_metadata(in_edge.text_id, SPEAKER_METADATA_KEY, CHOICE_SPEAKER_METADATA)
                for key, value in in_edge.text_metadata.items():
                    table.set_metadata(in_edge.text_id, key, value)
                edge.text = in_edge.text
                edge.text_id = in_edge.text_id
            node.edges.append(edge)

    labels = {
        label: remap[idx] if 0 <= idx < len(remap) else -1
        for label, idx in tree.goto_label_list.items()
    }
    return nodes, labels


def populate_script(
    importer: ScriptImporter, name: str, string_table: StringTable | None = None
) -> Script:
    """Build a runtime script from an importer that has parsed a script successfully."""
    table = string_table if string_table is not None else StringTable(f"{name}Strings")
    header_nodes, header_labels = _populate_from_tree(importer.header_tree, table)
    nodes, labels = _populate_from_tree(importer.body_tree, table)
    return Script(
        name=name,
        string_table=table,
        nodes=nodes,
        header_nodes=header_nodes,
        labels=labels,
        header_labels=header_labels,
        speakers=list(importer.referenced_speakers),
    )


def calculate_hash(text: str) -> str:
    """MD5 hex digest of the script text encoded as UTF-16LE."""
    return hashlib.md5(text.encode("utf-16-le")).hexdigest()


__all__ = [
    "EdgeType",
    "Script",
    "ScriptEdge",
    "ScriptNode",
    "ScriptNodeType",
    "StringTable",
    "calculate_hash",
    "populate_script",
]