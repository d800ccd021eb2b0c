"""Reads script source text into parsed header and body trees."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, NamedTuple

from .expression import Expression, ExpressionError, ValueType
from .lines import (
    extract_gosub_id,
    extract_text_id,
    format_text_id,
    is_comment_line,
    parse_comment_metadata,
    split_lines,
    trim_line,
)
from .messages import MessageLogger
from .tree import (
    END_GOTO_LABEL,
    ConditionalContext,
    ConditionalStage,
    NodeType,
    ParsedEdge,
    ParsedNode,
    ParsedTree,
)

RANDOM_ITEM_VAR = "SUDS.RandomItem"
"""Internal variable holding the option picked by a ``[random]`` block."""

HEADER_PREFIX = "==="

_IF_RE = re.compile(r"^\[if\s+(.+)\]$")
_ELSE_IF_RE = re.compile(r"^\[elseif\s+(.+)\]$")
_LABEL_RE = re.compile(r"^:\s*(\w+)$")
_GOTO_RE = re.compile(r"^\[go[ ]?to\s+(\w+)\s*\]$")
_GOSUB_RE = re.compile(r"^\[go[ ]?sub\s+(\w+)\s*\]$")
_RETURN_RE = re.compile(r"^\[return\s*\]$")
_SET_RE = re.compile(r"^\[set\s+(\S+)\s+(?:=\s+)?([^\]]+)\]$")
_IMPORT_SETTING_RE = re.compile(r"^\[importsetting\s+(\S+)\s+(?:=\s+)?([^\]]+)\]$")
_EVENT_RE = re.compile(r"^\[event\s+([\w.]+)([^\]]*)\]$")
_EVENT_ARG_RE = re.compile(r'("[^"]*"|[^,"]+)')
_SPEAKER_RE = re.compile(r"^(\S+):\s*(.+)$")


@dataclass
class ImporterSettings:
    """Project-wide defaults that scripts may override with ``[importsetting ...]``."""

    always_generate_speaker_lines_from_choices: bool = False
    speaker_id_for_generated_lines_from_choices: str = "Player"


class _MetaEntry(NamedTuple):
    value: str
    indent: int


class ScriptImporter:
    """Parses script text into a header tree and a body tree.

    The trees stay available after :meth:`import_text` so a runtime script can
    be built from them.
    """

    def __init__(self, settings: ImporterSettings | None = None) -> None:
        self.settings = settings if settings is not None else ImporterSettings()
        self.gosub_id_highest_number = 0
        self._name = ""
        self._logger = MessageLogger(write_to_log=False)
        self._silent = False
        self._reset()

    def _reset(self) -> None:
        self.header_tree = ParsedTree()
        self.body_tree = ParsedTree()
        self.referenced_speakers: list[str] = []
        self.text_id_highest_number = 0
        self._persistent_metadata: dict[str, list[_MetaEntry]] = {}
        self._transient_metadata: dict[str, str] = {}
        self._header_done = False
        self._header_in_progress = False
        self._too_late_for_header = False
        self._choice_unique_id = 0
        self._override_generate_speaker_line: bool | None = None
        self._override_choice_speaker_id: str | None = None

    # ------------------------------------------------------------ public API

    def import_text(
        self,
        text: str,
        name_for_errors: str = "",
        logger: MessageLogger | None = None,
        silent: bool = False,
    ) -> bool:
        """Parse ``text``; return False if the script has errors that stop it being used.

        Problems are reported to ``logger``; with ``silent`` most are suppressed.
        """
        self._reset()
        self._name = name_for_errors
        self._logger = logger if logger is not None else MessageLogger(write_to_log=False)
        self._silent = silent

        ok = True
        for line_no, line in enumerate(split_lines(text), start=1):
            if not self._parse_line(line, line_no):
                ok = False
                break

        for tree in (self.header_tree, self.body_tree):
            tree.connect_remaining_nodes(self._name, self._logger, self._silent)
        for tree in (self.header_tree, self.body_tree):
            self._generate_text_ids(tree)

        return self._post_import_sanity_check() and ok

    def node(self, index: int) -> ParsedNode | None:
        """Body node at ``index``, or None."""
        return self.body_tree.node(index)

    def header_node(self, index: int) -> ParsedNode | None:
        """Header node at ``index``, or None."""
        return self.header_tree.node(index)

    def goto_target_node_index(self, label: str) -> int:
        """Body node index a goto label leads to, or -1."""
        return self.body_tree.goto_target_node_index(label)

    # -------------------------------------------------------------- reporting

    def _error(self, text: str) -> None:
        if not self._silent:
            self._logger.error(text)

    def _warning(self, text: str) -> None:
        if not self._silent:
            self._logger.warning(text)

    def _line_error(self, line_no: int, text: str) -> None:
        self._error(f"Error in {self._name} line {line_no}: {text}")

    def _parse_condition(self, source: str, line_no: int) -> Expression:
        try:
            return Expression.parse(source)
        except ExpressionError as err:
            self._line_error(line_no, str(err))
            return Expression()

    # ------------------------------------------------------------ line level

    def _parse_line(self, line: str, line_no: int) -> bool:
        trimmed, indent = trim_line(line)
        if not trimmed:
            return True

        if is_comment_line(trimmed):
            self._parse_comment_metadata_line(trimmed, indent)
            return True

        if trimmed.startswith(HEADER_PREFIX):
            if self._header_done:
                self._error(f"Failed to parse {self._name} Line {line_no}: Duplicate header section")
                return False
            if self._too_late_for_header:
                self._error(
                    f"Failed to parse {self._name} Line {line_no}: Header section must be at start"
                )
                return False
            if self._header_in_progress:
                self._header_in_progress = False
                self._header_done = True
            else:
                self._header_in_progress = True
            return True

        if self._header_in_progress:
            return self._parse_header_line(trimmed, indent, line_no)
        return self._parse_body_line(trimmed, indent, line_no)

    def _parse_comment_metadata_line(self, line: str, indent: int) -> bool:
        meta = parse_comment_metadata(line)
        if meta is None:
            return False
        if meta.persistent:
            stack = self._persistent_metadata.get(meta.key)
            # Blank values only matter when overriding an existing entry
            if stack is None and meta.value:
                stack = self._persistent_metadata.setdefault(meta.key, [])
            if stack is not None:
                while stack and indent <= stack[-1].indent:
                    stack.pop()
                stack.append(_MetaEntry(meta.value, indent))
        elif meta.value:
            self._transient_metadata[meta.key] = meta.value
        else:
            self._transient_metadata.pop(meta.key, None)
        return True

    def _metadata_for_next_entry(self, indent: int) -> dict[str, str]:
        result: dict[str, str] = {}
        for key in list(self._persistent_metadata):
            stack = self._persistent_metadata[key]
            while stack and indent < stack[-1].indent:
                stack.pop()
            if stack:
                result[key] = stack[-1].value
            else:
                del self._persistent_metadata[key]
        result.update(self._transient_metadata)
        self._transient_metadata.clear()
        return result

    @staticmethod
    def _prepare_indent(tree: ParsedTree, indent: int) -> None:
        stack = tree.indent_level_stack
        while len(stack) > 1 and indent < stack[-1].threshold_indent:
            tree.pop_indent()
        if not stack:
            tree.push_indent(-1, 0, "")

    def _parse_header_line(self, line: str, indent: int, line_no: int) -> bool:
        tree = self.header_tree
        self._prepare_indent(tree, indent)
        # Only set and importsetting lines mean anything in the header
        if line.startswith("["):
            self._parse_set_line(line, tree, 0, line_no) or self._parse_import_setting_line(
                line, tree, 0, line_no
            )
        return True

    def _parse_body_line(self, line: str, indent: int, line_no: int) -> bool:
        self._too_late_for_header = True
        tree = self.body_tree
        self._prepare_indent(tree, indent)

        if line.startswith("*"):
            return self._parse_choice_line(line, tree, indent, line_no)
        if line.startswith(":"):
            return self._parse_goto_label_line(line, tree, indent, line_no)
        if line.startswith("["):
            parsers: tuple[Callable[[str, ParsedTree, int, int], bool], ...] = (
                self._parse_conditional_line,
                self._parse_goto_line,
                self._parse_set_line,
                self._parse_event_line,
                self._parse_gosub_line,
                self._parse_return_line,
                self._parse_import_setting_line,
                self._parse_random_line,
            )
            if not any(parse(line, tree, indent, line_no) for parse in parsers):
                self._warning(f"{self._name} Line {line_no}: Unrecognised command. Ignoring!")
            # Unknown commands never fail the import
            return True
        return self._parse_text_line(line, tree, indent, line_no)

    def _take_text_id(self, line: str) -> tuple[str, str]:
        tagged = extract_text_id(line)
        if tagged is None:
            return line, ""
        self.text_id_highest_number = max(self.text_id_highest_number, tagged.number)
        return tagged.text, tagged.id

    def _next_text_id(self) -> str:
        self.text_id_highest_number += 1
        return format_text_id(self.text_id_highest_number)

    def _add_speaker(self, speaker: str) -> None:
        if speaker not in self.referenced_speakers:
            self.referenced_speakers.append(speaker)

    # ----------------------------------------------------------------- choices

    def _parse_choice_line(self, line: str, tree: ParsedTree, indent: int, line_no: int) -> bool:
        if not line.startswith("*"):
            return False
        ctx = tree.indent_level_stack[-1]

        choice_idx = -1
        # Pending goto labels always split the choice
        if not tree.pending_goto_labels:
            choice_idx = tree.find_last_choice_node(indent)
        if choice_idx == -1:
            tree.ensure_choice_node_exists_above_select(indent, line_no)
            choice_idx = tree.append_node(ParsedNode(NodeType.CHOICE, indent, line_no))
        if tree.edge_in_progress_node_idx != -1:
            # An unresolved edge falls through; that is sorted out at the end
            tree.edge_in_progress_node_idx = tree.edge_in_progress_edge_idx = -1

        choice_node = tree.nodes[choice_idx]
        self._choice_unique_id += 1
        tree.push_indent(choice_idx, indent + 1, f"C{self._choice_unique_id:03d}")

        generate = self.settings.always_generate_speaker_lines_from_choices
        speaker = self.settings.speaker_id_for_generated_lines_from_choices
        if self._override_generate_speaker_line is not None:
            generate = self._override_generate_speaker_line
        if self._override_choice_speaker_id is not None:
            speaker = self._override_choice_speaker_id
        text_start = 1
        if len(line) > 1 and line[1] == "-":
            generate = False
            text_start = 2

        choice_text, text_id = self._take_text_id(line[text_start:].lstrip())
        metadata = self._metadata_for_next_entry(indent)
        choice_node.edges.append(
            ParsedEdge(choice_idx, -1, line_no, choice_text, text_id, metadata)
        )
        tree.edge_in_progress_node_idx = choice_idx
        tree.edge_in_progress_edge_idx = len(choice_node.edges) - 1

        if generate:
            # Same text and ID, so this is a single localisation entry
            ctx.last_text_node_idx = tree.append_node(
                ParsedNode(
                    NodeType.TEXT,
                    indent + 1,
                    line_no,
                    identifier=speaker,
                    text=choice_text,
                    text_id=text_id,
                    text_metadata=dict(metadata),
                )
            )
            self._add_speaker(speaker)
        return True

    # ------------------------------------------------------------ conditionals

    def _current_block(self, tree: ParsedTree) -> ConditionalContext | None:
        idx = tree.current_conditional_block_idx
        if 0 <= idx < len(tree.conditional_blocks):
            return tree.conditional_blocks[idx]
        return None

    def _add_select_edge(
        self, tree: ParsedTree, node_idx: int, line_no: int, condition: Expression
    ) -> None:
        select = tree.nodes[node_idx]
        select.edges.append(ParsedEdge(node_idx, -1, line_no, condition=condition))
        tree.edge_in_progress_node_idx = node_idx
        tree.edge_in_progress_edge_idx = len(select.edges) - 1

    def _open_select(
        self,
        tree: ParsedTree,
        indent: int,
        line_no: int,
        condition_str: str,
        stage: ConditionalStage,
    ) -> None:
        node_idx = tree.append_node(ParsedNode(NodeType.SELECT, indent, line_no))
        self._add_select_edge(tree, node_idx, line_no, self._parse_condition(condition_str, line_no))
        tree.conditional_blocks.append(
            ConditionalContext(node_idx, tree.current_conditional_block_idx, stage, condition_str)
        )
        tree.current_conditional_block_idx = len(tree.conditional_blocks) - 1

    def _parse_conditional_line(
        self, line: str, tree: ParsedTree, indent: int, line_no: int
    ) -> bool:
        if not line.startswith(("[if", "[else", "[endif")):
            return False
        if line == "[else]":
            return self._parse_else_line(tree, line_no)
        if line == "[endif]":
            return self._parse_end_if_line(tree, line_no)
        match = _IF_RE.search(line)
        if match:
            self._open_select(tree, indent, line_no, match.group(1), ConditionalStage.IF)
            return True
        match = _ELSE_IF_RE.search(line)
        if match:
            return self._parse_else_if_line(tree, match.group(1), line_no)
        return False

    def _parse_else_line(self, tree: ParsedTree, line_no: int) -> bool:
        block = self._current_block(tree)
        if block is None:
            self._line_error(line_no, "'else' with no matching 'if'")
        elif block.stage is ConditionalStage.ELSE:
            self._line_error(line_no, "cannot have more than one 'else'")
        else:
            block.stage = ConditionalStage.ELSE
            # Unique per select, so sibling else blocks of different ifs never merge
            block.condition_path_element = f"else-{block.select_node_idx}"
            self._add_select_edge(tree, block.select_node_idx, line_no, Expression())
            tree.indent_level_stack[-1].last_node_idx = block.select_node_idx
        return True

    def _parse_else_if_line(self, tree: ParsedTree, condition_str: str, line_no: int) -> bool:
        block = self._current_block(tree)
        if block is None:
            self._line_error(line_no, "'elseif' with no matching 'if'")
        elif block.stage is ConditionalStage.ELSE:
            self._line_error(line_no, "'elseif' occurs after 'else'")
        else:
            block.stage = ConditionalStage.ELSE_IF
            block.condition_path_element = f"elseif-{block.select_node_idx} {condition_str}"
            self._add_select_edge(
                tree, block.select_node_idx, line_no, self._parse_condition(condition_str, line_no)
            )
        return True

    def _parse_end_if_line(self, tree: ParsedTree, line_no: int) -> bool:
        block = self._current_block(tree)
        if block is None:
            self._line_error(line_no, "'endif' with no matching 'if'")
        else:
            tree.current_conditional_block_idx = block.previous_block_idx
            # Never auto-connect to a conditional; fallthrough resolves it
            tree.indent_level_stack[-1].last_node_idx = -1
        return True

    # ----------------------------------------------------------------- random

    def _parse_random_line(self, line: str, tree: ParsedTree, indent: int, line_no: int) -> bool:
        if not line.startswith(("[random", "[or", "[endrandom")):
            return False
        if line == "[random]":
            self._open_select(
                tree, indent, line_no, f"{{{RANDOM_ITEM_VAR}}} == 0", ConditionalStage.RANDOM
            )
            return True
        if line == "[or]":
            return self._parse_random_option_line(tree, line_no)
        if line == "[endrandom]":
            return self._parse_end_random_line(tree, line_no)
        return False

    def _parse_random_option_line(self, tree: ParsedTree, line_no: int) -> bool:
        block = self._current_block(tree)
        if block is None:
            self._line_error(line_no, "'or' with no matching 'random'")
        elif block.stage not in (ConditionalStage.RANDOM, ConditionalStage.RANDOM_OPTION):
            self._line_error(line_no, "'or' must occur after 'random'")
        else:
            block.stage = ConditionalStage.RANDOM_OPTION
            select = tree.nodes[block.select_node_idx]
            block.condition_path_element = f"{{{RANDOM_ITEM_VAR}}} == {len(select.edges)}"
            self._add_select_edge(
                tree,
                block.select_node_idx,
                line_no,
                self._parse_condition(block.condition_path_element, line_no),
            )
        return True

    def _parse_end_random_line(self, tree: ParsedTree, line_no: int) -> bool:
        block = self._current_block(tree)
        if block is None or block.stage not in (
            ConditionalStage.RANDOM,
            ConditionalStage.RANDOM_OPTION,
        ):
            self._line_error(line_no, "'endrandom' with no matching 'random'")
            return True
        select = tree.nodes[block.select_node_idx]
        # The last option becomes the else, so no extra fallthrough edge is added
        if select.edges:
            select.edges[-1].condition = Expression()
        tree.current_conditional_block_idx = block.previous_block_idx
        tree.indent_level_stack[-1].last_node_idx = -1
        return True

    # ------------------------------------------------------------ jumps

    def _parse_goto_label_line(
        self, line: str, tree: ParsedTree, indent: int, line_no: int
    ) -> bool:
        match = _LABEL_RE.search(line)
        if match is None:
            self._warning(f"Error in {self._name} line {line_no}: Badly formed goto label")
            return True
        label = match.group(1).lower()
        if label == END_GOTO_LABEL:
            self._line_error(
                line_no, "Label 'end' is reserved and cannot be used in the script, ignoring"
            )
        else:
            tree.pending_goto_labels.append(label)
        return True

    def _parse_goto_line(self, line: str, tree: ParsedTree, indent: int, line_no: int) -> bool:
        match = _GOTO_RE.search(line)
        if match is None:
            return False
        label = match.group(1).lower()
        # Labels not yet attached to a node are just aliases of this goto's label
        for pending in tree.pending_goto_labels:
            tree.aliased_goto_labels[pending] = label
        tree.pending_goto_labels.clear()
        tree.append_node(ParsedNode(NodeType.GOTO, indent, line_no, identifier=label))
        return True

    def _parse_gosub_line(self, line: str, tree: ParsedTree, indent: int, line_no: int) -> bool:
        gosub_id = ""
        tagged = extract_gosub_id(line)
        if tagged is not None:
            line, gosub_id = tagged.text, tagged.id
            self.gosub_id_highest_number = tagged.number
        match = _GOSUB_RE.search(line)
        if match is None:
            return False
        label = match.group(1).lower()
        if label == END_GOTO_LABEL:
            self._line_error(
                line_no, "You cannot 'gosub end', will never return. Did you mean goto?"
            )
        else:
            tree.append_node(
                ParsedNode(NodeType.GOSUB, indent, line_no, identifier=label, text_id=gosub_id)
            )
        return True

    def _parse_return_line(self, line: str, tree: ParsedTree, indent: int, line_no: int) -> bool:
        if _RETURN_RE.search(line) is None:
            return False
        tree.append_node(ParsedNode(NodeType.RETURN, indent, line_no))
        return True

    # ------------------------------------------------------- set / settings

    def _parse_set_line(self, line: str, tree: ParsedTree, indent: int, line_no: int) -> bool:
        line, text_id = self._take_text_id(line)
        match = _SET_RE.search(line)
        if match is None:
            return False
        name = match.group(1)
        try:
            expr = Expression.parse(match.group(2).strip())
        except ExpressionError as err:
            self._line_error(line_no, str(err))
            return False
        tree.append_node(
            ParsedNode(
                NodeType.SET_VARIABLE,
                indent,
                line_no,
                identifier=name,
                expression=expr,
                text_id=text_id if expr.is_text_literal() else "",
            )
        )
        return True

    def _parse_import_setting_line(
        self, line: str, tree: ParsedTree, indent: int, line_no: int
    ) -> bool:
        match = _IMPORT_SETTING_RE.search(line)
        if match is None:
            return False
        name = match.group(1)
        try:
            expr = Expression.parse(match.group(2).strip())
        except ExpressionError as err:
            self._line_error(line_no, str(err))
            return False
        if not expr.is_literal():
            self._line_error(line_no, "importsetting only accepts literal values")
            return False

        setting = name.casefold()
        if setting == "generatespeakerlinesfromchoices":
            if expr.literal_type() is ValueType.BOOLEAN:
                self._override_generate_speaker_line = bool(expr.literal_value())
            else:
                self._line_error(
                    line_no,
                    "[importsetting GenerateSpeakerLinesFromChoices ...] requires a boolean literal",
                )
        elif setting == "speakeridforgeneratedlinesfromchoices":
            if expr.literal_type() is ValueType.NAME:
                self._override_choice_speaker_id = str(expr.literal_value())
            else:
                self._line_error(
                    line_no,
                    "[importsetting SpeakerIDForGeneratedLinesFromChoices ...] "
                    "requires a Name literal e.g. (`Value`)",
                )
        return True

    # ------------------------------------------------------------ events / text

    def _parse_event_line(self, line: str, tree: ParsedTree, indent: int, line_no: int) -> bool:
        match = _EVENT_RE.search(line)
        if match is None:
            return False
        node = ParsedNode(NodeType.EVENT, indent, line_no, identifier=match.group(1))
        for arg_match in _EVENT_ARG_RE.finditer(match.group(2).strip()):
            arg = arg_match.group(1).strip()
            if not arg:
                continue
            try:
                node.event_args.append(Expression.parse(arg))
            except ExpressionError as err:
                self._warning(
                    f"Error in {self._name} line {line_no}: Literal argument "
                    f"{len(node.event_args) + 1} ('{arg}') invalid: {err}"
                )
        tree.append_node(node)
        return True

    def _parse_text_line(self, line: str, tree: ParsedTree, indent: int, line_no: int) -> bool:
        ctx = tree.indent_level_stack[-1]
        line, text_id = self._take_text_id(line)
        match = _SPEAKER_RE.search(line)
        if match:
            speaker, text = match.group(1), match.group(2)
            ctx.last_text_node_idx = tree.append_node(
                ParsedNode(
                    NodeType.TEXT,
                    indent,
                    line_no,
                    identifier=speaker,
                    text=text,
                    text_id=text_id,
                    text_metadata=self._metadata_for_next_entry(indent),
                )
            )
            self._add_speaker(speaker)
            return True

        last = tree.node(ctx.last_node_idx)
        if last is not None:
            if last.node_type is NodeType.TEXT:
                last.text += "\n" + line
            else:
                self._warning(
                    f"Error in {self._name} line {line_no}: Text newline continuation is not "
                    "immediately after a speaker line. Ignoring."
                )
        return True

    # ------------------------------------------------------------ finishing

    def _generate_text_ids(self, tree: ParsedTree) -> None:
        # Done after parsing so that explicit IDs later in the file are known first
        for node in tree.nodes:
            if node.node_type is NodeType.TEXT:
                if not node.text_id:
                    node.text_id = self._next_text_id()
            elif node.node_type is NodeType.CHOICE:
                for edge in node.edges:
                    if edge.text and not edge.text_id:
                        edge.text_id = self._next_text_id()
                    # A speaker line generated from the choice shares its ID
                    target = tree.node(edge.target_node_idx)
                    if (
                        target is not None
                        and target.node_type is NodeType.TEXT
                        and not target.text_id
                        and target.text == edge.text
                    ):
                        target.text_id = edge.text_id
            elif node.node_type is NodeType.SET_VARIABLE:
                if node.expression.is_text_literal() and not node.text_id:
                    node.text_id = self._next_text_id()

    def _post_import_sanity_check(self) -> bool:
        ok = True
        for node in self.body_tree.nodes:
            if node.node_type is NodeType.CHOICE:
                ok = self._check_choice_paths(node) and ok

        block = self._current_block(self.body_tree)
        if block is not None:
            select = self.body_tree.node(block.select_node_idx)
            if select is not None:
                if block.stage in (ConditionalStage.RANDOM, ConditionalStage.RANDOM_OPTION):
                    start, end = "random", "endrandom"
                else:
                    start, end = "if", "endif"
                self._error(
                    f"{self._name}: '{start}' block started on line "
                    f"{select.source_line_no} is missing '{end}'"
                )
        return ok

    def _check_choice_paths(self, choice: ParsedNode) -> bool:
        ok = True
        for edge in choice.edges:
            ok = self._check_choice_edge(edge) and ok
        return ok

    def _check_choice_edge(self, edge: ParsedEdge) -> bool:
        """Every path from a choice must reach a speaker line before another choice."""
        tree = self.body_tree
        target = tree.node(edge.target_node_idx)
        while target is not None:
            kind = target.node_type
            if kind is NodeType.TEXT:
                return True
            if kind is NodeType.CHOICE:
                # Reported even when silent: the script cannot work like this
                self._logger.error(
                    f"{self._name}: Choice '{edge.text}' on line {edge.source_line_no} needs a "
                    f"speaker line between it and the next choice at line "
                    f"{target.source_line_no}. Choices MUST show another speaker line before "
                    "the next choice."
                )
                return False
            if kind is NodeType.SELECT:
                ok = True
                for select_edge in target.edges:
                    select_target = tree.node(select_edge.target_node_idx)
                    # Choices directly under the select merge with the original choice
                    if select_target is not None and select_target.node_type is not NodeType.CHOICE:
                        ok = self._check_choice_edge(select_edge)
                return ok
            if kind in (NodeType.SET_VARIABLE, NodeType.EVENT):
                if not target.edges:
                    return True
                target = tree.node(target.edges[0].target_node_idx)
            elif kind in (NodeType.GOSUB, NodeType.RETURN):
                # Only checkable at runtime
                return True
            elif kind is NodeType.GOTO:
                target = tree.node(tree.goto_target_node_index(target.identifier))
        return True


__all__ = ["HEADER_PREFIX", "RANDOM_ITEM_VAR", "ImporterSettings", "ScriptImporter"]