"""Heading tree over the ATX headings of a Markdown document."""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Callable, Iterator

from mdoutline.exceptions import HeadingNotFoundError
from mdoutline.schemas import HeadingLevel, HeadingRange, HeadingRecord, LineCol
from mdoutline.syntax import MAX_HEADING_LEVEL, heading_pattern, is_code_fence
from mdoutline.text_utils import get_line_range, split_lines
from mdoutline.timestamps import match_leading_timestamp

logger = logging.getLogger(__name__)

NodePredicate = Callable[["HeadingNode"], bool]


class Traversal(Enum):
    """Callback answer controlling a tree walk."""

    CONTINUE = "continue"
    STOP = "stop"


def parse_heading_line(line_number: int, line: str, definer: str) -> HeadingRecord:
    """Build the record of a heading line whose definer (``"## "``) is known."""
    text = line[len(definer) :].strip()
    timestamp = None
    time_format = None
    title = text
    leading = match_leading_timestamp(text)
    if leading:
        timestamp, fmt = leading
        time_format = fmt.name
        title = text[len(timestamp) :].strip() or timestamp
    return HeadingRecord(
        level=HeadingLevel(by_syntax=len(definer) - 1),
        raw=line,
        definer=definer,
        text=text,
        title=title,
        timestamp=timestamp,
        time_format=time_format,
        range=HeadingRange(from_=LineCol(line=line_number)),
    )


class HeadingNode:
    """A heading and its place in the tree.

    ``prev`` and ``next`` link siblings sharing the same parent; document
    order is the pre-order walk of the tree.
    """

    def __init__(self, heading: HeadingRecord) -> None:
        self.heading = heading
        self.children: list[HeadingNode] = []
        self.parent: HeadingNode | None = None
        self.prev: HeadingNode | None = None
        self.next: HeadingNode | None = None

    def __repr__(self) -> str:
        return f"HeadingNode(line={self.start}, level={self.level}, text={self.heading.text!r})"

    @property
    def level(self) -> int:
        return self.heading.level.by_syntax

    @property
    def depth(self) -> int:
        return self.heading.level.by_depth or 0

    @property
    def start(self) -> int:
        return self.heading.range.from_.line

    @property
    def end(self) -> int:
        return self.get_heading_range().to.line

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def add_next(self, node: HeadingNode) -> None:
        self.next = node
        node.prev = self
        node.parent = self.parent
        if self.parent is not None:
            self.parent.children.append(node)

    def add_child(self, node: HeadingNode) -> None:
        if self.children:
            self.children[-1].add_next(node)
        else:
            node.parent = self
            self.children.append(node)

    def decouple(self) -> None:
        """Detach the node (and its subtree) from its parent and siblings."""
        if self.prev is not None:
            self.prev.next = self.next
        if self.next is not None:
            self.next.prev = self.prev
        if self.parent is not None:
            self.parent.children.remove(self)
        self.prev = None
        self.next = None
        self.parent = None

    def get_heading_range(self) -> HeadingRange:
        """Line range of the section; raises ValueError before ranges are resolved."""
        if self.heading.range.to is None:
            raise ValueError(f"Range of heading at line {self.start} is not resolved")
        return self.heading.range

    def get_contents(self, lines: list[str]) -> str:
        return get_line_range(lines, self.start, self.end)

    def get_level_siblings(self) -> list[HeadingNode]:
        """Contiguous siblings of the same level, this node included, in order."""
        first = self
        while first.prev is not None and first.prev.level == self.level:
            first = first.prev
        siblings = [first]
        node = first.next
        while node is not None and node.level == self.level:
            siblings.append(node)
            node = node.next
        return siblings

    def following(self) -> HeadingNode | None:
        """Next heading in document order."""
        if self.children:
            return self.children[0]
        node: HeadingNode | None = self
        while node is not None:
            if node.next is not None:
                return node.next
            node = node.parent
        return None

    def preceding(self) -> HeadingNode | None:
        """Previous heading in document order."""
        if self.prev is not None:
            node = self.prev
            while node.children:
                node = node.children[-1]
            return node
        if self.parent is None or self.parent.is_root:
            return None
        return self.parent


class HeadingTree:
    """Hierarchy of the headings of a Markdown text.

    Built in three passes: headings are attached while scanning lines
    (skipping fenced code blocks), ranges are resolved breadth first, and the
    rightmost spine is flagged as owning the last line of the document.
    """

    def __init__(self, text: str, max_level: int = MAX_HEADING_LEVEL) -> None:
        self.max_level = max_level
        self.text = text
        self.lines = split_lines(text)
        self.line_count = len(self.lines)
        self.root = HeadingNode(
            HeadingRecord(
                level=HeadingLevel(by_syntax=0, by_depth=0),
                range=HeadingRange(from_=LineCol(line=0)),
            )
        )
        self.level_table: dict[int, list[HeadingNode]] = {level: [] for level in range(1, MAX_HEADING_LEVEL + 1)}
        self._parse()
        self._resolve_ranges()
        self._mark_last_line()

    def _parse(self) -> None:
        pattern = heading_pattern(self.max_level)
        in_code_block = False
        depth = 0
        reference = self.root

        for line_number, line in enumerate(self.lines):
            if is_code_fence(line):
                in_code_block = not in_code_block
                continue
            if in_code_block:
                continue
            match = pattern.match(line)
            if not match:
                continue

            node = HeadingNode(parse_heading_line(line_number, line, match.group(0)))
            level = node.level

            while level < reference.level:
                parent_level = reference.parent.level if reference.parent is not None else 0
                if level > parent_level:
                    break
                reference = reference.parent
                depth -= 1

            if level > reference.level:
                reference.add_child(node)
                depth += 1
            else:
                reference.add_next(node)

            node.heading.level.by_depth = depth
            self.level_table[level].append(node)
            reference = node

        logger.debug("Parsed %d headings over %d lines", sum(map(len, self.level_table.values())), self.line_count)

    def _resolve_ranges(self) -> None:
        self.root.heading.range.to = LineCol(line=self.line_count)
        for node in self.iter_breadth_first():
            if node.next is not None:
                end = node.next.start
            else:
                end = node.parent.end
            node.heading.range.to = LineCol(line=end)

    def _mark_last_line(self) -> None:
        node = self.root
        node.heading.has_last_line = True
        while node.children:
            node = node.children[-1]
            node.heading.has_last_line = True

    def iter_nodes(self, top_node: HeadingNode | None = None) -> Iterator[HeadingNode]:
        """Pre-order walk over the descendants of ``top_node`` (root by default)."""
        top = top_node or self.root
        stack = list(reversed(top.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_breadth_first(self, top_node: HeadingNode | None = None) -> Iterator[HeadingNode]:
        top = top_node or self.root
        queue = deque(top.children)
        while queue:
            node = queue.popleft()
            yield node
            queue.extend(node.children)

    def traverse(self, callback: Callable[[HeadingNode], Traversal | None], top_node: HeadingNode | None = None) -> None:
        """Call ``callback`` on every node in document order until it returns STOP."""
        for node in self.iter_nodes(top_node):
            if callback(node) is Traversal.STOP:
                return

    def breadth_first_traversal(
        self, callback: Callable[[HeadingNode], Traversal | None], top_node: HeadingNode | None = None
    ) -> None:
        for node in self.iter_breadth_first(top_node):
            if callback(node) is Traversal.STOP:
                return

    def find(self, predicate: NodePredicate, top_node: HeadingNode | None = None) -> HeadingNode | None:
        return next((node for node in self.iter_nodes(top_node) if predicate(node)), None)

    def find_last(self, predicate: NodePredicate, top_node: HeadingNode | None = None) -> HeadingNode | None:
        found = None
        for node in self.iter_nodes(top_node):
            if predicate(node):
                found = node
        return found

    def find_last_contiguous(self, predicate: NodePredicate, top_node: HeadingNode | None = None) -> HeadingNode | None:
        """Last node of the leading run of document-order nodes matching ``predicate``."""
        found = None
        for node in self.iter_nodes(top_node):
            if not predicate(node):
                break
            found = node
        return found

    def search_last_contiguous(self, predicate: NodePredicate, top_node: HeadingNode | None = None) -> HeadingNode | None:
        """Same answer as :meth:`find_last_contiguous` for predicates that hold on a prefix of document order.

        Only one path from the top down is visited: at each level the last
        matching child of the leading matching run is descended into.
        """
        node = top_node or self.root
        found = None
        while node.children:
            last_match = None
            for child in node.children:
                if not predicate(child):
                    break
                last_match = child
            if last_match is None:
                break
            found = last_match
            node = last_match
        return found

    def get_node_at_line(self, line: int) -> HeadingNode | None:
        """Heading whose section directly contains ``line``, or None before the first heading."""
        return self.search_last_contiguous(lambda node: node.start <= line)

    def require_node_at_line(self, line: int) -> HeadingNode:
        """Like :meth:`get_node_at_line` but raises when no heading encloses ``line``.

        Raises:
            HeadingNotFoundError: If ``line`` lies before the first heading.
        """
        node = self.get_node_at_line(line)
        if node is None:
            raise HeadingNotFoundError(f"No heading encloses line {line}.")
        return node

    def get_node_starting_at(self, line: int) -> HeadingNode | None:
        node = self.get_node_at_line(line)
        if node is not None and node.start == line:
            return node
        return None

    def flatten(self, predicate: NodePredicate | None = None, top_node: HeadingNode | None = None) -> list[HeadingNode]:
        return [node for node in self.iter_nodes(top_node) if predicate is None or predicate(node)]

    def get_contents(self, node: HeadingNode) -> str:
        return node.get_contents(self.lines)
