from typing import Any, Dict, Iterable, Iterator, Optional, Tuple


class Element(object):
    def __init__(self, col: int, val: Any):
        self.col = col
        self.val = val
        self.next_in_row: Optional["Element"] = None

    def __eq__(self, other):
        return self.col == other.col and self.val == other.val

    def __repr__(self):
        return f"<{self.__class__.__name__}(col={self.col}, val={self.val})>"


class RowMap(object):
    """ Sorted mapping of column-index to value, for a single matrix row.
    Elements form a singly-linked list in ascending column order,
    with a dictionary index for constant-time lookup by column.

    RowMap itself stores whatever it is given;
    keeping zeros out is the job of the owning matrix. """

    def __init__(self, entries: Optional[Iterable[Tuple[int, Any]]] = None):
        self.head: Optional[Element] = None
        self.tail: Optional[Element] = None
        self.index: Dict[int, Element] = {}
        if entries is not None:
            for col, val in entries:
                self[col] = val

    def __len__(self):
        return len(self.index)

    def __contains__(self, col: int) -> bool:
        return col in self.index

    def __iter__(self) -> Iterator[int]:
        return self.keys()

    def __getitem__(self, col: int):
        return self.index[col].val

    def get(self, col: int, default=None):
        e = self.index.get(col)
        if e is None:
            return default
        return e.val

    def __setitem__(self, col: int, val):
        e = self.index.get(col)
        if e is not None:
            e.val = val
            return

        e = Element(col, val)
        self.index[col] = e
        if self.head is None:
            self.head = self.tail = e
        elif self.tail.col < col:  # Appending in order is the common case
            self.tail.next_in_row = e
            self.tail = e
        elif self.head.col > col:
            e.next_in_row = self.head
            self.head = e
        else:
            elem = self.head
            nxt = elem.next_in_row
            while nxt is not None and nxt.col < col:
                elem = nxt
                nxt = nxt.next_in_row
            # Now elem and nxt straddle col
            elem.next_in_row = e
            e.next_in_row = nxt

    def __delitem__(self, col: int):
        e = self.index.pop(col)
        prev = self.before(e)
        if prev is None:
            self.head = e.next_in_row
        else:
            prev.next_in_row = e.next_in_row
        if self.tail is e:
            self.tail = prev
        e.next_in_row = None

    def discard(self, col: int):
        """ Remove `col` if present """
        if col in self.index:
            del self[col]

    def before(self, e: Element) -> Optional[Element]:
        """ Find the element before `e`.
        If `e` is the first element in the row, returns None. """
        prev = self.head
        if prev is None or prev is e: return None

        nxt = prev.next_in_row
        while nxt is not None and nxt is not e:
            prev = nxt
            nxt = nxt.next_in_row
        assert nxt is e
        return prev

    def elements(self, start: int = 0) -> Iterator[Element]:
        """ Iterator of elements with column index >= `start` """
        e = self.head
        while e is not None and e.col < start:
            e = e.next_in_row
        while e is not None:
            yield e
            e = e.next_in_row

    def keys(self) -> Iterator[int]:
        for e in self.elements(): yield e.col

    def values(self) -> Iterator[Any]:
        for e in self.elements(): yield e.val

    def items(self) -> Iterator[Tuple[int, Any]]:
        for e in self.elements(): yield (e.col, e.val)

    def clear(self):
        self.head = self.tail = None
        self.index = {}

    def copy(self) -> "RowMap":
        """ Element-by-element copy; shares no nodes with `self` """
        return RowMap(self.items())

    def __eq__(self, other):
        if not isinstance(other, RowMap): return NotImplemented
        if len(self) != len(other): return False
        return list(self.items()) == list(other.items())

    __hash__ = None

    def __repr__(self):
        return f"{self.__class__.__name__}({dict(self.items())})"
