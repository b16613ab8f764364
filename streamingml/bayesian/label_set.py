#!filepath: streamingml/bayesian/label_set.py
from __future__ import annotations

from typing import Any, Dict, Hashable, List, Optional, Tuple

from streamingml.utils.errors import UnknownClassIndexError


class ClassLabelSet:
    """
    Append-only label <-> index mapping.

    - index = first-seen order, 0..K-1
    - never shrinks, never reorders
    - mutated only under the owning model's write lock
    """

    def __init__(self):
        self._labels: List[Any] = []
        self._index: Dict[Hashable, int] = {}

    def add(self, label: Hashable) -> int:
        idx = self._index.get(label)
        if idx is not None:
            return idx
        idx = len(self._labels)
        self._labels.append(label)
        self._index[label] = idx
        return idx

    def index_of(self, label: Hashable) -> Optional[int]:
        return self._index.get(label)

    def label_of(self, index: int) -> Any:
        if index < 0 or index >= len(self._labels):
            raise UnknownClassIndexError(
                f"Class index {index} out of range, known classes: {len(self._labels)}"
            )
        return self._labels[index]

    def as_tuple(self) -> Tuple[Any, ...]:
        return tuple(self._labels)

    def __contains__(self, label: Hashable) -> bool:
        return label in self._index

    def __len__(self) -> int:
        return len(self._labels)

    def __repr__(self) -> str:
        return f"ClassLabelSet({self._labels!r})"
