"""
The filter abstraction and the ordered pipeline filters are kept in.

A filter contributes command-line tokens to an operation. It receives the
operation it belongs to (the "context": source path, target dimensions,
associated audio and so on) and returns the tokens to append. The pipeline
calls its filters in the order they were added and concatenates their
tokens; a filter never sees, nor changes, the tokens of another filter.
"""
from typing import Any, Iterator, List

from loguru import logger


class Filter:
    """
    Base class for all filters.

    Subclasses must implement `apply`. Returning an empty list is allowed and
    simply contributes nothing to the command.
    """

    def apply(self, context: Any) -> List[str]:
        raise NotImplementedError("Subclasses must implement the apply() method.")

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for key, value in vars(self).items())
        return f"{type(self).__name__}({fields})"


class FilterPipeline:
    """
    An append-only, insertion-ordered collection of filters.

    The same filter may be added more than once; it then contributes its
    tokens once per occurrence.
    """

    def __init__(self):
        self._filters: List[Filter] = []

    def add(self, filter_obj: Filter) -> "FilterPipeline":
        """Appends a filter and returns the pipeline for chaining."""
        if not callable(getattr(filter_obj, "apply", None)):
            raise TypeError(f"{filter_obj!r} is not a filter: it has no apply() method")
        self._filters.append(filter_obj)
        return self

    def apply(self, context: Any) -> List[str]:
        """
        Collects the tokens of every filter, in insertion order.

        Args:
            context: The operation the command is assembled for.

        Returns:
            The concatenation of each filter's tokens.
        """
        tokens: List[str] = []
        for filter_obj in self._filters:
            contributed = [str(token) for token in filter_obj.apply(context)]
            logger.trace(f"{filter_obj!r} contributed {contributed}")
            tokens.extend(contributed)
        return tokens

    def __iter__(self) -> Iterator[Filter]:
        return iter(list(self._filters))

    def __len__(self) -> int:
        return len(self._filters)

    def __repr__(self) -> str:
        return f"FilterPipeline({self._filters!r})"
