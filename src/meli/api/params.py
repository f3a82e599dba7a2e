"""
Ordered query parameters.

Some resources depend on parameter order and accept repeated keys
(``/items?ids=MLA1&ids=MLA2``), so parameters are kept as an ordered list
of pairs instead of a dict.
"""

from typing import Any, Iterable, Iterator, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlencode

ParamPairs = Tuple[Tuple[str, str], ...]


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class HttpParams:
    """
    Chainable builder for ordered, multi-valued query parameters.

    Example:
        params = HttpParams().add("ids", "MLA1").add("ids", "MLA2").add("attributes", "id")
        str(params)  # 'ids=MLA1&ids=MLA2&attributes=id'
    """

    def __init__(self, pairs: Optional[Iterable[Tuple[str, Any]]] = None):
        self._pairs: List[Tuple[str, str]] = []
        for key, value in pairs or ():
            self.add(key, value)

    def add(self, key: str, value: Any) -> "HttpParams":
        """Append a parameter; None values are skipped."""
        if value is not None:
            self._pairs.append((key, _to_text(value)))
        return self

    def items(self) -> ParamPairs:
        return tuple(self._pairs)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HttpParams):
            return self._pairs == other._pairs
        return NotImplemented

    def __str__(self) -> str:
        return urlencode(self._pairs)

    def __repr__(self) -> str:
        return f"HttpParams({self._pairs!r})"


ParamsLike = Union[HttpParams, Mapping[str, Any], Iterable[Tuple[str, Any]], None]


def normalize_params(params: ParamsLike) -> ParamPairs:
    """
    Convert any accepted params form into an ordered tuple of string pairs.

    Mappings keep their insertion order; list values in a mapping expand to
    repeated keys.
    """
    if params is None:
        return ()
    if isinstance(params, HttpParams):
        return params.items()

    builder = HttpParams()
    if isinstance(params, Mapping):
        for key, value in params.items():
            if isinstance(value, (list, tuple)):
                for item in value:
                    builder.add(key, item)
            else:
                builder.add(key, value)
    else:
        for key, value in params:
            builder.add(key, value)
    return builder.items()
