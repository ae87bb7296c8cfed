"""Per-stream cursor state for incremental reads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class StreamState:
    stream_name: str
    stream_namespace: str | None
    cursor_field: List[str] = field(default_factory=list)
    cursor: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stream_name": self.stream_name,
            "stream_namespace": self.stream_namespace,
            "cursor_field": list(self.cursor_field),
            "cursor": self.cursor,
        }


class StateManager:
    """Holds the latest cursor per (namespace, stream); accepts the legacy and list state shapes."""

    def __init__(self, state: Optional[Dict[str, Any] | List[Dict[str, Any]]] = None) -> None:
        self._streams: Dict[Tuple[str | None, str], StreamState] = {}
        for entry in self._entries(state):
            name = entry.get("stream_name")
            if not name:
                continue
            ns = entry.get("stream_namespace")
            self._streams[(ns, name)] = StreamState(
                stream_name=name,
                stream_namespace=ns,
                cursor_field=list(entry.get("cursor_field") or []),
                cursor=entry.get("cursor"),
            )

    @staticmethod
    def _entries(state: Any) -> List[Dict[str, Any]]:
        if not state:
            return []
        if isinstance(state, dict):
            if "data" in state and isinstance(state["data"], dict):
                state = state["data"]
            return list(state.get("streams") or [])
        out: List[Dict[str, Any]] = []
        for item in state:
            # Message-shaped list entries wrap the payload in state.data or data.
            if isinstance(item, dict) and "state" in item:
                out.extend(StateManager._entries(item["state"]))
            elif isinstance(item, dict) and isinstance(item.get("data"), dict):
                out.extend(StateManager._entries(item["data"]))
            elif isinstance(item, dict):
                out.append(item)
        return out

    def get(self, name: str, namespace: str | None) -> StreamState | None:
        return self._streams.get((namespace, name))

    def cursor_for(self, name: str, namespace: str | None, cursor_field: List[str]) -> Any:
        """Saved cursor, or None when the stream is new or its cursor field changed."""
        saved = self.get(name, namespace)
        if saved is None or saved.cursor_field != list(cursor_field):
            return None
        return saved.cursor

    def update(self, name: str, namespace: str | None, cursor_field: List[str], cursor: Any) -> None:
        self._streams[(namespace, name)] = StreamState(
            stream_name=name,
            stream_namespace=namespace,
            cursor_field=list(cursor_field),
            cursor=cursor,
        )

    def to_dict(self) -> Dict[str, Any]:
        streams = sorted(self._streams.values(), key=lambda s: (s.stream_namespace or "", s.stream_name))
        return {"cdc": False, "streams": [s.to_dict() for s in streams]}
