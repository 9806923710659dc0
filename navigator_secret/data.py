import uuid
from typing import Optional, Any
from datetime import datetime, timezone
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from .conf import SESSION_ID, SESSION_PRINCIPAL_PATH


class SessionRecord(MutableMapping[str, Any]):
    """Session dict-like object.

    Opaque payload owned by the session store. Migration only looks at the
    nested authenticated-principal field (``passport.user`` by default) to
    tell a migrated session from a legacy or unauthenticated one.
    """

    def __init__(
        self,
        data: Optional[Mapping[str, Any]] = None,
        *,
        id: Optional[str] = None,
        new: bool = False,
    ) -> None:
        self._data: dict[str, Any] = dict(data or {})
        self._id_ = id or self._data.pop(SESSION_ID, None) or uuid.uuid4().hex
        self._new = new
        self._changed = new
        created = self._data.get('created')
        self._created = created or int(datetime.now(timezone.utc).timestamp())

    def __repr__(self) -> str:
        return (
            f'<Session-Record [id:{self._id_}, new:{self.new}] '
            f'keys={list(self._data.keys())}>'
        )

    # --- Properties ---

    @property
    def session_id(self) -> str:
        return self._id_

    @property
    def new(self) -> bool:
        return self._new

    @property
    def created(self) -> int:
        return self._created

    @property
    def empty(self) -> bool:
        return not bool(self._data)

    @property
    def is_changed(self) -> bool:
        return self._changed

    @is_changed.setter
    def is_changed(self, value: bool) -> None:
        self._changed = value

    def session_data(self) -> dict:
        """Return the stored payload (for persistence)."""
        return self._data

    # --- Principal ---

    def principal(self, path: Iterable[str] = SESSION_PRINCIPAL_PATH) -> Any:
        """Return the authenticated principal stored under ``path``, if any."""
        value: Any = self._data
        for key in path:
            if not isinstance(value, Mapping):
                return None
            value = value.get(key)
            if value is None:
                return None
        return value

    def is_authenticated(self, path: Iterable[str] = SESSION_PRINCIPAL_PATH) -> bool:
        return bool(self.principal(path))

    def regenerate(
        self,
        new_id: str,
        keep: Optional[Iterable[str]] = None
    ) -> "SessionRecord":
        """Return a new record under ``new_id``.

        Args:
            new_id: identifier issued by the session store.
            keep: keys carried over to the new record; all keys when None.
        """
        if keep is None:
            data = dict(self._data)
        else:
            data = {k: self._data[k] for k in keep if k in self._data}
        return SessionRecord(data, id=new_id, new=True)

    # --- Magic Methods ---

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._changed = True

    def __delitem__(self, key: str) -> None:
        del self._data[key]
        self._changed = True
