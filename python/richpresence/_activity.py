"""Activity value objects — the status tree published to the presence host.

Each object validates on assignment and serializes with ``to_dict()``.
Unset fields are left out of the serialized form entirely; only
``Activity.type`` and the nested ``timestamps``/``assets`` objects are
always present.
"""

import copy
import enum
from typing import Any, Dict, List, Optional, Union

from . import _protocol as P


class ActivityType(enum.IntEnum):
    PLAYING = 0
    LISTENING = 2
    WATCHING = 3
    COMPETING = 5


def _check_str(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, got {type(value).__name__}")
    return value


def _check_count(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


class Timestamps:
    """Start/end times in seconds since the epoch; 0 means unset."""

    __slots__ = ("_start", "_end")

    def __init__(self, start: Union[int, float] = 0, end: Union[int, float] = 0) -> None:
        self._start = 0
        self._end = 0
        self.start = start
        self.end = end

    @staticmethod
    def _seconds(name: str, value: Union[int, float]) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{name} must be a number, got {type(value).__name__}")
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value}")
        return int(value)

    @property
    def start(self) -> int:
        return self._start

    @start.setter
    def start(self, value: Union[int, float]) -> None:
        self._start = self._seconds("start", value)

    @property
    def end(self) -> int:
        return self._end

    @end.setter
    def end(self, value: Union[int, float]) -> None:
        self._end = self._seconds("end", value)

    def to_dict(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        if self._start > 0:
            out["start"] = self._start
        if self._end > 0:
            out["end"] = self._end
        return out

    def __repr__(self) -> str:
        return f"Timestamps(start={self._start}, end={self._end})"


class Party:
    """Party id and size. ``current_size`` may never exceed ``max_size``."""

    __slots__ = ("_id", "_current_size", "_max_size")

    def __init__(self, id: str = "", current_size: int = 0, max_size: int = 0) -> None:
        self._id = ""
        self._current_size = 0
        self._max_size = 0
        self.id = id
        _check_count("current_size", current_size)
        _check_count("max_size", max_size)
        if current_size > max_size:
            raise ValueError(
                f"current_size ({current_size}) exceeds max_size ({max_size})"
            )
        self._current_size = current_size
        self._max_size = max_size

    @property
    def id(self) -> str:
        return self._id

    @id.setter
    def id(self, value: str) -> None:
        self._id = _check_str("id", value)

    @property
    def current_size(self) -> int:
        return self._current_size

    @current_size.setter
    def current_size(self, value: int) -> None:
        _check_count("current_size", value)
        # A max of 0 means "not set yet", so sizes can be assigned in any order.
        if self._max_size and value > self._max_size:
            raise ValueError(
                f"current_size ({value}) exceeds max_size ({self._max_size})"
            )
        self._current_size = value

    @property
    def max_size(self) -> int:
        return self._max_size

    @max_size.setter
    def max_size(self, value: int) -> None:
        _check_count("max_size", value)
        if value < self._current_size:
            raise ValueError(
                f"max_size ({value}) is below current_size ({self._current_size})"
            )
        self._max_size = value

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self._id:
            out["id"] = self._id
        if self._current_size or self._max_size:
            out["size"] = [self._current_size, self._max_size]
        return out

    def __repr__(self) -> str:
        return f"Party(id={self._id!r}, size={self._current_size}/{self._max_size})"


class Assets:
    """Large and small image keys with their hover texts."""

    __slots__ = ("large_image", "large_text", "small_image", "small_text")

    def __init__(
        self,
        large_image: str = "",
        large_text: str = "",
        small_image: str = "",
        small_text: str = "",
    ) -> None:
        self.large_image = _check_str("large_image", large_image)
        self.large_text = _check_str("large_text", large_text)
        self.small_image = _check_str("small_image", small_image)
        self.small_text = _check_str("small_text", small_text)

    def to_dict(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for key in self.__slots__:
            value = getattr(self, key)
            if value:
                out[key] = value
        return out

    def __repr__(self) -> str:
        return f"Assets({self.to_dict()!r})"


class Button:
    """A clickable link: label shorter than 32 chars, URL shorter than 512."""

    __slots__ = ("_label", "_url")

    def __init__(self, label: str, url: str) -> None:
        self._label = ""
        self._url = ""
        self.label = label
        self.url = url

    @property
    def label(self) -> str:
        return self._label

    @label.setter
    def label(self, value: str) -> None:
        _check_str("label", value)
        if len(value) >= P.MAX_BUTTON_LABEL:
            raise ValueError(
                f"button label must be shorter than {P.MAX_BUTTON_LABEL} chars, "
                f"got {len(value)}"
            )
        self._label = value

    @property
    def url(self) -> str:
        return self._url

    @url.setter
    def url(self, value: str) -> None:
        _check_str("url", value)
        if len(value) >= P.MAX_BUTTON_URL:
            raise ValueError(
                f"button url must be shorter than {P.MAX_BUTTON_URL} chars, "
                f"got {len(value)}"
            )
        self._url = value

    def to_dict(self) -> Dict[str, str]:
        return {"label": self._label, "url": self._url}

    def __repr__(self) -> str:
        return f"Button({self._label!r}, {self._url!r})"


class Activity:
    """The activity published with SET_ACTIVITY.

    Usage::

        act = Activity(name="My Game", details="Level 3")
        act.timestamps.start = time.time()
        act.assets.large_image = "logo"
        act.party = Party("lobby-1", 2, 5)
        act.add_button(Button("Website", "https://example.com"))
    """

    __slots__ = (
        "_name", "_client_id", "_type", "_details", "_state",
        "_timestamps", "_party", "_assets", "_buttons",
    )

    def __init__(
        self,
        name: Optional[str] = None,
        type: ActivityType = ActivityType.PLAYING,
        details: str = "",
        state: str = "",
        client_id: int = 0,
        timestamps: Optional[Timestamps] = None,
        party: Optional[Party] = None,
        assets: Optional[Assets] = None,
        buttons: Optional[List[Button]] = None,
    ) -> None:
        self._name: Optional[str] = None
        self._client_id = 0
        self._type = ActivityType.PLAYING
        self._details = ""
        self._state = ""
        self._timestamps = Timestamps()
        self._party: Optional[Party] = None
        self._assets = Assets()
        self._buttons: List[Button] = []

        if name is not None:
            self.name = name
        self.type = type
        self.details = details
        self.state = state
        self.client_id = client_id
        if timestamps is not None:
            self.timestamps = timestamps
        self.party = party
        if assets is not None:
            self.assets = assets
        for button in buttons or ():
            self.add_button(button)

    @property
    def name(self) -> Optional[str]:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        _check_str("name", value)
        if not value:
            raise ValueError("name must not be empty")
        self._name = value

    @property
    def client_id(self) -> int:
        """Application id shown with the activity; 0 uses the client's own."""
        return self._client_id

    @client_id.setter
    def client_id(self, value: int) -> None:
        self._client_id = _check_count("client_id", value)

    @property
    def type(self) -> ActivityType:
        return self._type

    @type.setter
    def type(self, value: Union[ActivityType, int]) -> None:
        try:
            self._type = ActivityType(value)
        except ValueError:
            raise ValueError(f"unknown activity type: {value!r}") from None

    @property
    def details(self) -> str:
        return self._details

    @details.setter
    def details(self, value: str) -> None:
        self._details = _check_str("details", value)

    @property
    def state(self) -> str:
        return self._state

    @state.setter
    def state(self, value: str) -> None:
        self._state = _check_str("state", value)

    @property
    def timestamps(self) -> Timestamps:
        return self._timestamps

    @timestamps.setter
    def timestamps(self, value: Timestamps) -> None:
        if not isinstance(value, Timestamps):
            raise TypeError("timestamps must be a Timestamps instance")
        self._timestamps = value

    @property
    def party(self) -> Optional[Party]:
        return self._party

    @party.setter
    def party(self, value: Optional[Party]) -> None:
        if value is not None and not isinstance(value, Party):
            raise TypeError("party must be a Party instance or None")
        self._party = value

    @property
    def assets(self) -> Assets:
        return self._assets

    @assets.setter
    def assets(self, value: Assets) -> None:
        if not isinstance(value, Assets):
            raise TypeError("assets must be an Assets instance")
        self._assets = value

    @property
    def buttons(self) -> List[Button]:
        return list(self._buttons)

    def add_button(self, button: Button) -> None:
        if not isinstance(button, Button):
            raise TypeError("button must be a Button instance")
        if len(self._buttons) >= P.MAX_BUTTONS:
            raise ValueError(f"an activity holds at most {P.MAX_BUTTONS} buttons")
        self._buttons.append(button)

    def clear_buttons(self) -> None:
        self._buttons.clear()

    def copy(self) -> "Activity":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self._name:
            out["name"] = self._name
        if self._client_id:
            out["client_id"] = self._client_id
        out["type"] = int(self._type)
        if self._details:
            out["details"] = self._details
        if self._state:
            out["state"] = self._state
        out["timestamps"] = self._timestamps.to_dict()
        if self._party is not None:
            out["party"] = self._party.to_dict()
        out["assets"] = self._assets.to_dict()
        if self._buttons:
            out["buttons"] = [b.to_dict() for b in self._buttons]
        return out

    def __repr__(self) -> str:
        return f"Activity(name={self._name!r}, type={self._type.name})"
