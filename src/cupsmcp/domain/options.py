"""CUPS job options.

Callers pass a whitespace-delimited option string such as
``"sides=two-sided-long-edge media=A4 landscape"``. Every token is handed to
``lpr`` unchanged as ``-o <token>``; only the handful of keys the pipeline
itself reasons about get typed accessors.
"""

from __future__ import annotations

from dataclasses import dataclass

DUPLEX_SIDES = frozenset({"two-sided-long-edge", "two-sided-short-edge"})

# PPD-style duplex values that mean "not duplex".
_DUPLEX_OFF = frozenset({"none", "off", "false", "simplex"})

RECOGNIZED_KEYS = frozenset(
    {
        "sides",
        "duplex",
        "page-ranges",
        "media",
        "orientation-requested",
        "landscape",
        "portrait",
        "fit-to-page",
        "scaling",
        "number-up",
    }
)


@dataclass(frozen=True)
class OptionToken:
    """One ``key`` or ``key=value`` token."""

    key: str
    value: str | None = None

    @classmethod
    def parse(cls, token: str) -> OptionToken:
        key, sep, value = token.partition("=")
        return cls(key=key, value=value if sep else None)

    def __str__(self) -> str:
        return self.key if self.value is None else f"{self.key}={self.value}"


@dataclass(frozen=True)
class PrintOptions:
    """Parsed option string, order preserved."""

    tokens: tuple[OptionToken, ...] = ()

    @classmethod
    def parse(cls, raw: str | None) -> PrintOptions:
        if not raw:
            return cls()
        return cls(tuple(OptionToken.parse(t) for t in raw.split()))

    @property
    def raw(self) -> str:
        return " ".join(str(t) for t in self.tokens)

    def get(self, key: str) -> str | None:
        """Value of the last token named *key* (case-insensitive)."""
        wanted = key.lower()
        value: str | None = None
        for token in self.tokens:
            if token.key.lower() == wanted:
                value = token.value if token.value is not None else ""
        return value

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    @property
    def duplex(self) -> bool:
        sides = self.get("sides")
        if sides is not None:
            return sides.lower() in DUPLEX_SIDES
        duplex = self.get("duplex")
        if duplex is not None:
            return duplex.lower() not in _DUPLEX_OFF
        return False

    @property
    def page_ranges(self) -> str | None:
        return self.get("page-ranges")

    @property
    def media(self) -> str | None:
        return self.get("media")

    @property
    def orientation(self) -> str | None:
        """``"landscape"``/``"portrait"`` when requested, else None.

        IPP ``orientation-requested`` uses 4 for landscape and 3 for portrait.
        """
        requested = self.get("orientation-requested")
        if requested in ("4", "5"):
            return "landscape"
        if requested == "3":
            return "portrait"
        if self.has("landscape"):
            return "landscape"
        if self.has("portrait"):
            return "portrait"
        return None

    @property
    def scale(self) -> str | None:
        if self.has("fit-to-page"):
            return "fit"
        return self.get("scaling")

    @property
    def number_up(self) -> int | None:
        value = self.get("number-up")
        if value is None or not value.isdigit():
            return None
        return int(value)

    @property
    def passthrough(self) -> tuple[OptionToken, ...]:
        """Tokens the pipeline has no opinion about."""
        return tuple(t for t in self.tokens if t.key.lower() not in RECOGNIZED_KEYS)

    def to_lpr_args(self) -> list[str]:
        args: list[str] = []
        for token in self.tokens:
            args.extend(["-o", str(token)])
        return args
