from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional


@dataclass
class ApplicationConfig:
    """Framework configuration object handed to ``Application.setup``.

    Keys a mapping carries that are not fields here are preserved in
    ``additional`` so plugin-specific options survive a round trip.
    """

    application_name: Optional[str] = None
    uri_base: str = "http://localhost/"
    template_root: Optional[str] = None
    template_extension: Optional[str] = None
    dsn: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    model: Optional[str] = None
    view: Optional[str] = None
    rows_per_page: Optional[int] = None
    display_tables: list[str] = field(default_factory=list)
    ok_tables: list[str] = field(default_factory=list)
    additional: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)} - {"additional"}

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ApplicationConfig":
        known = cls.field_names()
        kwargs = {key: value for key, value in values.items() if key in known}
        extra = {key: value for key, value in values.items() if key not in known}
        return cls(**kwargs, additional=extra)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {name: getattr(self, name) for name in sorted(self.field_names())}
        payload["display_tables"] = list(self.display_tables)
        payload["ok_tables"] = list(self.ok_tables)
        payload["additional"] = dict(self.additional)
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ApplicationConfig":
        """Inverse of ``to_dict``: options come back from the ``additional`` entry."""
        known = cls.field_names()
        kwargs = {key: value for key, value in payload.items() if key in known}
        return cls(**kwargs, additional=dict(payload.get("additional") or {}))

    def get(self, key: str, default: Any = None) -> Any:
        if key in self.field_names():
            return getattr(self, key)
        return self.additional.get(key, default)


__all__ = ["ApplicationConfig"]
