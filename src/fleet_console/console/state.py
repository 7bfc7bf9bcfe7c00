"""
fleet_console.console.state

Tagged state variants for the settings controllers.

- `LoadState`: Idle | Loading | Loaded | Error(message) for the profiles collection.
- `EditorState`: NoEditor | Creating | Editing | ResettingPassword | CreatingVehicle.
  A single field of this type replaces per-modal booleans, so two editors can
  never be open at once.
"""

from __future__ import annotations

from dataclasses import dataclass

from fleet_console.console.models import Profile


@dataclass(frozen=True, slots=True)
class Idle:
    pass


@dataclass(frozen=True, slots=True)
class Loading:
    pass


@dataclass(frozen=True, slots=True)
class Loaded:
    pass


@dataclass(frozen=True, slots=True)
class Error:
    message: str


LoadState = Idle | Loading | Loaded | Error


@dataclass(frozen=True, slots=True)
class NoEditor:
    pass


@dataclass(frozen=True, slots=True)
class Creating:
    pass


@dataclass(frozen=True, slots=True)
class Editing:
    profile: Profile


@dataclass(frozen=True, slots=True)
class ResettingPassword:
    profile: Profile


@dataclass(frozen=True, slots=True)
class CreatingVehicle:
    pass


EditorState = NoEditor | Creating | Editing | ResettingPassword | CreatingVehicle

NO_EDITOR = NoEditor()
