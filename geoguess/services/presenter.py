"""
Presentation boundary.

The game logic talks to the page only through :class:`Presenter`. On the web,
:class:`CommandRecorder` turns each call into a small JSON command that the
browser replays against its Street View widget and DOM.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from geoguess.services.imagery import Position
from geoguess.services.places import Place, PointOfView

Severity = Literal["info", "success", "warn", "error"]
DEFAULT_POV = PointOfView(heading=0.0, pitch=0.0)


class Presenter:
    """No-op presenter; subclasses override what they render."""

    def show_panorama(self, position: Position, pov: Optional[PointOfView]) -> None:
        pass

    def show_status(self, text: str, severity: Severity = "info") -> None:
        pass

    def show_score(self, score: int, rounds_played: int) -> None:
        pass

    def set_input_enabled(self, enabled: bool) -> None:
        pass

    def reveal(self, place: Place) -> None:
        pass

    def drain(self) -> List[Dict[str, Any]]:
        """Commands rendered since the last drain; none for a presenter that renders directly."""
        return []


class CommandRecorder(Presenter):
    """Collects render commands for one request."""

    def __init__(self) -> None:
        self.commands: List[Dict[str, Any]] = []

    def show_panorama(self, position: Position, pov: Optional[PointOfView]) -> None:
        self.commands.append(
            {
                "command": "show_panorama",
                "position": position.as_dict(),
                "pov": (pov or DEFAULT_POV).as_dict(),
            }
        )

    def show_status(self, text: str, severity: Severity = "info") -> None:
        self.commands.append({"command": "show_status", "text": text, "severity": severity})

    def show_score(self, score: int, rounds_played: int) -> None:
        self.commands.append(
            {
                "command": "show_score",
                "text": f"Score: {score}",
                "score": score,
                "rounds_played": rounds_played,
            }
        )

    def set_input_enabled(self, enabled: bool) -> None:
        self.commands.append({"command": "set_input_enabled", "enabled": enabled})

    def reveal(self, place: Place) -> None:
        self.commands.append(
            {
                "command": "reveal",
                "name": place.name,
                "city": place.city,
                "country": place.country,
                "answer": place.answer(),
            }
        )

    def drain(self) -> List[Dict[str, Any]]:
        commands, self.commands = self.commands, []
        return commands
