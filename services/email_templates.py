"""Jinja2 rendering of room draw emails."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core import NotificationDefaults

TEMPLATE_DIR = Path(__file__).parent / "templates"

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


def render_winner_email(room_name: str, participant_count: int) -> RenderedEmail:
    html = _env.get_template("email/winner.html").render(
        room_name=room_name,
        participant_count=participant_count,
        app_name=NotificationDefaults.FROM_NAME,
    )
    return RenderedEmail(subject=f"\U0001F389 You Won! - {room_name}", html=html)


def render_results_email(room_name: str, winner: str) -> RenderedEmail:
    html = _env.get_template("email/results.html").render(
        room_name=room_name,
        winner=winner,
        app_name=NotificationDefaults.FROM_NAME,
    )
    return RenderedEmail(subject=f"Selection Results - {room_name}", html=html)
