"""Switching between single-player and server control profiles."""

from __future__ import annotations

from ..settings import CONTROL_NONE, CONTROL_RCON, Settings

PROFILE_SINGLEPLAYER = "singleplayer"
PROFILE_SERVER = "server"


def control_profile(settings: Settings) -> str:
    """"singleplayer" when no server control is configured, otherwise "server"."""
    if settings.server.control_type == CONTROL_NONE:
        return PROFILE_SINGLEPLAYER
    return PROFILE_SERVER


def apply_control_profile(settings: Settings, profile: str) -> None:
    """Set the server control type for a profile; raise ValueError for unknown ones."""
    if profile == PROFILE_SINGLEPLAYER:
        settings.server.control_type = CONTROL_NONE
    elif profile == PROFILE_SERVER:
        if settings.server.control_type == CONTROL_NONE:
            settings.server.control_type = CONTROL_RCON
    else:
        raise ValueError(f"profile must be {PROFILE_SINGLEPLAYER!r} or {PROFILE_SERVER!r}")


def control_profile_label(profile: str) -> str:
    """Display name of a profile."""
    return {PROFILE_SINGLEPLAYER: "单人存档", PROFILE_SERVER: "多人服务器"}.get(profile, profile)