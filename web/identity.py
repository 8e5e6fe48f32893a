"""Best-effort caller identity for the once-per-caller rule.

The identity is the network address of the request, falling back to the
first ``X-Forwarded-For`` hop. It is not authenticated and can be spoofed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import Request, request

from core import PickerDefaults


@dataclass(frozen=True)
class CallerIdentity:
    identity: str
    user_agent: str


def resolve_identity(req: Optional[Request] = None) -> CallerIdentity:
    req = req or request
    identity = req.remote_addr
    if not identity:
        forwarded = req.headers.get("X-Forwarded-For", "")
        identity = forwarded.split(",")[0].strip()
    return CallerIdentity(
        identity=identity or PickerDefaults.UNKNOWN_IDENTITY,
        user_agent=req.headers.get("User-Agent") or PickerDefaults.UNKNOWN_USER_AGENT,
    )
