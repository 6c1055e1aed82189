from __future__ import annotations

import re

from ..attendance.model import DeviceFingerprint

# Checked in order; the first match wins.
_OS_RULES = (
    ("Windows", re.compile(r"windows", re.I)),
    ("Android", re.compile(r"android", re.I)),
    ("iOS", re.compile(r"iphone|ipad|ipod|\bios\b", re.I)),
    ("macOS", re.compile(r"mac", re.I)),
    ("Linux", re.compile(r"linux", re.I)),
)

# Edge carries "Chrome" and Chrome carries "Safari", so the order matters.
_BROWSER_RULES = (
    ("Edge", re.compile(r"edg", re.I)),
    ("Chrome", re.compile(r"chrome|crios", re.I)),
    ("Firefox", re.compile(r"firefox|fxios", re.I)),
    ("Safari", re.compile(r"safari", re.I)),
)


def detect_device_type(user_agent: str) -> str:
    if re.search(r"tablet|ipad", user_agent, re.I):
        return "tablet"
    if re.search(r"android", user_agent, re.I) and not re.search(r"mobi", user_agent, re.I):
        return "tablet"
    if re.search(r"mobi|iphone|ipod", user_agent, re.I):
        return "mobile"
    return "desktop"


def detect_os(user_agent: str) -> str:
    for name, pattern in _OS_RULES:
        if pattern.search(user_agent):
            return name
    return "Unknown"


def detect_browser(user_agent: str) -> str:
    for name, pattern in _BROWSER_RULES:
        if pattern.search(user_agent):
            return name
    return "Unknown"


def build_device_fingerprint(user_agent: str | None) -> DeviceFingerprint:
    """Derive device/OS/browser from a user-agent string. Never fails."""
    user_agent = user_agent or ""
    return DeviceFingerprint(
        device_type=detect_device_type(user_agent),
        os=detect_os(user_agent),
        browser=detect_browser(user_agent),
        user_agent=user_agent,
    )
