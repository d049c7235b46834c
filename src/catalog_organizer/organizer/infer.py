"""Folder path inference from endpoint URL paths.

Examples (default options):
    /api/v1/admin/billing/validate-peppol-id -> "V1/Admin/Billing"
    /api/v1/users/{id}                       -> "V1/Users"
    /api/v1/users/{id}/documents             -> "V1/Users/Documents"
    /auth/login                              -> "Auth/Login"
"""

import re

VERSION_SEGMENT = re.compile(r"^v\d+$", re.IGNORECASE)


def is_version_segment(segment: str) -> bool:
    return bool(VERSION_SEGMENT.match(segment))


def title_case_words(segment: str) -> str:
    """`reset-password` -> `Reset Password`."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in segment.split("-"))


def infer_folder_from_path(
    url_path: str,
    *,
    strip_api_prefix: bool = True,
    strip_version: bool = False,
    max_depth: int = 3,
    capitalize_segments: bool = True,
) -> str:
    """Infer a folder path from a URL path.

    May return an empty string when nothing usable is left; callers
    substitute the fallback folder.
    """
    segments = [s for s in url_path.split("/") if s]

    if strip_api_prefix and segments and segments[0].lower() == "api":
        segments = segments[1:]

    if strip_version and segments and is_version_segment(segments[0]):
        segments = segments[1:]

    segments = [s for s in segments if not s.startswith("{")]

    # A hyphenated last segment is an action (validate-peppol-id, reset-password),
    # not a resource. Single words such as `login` are kept.
    if len(segments) > 1 and "-" in segments[-1]:
        segments = segments[:-1]

    segments = segments[:max_depth]

    if capitalize_segments:
        segments = [title_case_words(s) for s in segments]

    return "/".join(segments)
