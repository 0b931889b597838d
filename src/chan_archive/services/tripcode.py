"""Tripcode derivation from the raw name field.

A name like ``Anon#secret#other`` renders as ``Anon`` with the tripcode
``!<classic>!!<secure>``. The classic form is the traditional DES crypt
trip; the secure form mixes in a server-side salt.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import re
from typing import NamedTuple

from passlib.hash import des_crypt

logger = logging.getLogger(__name__)

CLASSIC_PREFIX = "!"
SECURE_PREFIX = "!!"
CLASSIC_LENGTH = 10
SECURE_LENGTH = 11

_NAME_PATTERN = re.compile(r"^(.*?)#(.*)$", re.DOTALL)
_SECRET_PATTERN = re.compile(r"^(.*?)(?:#+(.*))?$", re.DOTALL)
_SALT_OUTSIDE_RANGE = re.compile(rb"[^.-z]")
_SALT_TRANSLATION = bytes.maketrans(b":;<=>?@[\\]^_`", b"ABCDEFGabcdef")


class ParsedName(NamedTuple):
    """Display name and tripcode derived from a raw name field."""

    name: str
    trip: str


def encode_legacy_secret(secret: str) -> bytes:
    """Encode ``secret`` as Shift-JIS, replacing unencodable characters with ``?``.

    This is the only place where text leaves Unicode.
    """
    return secret.encode("shift_jis", errors="replace")


def classic_salt(encoded: bytes) -> str:
    """Derive the two-character crypt salt from an encoded secret."""
    salt = (encoded + b"H.")[1:3]
    salt = _SALT_OUTSIDE_RANGE.sub(b".", salt)
    return salt.translate(_SALT_TRANSLATION).decode("ascii")


def classic_tripcode(secret: str) -> str:
    """Return the 10-character classic tripcode, or ``""`` for a blank secret."""
    if not secret.strip():
        return ""

    encoded = encode_legacy_secret(secret)
    salt = classic_salt(encoded)
    try:
        digest = des_crypt.using(salt=salt).hash(encoded)
    except ValueError as err:
        # NUL bytes cannot go through crypt(3).
        logger.warning("Could not derive classic tripcode: %s", err)
        return ""
    return digest[-CLASSIC_LENGTH:]


def secure_tripcode(secret: str, salt: str) -> str:
    """Return the 11-character secure tripcode for ``secret``.

    Args:
        secret: The second, secure part of the name secret.
        salt: Base64-encoded server-side salt.
    """
    try:
        salt_bytes = base64.b64decode(salt)
    except (binascii.Error, ValueError):
        logger.warning("Secure tripcode salt is not valid base64; using it verbatim")
        salt_bytes = salt.encode("utf-8")
    digest = hashlib.sha1(secret.encode("utf-8") + salt_bytes).digest()
    return base64.b64encode(digest).decode("ascii")[:SECURE_LENGTH]


def process_name(raw_name: str | None, *, secure_salt: str = "") -> ParsedName:
    """Split a raw name field into its display name and tripcode.

    Args:
        raw_name: Name as typed by the poster, for example ``"Anon#pass"``.
        secure_salt: Base64-encoded salt for the secure tripcode.

    Returns:
        The stripped display name and the concatenated tripcode. A name
        without ``#`` is returned as is with an empty tripcode.
    """
    name = raw_name or ""
    match = _NAME_PATTERN.match(name)
    if match is None:
        return ParsedName(name, "")

    display_name = match.group(1).strip()
    secrets_match = _SECRET_PATTERN.match(match.group(2))
    # The pattern can always match, even an empty remainder.
    assert secrets_match is not None

    normal_trip = classic_tripcode(secrets_match.group(1))
    if normal_trip:
        normal_trip = CLASSIC_PREFIX + normal_trip

    secure_trip = ""
    if secrets_match.group(2) is not None:
        secure_trip = SECURE_PREFIX + secure_tripcode(secrets_match.group(2), secure_salt)

    return ParsedName(display_name, normal_trip + secure_trip)
