from __future__ import annotations

import base64
import hmac
import logging
import re
from dataclasses import dataclass
from hashlib import pbkdf2_hmac
from typing import Optional

from .exceptions import InvalidEncodedPassword, InvalidIterationCount, InvalidPassword, InvalidSalt, PasswordHashError, UnsupportedAlgorithm


logger = logging.getLogger(__name__)

ALGORITHM = "pbkdf2_sha256"
DIGEST = "sha256"
DEFAULT_ITERATIONS = 180_000
# hashlib.pbkdf2_hmac takes a C int
MAX_ITERATIONS = 2**31 - 1
DKLEN = 32
SEPARATOR = "$"

_ITERATIONS_RE = re.compile(r"[0-9]{1,10}")


def _to_bytes(value: str, error: type[PasswordHashError], what: str) -> bytes:
	try:
		return value.encode("utf-8")
	except UnicodeEncodeError as e:
		raise error(f"{what} is not encodable as UTF-8") from e


@dataclass(frozen=True)
class EncodedPassword:
	algorithm: str
	iterations: int
	salt: str
	hash: str

	def __str__(self) -> str:
		return SEPARATOR.join((self.algorithm, str(self.iterations), self.salt, self.hash))


def _resolve_iterations(iterations: Optional[int]) -> int:
	if iterations is None:
		return DEFAULT_ITERATIONS
	if isinstance(iterations, bool) or not isinstance(iterations, int):
		raise InvalidIterationCount(f"iterations must be an integer, got {type(iterations).__name__}")
	# 0 is kept as an alias for the default
	if iterations == 0:
		return DEFAULT_ITERATIONS
	if iterations < 0 or iterations > MAX_ITERATIONS:
		raise InvalidIterationCount(f"iterations out of range: {iterations}")
	return iterations


def encode_password(password: str, salt: str, iterations: Optional[int] = None) -> str:
	"""Encode ``password`` the way Django's PBKDF2PasswordHasher does.

	Returns ``pbkdf2_sha256$<iterations>$<salt>$<base64 digest>``. When
	``iterations`` is None (or 0) the default of 180000 rounds is used.
	"""
	if SEPARATOR in salt:
		raise InvalidSalt("salt contains dollar sign ($)")
	iterations = _resolve_iterations(iterations)
	logger.debug("deriving %s key with %d iterations", ALGORITHM, iterations)
	password_bytes = _to_bytes(password, InvalidPassword, "password")
	salt_bytes = _to_bytes(salt, InvalidSalt, "salt")
	dk = pbkdf2_hmac(DIGEST, password_bytes, salt_bytes, iterations, dklen=DKLEN)
	digest = base64.b64encode(dk).decode("ascii")
	return str(EncodedPassword(ALGORITHM, iterations, salt, digest))


def split_encoded(encoded_password: str) -> EncodedPassword:
	"""Parse a stored password into its four fields without re-deriving it."""
	parts = encoded_password.split(SEPARATOR)[:4]
	if len(parts) != 4:
		logger.warning("rejecting stored password with %d field(s)", len(parts))
		raise InvalidEncodedPassword("invalid django hashed password")
	algorithm, iterations_text, salt, digest = parts
	if algorithm != ALGORITHM:
		logger.warning("rejecting stored password with algorithm %r", algorithm)
		raise UnsupportedAlgorithm(algorithm)
	if not _ITERATIONS_RE.fullmatch(iterations_text) or int(iterations_text) > MAX_ITERATIONS:
		logger.warning("rejecting stored password with bad iteration count")
		raise InvalidEncodedPassword(f"invalid iterations in hashed password: {iterations_text!r}")
	return EncodedPassword(algorithm, int(iterations_text), salt, digest)


def authenticate(password: str, encoded_password: str) -> bool:
	"""Check ``password`` against a Django-managed ``encoded_password``.

	Only the default pbkdf2_sha256 hasher is supported. Returns False on a
	mismatch and raises a PasswordHashError subclass on malformed input.
	"""
	stored = _to_bytes(encoded_password, InvalidEncodedPassword, "hashed password")
	parsed = split_encoded(encoded_password)
	encoded = encode_password(password, parsed.salt, parsed.iterations)
	return hmac.compare_digest(encoded.encode("utf-8"), stored)
