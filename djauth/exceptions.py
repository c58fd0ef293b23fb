"""Exceptions raised by djauth"""
from __future__ import annotations


class PasswordHashError(ValueError):
	"""Base exception for password hashing errors"""
	pass


class InvalidEncodedPassword(PasswordHashError):
	"""Raised when a stored password string cannot be parsed"""
	pass


class UnsupportedAlgorithm(PasswordHashError):
	"""Raised when a stored password uses an algorithm other than pbkdf2_sha256"""

	def __init__(self, algorithm: str) -> None:
		super().__init__(f"algorithm {algorithm!r} is not supported")
		self.algorithm = algorithm


class InvalidSalt(PasswordHashError):
	"""Raised when a salt contains the field delimiter"""
	pass


class InvalidPassword(PasswordHashError):
	"""Raised when a plaintext password cannot be encoded as UTF-8"""
	pass


class InvalidIterationCount(PasswordHashError):
	"""Raised when an iteration count is not an unsigned 32-bit integer"""
	pass


class ConfigurationError(Exception):
	"""Raised when configuration is invalid"""
	pass
