from __future__ import annotations

import argparse
import getpass
import logging
import sys
from typing import Optional

from .config import Config, configure_logging, default_config, try_load_config
from .exceptions import ConfigurationError, PasswordHashError
from .hashers import DEFAULT_ITERATIONS, MAX_ITERATIONS, authenticate, encode_password


logger = logging.getLogger(__name__)


def _iterations(text: str) -> int:
	try:
		value = int(text)
	except ValueError as e:
		raise argparse.ArgumentTypeError(f"invalid iteration count: {text}") from e
	if value < 0 or value > MAX_ITERATIONS:
		raise argparse.ArgumentTypeError(f"iteration count must be between 0 and {MAX_ITERATIONS}")
	return value


def _prompt(prompt: str) -> str:
	return input(prompt)


def _prompt_password(prompt: str) -> str:
	return getpass.getpass(prompt)


def _prompt_iterations(prompt: str) -> Optional[int]:
	while True:
		answer = _prompt(prompt).strip()
		if not answer:
			return None
		try:
			return _iterations(answer)
		except argparse.ArgumentTypeError:
			print("Please input a number, try again!")


def _load(args: argparse.Namespace) -> Config:
	config = try_load_config(args.config) or default_config()
	configure_logging(args.log_level or config.app.log_level)
	return config


def cmd_encode(args: argparse.Namespace) -> int:
	config = _load(args)
	password = args.password if args.password is not None else _prompt_password("Input password: ")
	salt = args.salt if args.salt is not None else _prompt("Input salt: ")
	if args.iterations is not None:
		iterations = args.iterations
	elif config.hasher.iterations is not None:
		iterations = config.hasher.iterations
	else:
		iterations = _prompt_iterations(f"Input number of iterations (default {DEFAULT_ITERATIONS}): ")
	try:
		encoded = encode_password(password, salt, iterations)
	except PasswordHashError as e:
		print(f"Encoding error: {e}")
		return 2
	print(f"Encoded password: {encoded}")
	return 0


def cmd_verify(args: argparse.Namespace) -> int:
	_load(args)
	password = args.password if args.password is not None else _prompt_password("Input password: ")
	encoded = args.encoded if args.encoded is not None else _prompt("Input Django stored password: ")
	try:
		ok = authenticate(password, encoded.strip())
	except PasswordHashError as e:
		logger.debug("verification failed with %s", type(e).__name__)
		print(f"Verification error: {e}")
		return 2
	if ok:
		print("Password verified!")
		return 0
	print("Password verification failed!")
	return 1


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="djauth",
		description="Encode and verify Django pbkdf2_sha256 passwords",
	)
	parser.add_argument(
		"-c",
		"--config",
		help="config file path (default: djauth.json)",
		default="djauth.json",
	)
	parser.add_argument(
		"--log-level",
		help="override the configured log level",
		default=None,
	)
	sp = parser.add_subparsers(dest="cmd", required=True)

	sp_encode = sp.add_parser("encode", help="encode a password in Django style")
	sp_encode.add_argument("--password", required=False, help="plaintext password (prompted if omitted)")
	sp_encode.add_argument("--salt", required=False, help="salt, must not contain '$' (prompted if omitted)")
	sp_encode.add_argument("--iterations", type=_iterations, required=False, help=f"PBKDF2 rounds, 0 for the default {DEFAULT_ITERATIONS}")
	sp_encode.set_defaults(func=cmd_encode)

	sp_verify = sp.add_parser("verify", help="verify a Django stored password")
	sp_verify.add_argument("--password", required=False, help="plaintext password (prompted if omitted)")
	sp_verify.add_argument("--encoded", required=False, help="stored pbkdf2_sha256 string (prompted if omitted)")
	sp_verify.set_defaults(func=cmd_verify)

	return parser


def main(argv: list[str] | None = None) -> int:
	argv = list(sys.argv[1:] if argv is None else argv)
	parser = build_parser()
	args = parser.parse_args(argv)
	try:
		return args.func(args)
	except ConfigurationError as e:
		print(f"Configuration error: {e}")
		return 2


if __name__ == "__main__":
	sys.exit(main())
