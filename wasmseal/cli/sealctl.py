#!/usr/bin/env python3
"""
sealctl - sign and inspect WebAssembly modules.

Commands:
    keygen      Generate a signing key pair
    sign        Embed signed claims in a module
    inspect     Show and verify the claims embedded in a module
                (exit 2: no claims, 3: expired or not yet valid)
    hash        Print a module's canonical hash

Usage:
    # Generate account and module keys
    sealctl keygen -o .keys/ --name account
    sealctl keygen -o .keys/ --name module

    # Sign a module
    sealctl sign echo.wasm -o echo_s.wasm --name echo \\
        --account-key .keys/account.key --module-key .keys/module.key \\
        --cap messaging --cap kv --expires-days 365

    # Verify it
    sealctl inspect echo_s.wasm --json

Environment:
    WASMSEAL_MIN_REVISION   Lowest claim revision requiring hash verification

Security Notes:
    - Keep account keys offline; only the public key needs distributing
    - Key files are written with owner-only permissions
"""

import argparse
import json
import sys
from pathlib import Path

from ..claims.validation import validate_token
from ..config.loader import SealConfig, load_config
from ..crypto.jwt_codec import JwtClaimsCodec
from ..crypto.keys import Ed25519KeyPair
from ..errors import ConfigError, WasmSealError
from ..integrity.canonical_hash import compute_canonical_hash
from ..integrity.module_claims import extract_claims, sign_buffer_with_claims
from ..logging_config import setup_logging
from ..utils.error_handling import ErrorCategory, handle_error, with_error_handling
from ..utils.time_helpers import stamp_to_human


def _codec(config: SealConfig) -> JwtClaimsCodec:
    return JwtClaimsCodec(min_revision=config.min_revision)


def _read_module(path: str) -> bytes:
    with open(path, 'rb') as f:
        return f.read()


@with_error_handling(operation="keygen", default_return=1)
def cmd_keygen(args, config: SealConfig) -> int:
    """Generate a new signing key pair."""
    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    key_pair = Ed25519KeyPair.generate()

    private_path = output_dir / f"{args.name}.key"
    if private_path.exists() and not args.force:
        raise FileExistsError(f"Refusing to overwrite {private_path} (use --force)")
    key_pair.save(private_path)
    print(f"Seed saved to: {private_path}")

    public_path = output_dir / f"{args.name}.pub"
    with open(public_path, 'w') as f:
        f.write(key_pair.public_key())
    print(f"Public key saved to: {public_path}")
    print(f"Public key: {key_pair.public_key()}")
    return 0


@with_error_handling(operation="sign", default_return=1, handled=(WasmSealError, OSError, ValueError))
def cmd_sign(args, config: SealConfig) -> int:
    """Embed signed claims in a module."""
    module_bytes = _read_module(args.module)
    account_key = Ed25519KeyPair.from_file(args.account_key)
    module_key = Ed25519KeyPair.from_file(args.module_key)

    signed = sign_buffer_with_claims(
        args.name,
        module_bytes,
        module_key,
        account_key,
        expires_in_days=args.expires_days,
        not_before_days=args.not_before_days,
        caps=args.cap,
        tags=args.tag,
        provider=args.provider,
        rev=args.rev,
        ver=args.ver,
        call_alias=args.call_alias,
        codec=_codec(config),
        sections=config.sections,
    )

    source = Path(args.module)
    output = args.output or str(source.with_name(f"{source.stem}_s{source.suffix or '.wasm'}"))
    with open(output, 'wb') as f:
        f.write(signed)

    print(f"Signed module written to: {output}")
    print(f"  Issuer:  {account_key.public_key()}")
    print(f"  Subject: {module_key.public_key()}")
    print(f"  Added {len(signed) - len(module_bytes)} bytes")
    return 0


@with_error_handling(operation="inspect", default_return=1)
def cmd_inspect(args, config: SealConfig) -> int:
    """Show and verify the claims embedded in a module."""
    codec = _codec(config)
    token = extract_claims(_read_module(args.module), codec=codec, sections=config.sections)
    if token is None:
        print(f"No claims embedded in {args.module}")
        return 2

    claims = token.claims
    validation = validate_token(token.jwt, codec=codec)
    metadata = claims.metadata

    if args.json:
        report = {
            'claims': claims.to_dict(),
            'validation': validation.to_dict(),
        }
        if args.raw:
            report['jwt'] = token.jwt
        print(json.dumps(report, indent=2, sort_keys=True))
        return 0

    print(f"Module:      {metadata.name or '-'}")
    print(f"Issuer:      {claims.issuer}")
    print(f"Subject:     {claims.subject}")
    print(f"Hash:        {metadata.module_hash}")
    print(f"Revision:    {claims.revision}")
    print(f"Expires:     {validation.expires_human}")
    print(f"Can be used: {validation.not_before_human}")
    print(f"Issued:      {stamp_to_human(claims.issued_at)}")
    print(f"Capabilities: {', '.join(metadata.caps or []) or 'none'}")
    print(f"Tags:        {', '.join(metadata.tags or []) or 'none'}")
    if metadata.ver is not None:
        print(f"Version:     {metadata.ver} (rev {metadata.rev})")
    if metadata.call_alias:
        print(f"Call alias:  {metadata.call_alias}")
    if args.raw:
        print(f"JWT:         {token.jwt}")
    return 0 if validation.is_usable else 3


@with_error_handling(operation="hash", default_return=1)
def cmd_hash(args, config: SealConfig) -> int:
    """Print a module's canonical hash."""
    print(compute_canonical_hash(_read_module(args.module), config.sections))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sealctl',
        description='Sign and inspect WebAssembly modules',
    )
    parser.add_argument('--config', help='Path to a YAML configuration file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose logging')
    parser.add_argument('--json-logs', action='store_true', help='Log as JSON lines')

    subparsers = parser.add_subparsers(dest='command', required=True)

    keygen = subparsers.add_parser('keygen', help='Generate a signing key pair')
    keygen.add_argument('-o', '--output', required=True, help='Output directory')
    keygen.add_argument('--name', default='signing', help='Key file base name')
    keygen.add_argument('--force', action='store_true', help='Overwrite existing keys')
    keygen.set_defaults(func=cmd_keygen)

    sign = subparsers.add_parser('sign', help='Embed signed claims in a module')
    sign.add_argument('module', help='Module to sign')
    sign.add_argument('-o', '--output', help='Output path (default: <module>_s.wasm)')
    sign.add_argument('-n', '--name', required=True, help='Human-readable module name')
    sign.add_argument('--account-key', required=True, help='Issuer seed file')
    sign.add_argument('--module-key', required=True, help='Module seed file')
    sign.add_argument('-c', '--cap', action='append', default=[], help='Capability (repeatable)')
    sign.add_argument('-t', '--tag', action='append', default=[], help='Tag (repeatable)')
    sign.add_argument('--expires-days', type=int, help='Days until the claims expire')
    sign.add_argument('--not-before-days', type=int, help='Days until the claims become valid')
    sign.add_argument('-p', '--provider', action='store_true', help='Module is a capability provider')
    sign.add_argument('-r', '--rev', type=int, help='Module revision number')
    sign.add_argument('--ver', help='Module version string')
    sign.add_argument('-a', '--call-alias', help='Call alias')
    sign.set_defaults(func=cmd_sign)

    inspect = subparsers.add_parser('inspect', help='Show embedded claims')
    inspect.add_argument('module', help='Module to inspect')
    inspect.add_argument('--json', action='store_true', help='Output as JSON')
    inspect.add_argument('--raw', action='store_true', help='Include the raw JWT')
    inspect.set_defaults(func=cmd_inspect)

    hash_cmd = subparsers.add_parser('hash', help='Print the canonical hash')
    hash_cmd.add_argument('module', help='Module to hash')
    hash_cmd.set_defaults(func=cmd_hash)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        setup_logging()
        handle_error(e, "load_config", category=ErrorCategory.CONFIG)
        return 1

    options = config.log_options
    setup_logging(
        verbose=args.verbose or options.verbose,
        log_file=options.file,
        json_format=args.json_logs or options.json,
    )

    return args.func(args, config)


if __name__ == '__main__':
    sys.exit(main())
