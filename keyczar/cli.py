from click import option, argument, group, echo, pass_context, Context, Path as PathType
from loguru import logger
from pathlib import Path
import sys

from keyczar.common.b64url import b64u, ub64u
from keyczar.keys.errors import KeyczarError
from keyczar.keys.key_files import save_key, guess_key_type
from keyczar.keys.key_type import KeyParameters, KeyType
from keyczar.keys.registry import generate_key, read_key


EXIT_INVALID = 1
EXIT_ERROR = 2


def _load(file_path: Path):
    text = file_path.read_text(encoding="utf-8")
    return read_key(guess_key_type(text), text)


@group()
@option("--verbose", "-v", is_flag=True, default=False)
def app(verbose: bool) -> None:
    if verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")
    logger.debug("App started! ")


@app.command()
@option("--size", "-s", "size", type=int, default=KeyType.DSA_PRIV.default_size, show_default=True)
@argument("out_path", type=Path, required=True)
@pass_context
def create(context: Context, size: int, out_path: Path) -> None:
    try:
        key = generate_key(KeyType.DSA_PRIV, KeyParameters(key_size=size))
    except (KeyczarError, ValueError) as e:
        echo(f"error: {e}", err=True)
        context.exit(EXIT_ERROR)
    save_key(key, out_path)
    echo(key.hash().hex())


@app.command()
@argument("private_key_path", type=PathType(exists=True, dir_okay=False, path_type=Path))
@argument("out_path", type=Path)
@pass_context
def pubkey(context: Context, private_key_path: Path, out_path: Path) -> None:
    try:
        key = read_key(KeyType.DSA_PRIV, private_key_path.read_text(encoding="utf-8"))
    except (KeyczarError, ValueError) as e:
        echo(f"error: {e}", err=True)
        context.exit(EXIT_ERROR)
    save_key(key.get_public(), out_path)


@app.command()
@argument("private_key_path", type=PathType(exists=True, dir_okay=False, path_type=Path))
@argument("file_path", type=PathType(exists=True, dir_okay=False, path_type=Path))
@pass_context
def sign(context: Context, private_key_path: Path, file_path: Path) -> None:
    try:
        key = read_key(KeyType.DSA_PRIV, private_key_path.read_text(encoding="utf-8"))
        stream = key.get_stream()
        stream.init_sign()
        stream.update_sign(file_path.read_bytes())
        signature = stream.sign()
    except (KeyczarError, ValueError) as e:
        echo(f"error: {e}", err=True)
        context.exit(EXIT_ERROR)
    echo(b64u(signature))


@app.command()
@argument("key_path", type=PathType(exists=True, dir_okay=False, path_type=Path))
@argument("file_path", type=PathType(exists=True, dir_okay=False, path_type=Path))
@argument("signature", type=str)
@pass_context
def verify(context: Context, key_path: Path, file_path: Path, signature: str) -> None:
    try:
        key = _load(key_path)
        stream = key.get_stream()
        stream.init_verify()
        stream.update_verify(file_path.read_bytes())
        valid = stream.verify(ub64u(signature))
    except (KeyczarError, ValueError) as e:
        echo(f"error: {e}", err=True)
        context.exit(EXIT_ERROR)
    if not valid:
        echo("invalid")
        context.exit(EXIT_INVALID)
    echo("valid")
