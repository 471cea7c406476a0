import json
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
import click
from ipblocks.errors import BlocksError
from ipblocks.codec import encode_native
from ipblocks.cid import CID, RAW, DAG_CBOR, BASE32, BASES, cid_for_bytes, normalize_codec, supported_algorithms
from ipblocks.config import CONFIG_FILE_NAME, BlocksConfig, dumps_config
from ipblocks.context import BlocksContext
from ipblocks.unixfs.tree_helpers import list_directory, read_file, resolve_path

#print logs to console
logging.basicConfig(level=logging.INFO)

# Main CLI to work with block stores.
# It utilizes the 'click' library.

@dataclass
class CliContext:
    verbose:bool
    work_dir:str
    config_path:str
    store_type:str|None

    def enforce_path_exists(self, path:str) -> str:
        """Returns the path relative to the work directory, if it exists."""
        full_path = os.path.join(self.work_dir, path)
        if not os.path.lexists(full_path):
            raise click.ClickException(f"Path '{path}' does not exist in work directory '{self.work_dir}'.")
        return full_path

    @contextmanager
    def open(self):
        """Opens the blocks context and turns library errors into click errors."""
        try:
            with BlocksContext.from_work_dir(self.work_dir, self.config_path, self.store_type) as blocks_ctx:
                yield blocks_ctx
        except (BlocksError, ValueError) as e:
            raise click.ClickException(f"{type(e).__name__}: {e}") from e

@click.group()
@click.pass_context
@click.option("--work-dir", "-d", help="Work directory. By default, uses the current directory. All other files and paths will be relative to this.")
@click.option("--config", "-c", "config_path", help=f"Config file. By default, uses '{CONFIG_FILE_NAME}' in the work directory.")
@click.option("--store-type", "-s", type=click.Choice(['file', 'lmdb', 'memory', 'ipfs']), help="Overrides the store type of the config.")
@click.option("--verbose", "-v", is_flag=True, help="Will print verbose messages.")
def cli(ctx:click.Context, work_dir:str|None, config_path:str|None, store_type:str|None, verbose:bool):
    if(work_dir is None):
        work_dir = os.getcwd()
    if(not os.path.exists(work_dir)):
        raise click.ClickException(f"Work directory '{work_dir}' (absolute: '{os.path.abspath(work_dir)}') does not exist.")
    if(config_path is None):
        config_path = os.path.join(work_dir, CONFIG_FILE_NAME)
    if(verbose):
        logging.getLogger().setLevel(logging.DEBUG)
        print(" work dir: " + work_dir)
        print(" config file: " + config_path)

    ctx.obj = CliContext(
        verbose=verbose,
        work_dir=work_dir,
        config_path=config_path,
        store_type=store_type)

#===========================================================
# 'init' command
#===========================================================
@cli.command()
@click.pass_context
def init(ctx:click.Context):
    """Writes a default config file."""
    cli_ctx:CliContext = ctx.obj
    if os.path.exists(cli_ctx.config_path):
        raise click.ClickException(f"Config file '{cli_ctx.config_path}' already exists.")
    with open(cli_ctx.config_path, 'w') as f:
        f.write(dumps_config(BlocksConfig()))
    print(f"Created config file: {cli_ctx.config_path}")

#===========================================================
# 'add' command
#===========================================================
@cli.command()
@click.pass_context
@click.argument("paths", nargs=-1, required=True)
def add(ctx:click.Context, paths:tuple[str, ...]):
    """Imports files or directories as UnixFS and prints their CIDs."""
    cli_ctx:CliContext = ctx.obj
    with cli_ctx.open() as blocks_ctx:
        for path in paths:
            result = blocks_ctx.store.import_path(cli_ctx.enforce_path_exists(path))
            print(f"added {result.cid} {path}")

#===========================================================
# 'block' commands
#===========================================================
@cli.group()
def block():
    """Works with single blocks."""
    pass

@block.command("put")
@click.pass_context
@click.argument("file", type=click.File('rb'), default="-")
@click.option("--codec", default=RAW, help="Codec of the block.")
@click.option("--cid", "expected_cid", help="Stores the block under this CID, if it matches the data.")
def block_put(ctx:click.Context, file, codec:str, expected_cid:str|None):
    cli_ctx:CliContext = ctx.obj
    data = file.read()
    with cli_ctx.open() as blocks_ctx:
        if expected_cid is not None:
            cid = blocks_ctx.store.put(expected_cid, data)
        else:
            cid = blocks_ctx.store.add(data, normalize_codec(codec))
        print(cid)

@block.command("get")
@click.pass_context
@click.argument("key")
@click.option("--output", "-o", type=click.File('wb'), default="-", help="Output file, stdout by default.")
def block_get(ctx:click.Context, key:str, output):
    cli_ctx:CliContext = ctx.obj
    with cli_ctx.open() as blocks_ctx:
        data = blocks_ctx.store.get(key)
    output.write(data)

@block.command("stat")
@click.pass_context
@click.argument("key")
def block_stat(ctx:click.Context, key:str):
    cli_ctx:CliContext = ctx.obj
    with cli_ctx.open() as blocks_ctx:
        cid = blocks_ctx.store.key_to_cid(key)
        data = blocks_ctx.store.get(cid)
    print(f"Key: {cid}")
    print(f"Codec: {cid.codec}")
    print(f"Hash: {cid.hash_algorithm}")
    print(f"Size: {len(data)}")

#===========================================================
# 'cat' and 'ls' commands
#===========================================================
@cli.command()
@click.pass_context
@click.argument("path")
def cat(ctx:click.Context, path:str):
    """Prints the content of a file, given as '<cid>' or '<cid>/path/in/tree'."""
    cli_ctx:CliContext = ctx.obj
    with cli_ctx.open() as blocks_ctx:
        cid = _resolve(blocks_ctx, path)
        data = read_file(blocks_ctx.store, cid)
    click.get_binary_stream('stdout').write(data)

@cli.command()
@click.pass_context
@click.argument("path", required=False)
def ls(ctx:click.Context, path:str|None):
    """Lists a directory. Without a path, lists the published root."""
    cli_ctx:CliContext = ctx.obj
    with cli_ctx.open() as blocks_ctx:
        if path is None:
            cid = blocks_ctx.root().root_cid
        else:
            cid = _resolve(blocks_ctx, path)
        entries = list_directory(blocks_ctx.store, cid)
    for entry in entries:
        tsize = entry.tsize if entry.tsize is not None else "-"
        print(f"{entry.cid} {tsize} {entry.name}")

#===========================================================
# 'cid' command
#===========================================================
@cli.command("cid")
@click.argument("file", type=click.File('rb'), default="-")
@click.option("--codec", default=RAW, help="Codec of the data.")
@click.option("--hash", "hash_algorithm", type=click.Choice(supported_algorithms()), default="sha2-256")
@click.option("--base", type=click.Choice(BASES), default=BASE32)
def cid_command(file, codec:str, hash_algorithm:str, base:str):
    """Computes the CID of a single block, without storing it."""
    try:
        cid = cid_for_bytes(file.read(), normalize_codec(codec), hash_algorithm)
    except BlocksError as e:
        raise click.ClickException(str(e)) from e
    print(cid.encode(base))

#===========================================================
# 'publish' and 'root' commands
#===========================================================
@cli.command()
@click.pass_context
@click.argument("source")
@click.argument("target")
@click.option("--ref", help="Reference of the root to publish to.")
def publish(ctx:click.Context, source:str, target:str, ref:str|None):
    """Imports SOURCE and links it at TARGET in the published root."""
    cli_ctx:CliContext = ctx.obj
    source_path = cli_ctx.enforce_path_exists(source)
    with cli_ctx.open() as blocks_ctx:
        fs_root = blocks_ctx.root(ref)
        result = blocks_ctx.store.import_path(source_path)
        if os.path.isdir(source_path) and not os.path.islink(source_path):
            new_root = fs_root.add_directory(target, result.cid, result.size)
        else:
            new_root = fs_root.add_file(target, result.cid, result.size)
    print(f"published {result.cid} at {target}")
    print(f"root {new_root}")

@cli.command()
@click.pass_context
@click.option("--ref", help="Reference of the root.")
def root(ctx:click.Context, ref:str|None):
    """Prints the published root CID."""
    cli_ctx:CliContext = ctx.obj
    with cli_ctx.open() as blocks_ctx:
        ref = ref or blocks_ctx.config.root.ref
        cid = blocks_ctx.references.get(ref)
    if cid is None:
        raise click.ClickException(f"Nothing has been published to '{ref}' yet.")
    print(cid)

#===========================================================
# 'encode' command
#===========================================================
@cli.command()
@click.pass_context
@click.argument("json_value", required=False)
@click.option("--hex", "as_hex", is_flag=True, help="Prints the DAG-CBOR bytes as hex instead of storing them.")
def encode(ctx:click.Context, json_value:str|None, as_hex:bool):
    """Encodes a JSON value (argument or stdin) as DAG-CBOR and stores it."""
    cli_ctx:CliContext = ctx.obj
    if json_value is None:
        json_value = click.get_text_stream('stdin').read()
    try:
        value = json.loads(json_value)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON: {e}") from e
    try:
        data = encode_native(value)
    except BlocksError as e:
        raise click.ClickException(str(e)) from e
    if as_hex:
        print(data.hex())
        return
    with cli_ctx.open() as blocks_ctx:
        print(blocks_ctx.store.add(data, DAG_CBOR))

def _resolve(blocks_ctx:BlocksContext, path:str) -> CID:
    # accepts '<cid>', '<cid>/a/b', and '/ipfs/<cid>/a/b'
    path = path.strip("/")
    if path.startswith("ipfs/"):
        path = path[len("ipfs/"):]
    cid_str, _, rest = path.partition("/")
    cid = blocks_ctx.store.key_to_cid(cid_str)
    return resolve_path(blocks_ctx.store, cid, rest)

if __name__ == '__main__':
    cli(None)
