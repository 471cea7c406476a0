import logging
import httpx
from ipblocks.errors import BackendUnavailableError, HashVerificationError, NotFoundError, ParseError
from ipblocks.cid.cid import CID, check, parse_cid
from ipblocks.stores.block_store import BlockStore

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://127.0.0.1:5001"
DEFAULT_TIMEOUT = 30.0

def multiaddr_to_url(address:str) -> str:
    """Converts an IPFS API multiaddr like '/ip4/127.0.0.1/tcp/5001' to an http url.

    Plain http(s) urls are returned unchanged (without a trailing slash).
    """
    if(address.startswith("http://") or address.startswith("https://")):
        return address.rstrip("/")
    parts = [p for p in address.split("/") if p]
    if len(parts) < 4 or len(parts) > 5:
        raise ValueError(f"Not a valid API multiaddr: '{address}'.")
    host_proto, host, port_proto, port = parts[:4]
    if host_proto not in ("ip4", "ip6", "dns", "dns4", "dns6"):
        raise ValueError(f"Unsupported multiaddr host protocol '{host_proto}' in '{address}'.")
    if port_proto != "tcp":
        raise ValueError(f"Unsupported multiaddr transport '{port_proto}' in '{address}', must be tcp.")
    scheme = "http"
    rest = parts[4:]
    if rest:
        if rest[0] not in ("http", "https"):
            raise ValueError(f"Unsupported multiaddr protocol '{rest[0]}' in '{address}'.")
        scheme = rest[0]
    if host_proto == "ip6":
        host = f"[{host}]"
    return f"{scheme}://{host}:{int(port)}"

class IpfsBlockStore(BlockStore):
    """Stores blocks in an IPFS node through the Kubo HTTP RPC api.

    Every block read from the node is verified against the requested CID.
    """
    def __init__(
            self,
            address:str=DEFAULT_API_URL,
            timeout:float=DEFAULT_TIMEOUT,
            client:httpx.Client|None=None,
            validate:bool=True,
            **kwargs):
        super().__init__(**kwargs)
        self.base_url = multiaddr_to_url(address)
        self._owns_client = client is None
        if client is None:
            client = httpx.Client(base_url=self.base_url, timeout=timeout)
        self._client = client
        if(validate):
            self.check_connection()

    def check_connection(self) -> str:
        """Asks the node for its version. Raises BackendUnavailableError if it cannot be reached."""
        response = self._call("version")
        try:
            version = response.json()["Version"]
        except (KeyError, TypeError, ValueError) as e:
            raise BackendUnavailableError(f"Unexpected reply to 'version' from {self.base_url}: {response.text[:100]!r}") from e
        logger.debug(f"Connected to IPFS node {version} at {self.base_url}")
        return version

    def stat(self, key) -> dict:
        """Returns the node's 'block/stat' answer (Key and Size) for a block."""
        cid = self.key_to_cid(key)
        return self._call("block/stat", params={"arg": str(cid), "offline": "true"}).json()

    def _write(self, cid:CID, data:bytes) -> None:
        params = {
            "cid-codec": cid.codec,
            "mhtype": cid.hash_algorithm,
            "mhlen": str(len(cid.digest)),
            "pin": "false",
            }
        response = self._call("block/put", params=params, files={"data": ("block", data)})
        try:
            stored = parse_cid(response.json()["Key"])
        except (KeyError, ValueError, ParseError) as e:
            raise BackendUnavailableError(f"IPFS node returned an unexpected block/put response: {response.text}") from e
        #the node may answer with a different cid version or codec, but never a different multihash
        if stored.multihash != cid.multihash:
            raise HashVerificationError(f"IPFS node stored block {cid} as {stored}.")
        logger.debug(f"Stored block {cid} in IPFS ({len(data)} bytes)")

    def _read(self, cid:CID) -> bytes | None:
        try:
            response = self._call("block/get", params={"arg": str(cid), "offline": "true"})
        except NotFoundError:
            return None
        data = response.content
        check(cid, data)
        return data

    def _has(self, cid:CID) -> bool:
        try:
            self._call("block/stat", params={"arg": str(cid), "offline": "true"})
            return True
        except NotFoundError:
            return False

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _call(self, command:str, params:dict|None=None, files:dict|None=None) -> httpx.Response:
        url = f"/api/v0/{command}"
        try:
            response = self._client.post(url, params=params, files=files)
        except httpx.TransportError as e:
            raise BackendUnavailableError(f"IPFS node at {self.base_url} is not reachable ({command}): {e}") from e
        if response.is_success:
            return response
        message = _error_message(response)
        if response.status_code == 404 or "not found" in message.lower():
            raise NotFoundError(f"IPFS {command}: {message}")
        raise BackendUnavailableError(f"IPFS {command} failed with status {response.status_code}: {message}")

def _error_message(response:httpx.Response) -> str:
    # kubo answers errors with {"Message": ..., "Code": ..., "Type": "error"}
    try:
        return str(response.json().get("Message", response.text))
    except ValueError:
        return response.text
