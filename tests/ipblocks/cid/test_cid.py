import hashlib
import pytest
import multiformats
from multiformats import multihash
from ipblocks.errors import EncodingError, HashVerificationError, ParseError, UnsupportedAlgorithmError
from ipblocks.cid import *

def test_known_cid():
    cid = cid_for_bytes(b"hello world")
    assert str(cid) == "bafkreifzjut3te2nhyekklss27nh3k72ysco7y32koao5eei66wof36n5e"
    assert cid.digest.hex() == "b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9"

def test_determinism():
    data = b"same bytes, same cid"
    assert cid_for_bytes(data) == cid_for_bytes(bytes(data))
    assert str(cid_for_bytes(data)) == str(cid_for_bytes(data))
    assert cid_for_bytes(data) != cid_for_bytes(data + b"!")

def test_codec_is_part_of_identity():
    raw = cid_for_bytes(b"x", RAW)
    cbor = cid_for_bytes(b"x", DAG_CBOR)
    assert raw.digest == cbor.digest
    assert raw != cbor
    assert raw.with_codec(DAG_CBOR) == cbor

def test_verify():
    data = b"original content"
    cid = cid_for_bytes(data)
    assert verify(cid, data)
    assert not verify(cid, b"tampered content")
    with pytest.raises(HashVerificationError):
        check(cid, b"tampered content")

def test_string_round_trip():
    for codec in [RAW, DAG_PB, DAG_CBOR, DAG_JSON]:
        for algorithm in supported_algorithms():
            cid = cid_for_bytes(b"data", codec, algorithm)
            assert parse_cid(str(cid)) == cid

def test_other_bases():
    cid = cid_for_bytes(b"data", DAG_CBOR)
    for base in [BASE32_UPPER, BASE58BTC, BASE16]:
        text = cid.encode(base)
        assert parse_cid(text) == cid
    assert cid.encode(BASE58BTC).startswith("z")
    assert cid.encode(BASE16).startswith("f01")

def test_binary_round_trip():
    cid = cid_for_bytes(b"data", DAG_PB, "sha2-512")
    assert parse_identifier(cid.to_bytes()) == cid
    assert to_cid(cid.to_link()) == cid

def test_v0():
    cid = parse_cid("QmQg1v4o9xdT3Q14wh4S7dxZkDjyZ9ssFzFzyep1YrVJBY")
    assert cid.version == 0
    assert cid.codec == DAG_PB
    assert cid.hash_algorithm == "sha2-256"
    assert str(cid) == "QmQg1v4o9xdT3Q14wh4S7dxZkDjyZ9ssFzFzyep1YrVJBY"
    assert len(cid.to_bytes()) == 34
    assert parse_identifier(cid.to_bytes()) == cid
    v1 = cid.to_v1()
    assert v1.version == 1
    assert v1.digest == cid.digest
    assert str(v1).startswith("bafybei")

def test_v0_restrictions():
    with pytest.raises(EncodingError):
        cid_for_bytes(b"data", RAW, version=0)
    cid = cid_for_bytes(b"data", DAG_PB, version=0)
    with pytest.raises(EncodingError):
        cid.encode(BASE32)

def test_bare_multihash():
    cid = cid_for_bytes(b"data", RAW, "sha3-256")
    assert parse_multihash(cid.multihash) == cid

def test_invalid_strings():
    with pytest.raises(ParseError):
        parse_cid("")
    with pytest.raises(ParseError):
        parse_cid("xnotacid")
    with pytest.raises(ParseError):
        parse_cid("bafk!!!")

def test_unsupported_algorithm():
    with pytest.raises(UnsupportedAlgorithmError):
        cid_for_bytes(b"data", RAW, "md5")

def test_unknown_codec():
    with pytest.raises(EncodingError):
        cid_for_bytes(b"data", "git-raw")
    assert normalize_codec("dag-protobuf") == DAG_PB

def test_matches_multiformats():
    data = b"hello world"
    mh = multihash.wrap(hashlib.sha256(data).digest(), "sha2-256")
    expected = multiformats.CID("base32", 1, "raw", mh)
    cid = cid_for_bytes(data)
    assert str(cid) == str(expected)
    assert cid.to_bytes() == bytes(expected)
    assert cid.multihash == mh

def test_v0_with_multibase_prefix_fails():
    cid = parse_cid("QmQg1v4o9xdT3Q14wh4S7dxZkDjyZ9ssFzFzyep1YrVJBY")
    with pytest.raises(ParseError):
        parse_cid("z" + str(cid))

def test_invalid_identifiers():
    with pytest.raises(ParseError):
        parse_identifier(b"")
    with pytest.raises(ParseError):
        parse_identifier(b"\x02\x55\x12\x20" + bytes(32))
    #a codec outside raw, dag-pb, dag-cbor, and dag-json
    git_raw = multiformats.CID("base32", 1, "git-raw", multihash.wrap(bytes(20), "sha1"))
    with pytest.raises(ParseError):
        parse_identifier(bytes(git_raw))
    #digest shorter than the algorithm produces
    with pytest.raises(ParseError):
        parse_multihash(multihash.wrap(bytes(16), "sha2-256"))
