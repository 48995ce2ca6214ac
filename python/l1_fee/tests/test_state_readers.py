"""
Tests for parameter readers and the RPC client

HTTP traffic is replaced by unittest.mock; no network access is needed.
"""

from fractions import Fraction
from unittest.mock import MagicMock, patch

import pytest
import requests

from ..core.config import L1FeeConfig, L1_BLOCK_ADDRESS, GAS_PRICE_ORACLE_ADDRESS
from ..core.fee_context import FeeContext, build_context
from ..data.rpc_client import EthereumRPCClient, RPCError, format_block_tag
from ..data.state_readers import InMemoryParameterReader, RPCParameterReader


def rpc_response(result=None, error=None):
    response = MagicMock()
    response.raise_for_status.return_value = None
    body = {"jsonrpc": "2.0", "id": 1}
    if error is not None:
        body["error"] = error
    else:
        body["result"] = result
    response.json.return_value = body
    return response


def word(value: int) -> str:
    return "0x" + value.to_bytes(32, "big").hex()


@pytest.fixture
def no_sleep():
    with patch("l1_fee.data.rpc_client.time.sleep") as sleep:
        yield sleep


class TestInMemoryParameterReader:
    """Test suite for the dictionary-backed reader."""

    def test_unwritten_slot_is_zero(self):
        assert InMemoryParameterReader().read("0x" + "00" * 20, 2) == 0

    def test_case_insensitive_addresses(self):
        reader = InMemoryParameterReader()
        reader.set("0x" + "AB" * 20, 3, 99)
        assert reader.read("0x" + "ab" * 20, 3) == 99

    def test_records_reads(self):
        reader = InMemoryParameterReader({("0x" + "01" * 20, 1): 5})
        reader.read("0x" + "01" * 20, 1)
        reader.read("0x" + "02" * 20, 7)
        assert reader.reads == [("0x" + "01" * 20, 1), ("0x" + "02" * 20, 7)]


class TestFormatBlockTag:

    def test_number(self):
        assert format_block_tag(105235063) == hex(105235063)

    def test_tag(self):
        assert format_block_tag("latest") == "latest"

    def test_invalid(self):
        with pytest.raises(ValueError):
            format_block_tag(-1)
        with pytest.raises(ValueError):
            format_block_tag(True)


class TestEthereumRPCClient:
    """Test suite for the JSON-RPC client."""

    def test_requires_url(self):
        with pytest.raises(ValueError):
            EthereumRPCClient([])

    def test_get_storage_at_request(self, no_sleep):
        client = EthereumRPCClient(["http://rpc.local"])
        with patch("l1_fee.data.rpc_client.requests.post", return_value=rpc_response(word(7))) as post:
            assert client.get_storage_at("0x" + "11" * 20, 4, 100) == word(7)

        payload = post.call_args.kwargs["json"]
        assert payload["method"] == "eth_getStorageAt"
        assert payload["params"] == ["0x" + "11" * 20, "0x4", "0x64"]

    def test_get_latest_block_number(self, no_sleep):
        client = EthereumRPCClient(["http://rpc.local"])
        with patch("l1_fee.data.rpc_client.requests.post", return_value=rpc_response("0x10")):
            assert client.get_latest_block_number() == 16

    def test_rotates_on_failure(self, no_sleep):
        client = EthereumRPCClient(["http://a.local", "http://b.local"])
        responses = [requests.ConnectionError("down"), rpc_response("0x1")]
        with patch("l1_fee.data.rpc_client.requests.post", side_effect=responses) as post:
            assert client.make_rpc_call("eth_blockNumber", []) == "0x1"

        urls = [c.args[0] for c in post.call_args_list]
        assert urls == ["http://a.local", "http://b.local"]

    def test_rpc_error_retried(self, no_sleep):
        client = EthereumRPCClient(["http://a.local"])
        responses = [rpc_response(error={"code": -32000, "message": "busy"}), rpc_response("0x2")]
        with patch("l1_fee.data.rpc_client.requests.post", side_effect=responses):
            assert client.make_rpc_call("eth_blockNumber", []) == "0x2"

    def test_non_object_response_retried(self, no_sleep):
        client = EthereumRPCClient(["http://a.local", "http://b.local"])
        for body in [None, [], "0x1", 7]:
            malformed = MagicMock()
            malformed.raise_for_status.return_value = None
            malformed.json.return_value = body
            responses = [malformed, rpc_response("0x3")]
            with patch("l1_fee.data.rpc_client.requests.post", side_effect=responses) as post:
                assert client.make_rpc_call("eth_blockNumber", []) == "0x3"
            assert post.call_count == 2

    def test_non_object_responses_exhaust_attempts(self, no_sleep):
        client = EthereumRPCClient(["http://a.local"], max_retries=2)
        malformed = MagicMock()
        malformed.raise_for_status.return_value = None
        malformed.json.return_value = [{"result": "0x1"}]
        with patch("l1_fee.data.rpc_client.requests.post", return_value=malformed) as post:
            assert client.make_rpc_call("eth_blockNumber", []) is None

        assert post.call_count == 2

    def test_all_attempts_fail(self, no_sleep):
        client = EthereumRPCClient(["http://a.local", "http://b.local"], max_retries=2)
        with patch("l1_fee.data.rpc_client.requests.post",
                   side_effect=requests.Timeout("slow")) as post:
            assert client.make_rpc_call("eth_blockNumber", []) is None

        assert post.call_count == 4


class TestRPCParameterReader:
    """Test suite for the RPC-backed reader."""

    def test_reads_pinned_block(self):
        client = MagicMock()
        client.get_storage_at.return_value = word(5)
        reader = RPCParameterReader(client, block=123)

        assert reader.read("0x" + "11" * 20, 3) == word(5)
        client.get_storage_at.assert_called_once_with("0x" + "11" * 20, 3, 123)

    def test_failed_read_raises(self):
        client = MagicMock()
        client.get_storage_at.return_value = None
        reader = RPCParameterReader(client)

        with pytest.raises(RPCError):
            reader.read("0x" + "11" * 20, 3)

    def test_at_latest_block(self):
        client = MagicMock()
        client.get_latest_block_number.return_value = 77
        reader = RPCParameterReader.at_latest_block(client)
        assert reader.block == 77

    def test_at_latest_block_failure(self):
        client = MagicMock()
        client.get_latest_block_number.return_value = None
        with pytest.raises(RPCError):
            RPCParameterReader.at_latest_block(client)

    def test_build_context_over_rpc(self):
        storage = {
            (L1_BLOCK_ADDRESS.lower(), 2): word(30_000_000_000),
            (GAS_PRICE_ORACLE_ADDRESS.lower(), 3): word(188),
            (GAS_PRICE_ORACLE_ADDRESS.lower(), 4): word(684_000),
            (GAS_PRICE_ORACLE_ADDRESS.lower(), 5): word(6),
        }
        client = MagicMock()
        client.get_storage_at.side_effect = lambda address, slot, block: storage[(address, slot)]

        ctx = build_context(L1FeeConfig(), RPCParameterReader(client, block=1))

        assert ctx == FeeContext(base_fee=30_000_000_000, overhead=188, scalar=Fraction(684, 1000))
        blocks = {c.args[2] for c in client.get_storage_at.call_args_list}
        assert blocks == {1}
