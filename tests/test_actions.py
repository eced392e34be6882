"""Tests for the bridge and swap executors against a fake chain client."""

from __future__ import annotations

import asyncio
import time

from eth_abi import decode
from eth_account import Account
from eth_utils import to_checksum_address

import main
from conftest import KEY_1, TX_HASH, FakeClient, FakeConnector, texts

OWNER = Account.from_key(KEY_1).address


def test_bridge_skips_approval_when_allowance_is_enough(make_session) -> None:
    client = FakeClient(allowance=main.MAX_UINT256)
    connector = FakeConnector(client)
    session = make_session(connect=connector)

    ok = asyncio.run(main.perform_bridge(session, KEY_1, "http://p1:8080", 0))

    assert ok is True
    assert connector.calls == [(main.RPC_A, main.CHAIN_ID_A, "http://p1:8080")]
    assert [t[1] for t in client.transactions()] == ["deposit"]
    assert "Acct 1: allowance already OK for bridge token" in texts(session, "debug")
    assert f"Acct 1: bridge tx {main.short_hash(TX_HASH)} sent" in texts(session, "wait")


def test_bridge_approves_max_then_deposits_with_fresh_nonces(make_session) -> None:
    client = FakeClient(allowance=0)
    session = make_session(connect=FakeConnector(client))

    ok = asyncio.run(main.perform_bridge(session, KEY_1, None, 0))

    assert ok is True
    approve, deposit = client.transactions()
    assert approve[1] == "approve"
    assert approve[2] == main.TOKEN_A
    assert approve[3] == [to_checksum_address(main.BRIDGE_ROUTER), main.MAX_UINT256]
    assert approve[4]["gas"] == main.APPROVE_GAS_LIMIT
    assert approve[4]["nonce"] == 7

    assert deposit[1] == "deposit"
    assert deposit[2] == main.BRIDGE_ROUTER
    assert deposit[3] == [10**16, OWNER]
    assert deposit[4]["gas"] == main.BRIDGE_GAS_LIMIT
    assert deposit[4]["nonce"] == 8
    assert deposit[4]["maxFeePerGas"] == 2_000_000_000

    kinds = [c[0] for c in client.calls]
    # every submission is preceded by its own nonce and fee lookup and followed by a wait
    assert kinds == ["read", "nonce", "fees", "transact", "wait", "nonce", "fees", "transact", "wait"]


def test_bridge_failure_is_logged_and_returns_false(make_session) -> None:
    client = FakeClient(allowance=main.MAX_UINT256, fail_on="deposit")
    session = make_session(connect=FakeConnector(client))

    ok = asyncio.run(main.perform_bridge(session, KEY_1, None, 2))

    assert ok is False
    assert "Acct 3: bridge error: execution reverted" in texts(session, "error")


def test_failed_approval_aborts_the_bridge(make_session) -> None:
    client = FakeClient(allowance=0, fail_on="approve")
    session = make_session(connect=FakeConnector(client))

    ok = asyncio.run(main.perform_bridge(session, KEY_1, None, 0))

    assert ok is False
    assert [t[1] for t in client.transactions()] == ["approve"]


def test_bridge_connection_error_returns_false(make_session) -> None:
    session = make_session(connect=FakeConnector(error=RuntimeError("RPC not reachable")))

    ok = asyncio.run(main.perform_bridge(session, KEY_1, None, 0))

    assert ok is False
    assert "Acct 1: bridge error: RPC not reachable" in texts(session, "error")


def test_bridge_with_malformed_key_fails_before_connecting(make_session) -> None:
    connector = FakeConnector()
    session = make_session(connect=connector, strict_keys=False)

    ok = asyncio.run(main.perform_bridge(session, "not-a-key", None, 0))

    assert ok is False
    assert connector.calls == []


def test_swap_sends_single_multicall_without_approval_by_default(make_session) -> None:
    client = FakeClient(allowance=0)
    connector = FakeConnector(client)
    session = make_session(connect=connector)
    before = int(time.time())

    ok = asyncio.run(main.perform_swap(session, KEY_1, "socks5://p2:1080", 1))

    assert ok is True
    assert connector.calls == [(main.RPC_B, main.CHAIN_ID_B, "socks5://p2:1080")]
    (tx,) = client.transactions()
    assert tx[1] == "multicall"
    assert tx[2] == main.SWAP_ROUTER
    assert tx[4]["gas"] == main.SWAP_GAS_LIMIT

    (calls,) = tx[3]
    (data,) = calls
    assert bytes(data[:4]) == main.SEL_EXACT_INPUT_SINGLE
    (params,) = decode([main.EXACT_INPUT_SINGLE_TUPLE], bytes(data[4:]))
    token_in, token_out, deployer, recipient, deadline, amount_in, min_out, limit = params
    assert to_checksum_address(token_in) == to_checksum_address(main.TOKEN_B)
    assert to_checksum_address(recipient) == OWNER
    assert amount_in == 5 * 10**15
    assert min_out == 0
    assert limit == 0
    assert before + main.SWAP_DEADLINE_SECS <= deadline <= int(time.time()) + main.SWAP_DEADLINE_SECS


def test_swap_checks_allowance_when_policy_enabled(make_session) -> None:
    client = FakeClient(allowance=0)
    session = make_session(connect=FakeConnector(client), swap_approve=True)

    ok = asyncio.run(main.perform_swap(session, KEY_1, None, 0))

    assert ok is True
    approve, swap = client.transactions()
    assert approve[1] == "approve"
    assert approve[2] == main.TOKEN_B
    assert swap[1] == "multicall"
    assert swap[4]["nonce"] == approve[4]["nonce"] + 1


def test_swap_failure_returns_false(make_session) -> None:
    client = FakeClient(fail_on="multicall")
    session = make_session(connect=FakeConnector(client))

    ok = asyncio.run(main.perform_swap(session, KEY_1, None, 0))

    assert ok is False
    assert "Acct 1: swap error: execution reverted" in texts(session, "error")


def test_randomness_is_seedable_and_rounded() -> None:
    a = main.Randomness(seed=42)
    b = main.Randomness(seed=42)
    amounts = [a.amount(*main.BRIDGE_AMOUNT) for _ in range(20)]
    assert amounts == [b.amount(*main.BRIDGE_AMOUNT) for _ in range(20)]
    for amt in amounts:
        assert main.Decimal("0.01") <= amt <= main.Decimal("0.05")
        assert amt.as_tuple().exponent == -6
    delay = a.delay(*main.REPEAT_GAP)
    assert 8 <= delay <= 20


def test_short_hash_and_units() -> None:
    assert main.short_hash(TX_HASH) == "0xabab...abab"
    assert main.short_hash(None) == "N/A"
    assert main.to_units("0.012345", 18) == 12_345 * 10**12
    assert main.fmt_balance(15 * 10**17) == "1.5000"


def test_success_line_keeps_short_hash_before_explorer_link(make_session, monkeypatch) -> None:
    monkeypatch.setattr(main, "EXPLORER_A", "https://scan.a")
    session = make_session(connect=FakeConnector(FakeClient(allowance=main.MAX_UINT256)))

    assert asyncio.run(main.perform_bridge(session, KEY_1, None, 0)) is True
    assert texts(session, "success")[-1] == f"Acct 1: bridge completed 0xabab...abab • https://scan.a/tx/{TX_HASH}"


def test_success_line_without_explorer_is_short_hash_only(make_session, monkeypatch) -> None:
    monkeypatch.setattr(main, "EXPLORER_B", "")
    session = make_session(connect=FakeConnector(FakeClient()))

    assert asyncio.run(main.perform_swap(session, KEY_1, None, 0)) is True
    assert texts(session, "success")[-1] == "Acct 1: swap completed 0xabab...abab"


def test_short_hex_key_is_rejected_not_padded(make_session) -> None:
    connector = FakeConnector()
    session = make_session(connect=connector, strict_keys=False)

    ok = asyncio.run(main.perform_bridge(session, "0x12", None, 0))

    assert ok is False
    assert connector.calls == []
    assert any("64 hex characters" in t for t in texts(session, "error"))
