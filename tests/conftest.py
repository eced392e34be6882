"""Shared fakes for the session, runner and action tests."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from main import Randomness, Session

KEY_1 = "0x" + "11" * 32
KEY_2 = "22" * 32
KEY_3 = "0x" + "33" * 32
TX_HASH = "0x" + "ab" * 32


class LowRandomness(Randomness):
    """Always picks the lower bound."""

    def amount(self, lo: float, hi: float) -> Decimal:
        return Decimal(str(lo)).quantize(Decimal("0.000001"))

    def delay(self, lo: float, hi: float) -> float:
        return float(lo)


class FakeClient:
    def __init__(self, allowance: int = 0, fail_on: Optional[str] = None, balance: int = 0) -> None:
        self.allowance_value = allowance
        self.fail_on = fail_on
        self.balance_value = balance
        self.nonce = 7
        self.calls: List[tuple] = []

    async def balance(self, address: str) -> int:
        self.calls.append(("balance", address))
        return self.balance_value

    async def pending_nonce(self, address: str) -> int:
        self.calls.append(("nonce", address))
        n = self.nonce
        self.nonce += 1
        return n

    async def fee_data(self) -> Dict[str, int]:
        self.calls.append(("fees",))
        return {"maxFeePerGas": 2_000_000_000, "maxPriorityFeePerGas": 1_000_000_000}

    async def read(self, address: str, abi: Any, fn_name: str, *args: Any) -> Any:
        self.calls.append(("read", fn_name, address, args))
        return self.allowance_value

    async def transact(self, pk: str, address: str, abi: Any, fn_name: str, args: List[Any], opts: Dict[str, Any]) -> str:
        self.calls.append(("transact", fn_name, address, args, opts))
        if fn_name == self.fail_on:
            raise RuntimeError("execution reverted")
        return TX_HASH

    async def wait(self, tx_hash: str) -> Dict[str, int]:
        self.calls.append(("wait", tx_hash))
        return {"status": 1, "blockNumber": 1}

    def transactions(self) -> List[tuple]:
        return [c for c in self.calls if c[0] == "transact"]


class FakeConnector:
    def __init__(self, client: Optional[FakeClient] = None, error: Optional[Exception] = None) -> None:
        self.client = client or FakeClient()
        self.error = error
        self.calls: List[tuple] = []

    async def __call__(self, rpc_url: str, chain_id: int, proxy: Optional[str] = None) -> FakeClient:
        self.calls.append((rpc_url, chain_id, proxy))
        if self.error is not None:
            raise self.error
        return self.client


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.calls)


def write_lines(path: Path, lines: List[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_session(tmp_path: Path, sleeper: RecordingSleep):
    def _make(keys: Optional[List[str]] = None, proxies: Optional[List[str]] = None, **kwargs: Any) -> Session:
        if keys is not None:
            write_lines(tmp_path / "pk.txt", keys)
        if proxies is not None:
            write_lines(tmp_path / "proxy.txt", proxies)
        kwargs.setdefault("rng", LowRandomness())
        kwargs.setdefault("sleep", sleeper)
        return Session(
            str(tmp_path / "pk.txt"),
            str(tmp_path / "proxy.txt"),
            str(tmp_path / "config.json"),
            **kwargs,
        )

    return _make


def texts(session: Session, kind: Optional[str] = None) -> List[str]:
    return [e.text for e in session.logs.entries() if kind is None or e.kind == kind]
