import os, re, json, time, random, signal, asyncio
from collections import deque
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Optional, Dict, Any, List, Callable, Awaitable

from dotenv import load_dotenv
from web3 import Web3
from eth_account import Account
from eth_abi import encode as abi_encode
from eth_utils import keccak, to_checksum_address
from hexbytes import HexBytes
from rich.console import Console
from rich.table import Table
from rich.rule import Rule
from rich import box
from rich.theme import Theme

theme = Theme({"title":"bold cyan","ok":"bold green","err":"bold red","warn":"bold yellow","muted":"grey66","accent":"magenta"})
console = Console(theme=theme)

# Template values: replace RPC/TOKEN/ROUTER settings in .env before pointing at a real testnet.
load_dotenv()
RPC_A = os.getenv("RPC_A","https://rpc.random-networkA.test").strip()
RPC_B = os.getenv("RPC_B","https://rpc.random-networkB.test").strip()
CHAIN_ID_A = int(os.getenv("CHAIN_ID_A","1337"))
CHAIN_ID_B = int(os.getenv("CHAIN_ID_B","1338"))
EXPLORER_A = os.getenv("EXPLORER_A","").rstrip("/")
EXPLORER_B = os.getenv("EXPLORER_B","").rstrip("/")

TOKEN_A       = os.getenv("TOKEN_A","0x0000000000000000000000000000000000000001")
TOKEN_B       = os.getenv("TOKEN_B","0x0000000000000000000000000000000000000002")
BRIDGE_ROUTER = os.getenv("BRIDGE_ROUTER","0x0000000000000000000000000000000000000b1d")
SWAP_ROUTER   = os.getenv("SWAP_ROUTER","0x0000000000000000000000000000000000005a9f")
SWAP_DEPLOYER = os.getenv("SWAP_DEPLOYER","0x0000000000000000000000000000000000000000")

PK_FILE     = os.getenv("PK_FILE","pk.txt")
PROXY_FILE  = os.getenv("PROXY_FILE","proxy.txt")
CONFIG_FILE = os.getenv("CONFIG_FILE","config.json")

STRICT_KEYS       = os.getenv("STRICT_KEYS","true").lower()=="true"
SWAP_APPROVE      = os.getenv("SWAP_APPROVE","false").lower()=="true"
WAIT_TIMEOUT_SECS = int(os.getenv("WAIT_TIMEOUT_SECS","600"))
MAX_PRIORITY_GWEI = int(os.getenv("MAX_PRIORITY_GWEI","2"))

TOKEN_DECIMALS    = 18
APPROVE_GAS_LIMIT = 200_000
BRIDGE_GAS_LIMIT  = 800_000
SWAP_GAS_LIMIT    = 600_000
SWAP_DEADLINE_SECS = 30*60

BRIDGE_AMOUNT = (0.01, 0.05)
SWAP_AMOUNT   = (0.005, 0.02)
REPEAT_GAP    = (8, 20)
PHASE_GAP     = (7, 15)
ACCOUNT_GAP   = 30
LOG_CAP       = 1000

ERC20_ABI = [
    {"name":"allowance","type":"function","stateMutability":"view",
     "inputs":[{"name":"owner","type":"address"},{"name":"spender","type":"address"}],
     "outputs":[{"name":"","type":"uint256"}]},
    {"name":"approve","type":"function","stateMutability":"nonpayable",
     "inputs":[{"name":"spender","type":"address"},{"name":"amount","type":"uint256"}],
     "outputs":[{"name":"","type":"bool"}]},
    {"name":"balanceOf","type":"function","stateMutability":"view",
     "inputs":[{"name":"owner","type":"address"}],
     "outputs":[{"name":"","type":"uint256"}]},
    {"name":"decimals","type":"function","stateMutability":"view",
     "inputs":[],"outputs":[{"name":"","type":"uint8"}]}
]
BRIDGE_ABI = [
    {"inputs":[{"internalType":"uint256","name":"amount","type":"uint256"},{"internalType":"address","name":"receiver","type":"address"}],"name":"deposit","outputs":[],"stateMutability":"payable","type":"function"}
]
SWAP_ROUTER_ABI = [
    {"inputs":[{"internalType":"bytes[]","name":"data","type":"bytes[]"}],"name":"multicall","outputs":[{"internalType":"bytes[]","name":"results","type":"bytes[]"}],"stateMutability":"payable","type":"function"}
]

EXACT_INPUT_SINGLE_TUPLE = "(address,address,address,address,uint256,uint256,uint256,uint160)"
SEL_EXACT_INPUT_SINGLE = keccak(text=f"exactInputSingle({EXACT_INPUT_SINGLE_TUPLE})")[:4]

MAX_UINT256 = (1<<256)-1
PK_RE = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")

LOG_STYLES = {"success":"ok","error":"err","warn":"warn","debug":"muted","wait":"accent","info":None}

def short_hash(h: Optional[str]) -> str:
    return f"{h[:6]}...{h[-4:]}" if h else "N/A"

def fmt_addr(a: Optional[str]) -> str:
    return f"{a[:6]}…{a[-4:]}" if a else "-"

def tx_summary(explorer: str, h: str) -> str:
    return f"{short_hash(h)} • {explorer}/tx/{h}" if explorer else short_hash(h)

def gwei(x: float) -> int:
    return int(Decimal(x) * Decimal(1_000_000_000))

def to_units(amount: Decimal|float|str, decimals: int) -> int:
    return int(Decimal(str(amount)).scaleb(decimals))

def fmt_balance(wei: int, decimals: int = TOKEN_DECIMALS) -> str:
    return f"{Decimal(int(wei)).scaleb(-decimals):.4f}"

def normalize_pk(pk: str) -> str:
    s = pk.strip()
    if s.startswith(("0x","0X")): s=s[2:]
    if not re.fullmatch(r"[0-9a-fA-F]{64}", s or ""): raise ValueError("PRIVATE_KEY must be 64 hex characters")
    s=s.lower()
    if s=="0"*64: raise ValueError("PRIVATE_KEY zero")
    return "0x"+s

def address_of(pk: str) -> Optional[str]:
    try:
        return Account.from_key(normalize_pk(pk)).address
    except ValueError:
        return None

def proxy_for(index: int, proxies: List[str]) -> Optional[str]:
    if not proxies: return None
    return proxies[index % max(1, len(proxies))]

def read_lines(path: Path, log: Optional[Callable[..., Any]] = None) -> List[str]:
    try:
        if not path.exists(): return []
        return [L.strip() for L in path.read_text(encoding="utf-8").splitlines() if L.strip()]
    except (OSError, UnicodeDecodeError) as e:
        if log: log(f"read {path} error: {e}", "error")
        return []


# =========================
# LOG BUFFER
# =========================
@dataclass(frozen=True)
class LogEntry:
    ts: str
    kind: str
    text: str

    def render(self) -> str:
        return f"[{self.ts}] {self.text}"

class LogBuffer:
    """Timestamped log lines, oldest dropped first once `cap` is reached."""
    def __init__(self, cap: int = LOG_CAP) -> None:
        self.cap = cap
        self._entries: deque = deque(maxlen=cap)
        self._listeners: List[Callable[[Optional[LogEntry]], None]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def subscribe(self, fn: Callable[[Optional[LogEntry]], None]) -> None:
        self._listeners.append(fn)

    def add(self, text: str, kind: str = "info") -> LogEntry:
        entry = LogEntry(time.strftime("%H:%M:%S"), kind, text)
        self._entries.append(entry)
        for fn in self._listeners: fn(entry)
        return entry

    def clear(self) -> None:
        self._entries.clear()
        for fn in self._listeners: fn(None)


# =========================
# CONFIG
# =========================
def _coerce_reps(v: Any) -> int:
    try:
        n = int(float(v))
    except (TypeError, ValueError, OverflowError):
        return 1
    return n if n >= 1 else 1

@dataclass
class ActivityConfig:
    bridge_repetitions: int = 1
    swap_repetitions: int = 1

    @classmethod
    def from_dict(cls, d: Dict[str,Any]) -> "ActivityConfig":
        return cls(_coerce_reps(d.get("bridgeRepetitions")), _coerce_reps(d.get("swapRepetitions")))

    def to_dict(self) -> Dict[str,int]:
        return {"bridgeRepetitions": self.bridge_repetitions, "swapRepetitions": self.swap_repetitions}

def write_json_atomic(path: Path, data: Dict[str,Any]) -> None:
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
    os.replace(tmp, path)


# =========================
# CHAIN CLIENT
# =========================
def request_kwargs(proxy: Optional[str]) -> Dict[str,Any]:
    kwargs: Dict[str,Any] = {"timeout":60}
    # passed with every request, so calls from any worker thread use the proxy;
    # socks*:// goes through PySocks, anything else is a plain HTTP(S) proxy
    if proxy: kwargs["proxies"]={"http":proxy,"https":proxy}
    return kwargs

def make_provider(rpc_url: str, proxy: Optional[str]) -> Web3:
    w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs=request_kwargs(proxy)))
    try:
        from web3.middleware.proof_of_authority import ExtraDataToPOAMiddleware
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    except ImportError:
        from web3.middleware import geth_poa_middleware
        w3.middleware_onion.inject(geth_poa_middleware, layer=0)
    if not w3.is_connected(): raise RuntimeError(f"RPC not reachable: {rpc_url}")
    return w3

def suggest_fees(w3: Web3) -> Dict[str,int]:
    base = w3.eth.get_block("latest").get("baseFeePerGas")
    if base is None:
        return {"gasPrice": int(w3.eth.gas_price)}
    try:
        prio = int(w3.eth.max_priority_fee)
    except Exception:
        prio = gwei(MAX_PRIORITY_GWEI)
    return {"maxFeePerGas": int(base)*2 + prio, "maxPriorityFeePerGas": prio}

class ChainClient:
    """Async facade over a blocking Web3 instance; every RPC runs in a worker thread."""
    def __init__(self, w3: Web3, chain_id: int) -> None:
        self.w3 = w3
        self.chain_id = chain_id

    @classmethod
    async def connect(cls, rpc_url: str, chain_id: int, proxy: Optional[str] = None) -> "ChainClient":
        w3 = await asyncio.to_thread(make_provider, rpc_url, proxy)
        return cls(w3, chain_id)

    async def balance(self, address: str) -> int:
        return int(await asyncio.to_thread(self.w3.eth.get_balance, to_checksum_address(address)))

    async def pending_nonce(self, address: str) -> int:
        return int(await asyncio.to_thread(self.w3.eth.get_transaction_count, to_checksum_address(address), "pending"))

    async def fee_data(self) -> Dict[str,int]:
        return await asyncio.to_thread(suggest_fees, self.w3)

    def _fn(self, address: str, abi: List[Dict[str,Any]], fn_name: str, args: List[Any]):
        c = self.w3.eth.contract(address=to_checksum_address(address), abi=abi)
        return getattr(c.functions, fn_name)(*args)

    async def read(self, address: str, abi: List[Dict[str,Any]], fn_name: str, *args: Any) -> Any:
        return await asyncio.to_thread(lambda: self._fn(address, abi, fn_name, list(args)).call())

    async def transact(self, pk: str, address: str, abi: List[Dict[str,Any]], fn_name: str, args: List[Any], opts: Dict[str,Any]) -> str:
        def _send() -> str:
            tx = self._fn(address, abi, fn_name, args).build_transaction({**opts, "chainId": self.chain_id})
            signed = self.w3.eth.account.sign_transaction(tx, private_key=pk)
            raw = getattr(signed,"rawTransaction",None) or getattr(signed,"raw_transaction",None)
            return Web3.to_hex(self.w3.eth.send_raw_transaction(raw))
        return await asyncio.to_thread(_send)

    async def wait(self, tx_hash: str) -> Any:
        rcpt = await asyncio.to_thread(self.w3.eth.wait_for_transaction_receipt, HexBytes(tx_hash), WAIT_TIMEOUT_SECS)
        if rcpt["status"] != 1:
            raise RuntimeError(f"tx {short_hash(tx_hash)} reverted in block {rcpt['blockNumber']}")
        return rcpt


# =========================
# ACTIONS
# =========================
class Randomness:
    """Seedable source for transfer amounts and pause lengths."""
    def __init__(self, seed: Optional[int] = None) -> None:
        self._r = random.Random(seed)

    def amount(self, lo: float, hi: float) -> Decimal:
        return Decimal(str(self._r.uniform(lo, hi))).quantize(Decimal("0.000001"))

    def delay(self, lo: float, hi: float) -> float:
        return self._r.uniform(lo, hi)

async def tx_options(client: ChainClient, sender: str, gas: int) -> Dict[str,Any]:
    # fetched right before each submission: approve then deposit must not share a nonce
    nonce = await client.pending_nonce(sender)
    fees = await client.fee_data()
    return {"from": sender, "nonce": nonce, "gas": gas, **fees}

def encode_exact_input_single(token_in: str, token_out: str, recipient: str, amount_in: int, deadline: int) -> HexBytes:
    params = (to_checksum_address(token_in), to_checksum_address(token_out), to_checksum_address(SWAP_DEPLOYER),
              to_checksum_address(recipient), int(deadline), int(amount_in), 0, 0)
    return HexBytes(SEL_EXACT_INPUT_SINGLE + abi_encode([EXACT_INPUT_SINGLE_TUPLE], [params]))

async def ensure_allowance(session: "Session", client: ChainClient, pk: str, owner: str, token: str, spender: str, need: int, idx: int, note: str) -> None:
    cur = int(await client.read(token, ERC20_ABI, "allowance", owner, to_checksum_address(spender)))
    if cur >= need:
        session.log(f"Acct {idx+1}: allowance already OK for {note}", "debug")
        return
    session.log(f"Acct {idx+1}: approving {note}...", "info")
    opts = await tx_options(client, owner, APPROVE_GAS_LIMIT)
    hx = await client.transact(pk, token, ERC20_ABI, "approve", [to_checksum_address(spender), MAX_UINT256], opts)
    session.log(f"Acct {idx+1}: approval tx {short_hash(hx)} sent", "wait")
    await client.wait(hx)
    session.log(f"Acct {idx+1}: approval mined", "success")

async def perform_bridge(session: "Session", pk: str, proxy: Optional[str], idx: int) -> bool:
    if not BRIDGE_ROUTER:
        session.log("Bridge router not configured", "error"); return False
    try:
        pk = normalize_pk(pk)
        client = await session.connect(RPC_A, CHAIN_ID_A, proxy)
        owner = Account.from_key(pk).address
        amount = session.rng.amount(*BRIDGE_AMOUNT)
        units = to_units(amount, TOKEN_DECIMALS)
        await ensure_allowance(session, client, pk, owner, TOKEN_A, BRIDGE_ROUTER, units, idx, "bridge token")
        session.log(f"Acct {idx+1}: bridging {amount} tokenA -> router", "info")
        opts = await tx_options(client, owner, BRIDGE_GAS_LIMIT)
        hx = await client.transact(pk, BRIDGE_ROUTER, BRIDGE_ABI, "deposit", [units, owner], opts)
        session.log(f"Acct {idx+1}: bridge tx {short_hash(hx)} sent", "wait")
        await client.wait(hx)
        session.log(f"Acct {idx+1}: bridge completed {tx_summary(EXPLORER_A, hx)}", "success")
        return True
    except Exception as e:
        session.log(f"Acct {idx+1}: bridge error: {e}", "error")
        return False

async def perform_swap(session: "Session", pk: str, proxy: Optional[str], idx: int) -> bool:
    if not SWAP_ROUTER:
        session.log("Swap router not configured", "error"); return False
    try:
        pk = normalize_pk(pk)
        client = await session.connect(RPC_B, CHAIN_ID_B, proxy)
        owner = Account.from_key(pk).address
        amount = session.rng.amount(*SWAP_AMOUNT)
        units = to_units(amount, TOKEN_DECIMALS)
        if session.swap_approve:
            await ensure_allowance(session, client, pk, owner, TOKEN_B, SWAP_ROUTER, units, idx, "swap token")
        deadline = int(time.time()) + SWAP_DEADLINE_SECS
        # amountOutMinimum = 0: the template carries no slippage guard
        call = encode_exact_input_single(TOKEN_B, TOKEN_A, owner, units, deadline)
        session.log(f"Acct {idx+1}: swapping {amount} tokenB -> tokenA", "info")
        opts = await tx_options(client, owner, SWAP_GAS_LIMIT)
        hx = await client.transact(pk, SWAP_ROUTER, SWAP_ROUTER_ABI, "multicall", [[call]], opts)
        session.log(f"Acct {idx+1}: swap tx {short_hash(hx)} sent", "wait")
        await client.wait(hx)
        session.log(f"Acct {idx+1}: swap completed {tx_summary(EXPLORER_B, hx)}", "success")
        return True
    except Exception as e:
        session.log(f"Acct {idx+1}: swap error: {e}", "error")
        return False


# =========================
# SESSION / RUNNER
# =========================
Action = Callable[["Session", str, Optional[str], int], Awaitable[bool]]

@dataclass
class RunState:
    running: bool = False
    stop_requested: bool = False

    def reset(self) -> None:
        self.running = False
        self.stop_requested = False

class Session:
    """Everything one bot process works on: accounts, proxies, config, run flags and logs."""
    def __init__(self, pk_file: str = PK_FILE, proxy_file: str = PROXY_FILE, config_file: str = CONFIG_FILE, *,
                 strict_keys: bool = STRICT_KEYS, swap_approve: bool = SWAP_APPROVE,
                 rng: Optional[Randomness] = None, sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
                 connect: Optional[Callable[..., Awaitable[ChainClient]]] = None, log_cap: int = LOG_CAP) -> None:
        self.pk_file = Path(pk_file)
        self.proxy_file = Path(proxy_file)
        self.config_file = Path(config_file)
        self.strict_keys = strict_keys
        self.swap_approve = swap_approve
        self.rng = rng or Randomness()
        self.sleep = sleep
        self.connect = connect or ChainClient.connect
        self.bridge: Action = perform_bridge
        self.swap: Action = perform_swap
        self.logs = LogBuffer(log_cap)
        self.state = RunState()
        self.config = ActivityConfig()
        self.private_keys: List[str] = []
        self.proxies: List[str] = []
        self.wallets: List[Dict[str,str]] = []
        self.task: Optional[asyncio.Task] = None

    def log(self, text: str, kind: str = "info") -> LogEntry:
        return self.logs.add(text, kind)

    def bootstrap(self) -> None:
        self.load_private_keys()
        self.load_proxies()
        self.load_config()
        self.wallets = [{"address": address_of(pk) or "invalid key", "balance": "-", "proxy": proxy_for(i, self.proxies) or "-"}
                        for i, pk in enumerate(self.private_keys)]

    # ---------- loaders ----------
    def load_private_keys(self) -> List[str]:
        lines = read_lines(self.pk_file, self.log)
        self.private_keys = [L for L in lines if PK_RE.match(L)] if self.strict_keys else lines
        if not self.private_keys:
            self.log(f"No private keys found ({self.pk_file}). Add at least one 0x... private key.", "warn")
        else:
            self.log(f"Loaded {len(self.private_keys)} private key(s) from {self.pk_file}", "success")
        return self.private_keys

    def load_proxies(self) -> List[str]:
        self.proxies = read_lines(self.proxy_file, self.log)
        if self.proxies:
            self.log(f"Loaded {len(self.proxies)} proxies from {self.proxy_file}", "success")
        else:
            self.log(f"No proxies loaded ({self.proxy_file} missing or empty). Running without proxies.", "info")
        return self.proxies

    def load_config(self) -> ActivityConfig:
        try:
            if self.config_file.exists():
                raw = json.loads(self.config_file.read_text(encoding="utf-8"))
                self.config = ActivityConfig.from_dict(raw if isinstance(raw, dict) else {})
                self.log(f"Loaded {self.config_file}", "success")
            else:
                self.config = ActivityConfig()
                write_json_atomic(self.config_file, self.config.to_dict())
                self.log(f"Created default {self.config_file}", "info")
        except (OSError, ValueError) as e:
            self.config = ActivityConfig()
            self.log(f"Failed to load {self.config_file}: {e}", "error")
        return self.config

    def save_config(self) -> bool:
        try:
            write_json_atomic(self.config_file, self.config.to_dict())
            self.log(f"Saved {self.config_file}", "success")
            return True
        except OSError as e:
            self.log(f"Failed to save config: {e}", "error")
            return False

    # ---------- control surface ----------
    def set_config(self, bridge_repetitions: Any, swap_repetitions: Any) -> ActivityConfig:
        self.config = ActivityConfig(_coerce_reps(bridge_repetitions), _coerce_reps(swap_repetitions))
        self.save_config()
        return self.config

    def clear_logs(self) -> None:
        self.logs.clear()

    async def refresh_wallets(self) -> List[Dict[str,str]]:
        self.load_private_keys()
        self.load_proxies()
        rows = []
        for i, pk in enumerate(self.private_keys):
            addr = address_of(pk); proxy = proxy_for(i, self.proxies); bal = "0.0000"
            if addr:
                try:
                    client = await self.connect(RPC_A, CHAIN_ID_A, proxy)
                    bal = fmt_balance(await client.balance(addr))
                except Exception as e:
                    self.log(f"Acct {i+1}: balance query failed: {e}", "debug")
            rows.append({"address": addr or "invalid key", "balance": bal, "proxy": proxy or "-"})
        self.wallets = rows
        self.log(f"Wallets refreshed ({len(rows)} account(s))", "success")
        return rows

    def start(self) -> bool:
        if self.state.running:
            self.log("Activity already running.", "warn")
            return False
        if not self.private_keys:
            self.log("No valid private keys loaded. Nothing to run.", "error")
            return False
        self.state.running = True
        self.state.stop_requested = False
        self.task = asyncio.get_running_loop().create_task(self.run_activity())
        return True

    def stop(self) -> bool:
        if not self.state.running:
            self.log("No activity is running.", "warn")
            return False
        if not self.state.stop_requested:
            self.state.stop_requested = True
            self.log("Stop requested. Finishing the current step...", "warn")
        return True

    # ---------- runner ----------
    async def _pause(self, seconds: float, label: str) -> None:
        if seconds <= 0 or self.state.stop_requested: return
        self.log(f"{label}: waiting {seconds:.0f}s", "wait")
        remaining = float(seconds)
        while remaining > 0 and not self.state.stop_requested:
            step = min(1.0, remaining)
            await self.sleep(step)
            remaining -= step

    async def _repeat(self, action: Action, label: str, times: int, pk: str, proxy: Optional[str], idx: int) -> None:
        for r in range(1, times+1):
            if self.state.stop_requested: return
            self.log(f"Acct {idx+1}: {label} {r}/{times}", "info")
            ok = await action(self, pk, proxy, idx)
            if not ok: self.log(f"Acct {idx+1}: {label} {r}/{times} failed", "warn")
            if r < times: await self._pause(self.rng.delay(*REPEAT_GAP), f"Next {label.lower()}")

    async def run_activity(self) -> None:
        keys = list(self.private_keys); proxies = list(self.proxies); cfg = self.config
        total = len(keys)
        self.log(f"Starting activity: {total} account(s), bridge x{cfg.bridge_repetitions}, swap x{cfg.swap_repetitions}", "info")
        try:
            for i, pk in enumerate(keys):
                if self.state.stop_requested: break
                proxy = proxy_for(i, proxies)
                self.log(f"Acct {i+1}/{total}: {fmt_addr(address_of(pk))} • proxy {proxy or 'none'}", "info")
                await self._repeat(self.bridge, "Bridge", cfg.bridge_repetitions, pk, proxy, i)
                await self._pause(self.rng.delay(*PHASE_GAP), "Before swap")
                await self._repeat(self.swap, "Swap", cfg.swap_repetitions, pk, proxy, i)
                if i < total-1 and not self.state.stop_requested:
                    await self._pause(ACCOUNT_GAP, "Next account")
            if self.state.stop_requested:
                self.log("Activity stopped.", "warn")
            else:
                self.log("Activity finished for all accounts.", "success")
        except Exception as e:
            self.log(f"Activity loop error: {e}", "error")
        finally:
            self.state.reset()


# =========================
# HEADLESS MENU
# =========================
def print_entry(entry: Optional[LogEntry]) -> None:
    if entry is None: return
    console.print(entry.render(), style=LOG_STYLES.get(entry.kind), markup=False, highlight=False)

def ask_int(prompt: str, default: Optional[int]=None, minv: Optional[int]=None, maxv: Optional[int]=None) -> int:
    while True:
        s = console.input(f"[accent]?[/accent] {prompt}{f' [{default}]' if default is not None else ''}: ").strip()
        if not s and default is not None: v = default
        else:
            try: v = int(s)
            except ValueError: console.print("[warn]Enter a whole number.[/warn]"); continue
        if minv is not None and v < minv: console.print(f"[warn]Min {minv}[/warn]"); continue
        if maxv is not None and v > maxv: console.print(f"[warn]Max {maxv}[/warn]"); continue
        return v

def run_headless(session: Session) -> None:
    async def _run():
        try:
            asyncio.get_running_loop().add_signal_handler(signal.SIGINT, session.stop)
        except (NotImplementedError, RuntimeError):
            pass
        if session.start():
            await session.task
    console.print("[muted]Ctrl+C requests a stop after the current step.[/muted]")
    asyncio.run(_run())

def show_wallets(session: Session) -> None:
    t=Table(box=box.ROUNDED, show_header=True, header_style="accent")
    t.add_column("No"); t.add_column("Address", style="title"); t.add_column("Balance A"); t.add_column("Proxy", style="muted")
    for i, w in enumerate(session.wallets, start=1):
        t.add_row(str(i), w["address"], w["balance"], w["proxy"])
    console.print(t)

def main_menu() -> None:
    session = Session()
    session.logs.subscribe(print_entry)
    session.bootstrap()
    while True:
        console.print(Rule(style="accent")); console.print("[title]Universal Testnet Bot[/title]", justify="center"); console.print(Rule(style="accent"))
        cfg = session.config
        console.print(f"[muted]Accounts {len(session.private_keys)} • proxies {len(session.proxies)} • bridge x{cfg.bridge_repetitions} • swap x{cfg.swap_repetitions}[/muted]")
        t=Table(box=box.ROUNDED, show_header=True, header_style="accent"); t.add_column("No"); t.add_column("Menu", style="title")
        t.add_row("1","Run activity"); t.add_row("2","Set config"); t.add_row("3","Refresh wallets"); t.add_row("4","Exit"); console.print(t)
        ch = console.input("[accent]Choose[/accent]: ").strip()
        if ch=="1": run_headless(session)
        elif ch=="2":
            b = ask_int("Bridge repetitions", cfg.bridge_repetitions, 1, 1000)
            s = ask_int("Swap repetitions", cfg.swap_repetitions, 1, 1000)
            session.set_config(b, s)
        elif ch=="3": asyncio.run(session.refresh_wallets()); show_wallets(session)
        elif ch=="4": console.print("[muted]Bye.[/muted]"); break
        else: console.print("[warn]Unknown choice.[/warn]")

if __name__ == "__main__":
    try:
        main_menu()
    except KeyboardInterrupt:
        console.print("\n[warn]Stopped by user.[/warn]")
