# merak_bot/config.py
import os
from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv


class ConfigError(ValueError):
    pass


# --- env helpers ---
# All helpers read from an explicit mapping so that settings can be built from
# something other than os.environ (tests, overrides).

def _env(env: Mapping[str, str], name: str, default: str = "") -> str:
    v = env.get(name)
    return default if v is None else str(v).strip()

def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    v = _env(env, name)
    if not v:
        return int(default)
    v = v.replace("_", "")
    try:
        # int() keeps full uint256 precision, never go through float
        return int(v, 16) if v.lower().startswith("0x") else int(v)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {v!r}") from None

def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    v = _env(env, name)
    if not v:
        return default
    return v.lower() in ("1","true","yes","y","on")

def _env_csv(env: Mapping[str, str], name: str) -> Tuple[str, ...]:
    raw = _env(env, name)
    if not raw:
        return ()
    parts = [p.strip() for p in raw.split(",")]
    return tuple(p for p in parts if p)


@dataclass(frozen=True)
class Network:
    name: str
    rpc_url: str
    explorer_url: str


NETWORKS: Dict[str, Network] = {
    "testnet": Network("testnet", "https://evmrpc-testnet.0g.ai", "https://chainscan-galileo.0g.ai"),
    "mainnet": Network("mainnet", "https://evmrpc.0g.ai", "https://chainscan.0g.ai"),
}


@dataclass(frozen=True)
class Token:
    symbol: str
    address: str
    decimals: int = 18


# Токены по умолчанию (0G); адрес переопределяется через TOKEN_<SYM>
DEFAULT_TOKENS: Tuple[Token, ...] = (
    Token("wAOGI", "0x006921B4B6DAc59342EA5e7d62f8351aeB65EEA8", 18),
    Token("USDC", "0x3eC8A8705bE1D5ca90066b37ba62c4183B024ebf", 6),
    Token("WETH", "0x0fE9B43625fA7EdD663aDcEC0728DD635e4AbF7c", 18),
)
WRAPPED_NATIVE = "wAOGI"
NATIVE_SYMBOL = "AOGI"
NATIVE_DECIMALS = 18


@dataclass(frozen=True)
class WrapConfig:
    enabled: bool = True
    amount: int = 10**16
    label: str = "AOGI Wrapping"


@dataclass(frozen=True)
class SwapConfig:
    key: str
    path: Tuple[str, ...]
    amount: int
    label: str
    min_output: int = 1
    enabled: bool = True


@dataclass(frozen=True)
class LiquidityConfig:
    key: str
    token0: str
    token1: str
    amount0: int
    amount1: int
    label: str
    min0: int = 1
    min1: int = 1
    enabled: bool = True


DEFAULT_SWAPS: Tuple[SwapConfig, ...] = (
    SwapConfig("wAOGI_USDC", ("wAOGI", "USDC"), 10**15, "wAOGI → USDC Swap"),
    SwapConfig("USDC_wAOGI", ("USDC", "wAOGI"), 1_000, "USDC → wAOGI Swap"),
    SwapConfig("wAOGI_WETH", ("wAOGI", "WETH"), 10**15, "wAOGI → WETH Swap"),
    SwapConfig("WETH_wAOGI", ("WETH", "wAOGI"), 10**12, "WETH → wAOGI Swap"),
)

DEFAULT_LIQUIDITY: Tuple[LiquidityConfig, ...] = (
    LiquidityConfig("wAOGI_WETH", "wAOGI", "WETH", 10**14, 19_149 * 10**6, "wAOGI-WETH LP Deposit"),
    LiquidityConfig("wAOGI_USDC", "wAOGI", "USDC", 10**14, 5_765, "wAOGI-USDC LP Deposit"),
    LiquidityConfig("USDC_WETH", "USDC", "WETH", 2_000, 13_873 * 10**6, "USDC-WETH LP Deposit"),
)


@dataclass(frozen=True)
class Settings:
    network: Network = NETWORKS["testnet"]
    max_retries: int = 3
    retry_delay_ms: int = 5_000
    delay_between_tx_ms: int = 60_000
    delay_between_wallets_ms: int = 60_000
    check_balance: bool = True
    track_transactions: bool = False
    transactions_dir: str = "transactions"
    use_jitter: bool = True
    rotate_proxies: bool = True
    mnemonic_file: str = "mnemonic.txt"
    proxy_file: str = "proxy.txt"

    # Uniswap V3 (Jaine) addresses
    router: str = "0xb95B5953FF8ee5D5d9818CdbEfE363ff2191318c"
    pos_manager: str = "0x44f24B66b3BAa3A784dBeee9bFE602f15A2Cc5d9"
    v3_factory: str = "0x7453582657F056ce5CfcEeE9E31E4BC390fa2b3c"
    v3_fee: int = 500  # 0.05%
    gas_limit_default: int = 400_000
    swap_deadline_sec: int = 600
    rpc_timeout: int = 30

    tokens: Tuple[Token, ...] = DEFAULT_TOKENS
    wrap: WrapConfig = field(default_factory=WrapConfig)
    swaps: Tuple[SwapConfig, ...] = DEFAULT_SWAPS
    liquidity: Tuple[LiquidityConfig, ...] = DEFAULT_LIQUIDITY

    log_level: str = "INFO"
    log_color: bool = True
    log_json: bool = False
    debug: bool = False

    def token(self, symbol: str) -> Token:
        for t in self.tokens:
            if t.symbol == symbol:
                return t
        raise ConfigError(f"unknown token symbol: {symbol}")


def _load_tokens(env: Mapping[str, str]) -> Tuple[Token, ...]:
    tokens = []
    for t in DEFAULT_TOKENS:
        tokens.append(Token(
            t.symbol,
            _env(env, f"TOKEN_{t.symbol}", t.address),
            _env_int(env, f"{t.symbol}_DECIMALS", t.decimals),
        ))
    # опционально: один дополнительный токен через ENV
    extra_sym = _env(env, "EXTRA_TOKEN_SYMBOL")
    extra_addr = _env(env, "EXTRA_TOKEN_ADDRESS")
    if extra_sym and extra_addr:
        tokens.append(Token(extra_sym, extra_addr, _env_int(env, "EXTRA_TOKEN_DECIMALS", 18)))
    return tuple(tokens)


def _load_wrap(env: Mapping[str, str]) -> WrapConfig:
    d = WrapConfig()
    return WrapConfig(
        enabled=_env_bool(env, "WRAP_ENABLED", d.enabled),
        amount=_env_int(env, "WRAP_AMOUNT", d.amount),
        label=_env(env, "WRAP_LABEL", d.label),
    )


def _load_swap(env: Mapping[str, str], d: SwapConfig) -> SwapConfig:
    p = f"SWAP_{d.key.upper()}_"
    return SwapConfig(
        key=d.key,
        path=_env_csv(env, p + "PATH") or d.path,
        amount=_env_int(env, p + "AMOUNT", d.amount),
        label=_env(env, p + "LABEL", d.label),
        min_output=_env_int(env, p + "MIN_OUTPUT", d.min_output),
        enabled=_env_bool(env, p + "ENABLED", d.enabled),
    )


def _load_liquidity(env: Mapping[str, str], d: LiquidityConfig) -> LiquidityConfig:
    p = f"LIQUIDITY_{d.key.upper()}_"
    return LiquidityConfig(
        key=d.key,
        token0=d.token0,
        token1=d.token1,
        amount0=_env_int(env, p + "AMOUNT0", d.amount0),
        amount1=_env_int(env, p + "AMOUNT1", d.amount1),
        label=_env(env, p + "LABEL", d.label),
        min0=_env_int(env, p + "MIN0", d.min0),
        min1=_env_int(env, p + "MIN1", d.min1),
        enabled=_env_bool(env, p + "ENABLED", d.enabled),
    )


def _load_network(env: Mapping[str, str]) -> Network:
    name = _env(env, "NETWORK", "testnet").lower()
    base = NETWORKS.get(name)
    rpc = _env(env, "RPC_URL")
    if base is None and not rpc:
        raise ConfigError(f"unknown NETWORK {name!r} and no RPC_URL given")
    explorer = _env(env, "EXPLORER_URL", base.explorer_url if base else "")
    return Network(name, rpc or base.rpc_url, explorer.rstrip("/"))


def _validate(s: Settings) -> Settings:
    if s.max_retries < 1:
        raise ConfigError("MAX_RETRIES must be >= 1")
    for name in ("retry_delay_ms", "delay_between_tx_ms", "delay_between_wallets_ms"):
        if getattr(s, name) < 0:
            raise ConfigError(f"{name} must be >= 0")
    symbols = {t.symbol for t in s.tokens}
    if WRAPPED_NATIVE not in symbols:
        raise ConfigError(f"token {WRAPPED_NATIVE} is required for wrapping")
    for sw in s.swaps:
        if len(sw.path) < 2:
            raise ConfigError(f"swap {sw.key}: path needs at least 2 tokens")
        missing = [sym for sym in sw.path if sym not in symbols]
        if missing:
            raise ConfigError(f"swap {sw.key}: unknown tokens {missing}")
    for lp in s.liquidity:
        if lp.token0 not in symbols or lp.token1 not in symbols:
            raise ConfigError(f"liquidity {lp.key}: unknown token pair {lp.token0}/{lp.token1}")
    amounts = [s.wrap.amount] + [sw.amount for sw in s.swaps] + [sw.min_output for sw in s.swaps]
    amounts += [v for lp in s.liquidity for v in (lp.amount0, lp.amount1, lp.min0, lp.min1)]
    if any(a < 0 or a >= 2**256 for a in amounts):
        raise ConfigError("amounts must fit in uint256")
    return s


def load_settings(env: Optional[Mapping[str, str]] = None,
                  overrides: Optional[Mapping[str, object]] = None) -> Settings:
    """Build the run configuration once: defaults, then the environment
    (``.env`` is loaded when ``env`` is not given), then ``overrides``
    (Settings field name -> value). The result is immutable."""
    if env is None:
        load_dotenv()
        env = os.environ
    d = Settings()
    s = Settings(
        network=_load_network(env),
        max_retries=_env_int(env, "MAX_RETRIES", d.max_retries),
        retry_delay_ms=_env_int(env, "RETRY_DELAY_MS", d.retry_delay_ms),
        delay_between_tx_ms=_env_int(env, "DELAY_BETWEEN_TX_MS", d.delay_between_tx_ms),
        delay_between_wallets_ms=_env_int(env, "DELAY_BETWEEN_WALLETS_MS", d.delay_between_wallets_ms),
        check_balance=_env_bool(env, "CHECK_BALANCE_BEFORE_TRANSACTIONS", d.check_balance),
        track_transactions=_env_bool(env, "TRACK_TRANSACTIONS", d.track_transactions),
        transactions_dir=_env(env, "TRANSACTIONS_DIR", d.transactions_dir),
        use_jitter=_env_bool(env, "USE_JITTER", d.use_jitter),
        rotate_proxies=_env_bool(env, "ROTATE_PROXIES", d.rotate_proxies),
        mnemonic_file=_env(env, "MNEMONIC_FILE", d.mnemonic_file),
        proxy_file=_env(env, "PROXY_FILE", d.proxy_file),
        router=_env(env, "ROUTER", d.router),
        pos_manager=_env(env, "POS_MANAGER", d.pos_manager),
        v3_factory=_env(env, "V3_FACTORY", d.v3_factory),
        v3_fee=_env_int(env, "V3_FEE", d.v3_fee),
        gas_limit_default=_env_int(env, "GAS_LIMIT_DEFAULT", d.gas_limit_default),
        swap_deadline_sec=_env_int(env, "SWAP_DEADLINE_SEC", d.swap_deadline_sec),
        rpc_timeout=_env_int(env, "RPC_TIMEOUT", d.rpc_timeout),
        tokens=_load_tokens(env),
        wrap=_load_wrap(env),
        swaps=tuple(_load_swap(env, sw) for sw in DEFAULT_SWAPS),
        liquidity=tuple(_load_liquidity(env, lp) for lp in DEFAULT_LIQUIDITY),
        log_level=_env(env, "LOG_LEVEL", d.log_level).upper(),
        log_color=_env_bool(env, "LOG_COLOR", d.log_color),
        log_json=_env_bool(env, "LOG_JSON", d.log_json),
        debug=_env_bool(env, "DEBUG", d.debug),
    )
    if overrides:
        try:
            s = replace(s, **dict(overrides))
        except TypeError as e:
            raise ConfigError(f"bad override: {e}") from None
    return _validate(s)
