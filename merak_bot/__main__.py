# merak_bot/__main__.py
import asyncio
import sys

from . import __version__
from .config import ConfigError, load_settings
from .orchestrator import NoWalletsError, run_all
from .proxies import load_proxies
from .reporter import DIVIDER
from .util import get_logger, init_logging
from .wallets import load_wallet_keys


async def run_bot(settings) -> None:
    log = get_logger()
    log.info(DIVIDER)
    log.info(f"starting merak-bot v{__version__} on {settings.network.name}")

    proxies = load_proxies(settings.proxy_file)
    if proxies:
        log.info(f"loaded {len(proxies)} proxies from {settings.proxy_file}")

    log.info(f"loading wallet keys from {settings.mnemonic_file}")
    wallets = load_wallet_keys(settings.mnemonic_file)
    if not wallets:
        raise NoWalletsError(f"no valid keys found, check {settings.mnemonic_file}")
    log.info(f"loaded {len(wallets)} wallet{'s' if len(wallets) > 1 else ''}")

    await run_all(wallets, proxies, settings)


def main() -> int:
    try:
        settings = load_settings()
    except ConfigError as e:
        init_logging().error(f"bad configuration: {e}")
        return 1
    log = init_logging(settings.log_level, settings.log_color, settings.log_json, settings.debug)
    try:
        asyncio.run(run_bot(settings))
    except KeyboardInterrupt:
        log.warning("interrupted")
        return 130
    except NoWalletsError as e:
        log.error(str(e))
        return 1
    except Exception:
        log.exception("FATAL ERROR")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
