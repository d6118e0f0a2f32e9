from decimal import Decimal
import os
from dotenv import load_dotenv
load_dotenv()
# ---- TronGrid ----
TRONGRID_API_KEY = os.environ.get("TRONGRID_API_KEY", "")
TRON_TESTNET_URL = os.environ.get("TRON_TESTNET_URL", "https://api.shasta.trongrid.io")   # Shasta
TRON_MAINNET_URL = os.environ.get("TRON_MAINNET_URL", "https://api.trongrid.io")

TRONGRID_REQUESTS_PER_SEC = float(os.environ.get("TRONGRID_REQUESTS_PER_SEC", "5"))
TRONGRID_TIMEOUT_SEC = int(os.environ.get("TRONGRID_TIMEOUT_SEC", "15"))

# receipt polling after broadcast
TX_CONFIRM_TIMEOUT_SEC = int(os.environ.get("TX_CONFIRM_TIMEOUT_SEC", "60"))
TX_CONFIRM_POLL_SEC = float(os.environ.get("TX_CONFIRM_POLL_SEC", "3"))

NETWORK_URLS = {
    "testnet": TRON_TESTNET_URL,
    "mainnet": TRON_MAINNET_URL,
}
DEFAULT_NETWORK = os.environ.get("DEFAULT_NETWORK", "testnet")

# ---- Fee estimation ----

SUN_PER_TRX = Decimal("1000000")

# typical resource usage per operation: (energy, bandwidth)
DEPLOY_RESOURCES = (65000, 350)
TRANSFER_RESOURCES = (14500, 345)
MINT_BURN_RESOURCES = (12000, 345)

# used when getchainparameters cannot be read
DEFAULT_ENERGY_FEE_SUN = 420
DEFAULT_TRANSACTION_FEE_SUN = 1000

SAFETY_MARGIN = {
    "testnet": Decimal("1.1"),
    "mainnet": Decimal("1.2"),
}

# ----- Pricing ------

# approximate TRX price, display only
TRX_USD_PRICE = Decimal(os.environ.get("TRX_USD_PRICE", "0.25"))

# ---- Contract ----
DEPLOY_FEE_LIMIT_SUN = 1_000_000_000
CALL_FEE_LIMIT_SUN = 100_000_000
DEPLOY_USER_RESOURCE_PERCENT = 100
DEPLOY_ORIGIN_ENERGY_LIMIT = 10_000_000

TRC20_BYTECODE = os.environ.get("TRC20_BYTECODE", "")
TRC20_BYTECODE_PATH = os.environ.get("TRC20_BYTECODE_PATH", "contracts/TRC20Token.bin")

# ---- Static (in-memory) chain ----
# TRX every unknown account holds under --use-static
STATIC_STARTING_TRX = Decimal(os.environ.get("STATIC_STARTING_TRX", "1000"))

# ---- Storage ----
STORE_BACKEND = os.environ.get("STORE_BACKEND", "memory")     # memory | sql
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///tronconsole.db")
TRANSACTIONS_DEFAULT_LIMIT = int(os.environ.get("TRANSACTIONS_DEFAULT_LIMIT", "50"))

# ---- Server / logging ----
HOST = os.environ.get("HOST", "127.0.0.1")
PORT = int(os.environ.get("PORT", "5000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FILE = os.environ.get("LOG_FILE", "")
