"""
SimpleDao Constants

Protocol constants for the governance engine and its token, plus the logger
settings read from the environment (.env). Constants are organized by
category for easy reference.
"""
import ast

from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# TIME
# ==================================================================================
SECONDS_PER_DAY = 24 * 60 * 60


# ==================================================================================
# GOVERNANCE PARAMETERS
# ==================================================================================
# Voting deadline must lie within [now + MIN_VOTING_WINDOW, now + MAX_VOTING_WINDOW]
MIN_VOTING_DAYS = 3
MAX_VOTING_DAYS = 34
MIN_VOTING_WINDOW = MIN_VOTING_DAYS * SECONDS_PER_DAY
MAX_VOTING_WINDOW = MAX_VOTING_DAYS * SECONDS_PER_DAY

# Combined FOR + AGAINST weight needed, as a percentage of total supply
QUORUM_PERCENT = 60

# Lengths must be strictly greater than these
MIN_TITLE_LENGTH = 1
MIN_DESCRIPTION_LENGTH = 12


# ==================================================================================
# GOVERNANCE TOKEN
# ==================================================================================
TOKEN_NAME = "Governance Token"
TOKEN_SYMBOL = "GOV"
TOKEN_DECIMALS = 18
INITIAL_MINT_TOKENS = 100  # whole tokens minted to each initial holder
INITIAL_MINT_AMOUNT = INITIAL_MINT_TOKENS * 10 ** TOKEN_DECIMALS


# ==================================================================================
# NETWORKS
# ==================================================================================
DEFAULT_NETWORK = "hardhat"
LOCAL_NETWORKS = ("hardhat", "localhost")

# Well-known development accounts of a local Hardhat/Anvil node
DEV_ACCOUNTS = (
    "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
    "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
    "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
    "0x90F79bf6EB2c4f870365E785982E1f101E93b906",
)
DEFAULT_DEPLOYER = DEV_ACCOUNTS[0]
DEFAULT_HOLDER_COUNT = 2

DEFAULT_STATE_PATH = "simpledao-state.json"
DEFAULT_CONFIG_PATH = "simpledao.toml"


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in LOGGER_DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
