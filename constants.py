#!/usr/bin/env python3

# --- ANSI Color Codes ---
C_GREEN = '\033[92m'
C_RED = '\033[91m'
C_YELLOW = '\033[93m'
C_BLUE = '\033[94m'
C_RESET = '\033[0m'

# --- Environment Variable Names ---
RPC_URL_ENV_VAR = 'RPC_URL'
TELEGRAM_BOT_TOKEN_ENV_VAR = 'TELEGRAM_BOT_TOKEN'
TELEGRAM_CHAT_ID_ENV_VAR = 'TELEGRAM_CHAT_ID'

# --- Pool Defaults ---
DEFAULT_PAIR_ADDRESS = '0xB4e16d0168e52d35CaCD2c6185b44281Ec28C9Dc'  # Uniswap V2 USDC/WETH
DEFAULT_BASE_SYMBOL = 'WETH'
DEFAULT_QUOTE_SYMBOL = 'USDC'
DEFAULT_CSV_PATH = 'prices.csv'

# --- Function Selectors ---
TOKEN0_SIG = '0x0dfe1681'
TOKEN1_SIG = '0xd21220a7'
GET_RESERVES_SIG = '0x0902f1ac'
DECIMALS_SIG = '0x313ce567'
SYMBOL_SIG = '0x95d89b41'

# --- Loop Timing ---
DEFAULT_CHECK_INTERVAL = 1.0
DEFAULT_RPC_TIMEOUT = 10.0
ERROR_BACKOFF_SECONDS = 2.0

# --- CSV Sink ---
CSV_HEADER = ('timestamp', 'price', 'pct_change', 'block', 'delta_quote', 'delta_base')
