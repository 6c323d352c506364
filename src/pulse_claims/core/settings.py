"""Application settings and configuration.

This module defines all configuration options for the Pulse Claims service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_CHAIN_ID = 8453
CELO_CHAIN_ID = 42220
OPTIMISM_CHAIN_ID = 10


class ChainSettings(BaseModel):
    """Per-network RPC endpoint, contract address and retry policy."""

    name: str
    rpc_url: str
    daily_rewards_address: str = ""
    rpc_max_attempts: int = Field(default=3, ge=1)
    rpc_base_delay_seconds: float = Field(default=0.5, ge=0)
    rpc_timeout_seconds: float = Field(default=10.0, gt=0)


def default_chains() -> dict[int, ChainSettings]:
    """Return the built-in network table.

    Celo gets a longer retry policy; receipts there routinely lag behind the
    transaction hash for a few seconds on public RPC nodes.
    """
    return {
        BASE_CHAIN_ID: ChainSettings(name="base", rpc_url="https://mainnet.base.org"),
        CELO_CHAIN_ID: ChainSettings(
            name="celo",
            rpc_url="https://forno.celo.org",
            rpc_max_attempts=5,
            rpc_base_delay_seconds=1.0,
        ),
        OPTIMISM_CHAIN_ID: ChainSettings(name="optimism", rpc_url="https://mainnet.optimism.io"),
    }


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Pulse Claims", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    # Voucher signing key; used for nothing but claim vouchers
    claim_signer_private_key: str | None = Field(default=None, alias="CLAIM_SIGNER_PRIVATE_KEY")
    claim_deadline_max_seconds: int = Field(default=900, alias="CLAIM_DEADLINE_MAX_SECONDS")

    # Redis holds every counter, bucket and processed-hash marker
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    key_prefix: str = Field(default="pulse", alias="KEY_PREFIX")

    # Networks
    chains: dict[int, ChainSettings] = Field(default_factory=default_chains, alias="CHAINS")
    daily_rewards_address_base: str | None = Field(
        default=None, alias="DAILY_REWARDS_ADDRESS_BASE"
    )
    daily_rewards_address_celo: str | None = Field(
        default=None, alias="DAILY_REWARDS_ADDRESS_CELO"
    )
    daily_rewards_address_optimism: str | None = Field(
        default=None, alias="DAILY_REWARDS_ADDRESS_OPTIMISM"
    )
    default_chain_id: int = Field(default=BASE_CHAIN_ID, alias="DEFAULT_CHAIN_ID")
    # 4-byte selector of the deployed claim(claimer, fid, nonce, deadline, signature)
    claim_function_selector: str = Field(default="0x6e8aa08a", alias="CLAIM_FUNCTION_SELECTOR")

    # Global daily cap across all claimers, per chain
    daily_claim_limit: int = Field(default=250, alias="DAILY_CLAIM_LIMIT")

    # Anti-bot heuristic: low-reputation identities must show a streak
    anti_bot_enabled: bool = Field(default=True, alias="ANTI_BOT_ENABLED")
    reputation_threshold: float = Field(default=0.5, alias="REPUTATION_THRESHOLD")
    min_streak_days: int = Field(default=3, alias="MIN_STREAK_DAYS")

    # Read-only collaborators
    social_activity_url: str | None = Field(default=None, alias="SOCIAL_ACTIVITY_URL")
    reputation_url: str | None = Field(default=None, alias="REPUTATION_URL")
    reputation_api_key: str | None = Field(default=None, alias="REPUTATION_API_KEY")
    http_timeout_seconds: float = Field(default=5.0, alias="HTTP_TIMEOUT_SECONDS")

    # Abuse-prevention limits (requests per window)
    authorize_ip_limit: int = Field(default=100, alias="AUTHORIZE_IP_LIMIT")
    authorize_claimer_limit: int = Field(default=10, alias="AUTHORIZE_CLAIMER_LIMIT")
    confirm_ip_limit: int = Field(default=10, alias="CONFIRM_IP_LIMIT")
    confirm_claimer_limit: int = Field(default=5, alias="CONFIRM_CLAIMER_LIMIT")
    rate_limit_window_seconds: int = Field(default=60, alias="RATE_LIMIT_WINDOW_SECONDS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def rewards_address_overrides(self) -> dict[int, str]:
        """Return per-chain contract addresses supplied through dedicated variables."""
        overrides = {
            BASE_CHAIN_ID: self.daily_rewards_address_base,
            CELO_CHAIN_ID: self.daily_rewards_address_celo,
            OPTIMISM_CHAIN_ID: self.daily_rewards_address_optimism,
        }
        return {chain_id: address for chain_id, address in overrides.items() if address}


settings = Settings()
