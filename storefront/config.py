"""Application configuration using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Database (orders and accounts; the catalog lives in memory)
    database_url: str = "sqlite+aiosqlite:///./storefront.db"

    # App Settings
    debug: bool = False
    log_level: str = "INFO"
    app_host: str = "0.0.0.0"
    app_port: int = 8002

    # Business
    business_name: str = "Gadget Wall"
    currency_symbol: str = "€"
    vat_rate: float = 0.23  # Portugal standard VAT, prices are VAT inclusive
    seed_catalog: bool = True

    # ==========================================================================
    # AI & LLM Configuration
    # ==========================================================================
    openai_api_key: str = ""

    # Sales assistant (chat)
    llm_model: str = "gpt-4o"
    llm_temperature: float = 0.6
    llm_max_tokens: int = 2000
    llm_timeout_seconds: float = 60.0

    # Lead discovery (web search tool)
    lead_model: str = "gpt-4o"
    lead_search_tool: str = "web_search_preview"
    lead_search_context_size: str = "medium"  # low, medium, high

    # UI hint: seconds to wait before showing the invoice after an order
    invoice_display_delay_seconds: float = 1.0

    # ==========================================================================
    # Accounts
    # ==========================================================================
    admin_email: str = "admin@gadgetwall.pt"
    admin_password: str = "admin"
    password_hash_iterations: int = 120_000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
