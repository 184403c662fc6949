from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Search provider
    search_provider: str = "duckduckgo"  # duckduckgo | searxng | brave | tavily
    search_fallback_provider: str = ""  # optional, same choices as search_provider
    searxng_instance: str = "https://searx.be"
    duckduckgo_proxies: str = ""  # comma separated URL prefixes, tried after the direct endpoint
    brave_api_key: str = ""
    tavily_api_key: str = ""
    search_max_results_per_query: int = 5
    search_http_timeout_seconds: float = 10.0

    # Research run
    research_batch_size: int = 3
    research_step_timeout_seconds: float = 20.0
    research_batch_delay_seconds: float = 1.0
    research_max_queries: int = 8
    research_top_results: int = 20

    # Result cache
    search_cache_ttl_seconds: float = 600.0
    search_cache_max_entries: int = 50
    search_cache_sweep_interval_seconds: float = 300.0
    search_cache_empty_results: bool = False  # True keeps the legacy "cache empty sets" behaviour

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_dir: str = "logs"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]

    @property
    def duckduckgo_proxy_list(self) -> list[str]:
        return [p.strip() for p in self.duckduckgo_proxies.split(",") if p.strip()]


settings = Settings()
