from pydantic_settings import BaseSettings

from tidy_url.models import CleaningOptions


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    log_level: str = "INFO"

    # ── HTTPS probe ──
    https_probe_timeout_seconds: float = 5.0
    # Browser-like User-Agent; some hosts answer 403 to the default httpx UA
    https_probe_user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    )

    # ── Batch cleaning ──
    batch_size: int = 10
    tracking_rules_path: str = "config/tracking.yaml"

    # Cleaning options used by the CLI (the library defaults differ)
    clean_try_https: bool = True
    clean_remove_www: bool = True
    clean_remove_trailing_slash: bool = True
    clean_remove_fragment: bool = True
    clean_remove_tracking: bool = True
    clean_sort_params: bool = True
    clean_remove_empty_params: bool = True
    clean_remove_default_ports: bool = True

    def cleaning_options(self) -> CleaningOptions:
        return CleaningOptions(
            try_https=self.clean_try_https,
            remove_www=self.clean_remove_www,
            remove_trailing_slash=self.clean_remove_trailing_slash,
            remove_fragment=self.clean_remove_fragment,
            remove_tracking=self.clean_remove_tracking,
            sort_params=self.clean_sort_params,
            remove_empty_params=self.clean_remove_empty_params,
            remove_default_ports=self.clean_remove_default_ports,
        )


settings = Settings()
