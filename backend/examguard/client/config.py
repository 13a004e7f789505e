from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    ledger_url: str = "http://localhost:8000"
    ledger_path: str = "/api/v1/proctoring/log-event"
    session_cookie_name: str = "examguard_session"
    request_timeout: float = 10.0

    fullscreen_poll_interval: float = 0.5
    visibility_poll_interval: float = 0.2
    focus_recheck_delay: float = 0.1

    debug_log_size: int = 500
    # 0 disables suppression of repeated same-kind signals
    duplicate_window: float = 0.0

    results_url: str = "/result"
    submit_on_terminate: bool = True

    class Config:
        env_prefix = "EXAMGUARD_CLIENT_"
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"
