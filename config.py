from pydantic import PrivateAttr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Nexus API Gateway"
    debug: bool = False
    log_level: str = "INFO"

    cors_origins: str = "http://localhost:3000,http://localhost:3002,http://localhost:5000"

    # camelCase <-> snake_case translation at the gateway boundary
    case_transform_enabled: bool = True
    case_transform_prefix: str = "/api"
    request_id_header: str = "X-Gateway-Request-ID"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    _path_prefix: str = PrivateAttr(default="")
    _cors_origin_list: list[str] = PrivateAttr(default_factory=list)

    def model_post_init(self, __context: object) -> None:
        prefix = self.case_transform_prefix.strip().rstrip("/")
        if prefix and not prefix.startswith("/"):
            prefix = "/" + prefix
        self._path_prefix = prefix
        origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        self._cors_origin_list = origins

    @property
    def case_transform_path_prefix(self) -> str:
        return self._path_prefix

    @property
    def cors_origin_list(self) -> list[str]:
        return self._cors_origin_list


settings = Settings()
