from pathlib import Path

from pydantic import SecretStr, ValidationError
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from price_poller.errors import ConfigError


class Config(BaseSettings):
    COINBASE_API_URL: str = "https://api.coinbase.com"
    LOG_LEVEL: str = "INFO"


def get_config():
    return Config()


class InfluxConfig(BaseSettings):
    """
    Connection parameters of the InfluxDB write endpoint.

    Values come from a TOML or JSON file, `INFLUX_*` environment
    variables take precedence over the file.
    """

    model_config = SettingsConfigDict(env_prefix="INFLUX_", frozen=True, extra="ignore")

    host: str
    org: str
    bucket: str
    token: SecretStr

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # file paths are set on the model config by `load_influx_config`,
        # sources without a path read nothing
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
            JsonConfigSettingsSource(settings_cls),
        )

    @property
    def write_url(self) -> str:
        return f"{self.host.rstrip('/')}/api/v2/write"


_FILE_KEYS = {
    ".toml": "toml_file",
    ".json": "json_file",
}


def load_influx_config(path: str | Path) -> InfluxConfig:
    path = Path(path)

    if not path.is_file():
        raise ConfigError(f"config file {path} does not exist")

    file_key = _FILE_KEYS.get(path.suffix.lower())
    if file_key is None:
        raise ConfigError(
            f"unsupported config format '{path.suffix}', expected one of {', '.join(_FILE_KEYS)}"
        )

    file_config = type(
        "InfluxFileConfig",
        (InfluxConfig,),
        {"model_config": SettingsConfigDict(**{file_key: path})},
    )

    try:
        return file_config()
    except ValidationError as exc:
        missing = ", ".join(".".join(map(str, e["loc"])) for e in exc.errors())
        raise ConfigError(f"invalid config in {path}: {missing}") from exc
    except ValueError as exc:
        # malformed TOML / JSON
        raise ConfigError(f"could not read config file {path}: {exc}") from exc


def check_https(url: str) -> str:
    if not url.lower().startswith("https://"):
        raise ConfigError(f"refusing to use non-https url {url}")
    return url
