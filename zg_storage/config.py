from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AnyUrl, Field, validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central application configuration parsed from environment variables."""

    api_host: str = Field("0.0.0.0", description="Host interface for the API server.")
    api_port: int = Field(3000, description="Port for the API server.")

    rpc_url: AnyUrl = Field("https://evmrpc-testnet.0g.ai/", description="EVM RPC endpoint of the 0G chain.")
    flow_contract: str = Field(
        "0x0460aA47b41a66694c0a73f667a1b795A5ED3556",
        pattern=r"^0x[0-9a-fA-F]{40}$",
        description="Address of the flow contract used for storage accounting.",
    )
    indexer_rpc: AnyUrl = Field(
        "https://indexer-storage-testnet-standard.0g.ai",
        description="Indexer endpoint routing uploads and downloads to storage nodes.",
    )
    private_key: Optional[str] = Field(None, description="Signer private key used by the HTTP service.")

    client_binary: str = Field("0g-storage-client", description="Executable of the 0G storage client.")
    client_extra_args: Optional[str] = Field(
        None,
        description="Optional additional CLI arguments for the storage client, serialized as a space-delimited string.",
    )
    client_timeout_seconds: Optional[int] = Field(
        None,
        description="Maximum number of seconds a storage client call may run. Unset or 0 disables the timeout.",
    )

    upload_dir: Path = Field(Path("uploads"), description="Staging directory for multipart uploads.")
    download_dir: Path = Field(Path("downloads"), description="Base path for retrieved files.")

    cors_origins: List[str] = Field(default_factory=list, description="Origins allowed to call the API.")
    log_level: str = Field("INFO", description="Log level applied by the entry points.")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "ZG_"

    @validator("upload_dir", "download_dir", pre=True)
    def expand_storage_path(cls, value: Path) -> Path:
        """Expand user and environment variables for storage paths."""
        return Path(value).expanduser().resolve()

    @validator("client_timeout_seconds", pre=True)
    def normalize_client_timeout(cls, value: Optional[int]) -> Optional[int]:
        """Interpret falsy values as disabling timeouts."""
        if value in (None, "", "None", 0, "0"):
            return None
        return int(value)

    @validator("private_key", pre=True)
    def blank_key_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not str(value).strip():
            return None
        return str(value).strip()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance to avoid reparsing the environment."""
    return Settings()


settings = get_settings()
