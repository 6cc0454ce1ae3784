from pathlib import Path
from typing import ClassVar, List
from pydantic import BaseModel, Field
import tomllib
import os
import random

from bidboard.core import ListingDescriptor


class SourceCfg(BaseModel):
    base_url: str = "https://huutokaupat.com/kohde"
    delay_seconds: float = 0.5
    timeout_seconds: float = 30.0


class MarkersCfg(BaseModel):
    no_bids: str = "Ei tarjouksia"
    ended: str = "Päättynyt"
    verifying: str = "tarkistetaan tarjouksia"


class NetworkCfg(BaseModel):
    rotate_user_agents: bool = True
    accept_language: str = "fi-FI,fi;q=0.9,en;q=0.8"


class PollingCfg(BaseModel):
    interval_minutes: int = 10


class ListingCfg(BaseModel):
    id: str
    property_number: str


DEFAULT_LISTINGS = [
    ListingCfg(id="5811936", property_number="444-519-3-28"),
    ListingCfg(id="5811954", property_number="444-519-2-104"),
    ListingCfg(id="5811984", property_number="444-519-2-154"),
    ListingCfg(id="5812020", property_number="444-519-2-155"),
    ListingCfg(id="5812050", property_number="444-519-2-165"),
    ListingCfg(id="5812083", property_number="444-519-2-168"),
    ListingCfg(id="5812101", property_number="444-519-3-29"),
    ListingCfg(id="5812110", property_number="444-519-3-18"),
]


class Settings(BaseModel):
    source: SourceCfg = SourceCfg()
    markers: MarkersCfg = MarkersCfg()
    network: NetworkCfg = NetworkCfg()
    polling: PollingCfg = PollingCfg()
    listing: List[ListingCfg] = Field(default_factory=lambda: list(DEFAULT_LISTINGS))
    snapshot_path: str = "auction-data.json"

    # ---- helpers -----------------------------------------------------
    _UA_POOL: ClassVar[list[str]] = [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_5) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/17.0 Safari/605.1.15",
    ]

    def catalog(self) -> list[ListingDescriptor]:
        return [
            ListingDescriptor(id=item.id, property_number=item.property_number)
            for item in self.listing
        ]

    def request_headers(self) -> dict[str, str]:
        pool = self._UA_POOL
        ua = random.choice(pool) if self.network.rotate_user_agents else pool[0]
        return {
            "User-Agent": ua,
            "Accept-Language": self.network.accept_language,
        }


def load_settings() -> Settings:
    cfg_path = Path(os.getenv("BIDBOARD_CONFIG", "bidboard.toml"))
    raw = tomllib.loads(cfg_path.read_text()) if cfg_path.exists() else {}
    return Settings.model_validate(raw)
