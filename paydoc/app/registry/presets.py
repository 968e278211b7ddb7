"""
Asset and network presets.

This module defines the fixed asset choice list a pay form offers and the
networks suggested for each asset. Each entry explicitly binds together:

- an asset ticker
- the networks offered for it (first entry is the default)
- a human-readable description

Presets are advisory. The validator accepts any asset or network that
matches the document patterns, whether or not it is listed here.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict


class AssetPreset(BaseModel):
    """
    Declarative description of a selectable asset.
    """

    asset: str
    networks: List[str]
    description: str

    model_config = ConfigDict(frozen=True)


ASSET_PRESETS: Dict[str, AssetPreset] = {
    "USDC": AssetPreset(
        asset="USDC",
        networks=["ETH-mainnet", "Base-mainnet"],
        description="USD Coin. Recommended for first-time users.",
    ),
    "BTC": AssetPreset(
        asset="BTC",
        networks=["BTC-mainnet"],
        description="Bitcoin on its main network.",
    ),
    "ETH": AssetPreset(
        asset="ETH",
        networks=["ETH-mainnet", "ETH-sepolia"],
        description="Ether on mainnet or the Sepolia test network.",
    ),
}


def networks_for(asset: str) -> List[str]:
    """Networks offered for ``asset``; empty for unlisted assets."""
    preset = ASSET_PRESETS.get(asset)
    return list(preset.networks) if preset is not None else []
