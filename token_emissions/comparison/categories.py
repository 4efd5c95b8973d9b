"""Static sector categories for tracked tokens, keyed by CoinGecko ID."""

TOKEN_CATEGORIES: dict[str, list[str]] = {
    "Layer 1": [
        "bitcoin", "ethereum", "solana", "cardano", "avalanche-2",
        "aptos", "sui", "celestia", "near", "polkadot",
    ],
    "Layer 2": [
        "arbitrum", "optimism", "starknet", "polygon-ecosystem-token",
        "mantle", "base-protocol", "zksync", "scroll",
    ],
    "DeFi": [
        "uniswap", "aave", "lido-dao", "maker", "curve-dao-token",
        "compound-governance-token", "gmx", "pendle", "jupiter-exchange-solana",
    ],
    "Perpetuals": ["gmx", "dydx-chain", "gains-network", "hyperliquid", "vertex-protocol"],
    "RWA": ["ondo-finance", "centrifuge", "maple-finance", "goldfinch", "clearpool"],
    "Gaming": ["immutable-x", "the-sandbox", "axie-infinity", "gala", "ronin", "beam-2"],
    "AI": [
        "render-token", "fetch-ai", "singularitynet", "ocean-protocol",
        "bittensor", "worldcoin-wld",
    ],
    "Meme": ["dogecoin", "shiba-inu", "pepe", "floki", "bonk", "dogwifcoin"],
}


def get_token_category(coingecko_id: str) -> str | None:
    """
    Look up the sector of a token.

    A token listed under several sectors gets the first one in table order.
    """
    for category, ids in TOKEN_CATEGORIES.items():
        if coingecko_id in ids:
            return category
    return None
