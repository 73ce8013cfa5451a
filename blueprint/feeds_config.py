# Public Nitter instances, tried in this order
DEFAULT_NITTER_INSTANCES = [
    "https://nitter.privacydev.net",
    "https://nitter.poast.org",
    "https://nitter.lucabased.xyz",
    "https://nitter.moomoo.me",
    "https://nitter.net",
]

NITTER_FEED_TEMPLATE = "{instance}/{handle}/rss"

# Gemini fallback matrix: every model is tried under v1 before moving to v1beta
DEFAULT_GEMINI_API_VERSIONS = ["v1", "v1beta"]

DEFAULT_GEMINI_MODELS = [
    "gemini-2.0-flash",
    "gemini-1.5-flash",
    "gemini-1.5-pro",
    "gemini-pro",
]

AVATAR_FALLBACK_TEMPLATE = "https://unavatar.io/twitter/{handle}"
