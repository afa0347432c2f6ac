"""Internal constants shared across the library."""

BASE_URL = "https://flex-api.sharetribe.com/v1/api"
USER_AGENT = "melacache/aiohttp"

# ------------------------------------------------------------------
# Image variants requested by storefront cards
# ------------------------------------------------------------------

LISTING_CARD_VARIANTS: dict[str, str] = {
    "listing-card": "w:400;h:300;fit:crop",
    "listing-card-2x": "w:800;h:600;fit:crop",
}
BRAND_LOGO_VARIANTS: tuple[str, ...] = ("square-small", "square-small2x")

# ------------------------------------------------------------------
# Sparse fieldsets
# ------------------------------------------------------------------

LISTING_CARD_FIELDS: tuple[str, ...] = (
    "title",
    "geolocation",
    "price",
    "publicData.brand",
    "publicData.sku",
)
RECOMMENDED_LISTING_FIELDS: tuple[str, ...] = ("title", "price", "publicData", "images")
AUTHOR_FIELDS: tuple[str, ...] = ("profile.displayName", "profile.abbreviatedName")
BRAND_USER_FIELDS: tuple[str, ...] = ("profile", "metadata")
