"""Catálogo de plataformas de e-commerce soportadas por el proveedor."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SupportedPlatform:
    id: str
    url: str
    category: str


PLATFORM_CATEGORIES = (
    "Major Marketplace",
    "E-commerce Platform",
    "Apparel & Fashion",
    "Outdoor & Lifestyle",
    "Accessories",
    "Electronics",
    "Other",
)

SUPPORTED_PLATFORMS = (
    SupportedPlatform("amazon", "amazon.com", "Major Marketplace"),
    SupportedPlatform("ebay", "ebay.com", "Major Marketplace"),
    SupportedPlatform("etsy", "etsy.com", "Major Marketplace"),
    SupportedPlatform("aliexpress", "aliexpress.com", "Major Marketplace"),
    SupportedPlatform("temu", "temu.com", "Major Marketplace"),
    SupportedPlatform("shopify", "shopify.com", "E-commerce Platform"),
    SupportedPlatform("myshopify", "myshopify.com", "E-commerce Platform"),
    SupportedPlatform("aloyoga", "aloyoga.com", "Apparel & Fashion"),
    SupportedPlatform("bombas", "bombas.com", "Apparel & Fashion"),
    SupportedPlatform("mackweldon", "mackweldon.com", "Apparel & Fashion"),
    SupportedPlatform("meundies", "meundies.com", "Apparel & Fashion"),
    SupportedPlatform("mizzenandmain", "mizzenandmain.com", "Apparel & Fashion"),
    SupportedPlatform("tenthousand", "tenthousand.com", "Apparel & Fashion"),
    SupportedPlatform("birdygrey", "birdygrey.com", "Apparel & Fashion"),
    SupportedPlatform("fairharborclothing", "fairharborclothing.com", "Apparel & Fashion"),
    SupportedPlatform("coolibar", "coolibar.com", "Outdoor & Lifestyle"),
    SupportedPlatform("coldwatercreek", "coldwatercreek.com", "Outdoor & Lifestyle"),
    SupportedPlatform("popsockets", "popsockets.com", "Accessories"),
    SupportedPlatform("whoop", "whoop.com", "Electronics"),
    SupportedPlatform("myib", "myib.com", "Other"),
    SupportedPlatform("ocgsc", "ocgsc.com", "Other"),
)


def get_platform(platform_id: str) -> SupportedPlatform | None:
    return next((p for p in SUPPORTED_PLATFORMS if p.id == platform_id), None)


def platforms_by_category(category: str) -> list[SupportedPlatform]:
    return [p for p in SUPPORTED_PLATFORMS if p.category == category]
