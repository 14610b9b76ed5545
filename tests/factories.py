"""Row and payload builders shared by the test modules."""
import io
from types import SimpleNamespace

from PIL import Image

from portfolio_site.models import PortfolioCategory, PortfolioMedia, SiteSection


def make_category(**overrides) -> PortfolioCategory:
    values = {
        "name_ru": "Портреты",
        "name_en": "Portraits",
        "slug": "portraits",
        "order_index": 0,
    }
    values.update(overrides)
    return PortfolioCategory(**values)


def make_media(category_id: int, **overrides) -> PortfolioMedia:
    values = {
        "category_id": category_id,
        "media_url": "https://res.cloudinary.com/demo/image/upload/v1/portfolio/a.webp",
        "order_index": 0,
        "media_type": "image",
    }
    values.update(overrides)
    return PortfolioMedia(**values)


def make_section(**overrides) -> SiteSection:
    values = {"key": "about", "order_index": 0}
    values.update(overrides)
    return SiteSection(**values)


def media_dict(item_id: int, media_type: str = "image", **extra) -> dict:
    item = {
        "id": item_id,
        "media_url": f"https://cdn.example.com/{item_id}",
        "media_type": media_type,
        "title_ru": f"Работа {item_id}",
        "title_en": f"Work {item_id}",
        "description_ru": None,
        "description_en": None,
    }
    item.update(extra)
    return item


def category_stub(category_id: int, name_en: str, cover=None) -> SimpleNamespace:
    return SimpleNamespace(
        id=category_id,
        slug=name_en.lower(),
        name_ru=f"{name_en} (ru)",
        name_en=name_en,
        main_image_url=cover,
    )


def png_bytes(size=(8, 8), color=(200, 30, 90)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()
