"""
Product catalog

Static eyewear products and categories held in memory.
"""

from typing import Dict, List, Optional

from fastapi import HTTPException

from schemas import Category, Product

_IMG = "https://images.unsplash.com/photo-{}?w=500&q=80"

PRODUCTS: List[Product] = [
    Product(
        id="1", name="Classic Aviator Gold", category="sunglasses", brand="RayBan",
        frame_type="Metal", lens_type="Polarized", price=89.99, discount=20,
        images=[_IMG.format("1511499767150-a48a237f0083")],
        description="Timeless aviator sunglasses with premium gold frame and polarized lenses.",
        features=["UV Protection", "100% Polarized", "Scratch Resistant", "Lightweight"],
        rating=4.5, reviews=328,
    ),
    Product(
        id="2", name="Modern Rectangle Frame", category="eyeglasses", brand="Oakley",
        frame_type="Acetate", lens_type="Blue Light Filter", price=59.99, discount=15,
        images=[_IMG.format("1574258495973-f010dfbb5371")],
        description="Contemporary rectangle eyeglasses with blue light filtering lenses.",
        features=["Blue Light Protection", "Anti-Glare", "Lightweight", "Durable"],
        rating=4.8, reviews=512,
    ),
    Product(
        id="3", name="Round Vintage Sunglasses", category="sunglasses", brand="Prada",
        frame_type="Acetate", lens_type="Gradient", price=129.99, discount=25,
        images=[_IMG.format("1508296695146-257a814070b4")],
        description="Round frame sunglasses with gradient lenses for a vintage-inspired look.",
        features=["UV400 Protection", "Gradient Lenses", "Premium Acetate", "Fashion Forward"],
        rating=4.6, reviews=234,
    ),
    Product(
        id="4", name="Cat Eye Fashion Glasses", category="eyeglasses", brand="Gucci",
        frame_type="Acetate", lens_type="Clear", price=149.99, discount=10,
        images=[_IMG.format("1577803645773-f96470509666")],
        description="Elegant cat eye glasses combining vintage charm with modern style.",
        features=["Designer Frame", "Comfortable Fit", "Prescription Ready", "Stylish"],
        rating=4.7, reviews=189,
    ),
    Product(
        id="5", name="Sports Performance Sunglasses", category="sunglasses", brand="Nike",
        frame_type="Plastic", lens_type="Mirrored", price=79.99, discount=15,
        images=[_IMG.format("1473496169904-658ba7c44d8a")],
        description="High-performance sports sunglasses designed for active lifestyles.",
        features=["Impact Resistant", "Non-Slip", "UV Protection", "Wraparound Design"],
        rating=4.4, reviews=276,
    ),
    Product(
        id="6", name="Classic Wayfarer Black", category="sunglasses", brand="RayBan",
        frame_type="Acetate", lens_type="Polarized", price=99.99, discount=20,
        images=[_IMG.format("1572635196237-14b3f281503f")],
        description="Iconic wayfarer design in classic black.",
        features=["100% UV Protection", "Polarized", "Durable Frame", "Iconic Design"],
        rating=4.9, reviews=892,
    ),
    Product(
        id="7", name="Blue Light Blocking Glasses", category="eyeglasses", brand="Felix Gray",
        frame_type="Metal", lens_type="Blue Light Filter", price=69.99, discount=25,
        images=[_IMG.format("1591076482161-42ce6da69f67")],
        description="Blue light blocking lenses to reduce eye strain from digital devices.",
        features=["Blue Light Filter", "Anti-Reflective", "Clear Lenses", "All-Day Comfort"],
        rating=4.6, reviews=445,
    ),
    Product(
        id="8", name="Luxury Pilot Sunglasses", category="sunglasses", brand="Tom Ford",
        frame_type="Metal", lens_type="Gradient", price=199.99, discount=15,
        images=[_IMG.format("1583099645256-70eb52f48e3c")],
        description="Premium pilot-style sunglasses with designer details.",
        features=["UV Protection", "Gradient Lenses", "Designer Details", "Premium Build"],
        rating=4.8, reviews=156,
    ),
    Product(
        id="9", name="Daily Contact Lenses", category="contact-lenses", brand="Acuvue",
        price=89.99, discount=0,
        images=[_IMG.format("1587463272361-565200f82b33")],
        description="Daily disposable contact lenses, 30 pack.",
        features=["Daily Disposable", "UV Blocking", "Moisture Lock"],
        in_stock=False, rating=4.3, reviews=98,
    ),
]

CATEGORIES: List[Category] = [
    Category(id="eyeglasses", name="Eyeglasses", icon="👓"),
    Category(id="sunglasses", name="Sunglasses", icon="🕶️"),
    Category(id="contact-lenses", name="Contact Lenses", icon="👁️"),
]

_BY_ID: Dict[str, Product] = {p.id: p for p in PRODUCTS}


def final_price(product: Product) -> float:
    """Discounted unit price, unrounded."""
    return product.price * (1 - product.discount / 100)


def find_product(product_id: str) -> Optional[Product]:
    return _BY_ID.get(product_id)


def get_product(product_id: str) -> Product:
    product = find_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def list_products(
    category: Optional[str] = None,
    q: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    sort: Optional[str] = None,
) -> List[Product]:
    items = list(PRODUCTS)
    if category and category != "all":
        items = [p for p in items if p.category == category]
    if q:
        needle = q.lower()
        items = [
            p for p in items
            if needle in p.name.lower() or needle in p.brand.lower() or needle in p.category.lower()
        ]
    if min_price is not None:
        items = [p for p in items if final_price(p) >= min_price]
    if max_price is not None:
        items = [p for p in items if final_price(p) <= max_price]

    if sort == "price-low":
        items.sort(key=final_price)
    elif sort == "price-high":
        items.sort(key=final_price, reverse=True)
    elif sort == "rating":
        items.sort(key=lambda p: p.rating, reverse=True)
    elif sort not in (None, "featured"):
        raise HTTPException(status_code=400, detail=f"Unknown sort '{sort}'")
    return items


def list_categories() -> List[dict]:
    counts: Dict[str, int] = {}
    for p in PRODUCTS:
        counts[p.category] = counts.get(p.category, 0) + 1
    return [{**c.model_dump(), "product_count": counts.get(c.id, 0)} for c in CATEGORIES]


def product_view(product: Product) -> dict:
    """Product fields plus the rounded discounted price."""
    data = product.model_dump()
    data["final_price"] = round(final_price(product), 2)
    return data
