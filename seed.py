"""
Demo data loaded into an empty database at startup
"""
import logging
from typing import Dict, List

import config
from database import create_document, get_db
from schemas import ROLE_ADMIN, USER_ACTIVE, User as UserSchema
from security import hash_password

logger = logging.getLogger(__name__)

DEMO_PRODUCTS: List[dict] = [
    {
        "name": "Premium Wireless Headphones",
        "description": "Wireless headphones with active noise cancellation and 30-hour battery life",
        "price": 299.99,
        "image": "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=800",
        "category": "Electronics",
        "stock": 50,
        "qr_code": "QR-PROD-001",
        "metadata": {
            "production_date": "2025-12-15",
            "manufacturer": "TechAudio Inc.",
            "warranty": "2 years",
            "purpose": "Premium audio for professionals and audiophiles",
        },
    },
    {
        "name": "Smart Fitness Watch",
        "description": "Heart rate monitoring, GPS tracking, sleep analysis and 7-day battery life",
        "price": 199.99,
        "image": "https://images.unsplash.com/photo-1523275335684-37898b6baf30?w=800",
        "category": "Wearables",
        "stock": 75,
        "qr_code": "QR-PROD-002",
        "metadata": {
            "production_date": "2026-01-05",
            "manufacturer": "FitTech Solutions",
            "warranty": "1 year",
            "purpose": "Health and fitness tracking",
        },
    },
    {
        "name": "Portable Bluetooth Speaker",
        "description": "360-degree sound, IPX7 waterproof design and 12-hour playtime",
        "price": 89.99,
        "image": "https://images.unsplash.com/photo-1608043152269-423dbba4e7e1?w=800",
        "category": "Audio",
        "stock": 100,
        "qr_code": "QR-PROD-003",
        "metadata": {
            "production_date": "2025-11-20",
            "manufacturer": "SoundWave Audio",
            "warranty": "1 year",
            "purpose": "Portable audio for outdoor and indoor use",
        },
    },
]

DEFAULT_TEAM: List[dict] = [
    {
        "name": "Sarah Johnson",
        "role": "CEO & Founder",
        "bio": "Leads strategy and sets short-term and long-term goals.",
        "email": "sarah@example.com",
    },
    {
        "name": "Michael Chen",
        "role": "CTO",
        "bio": "Owns the platform, QR code tooling and the website.",
        "email": "michael@example.com",
    },
    {
        "name": "Emily Rodriguez",
        "role": "Head of Design",
        "bio": "Focused on user experience and interface design.",
        "email": "emily@example.com",
    },
    {
        "name": "David Kim",
        "role": "Product Manager",
        "bio": "Drives the catalog and customer satisfaction.",
        "email": "david@example.com",
    },
]

DEFAULT_GOALS: Dict[str, object] = {
    "mission": "To provide high-quality products that enhance daily life through technology.",
    "vision": "Becoming the most trusted storefront for tech enthusiasts.",
    "values": ["Customer First", "Innovation", "Quality", "Sustainability", "Transparency"],
}


def ensure_admin():
    if not (config.ADMIN_EMAIL and config.ADMIN_PASSWORD):
        return
    email = config.ADMIN_EMAIL.strip().lower()
    if get_db()["user"].find_one({"email": email}):
        return
    admin = UserSchema(
        name="Admin User",
        email=email,
        password_hash=hash_password(config.ADMIN_PASSWORD),
        role=ROLE_ADMIN,
        status=USER_ACTIVE,
    )
    create_document("user", admin)
    logger.info("Created bootstrap admin %s", email)


def seed_database():
    db = get_db()
    if db["product"].count_documents({}) == 0:
        for prod in DEMO_PRODUCTS:
            create_document("product", prod)
        logger.info("Seeded %d demo products", len(DEMO_PRODUCTS))
    if db["team"].count_documents({}) == 0:
        for member in DEFAULT_TEAM:
            create_document("team", member)
    if db["team_goals"].count_documents({}) == 0:
        create_document("team_goals", DEFAULT_GOALS)
    ensure_admin()
