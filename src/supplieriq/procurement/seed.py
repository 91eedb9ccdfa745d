"""
Demo data: eight suppliers across metals, electronics and plastics with a
small order, issue and rating history.

Metals is the interesting category: SteelPro is the strong incumbent,
MetalWorks is good with one late delivery, Global Metals is late and has
issues, and AlumniCorp is new with a single order.
"""

from datetime import date
from decimal import Decimal

from supplieriq.kernel.logging import get_logger
from supplieriq.procurement.models import (
    IssueSeverity,
    IssueType,
    OrderStatus,
    PurchaseOrder,
    Supplier,
    SupplierIssue,
    SupplierRating,
)
from supplieriq.procurement.sqlite_store import SQLiteStore
from supplieriq.procurement.stores import InMemoryStore

logger = get_logger(__name__)

# (name, category, region, description)
SUPPLIERS = [
    ("SteelPro Industries", "metals", "DE", "Premium steel and aluminum supplier in Germany"),
    ("MetalWorks GmbH", "metals", "DE", "Specialized in aluminum casings and metal parts"),
    ("Global Metals Ltd", "metals", "UK", "International metals supplier"),
    ("AlumniCorp", "metals", "US", "US-based aluminum manufacturer"),
    ("TechParts Asia", "electronics", "CN", "Electronic components manufacturer"),
    ("CircuitBoard Pro", "electronics", "DE", "German electronics supplier"),
    ("PolymerTech", "plastics", "DE", "Industrial plastics and polymers"),
    ("PlastiCo International", "plastics", "US", "US plastics manufacturer"),
]

# (supplier, category, quantity, unit price, expected delivery, actual delivery)
ORDERS = [
    ("SteelPro Industries", "metals", 5000, "2.50", "2024-01-15", "2024-01-14"),
    ("SteelPro Industries", "metals", 8000, "2.40", "2024-02-20", "2024-02-18"),
    ("SteelPro Industries", "metals", 10000, "2.30", "2024-03-10", "2024-03-10"),
    ("SteelPro Industries", "metals", 7500, "2.45", "2024-04-05", "2024-04-04"),
    ("SteelPro Industries", "metals", 12000, "2.35", "2024-05-15", "2024-05-15"),
    ("MetalWorks GmbH", "metals", 3000, "2.80", "2024-01-20", "2024-01-22"),
    ("MetalWorks GmbH", "metals", 5000, "2.70", "2024-02-25", "2024-02-24"),
    ("MetalWorks GmbH", "metals", 6000, "2.75", "2024-04-10", "2024-04-09"),
    ("Global Metals Ltd", "metals", 4000, "2.20", "2024-02-01", "2024-02-05"),
    ("Global Metals Ltd", "metals", 5000, "2.60", "2024-03-15", "2024-03-20"),
    ("Global Metals Ltd", "metals", 3500, "2.40", "2024-04-20", "2024-04-19"),
    ("AlumniCorp", "metals", 2000, "2.90", "2024-05-01", "2024-05-01"),
    ("TechParts Asia", "electronics", 10000, "0.50", "2024-03-01", "2024-03-01"),
    ("TechParts Asia", "electronics", 15000, "0.45", "2024-04-01", "2024-04-03"),
]

# (supplier, type, severity, description, resolved at)
ISSUES = [
    ("Global Metals Ltd", IssueType.DELIVERY, IssueSeverity.MEDIUM,
     "Shipment arrived 5 days late due to logistics issues", "2024-02-10"),
    ("Global Metals Ltd", IssueType.QUALITY, IssueSeverity.LOW,
     "Minor surface defects on 2% of batch", "2024-03-25"),
    ("MetalWorks GmbH", IssueType.COMMUNICATION, IssueSeverity.LOW,
     "Delayed response to order confirmation", "2024-01-25"),
    ("TechParts Asia", IssueType.DELIVERY, IssueSeverity.LOW,
     "Customs delay caused late delivery", "2024-04-05"),
]

# (supplier, rating, comment, category)
RATINGS = [
    ("SteelPro Industries", 5.0, "Excellent quality and on-time delivery", "metals"),
    ("SteelPro Industries", 4.8, "Great service, competitive pricing", "metals"),
    ("SteelPro Industries", 4.9, "Reliable partner for large orders", "metals"),
    ("MetalWorks GmbH", 4.2, "Good quality products", "metals"),
    ("MetalWorks GmbH", 4.0, "Decent service, slight delays sometimes", "metals"),
    ("Global Metals Ltd", 3.5, "Competitive pricing but delivery issues", "metals"),
    ("Global Metals Ltd", 3.0, "Quality inconsistent between batches", "metals"),
    ("AlumniCorp", 4.5, "Promising new supplier", "metals"),
    ("TechParts Asia", 4.3, "Good quality electronics components", "electronics"),
    ("TechParts Asia", 4.0, "Reliable for bulk orders", "electronics"),
    ("CircuitBoard Pro", 4.7, "High quality German engineering", "electronics"),
    ("PolymerTech", 4.4, "Reliable plastics supplier", "plastics"),
]


async def seed_demo_data(store: InMemoryStore | SQLiteStore) -> dict[str, int]:
    """
    Load the demo data set into a store

    Args:
        store: Store to load into

    Returns:
        Record counts per type
    """
    ids: dict[str, str] = {}
    for name, category, region, description in SUPPLIERS:
        supplier = await store.add_supplier(
            Supplier(name=name, category=category, region=region, description=description)
        )
        ids[name] = supplier.supplier_id

    for name, category, quantity, unit_price, expected, actual in ORDERS:
        await store.add_order(
            PurchaseOrder(
                supplier_id=ids[name],
                category=category,
                quantity=quantity,
                unit_price=Decimal(unit_price),
                status=OrderStatus.DELIVERED,
                expected_delivery_date=date.fromisoformat(expected),
                actual_delivery_date=date.fromisoformat(actual),
            )
        )

    for name, issue_type, severity, description, resolved_at in ISSUES:
        await store.add_issue(
            SupplierIssue(
                supplier_id=ids[name],
                issue_type=issue_type,
                severity=severity,
                description=description,
                resolved=True,
                resolved_at=date.fromisoformat(resolved_at),
            )
        )

    for name, rating, comment, category in RATINGS:
        await store.add_rating(
            SupplierRating(supplier_id=ids[name], rating=rating, comment=comment, category=category)
        )

    counts = {
        "suppliers": len(SUPPLIERS),
        "orders": len(ORDERS),
        "issues": len(ISSUES),
        "ratings": len(RATINGS),
    }
    logger.info("Demo data seeded", **counts)
    return counts
