from __future__ import annotations

import random
from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.accounts.constants import UserRole
from modules.accounts.models import User
from modules.catalog.models import Category, Product, ProductCustomization
from modules.orders.constants import OrderSource, OrderStatus
from modules.orders.dtos import CartItemDTO, CreateOrderDTO
from modules.orders.models import Order
from modules.orders.views import build_order_service

STAFF_USERS = [
    ("admin@matchacafe.test", "Cafe Admin", UserRole.ADMIN, "admin12345"),
    ("barista@matchacafe.test", "Head Barista", UserRole.BARISTA, "barista12345"),
    ("kiosk@matchacafe.test", "Front Kiosk", UserRole.KIOSK, "kiosk12345"),
    ("member@matchacafe.test", "Sample Member", UserRole.MEMBER, "member12345"),
]

CATALOG = {
    ("Matcha", "matcha"): [
        ("Matcha Latte", "matcha-latte", Decimal("45000"), True),
        ("Iced Matcha", "iced-matcha", Decimal("42000"), True),
        ("Matcha Espresso Fusion", "matcha-espresso-fusion", Decimal("52000"), True),
    ],
    ("Coffee", "coffee"): [
        ("Americano", "americano", Decimal("30000"), True),
        ("Cafe Latte", "cafe-latte", Decimal("38000"), True),
    ],
    ("Pastry", "pastry"): [
        ("Butter Croissant", "butter-croissant", Decimal("28000"), False),
        ("Matcha Cookie", "matcha-cookie", Decimal("18000"), False),
    ],
}

DRINK_OPTIONS = [
    ("size", "Regular", Decimal("0")),
    ("size", "Large", Decimal("5000")),
    ("milk", "Oat Milk", Decimal("7000")),
    ("sugar", "Less Sugar", Decimal("0")),
    ("extra", "Extra Matcha Shot", Decimal("10000")),
]


class Command(BaseCommand):
    help = "Seed database with staff accounts, a cafe catalog and sample orders."

    def add_arguments(self, parser):
        parser.add_argument(
            "--orders",
            type=int,
            default=10,
            help="Number of sample orders to place (default: 10).",
        )

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        products = self._seed_catalog()
        orders_created = self._seed_orders(products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        created = 0
        for email, full_name, role, password in STAFF_USERS:
            if User.objects.filter(email=email).exists():
                continue
            if role == UserRole.ADMIN:
                User.objects.create_superuser(email, password, full_name=full_name)
            else:
                User.objects.create_user(
                    email, password, full_name=full_name, role=role
                )
            created += 1
        return created

    def _seed_catalog(self) -> list[Product]:
        self.stdout.write("Creating catalog...")
        products: list[Product] = []
        for position, ((category_name, category_slug), items) in enumerate(CATALOG.items()):
            category, _ = Category.objects.get_or_create(
                slug=category_slug,
                defaults={"name": category_name, "display_order": position},
            )
            for order, (name, slug, price, customizable) in enumerate(items):
                product, created = Product.objects.get_or_create(
                    slug=slug,
                    defaults={
                        "name": name,
                        "category": category,
                        "base_price": price,
                        "display_order": order,
                        "is_customizable": customizable,
                    },
                )
                if created and customizable:
                    ProductCustomization.objects.bulk_create(
                        [
                            ProductCustomization(
                                product=product,
                                customization_type=kind,
                                option_name=option,
                                price_modifier=modifier,
                                display_order=index,
                            )
                            for index, (kind, option, modifier) in enumerate(DRINK_OPTIONS)
                        ]
                    )
                products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating catalog... Done!"))
        return products

    def _seed_orders(self, products: list[Product], count: int) -> int:
        self.stdout.write("Creating orders...")
        if Order.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        products = list(
            Product.objects.alive()
            .filter(id__in=[p.id for p in products])
            .prefetch_related("customizations")
        )
        member = User.objects.filter(role=UserRole.MEMBER).first()
        service = build_order_service()
        progressions = [
            [],
            [OrderStatus.PREPARING],
            [OrderStatus.PREPARING, OrderStatus.READY],
            [OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.COMPLETED],
            [OrderStatus.CANCELLED],
        ]

        for i in range(count):
            items = []
            for product in random.sample(products, k=random.randint(1, 3)):
                options = list(product.customizations.all())
                chosen = random.sample(options, k=min(len(options), random.randint(0, 2)))
                items.append(
                    CartItemDTO(
                        product_id=product.id,
                        quantity=random.randint(1, 3),
                        customization_ids=[c.id for c in chosen],
                    )
                )

            if member is not None and i % 2 == 0:
                dto = CreateOrderDTO(
                    items=items, source=OrderSource.MEMBER, user_id=member.id
                )
            else:
                dto = CreateOrderDTO(
                    items=items,
                    source=random.choice([OrderSource.GUEST, OrderSource.KIOSK]),
                    customer_name=f"Walk-in {i + 1}",
                )
            order = service.create_order(dto)

            for status in random.choice(progressions):
                service.update_status(order.id, status, notes="Seed data")

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return count
