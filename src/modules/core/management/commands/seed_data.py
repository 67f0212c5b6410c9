from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.transactions.exceptions import TransactionError
from modules.transactions.repositories.django_repository import (
    TransactionDjangoRepository,
)
from modules.transactions.services import TransactionService


class Command(BaseCommand):
    help = "Seed database with development customers, products and transactions."

    def add_arguments(self, parser):
        parser.add_argument(
            "--transactions",
            type=int,
            default=30,
            help="Number of transactions to attempt (default: 30).",
        )

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        customers = self._seed_customers()
        products = self._seed_products()
        created, rejected = self._seed_transactions(
            customers, products, options["transactions"]
        )

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"customers={len(customers)}, "
                f"products={len(products)}, "
                f"transactions={created}, "
                f"rejected={rejected}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="cashier").exists():
            User.objects.create_user("cashier", password="cashier123")
            created += 1
        return created

    def _seed_customers(self) -> list[Customer]:
        seed_customers = [
            ("Ana Souza", "ana@example.com"),
            ("Bruno Lima", "bruno@example.com"),
            ("Carla Mendes", "carla@example.com"),
            ("Daniel Costa", "daniel@example.com"),
            ("Helena Ferreira", "helena@example.com"),
        ]
        repo = CustomerDjangoRepository()
        customers: list[Customer] = []
        for name, email in seed_customers:
            customer = repo.get_by_email(email) or repo.save(
                Customer(name=name, email=email)
            )
            customers.append(customer)
        return customers

    def _seed_products(self) -> list[Product]:
        catalog = [
            ("ELET-001", "Monitor 27\"", Decimal("1299.90")),
            ("ELET-002", "Mechanical Keyboard", Decimal("399.90")),
            ("ELET-003", "Gaming Mouse", Decimal("249.90")),
            ("MOV-001", "Office Desk", Decimal("899.00")),
            ("MOV-002", "Ergonomic Chair", Decimal("1499.00")),
            ("OFF-001", "A4 Paper", Decimal("29.90")),
            ("OFF-002", "Blue Pen", Decimal("4.90")),
            ("OFF-003", "Notebook", Decimal("19.90")),
        ]
        repo = ProductDjangoRepository()
        products: list[Product] = []
        for sku, name, price in catalog:
            stock = random.randint(0, 40)
            product = repo.get_by_sku(sku) or repo.save(
                Product(sku=sku, name=name, price=price, stock_quantity=stock)
            )
            products.append(product)
        return products

    def _seed_transactions(
        self, customers: list[Customer], products: list[Product], count: int
    ) -> tuple[int, int]:
        """Create transactions through the real service, stock rules included."""
        if not customers or not products:
            self.stdout.write(
                self.style.WARNING("Skipping transactions (no customers/products).")
            )
            return 0, 0

        service = TransactionService(
            transaction_repository=TransactionDjangoRepository(),
            customer_repository=CustomerDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )
        created = rejected = 0
        for _ in range(count):
            picked = random.sample(products, k=random.randint(1, min(3, len(products))))
            payload = {
                "customer_id": str(random.choice(customers).id),
                "items": [
                    {"product_id": str(p.id), "quantity": random.randint(1, 4)}
                    for p in picked
                ],
            }
            try:
                service.create_transaction(payload)
            except TransactionError as exc:
                rejected += 1
                self.stdout.write(f"  rejected: {exc.message}")
                continue
            created += 1
        return created, rejected
