"""
Management command to seed the catalog with sample products.

Usage:
    python manage.py seed_products
    python manage.py seed_products --clear  # Clear existing data first
    python manage.py seed_products --products 200
"""
import random
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from catalog.models import Product

PRODUCT_TEMPLATES = {
    Product.Category.FRAMES: ['Photo Frame', 'Collage Frame', 'Mirror Frame', 'Resin Frame'],
    Product.Category.WALL_HANGING: ['Macrame Hanging', 'Dreamcatcher', 'Bell Chime', 'Toran'],
    Product.Category.BAG: ['Jute Tote', 'Embroidered Clutch', 'Block Print Sling', 'Potli Bag'],
    Product.Category.PEN_STAND: ['Bamboo Pen Stand', 'Terracotta Holder', 'Painted Desk Cup'],
    Product.Category.JEWELLERY: ['Quilled Earrings', 'Beaded Necklace', 'Thread Bangles', 'Clay Pendant'],
    Product.Category.DIYAS: ['Clay Diya', 'Painted Diya Set', 'Floating Diya', 'Brass Diya'],
    Product.Category.BOTTLE_ART: ['Mandala Bottle', 'Lippan Bottle', 'Fairy Light Bottle'],
}

ADJECTIVES = ['Handmade', 'Classic', 'Festive', 'Rustic', 'Pastel', 'Royal', 'Mini', 'Large']


class Command(BaseCommand):
    help = 'Seed the catalog with sample products across every category'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete orders and products before seeding',
        )
        parser.add_argument(
            '--products',
            type=int,
            default=100,
            help='Number of products to create (default: 100)',
        )
        parser.add_argument(
            '--seed',
            type=int,
            default=None,
            help='Random seed for reproducible data',
        )

    def handle(self, *args, **options):
        if options['seed'] is not None:
            random.seed(options['seed'])

        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self._clear_data()

        self.stdout.write('Starting catalog seeding...')

        with transaction.atomic():
            created = self._create_products(options['products'])

        self.stdout.write(self.style.SUCCESS(f'Created {created} products'))

    def _clear_data(self):
        from orders.models import Order

        Order.objects.all().delete()
        Product.objects.all().delete()

        self.stdout.write(self.style.WARNING('All existing data cleared.'))

    def _create_products(self, count):
        categories = list(PRODUCT_TEMPLATES)
        products = []

        for i in range(count):
            category = categories[i % len(categories)]
            base_name = random.choice(PRODUCT_TEMPLATES[category])
            quantity = random.choice([0, 0, 5, 10, 25, 50, 100])
            products.append(Product(
                name=f'{random.choice(ADJECTIVES)} {base_name}',
                category=category,
                price=Decimal(random.randint(50, 2500)),
                offer=Decimal(random.choice([0, 0, 5, 10, 15, 25])),
                quantity=quantity,
                status=Product.derived_status(quantity),
            ))

        Product.objects.bulk_create(products, batch_size=500)
        return len(products)
