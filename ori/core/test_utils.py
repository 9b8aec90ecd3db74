"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from ori.core.models import Role, Team
from ori.catalog.models import Category, Product, ProductLot
from ori.inventory.models import Location
from ori.inventory.services import record_move
from ori.crm.models import Company, Contact, Prospect
from ori.sales.models import Quote, SalesOrder
from ori.sales.services import save_quote
from ori.purchasing.models import Supplier, PurchaseOrder, PurchaseOrderItem
from ori.purchasing.services import generate_po_folio
from ori.logistics.models import Carrier
from ori.billing.models import Invoice
from ori.tasks.models import Task
from ori.prospecting.models import Candidate
from ori.communication.models import EmailAccount
from decimal import Decimal
from datetime import timedelta
from django.utils import timezone
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False,
                    role=None, team=None):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser,
            role=role,
            team=team,
        )

    @staticmethod
    def create_role(name=None, data_scope='all', permissions=None):
        if not name:
            name = f'Role_{TestDataFactory.random_string(6)}'
        return Role.objects.create(name=name, data_scope=data_scope, permissions=permissions or {})

    @staticmethod
    def create_team(name=None):
        if not name:
            name = f'Team_{TestDataFactory.random_string(6)}'
        return Team.objects.create(name=name)

    @staticmethod
    def create_category(name=None, code=None):
        """Create a test category"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        if not code:
            code = TestDataFactory.random_string(4).upper()
        return Category.objects.create(name=name, code=code)

    @staticmethod
    def create_product(name=None, sku=None, category=None, unit='kg', reorder_point=Decimal('0'), max_stock=None):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if not sku:
            sku = f'SKU-{TestDataFactory.random_string(8).upper()}'
        if not category:
            category = TestDataFactory.create_category()
        return Product.objects.create(
            name=name,
            sku=sku,
            category=category,
            unit_default=unit,
            reorder_point=reorder_point,
            max_stock=max_stock,
        )

    @staticmethod
    def create_lot(product=None, code=None, unit_cost=Decimal('10.00'), unit='kg', status='disponible'):
        """Create a lot without stock; use add_stock to place quantities"""
        if not product:
            product = TestDataFactory.create_product()
        if not code:
            code = f'LOT-{TestDataFactory.random_string(6).upper()}'
        return ProductLot.objects.create(product=product, code=code, unit_cost=unit_cost, unit=unit, status=status)

    @staticmethod
    def create_location(name=None, code=None, type='warehouse'):
        if not name:
            name = f'Bodega_{TestDataFactory.random_string(6)}'
        if not code:
            code = f'LOC-{TestDataFactory.random_string(6).upper()}'
        return Location.objects.create(name=name, code=code, type=type)

    @staticmethod
    def add_stock(lot, location, qty, user=None):
        """Place stock through an 'in' move so balances and ledger agree"""
        return record_move('in', lot, Decimal(str(qty)), user=user, to_location=location, reference='test')

    @staticmethod
    def create_company(name=None, owner=None, stage='investigacion', **kwargs):
        if not name:
            name = f'Empresa_{TestDataFactory.random_string(6)}'
        return Company.objects.create(name=name, owner=owner, stage=stage, **kwargs)

    @staticmethod
    def create_contact(company=None, name=None, email=None, owner=None):
        if not name:
            name = f'Contacto_{TestDataFactory.random_string(6)}'
        return Contact.objects.create(company=company, name=name, email=email or f'{name.lower()}@test.com',
                                      owner=owner)

    @staticmethod
    def create_prospect(name=None, owner=None, stage='nuevo_lead', est_value=Decimal('0'), **kwargs):
        if not name:
            name = f'Prospecto_{TestDataFactory.random_string(6)}'
        return Prospect.objects.create(name=name, owner=owner, created_by=owner, stage=stage,
                                       est_value=est_value, **kwargs)

    @staticmethod
    def create_quote(company=None, prospect=None, salesperson=None, items=None, status='borrador', **kwargs):
        """Create a quote with totals computed through save_quote"""
        if company is None and prospect is None:
            company = TestDataFactory.create_company()
        quote = Quote(
            company=company,
            prospect=prospect,
            salesperson=salesperson,
            created_by=salesperson,
            status=status,
            items=items if items is not None else [
                {'product_name': 'Resina', 'qty': '2', 'unit': 'ton', 'unit_price': '1000.00'},
            ],
            **kwargs
        )
        return save_quote(quote, user=salesperson, action='create')

    @staticmethod
    def create_sales_order(company=None, salesperson=None, items=None, total=Decimal('1160.00'), status='pendiente',
                           folio=None):
        if company is None:
            company = TestDataFactory.create_company()
        if not folio:
            folio = f'OV-{TestDataFactory.random_string(10).upper()}'
        return SalesOrder.objects.create(
            folio=folio,
            company=company,
            salesperson=salesperson,
            status=status,
            items=items if items is not None else [{'product_name': 'Resina', 'qty': '10', 'unit': 'ton'}],
            total=total,
        )

    @staticmethod
    def create_supplier(name=None, rating='bueno'):
        if not name:
            name = f'Proveedor_{TestDataFactory.random_string(6)}'
        return Supplier.objects.create(name=name, rating=rating)

    @staticmethod
    def create_purchase_order(supplier=None, user=None, status='borrador', items=None):
        """Create a purchase order; items are (product, qty, unit_cost) tuples"""
        if supplier is None:
            supplier = TestDataFactory.create_supplier()
        po = PurchaseOrder.objects.create(
            folio=generate_po_folio(),
            supplier=supplier,
            status=status,
            responsible=user,
            created_by=user,
        )
        for product, qty, unit_cost in items or []:
            PurchaseOrderItem.objects.create(
                purchase_order=po,
                product=product,
                custom_name='' if product else 'Servicio',
                qty=Decimal(str(qty)),
                unit=product.unit_default if product else 'unidad',
                unit_cost=Decimal(str(unit_cost)),
            )
        po.recalculate_totals()
        return po

    @staticmethod
    def create_carrier(name=None, tracking_url_template=''):
        if not name:
            name = f'Transportista_{TestDataFactory.random_string(6)}'
        return Carrier.objects.create(name=name, tracking_url_template=tracking_url_template)

    @staticmethod
    def create_invoice(company=None, total=Decimal('1160.00'), status='enviada', due_date=None, number=None,
                       user=None):
        if company is None:
            company = TestDataFactory.create_company()
        if not number:
            number = f'F-TEST-{TestDataFactory.random_string(6).upper()}'
        return Invoice.objects.create(
            number=number,
            company=company,
            status=status,
            due_date=due_date or timezone.localdate() + timedelta(days=30),
            subtotal=(total / Decimal('1.16')).quantize(Decimal('0.01')),
            tax=total - (total / Decimal('1.16')).quantize(Decimal('0.01')),
            total=total,
            created_by=user,
        )

    @staticmethod
    def create_task(title=None, created_by=None, assignees=None, status='por_hacer', due_at=None, **kwargs):
        if not title:
            title = f'Tarea_{TestDataFactory.random_string(6)}'
        task = Task.objects.create(title=title, created_by=created_by, status=status, due_at=due_at, **kwargs)
        if assignees:
            task.assignees.set(assignees)
        return task

    @staticmethod
    def create_candidate(name=None, place_id=None, status='pendiente', **kwargs):
        if not name:
            name = f'Candidato_{TestDataFactory.random_string(6)}'
        return Candidate.objects.create(
            name=name,
            google_place_id=place_id or f'place_{TestDataFactory.random_string(12)}',
            status=status,
            **kwargs
        )

    @staticmethod
    def create_email_account(user=None, email=None, provider='imap_smtp', **kwargs):
        if user is None:
            user = TestDataFactory.create_user()
        defaults = {
            'imap_smtp': {'imap_host': 'imap.test.com', 'smtp_host': 'smtp.test.com', 'password': 'secret'},
            'nylas': {'grant_id': 'grant-123', 'api_key': 'nylas-key'},
            'mailersend': {'api_key': 'ms-key'},
        }[provider]
        defaults.update(kwargs)
        return EmailAccount.objects.create(
            user=user,
            email=email or f'{user.username}@ventas.test.com',
            display_name=user.get_display_name(),
            provider=provider,
            **defaults
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
