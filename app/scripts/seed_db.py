"""
Script para poblar la base de datos con datos de ejemplo.

Uso (desde app/):
    python -m scripts.seed_db
"""
from decimal import Decimal

from core.database import SessionLocal
from core.catalog_service import create_category, create_product, reconcile_category_counts
from core.dependencies import ROLE_ADMIN
from core.slugs import slugify
from core.user_service import create_user
from models import User, Category, Product
from schemas.products import CategoryCreate, ProductCreate

PEXELS_IMAGE = "https://images.pexels.com/photos/{}/pexels-photo-{}.jpeg?auto=compress&cs=tinysrgb&w=800&h=800&fit=crop"

CATEGORIES = [
    ("Artículos Publicitarios", "Artículos promocionales con el logo de tu empresa", "megaphone"),
    ("Regalos Premium", "Regalos ejecutivos para ocasiones especiales", "gift"),
    ("Mug, Vasos, Botellas y Termos", "Todo para bebidas frías y calientes", "coffee"),
    ("The Green Life", "Productos ecológicos y sustentables", "leaf"),
]

# (categoría, productId, nombre, descripción, cantidad, precio, foto pexels, destacado)
PRODUCTS = [
    (0, "PROD-001", "Kit Corporativo Ejecutivo",
     "Set de libreta, bolígrafo y accesorios de escritorio para eventos empresariales.",
     100, Decimal("15990"), 6457579, True),
    (1, "PROD-002", "Caja de Regalo Premium",
     "Caja de regalo con diseño premium y personalización con logo.",
     50, Decimal("24990"), 264985, True),
    (2, "PROD-003", "Botella Térmica Personalizada",
     "Botella de acero inoxidable de 500ml, disponible para grabado láser.",
     200, Decimal("8990"), 4397840, True),
    (3, "PROD-004", "Set Eco-Friendly Bambú",
     "Libreta, bolígrafo y lápiz de bambú. Material sustentable.",
     150, Decimal("6990"), 7262775, False),
]


def seed_data():
    db = SessionLocal()

    try:
        print("🌱 Poblando base de datos...")

        # Categorías (se reutilizan si ya existen)
        categories = []
        for name, description, icon in CATEGORIES:
            category = db.query(Category).filter(Category.slug == slugify(name)).first()
            if category is None:
                category = create_category(db, CategoryCreate(
                    name=name,
                    description=description,
                    icon=icon,
                    order=len(categories)
                ))
            categories.append(category)
        print(f"✅ {len(categories)} categorías listas")

        created = 0
        for category_index, product_id, name, description, quantity, price, photo, featured in PRODUCTS:
            if db.query(Product.id).filter(Product.product_id == product_id).first():
                continue
            create_product(db, ProductCreate(
                product_id=product_id,
                name=name,
                description=description,
                category=categories[category_index].id,
                quantity=quantity,
                price=price,
                image=PEXELS_IMAGE.format(photo, photo),
                featured=featured
            ))
            created += 1
        print(f"✅ {created} productos creados")

        if not db.query(User.id).filter(User.email == "admin@suvenirs.cl").first():
            admin = create_user(
                db,
                email="admin@suvenirs.cl",
                password="admin123",
                first_name="Admin",
                last_name="Suvenirs",
                role=ROLE_ADMIN,
                is_verified=True
            )
            print(f"✅ Usuario admin creado (ID: {admin.id}, email: admin@suvenirs.cl / admin123)")

        print("📊 Actualizando conteo de productos por categoría...")
        reconcile_category_counts(db)

        print("\n🎉 Base de datos poblada exitosamente!")

    except Exception as e:
        print(f"❌ Error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_data()
