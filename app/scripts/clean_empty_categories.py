"""
Eliminar categorías vacías: sin productos asociados y sin subcategorías.

Uso (desde app/):
    python -m scripts.clean_empty_categories --dry-run
    python -m scripts.clean_empty_categories
"""
import argparse
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.database import SessionLocal
from models.products import Category, Product


def find_empty_categories(db: Session) -> List[Category]:
    """Categorías sin productos que las referencien y sin hijas."""
    with_products = select(Product.category_id).where(Product.category_id.isnot(None))
    with_children = (
        select(Category.parent_id)
        .where(Category.parent_id.isnot(None))
        .correlate(None)
    )

    return db.query(Category).filter(
        Category.id.notin_(with_products),
        Category.id.notin_(with_children)
    ).order_by(Category.name.asc()).all()


def clean_empty_categories(db: Session, dry_run: bool = False) -> int:
    total = db.query(Category).count()
    print(f"📊 Total de categorías: {total}")

    empty = find_empty_categories(db)
    print(f"🔍 Categorías sin productos: {len(empty)}\n")

    if not empty:
        print("✅ No hay categorías vacías")
        return 0

    print("📋 Categorías a eliminar:")
    for index, category in enumerate(empty, start=1):
        print(f"   {index}. {category.name} (ID: {category.code})")

    if dry_run:
        print("\n⚠️  Modo --dry-run: no se eliminó nada")
        return 0

    print("\n🗑️  Eliminando categorías vacías...")
    for category in empty:
        db.delete(category)
    db.commit()

    print(f"\n✅ {len(empty)} categorías eliminadas")
    print(f"   Categorías restantes: {db.query(Category).count()}")
    return len(empty)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Eliminar categorías sin productos ni subcategorías")
    parser.add_argument("--dry-run", action="store_true", help="Solo listar, sin eliminar")
    args = parser.parse_args()

    session = SessionLocal()
    try:
        clean_empty_categories(session, dry_run=args.dry_run)
    finally:
        session.close()
