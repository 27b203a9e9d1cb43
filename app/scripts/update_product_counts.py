"""
Recalcular productCount de todas las categorías.

Uso (desde app/):
    python -m scripts.update_product_counts
    python -m scripts.update_product_counts --assign-orphans
"""
import argparse

from core.database import SessionLocal
from core.catalog_service import reconcile_category_counts


def update_product_counts(assign_orphans: bool = False):
    db = SessionLocal()

    try:
        print("🔄 Recalculando productos por categoría...")
        result = reconcile_category_counts(db, assign_orphans=assign_orphans)

        if assign_orphans:
            print(f"📦 Productos sin categoría asignados: {result['orphansAssigned']}")

        print(f"📊 Categorías actualizadas: {result['categories']}")
        for code, count in sorted(result["counts"].items()):
            print(f"   {code}: {count} productos")

        empty = result["categories"] - len(result["counts"])
        print(f"\n✅ Listo. Categorías sin productos: {empty}")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Recalcular el conteo de productos por categoría")
    parser.add_argument(
        "--assign-orphans",
        action="store_true",
        help="Asignar una categoría raíz al azar a los productos sin categoría"
    )
    args = parser.parse_args()
    update_product_counts(assign_orphans=args.assign_orphans)
