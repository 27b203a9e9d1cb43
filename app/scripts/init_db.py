"""
Script para inicializar la base de datos.
Crea todas las tablas definidas en models/

Uso (desde app/):
    python -m scripts.init_db
    python -m scripts.init_db --drop   # elimina y vuelve a crear
"""
import argparse

from core.database import engine, Base
import models  # noqa: F401  (registra todas las tablas en Base.metadata)


def init_db():
    """Crear todas las tablas en la base de datos"""
    print("🔨 Creando tablas en la base de datos...")
    Base.metadata.create_all(bind=engine)
    print("✅ Tablas creadas exitosamente!")
    print("\n📋 Tablas disponibles:")
    tables = sorted(Base.metadata.tables)
    for index, table in enumerate(tables):
        prefix = "└──" if index == len(tables) - 1 else "├──"
        print(f"   {prefix} {table}")


def drop_db():
    """Eliminar todas las tablas de la base de datos"""
    print("⚠️  Eliminando todas las tablas...")
    Base.metadata.drop_all(bind=engine)
    print("✅ Tablas eliminadas!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Crear las tablas de la base de datos")
    parser.add_argument("--drop", action="store_true", help="Eliminar las tablas antes de crearlas")
    args = parser.parse_args()

    if args.drop:
        drop_db()
    init_db()
