"""
Generación de slugs para URLs amigables.

La misma función se usa para productos, categorías y posts del blog,
de modo que un nombre siempre produce el mismo slug.
"""
import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """
    "Taza Cerámica Ñuñoa 350ml" -> "taza-ceramica-nunoa-350ml"

    - minúsculas
    - sin acentos ni diacríticos
    - cualquier secuencia no alfanumérica se convierte en un guion
    - sin guiones al inicio ni al final
    """
    if not text:
        return ""
    normalized = unicodedata.normalize("NFD", text.lower())
    without_marks = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("-", without_marks).strip("-")
