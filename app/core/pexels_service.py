"""
Cliente de la API de Pexels para buscar imágenes de stock.
Solo lo usan los administradores al editar productos, categorías y posts.
"""
import logging
from typing import Optional, Dict, Any

import httpx

from core.config import settings

logger = logging.getLogger(__name__)


def normalize_photos(result: Dict[str, Any]) -> Dict[str, Any]:
    """Reducir la respuesta de Pexels a los campos que usa el panel."""
    return {
        "photos": [
            {
                "id": photo.get("id"),
                "url": photo.get("src", {}).get("medium"),
                "urls": {
                    "original": photo.get("src", {}).get("original"),
                    "large": photo.get("src", {}).get("large"),
                    "medium": photo.get("src", {}).get("medium"),
                    "small": photo.get("src", {}).get("small"),
                },
                "alt": photo.get("alt"),
                "photographer": photo.get("photographer"),
                "photographerUrl": photo.get("photographer_url"),
            }
            for photo in result.get("photos", [])
        ],
        "page": result.get("page"),
        "perPage": result.get("per_page"),
        "totalResults": result.get("total_results"),
        "hasMore": bool(result.get("next_page")),
    }


class PexelsService:
    """Servicio para consultar fotos en Pexels"""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.PEXELS_API_KEY
        self.base_url = base_url or settings.PEXELS_BASE_URL

    async def _get(self, path: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        GET autenticado a Pexels.
        Retorna None si falta la API key o si el servicio falla.
        """
        if not self.api_key:
            logger.warning("⚠️ PEXELS_API_KEY no configurada")
            return None

        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=10.0) as client:
                response = await client.get(
                    path,
                    params=params,
                    headers={"Authorization": self.api_key}
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"❌ Error de Pexels {e.response.status_code} en {path}")
            return None
        except httpx.HTTPError as e:
            logger.error(f"❌ No se pudo conectar con Pexels: {e}")
            return None

    async def search_photos(self, query: str, page: int = 1, per_page: int = 15) -> Optional[Dict[str, Any]]:
        result = await self._get("/search", {"query": query, "page": page, "per_page": per_page})
        return normalize_photos(result) if result is not None else None

    async def curated_photos(self, page: int = 1, per_page: int = 15) -> Optional[Dict[str, Any]]:
        result = await self._get("/curated", {"page": page, "per_page": per_page})
        return normalize_photos(result) if result is not None else None


pexels_service = PexelsService()
