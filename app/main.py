import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import settings

# Rutas de endpoints importadas
from routes.auth import router as auth_router
from routes.products import router as products_router
from routes.categories import router as categories_router
from routes.quotes import router as quotes_router
from routes.blog import router as blog_router
from routes.admin import router as admin_router
from routes.images import router as images_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

docs_url = "/docs" if settings.ENV == "development" else None
redoc_url = "/redoc" if settings.ENV == "development" else None
openapi_url = "/openapi.json" if settings.ENV == "development" else None

# ==================== LIFESPAN EVENTS ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestiona el startup y shutdown de la aplicación.
    """
    logger.info(f"🚀 {settings.API_TITLE} v{settings.API_VERSION} iniciada (ENV={settings.ENV})")
    if not settings.PEXELS_API_KEY:
        logger.warning("⚠️ PEXELS_API_KEY no configurada: /images responderá 503")
    yield
    logger.info("👋 API detenida")

app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    docs_url=docs_url,
    redoc_url=redoc_url,
    openapi_url=openapi_url,
    redirect_slashes=False,  # Evita redirects 307
    lifespan=lifespan
)

# CORS: orígenes separados por coma, "*" permite cualquiera (sin credenciales)
allow_origins = settings.cors_origins
allow_all = allow_origins == ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=not allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ==================== EXCEPTION HANDLERS ====================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Los errores de la API ya traen el formato estándar en `detail`;
    los demás (404 de ruta, 405, etc.) se envuelven.
    """
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {
            "success": False,
            "status_code": exc.status_code,
            "error": str(exc.detail),
            "code": "HTTP_ERROR"
        }

    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(content),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Maneja errores de validación de Pydantic y los convierte al formato estándar.
    """
    errors = exc.errors()

    # Construir mensaje descriptivo
    error_messages = []
    validation_errors = []

    for error in errors:
        field = " -> ".join(str(loc) for loc in error["loc"][1:])  # Omitir 'body' / 'query'
        msg = error["msg"]
        error_type = error["type"]

        # Mensajes personalizados según el tipo de error
        if error_type == "string_too_short":
            min_length = error.get("ctx", {}).get("min_length", "")
            error_messages.append(f"El campo '{field}' debe tener al menos {min_length} caracteres")
        elif error_type == "string_too_long":
            max_length = error.get("ctx", {}).get("max_length", "")
            error_messages.append(f"El campo '{field}' debe tener máximo {max_length} caracteres")
        elif error_type == "missing":
            error_messages.append(f"El campo '{field}' es requerido")
        elif error_type == "value_error":
            error_messages.append(f"El campo '{field}' tiene un valor inválido")
        elif error_type.startswith("greater_than"):
            limit = error.get("ctx", {}).get("gt", error.get("ctx", {}).get("ge", ""))
            error_messages.append(f"El campo '{field}' debe ser mayor o igual que {limit}")
        elif error_type.startswith("less_than"):
            limit = error.get("ctx", {}).get("lt", error.get("ctx", {}).get("le", ""))
            error_messages.append(f"El campo '{field}' debe ser menor o igual que {limit}")
        elif "email" in error_type.lower() or "email" in msg.lower():
            error_messages.append(f"El campo '{field}' debe ser un email válido")
        else:
            error_messages.append(f"El campo '{field}': {msg}")

        validation_errors.append({
            "field": field,
            "message": error_messages[-1],
            "type": error_type
        })

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({
            "success": False,
            "status_code": 400,
            "error": "Error de validación: " + "; ".join(error_messages),
            "code": "VALIDATION_ERROR",
            "details": validation_errors
        })
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Errores inesperados: se registran completos, el cliente solo ve un mensaje genérico."""
    logger.exception(f"❌ Error no controlado en {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "status_code": 500,
            "error": "Error interno del servidor",
            "code": "INTERNAL_ERROR"
        }
    )

# Registrar routers
app.include_router(auth_router)
app.include_router(products_router)
app.include_router(categories_router)
app.include_router(quotes_router)
app.include_router(blog_router)
app.include_router(admin_router)
app.include_router(images_router)

@app.get("/")
async def root():
    return {
        "message": "Bienvenido a la API de Suvenirs",
        "version": settings.API_VERSION,
        "docs": docs_url
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy"}
