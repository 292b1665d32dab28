"""planilla-processor — Repair and normalize distributor workbooks."""

__version__ = "0.2.0"

SN = "SN"

DISTRIBUIDOR = "DISTRIBUIDOR"
LISTA_PRECIOS = "LISTA DE PRECIOS"
LISTA_PRECIOS_TRADICIONAL = "LISTA DE PRECIOS TRADICIONAL"
CLIENTES = "CLIENTES"

REQUIRED_SHEETS: tuple[str, ...] = (
    DISTRIBUIDOR,
    LISTA_PRECIOS,
    LISTA_PRECIOS_TRADICIONAL,
    CLIENTES,
)

VISITA_COLUMNS: tuple[str, ...] = (
    "Visita Lunes",
    "Visita Martes",
    "Visita Miercoles",
    "Visita Jueves",
    "Visita Viernes",
    "Visita Sabado",
    "Visita Domingo",
)

REQUIRED_COLUMNS: dict[str, tuple[str, ...]] = {
    DISTRIBUIDOR: (
        "Codigo",
        "Nombre",
        "CUIT",
        "Telefono",
        "Email",
        "Condicion Iva",
        "Persona Contacto",
    ),
    LISTA_PRECIOS: ("Codigo", "Nombre"),
    LISTA_PRECIOS_TRADICIONAL: (
        "Codigo de Lista",
        "Codigo Producto Bimbo",
        "Nombre del Producto",
        "Marca",
        "Categoria del producto",
        "Precio Sin IVA",
        "% IVA",
        "Precio con IVA",
    ),
    CLIENTES: (
        "Codigo",
        "Nombre",
        "Direccion",
        "Telefono",
        "Email",
        "CUIT",
        "Condicion Iva",
        "Persona Contacto",
        "Codigo Lista precios",
        *VISITA_COLUMNS,
    ),
}
"""Required column manifest per worksheet, in insertion-check order."""
