"""Candidate source fields for every canonical sale attribute.

Upstream versions disagree on field names, so each canonical attribute is
resolved by trying the candidates below in order. Editing these tables is the
only change needed when the upstream renames a field.
"""

from __future__ import annotations

from typing import Tuple

SALE_ID_FIELDS: Tuple[str, ...] = ("id",)

TYPE_TEXT_FIELDS: Tuple[str, ...] = ("tipo", "tipo_venda")
TYPE_CODE_FIELDS: Tuple[str, ...] = ("tipo_id",)

DATE_FIELDS: Tuple[str, ...] = (
    "data",
    "data_venda",
    "data_emissao",
    "emissao",
    "created_at",
    "atualizado_em",
)

EMPLOYEE_ID_FIELDS: Tuple[str, ...] = (
    "funcionario_id",
    "vendedor_id",
    "usuario_id",
    "atendente_id",
    "user_id",
)
EMPLOYEE_NAME_FIELDS: Tuple[str, ...] = (
    "funcionario_nome",
    "vendedor_nome",
    "usuario_nome",
    "atendente_nome",
)

AMOUNT_FIELDS: Tuple[str, ...] = ("valor_total", "total", "valor")

CUSTOMER_FIELDS: Tuple[str, ...] = ("cliente_nome", "cliente")
CODE_FIELDS: Tuple[str, ...] = ("codigo", "numero", "documento")

# Lowercased substrings of the type text, checked in order.
TYPE_TEXT_TOKENS: Tuple[Tuple[str, str], ...] = (
    ("servi", "service"),
    ("balc", "counter_sale"),
)
TYPE_CODES = {2: "service", 3: "counter_sale"}

# Directory entries as returned by the employee listing endpoint.
DIRECTORY_ID_FIELDS: Tuple[str, ...] = ("id", "funcionario_id")
DIRECTORY_NAME_FIELDS: Tuple[str, ...] = ("nome", "name", "funcionario_nome")
