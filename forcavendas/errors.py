"""Erros de nível de lote da sincronização mobile.

Erros de pedido individual não são exceções: viram dados no resultado do lote.
"""


class SyncError(Exception):
    """Erro que aborta a chamada inteira antes de qualquer pedido ser processado."""

    default_code = "sync_error"
    default_message = "Erro na sincronização"
    default_http_status = 500

    def __init__(self, message: str | None = None, code: str | None = None) -> None:
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.http_status = self.default_http_status
        super().__init__(self.message)


class UnauthorizedError(SyncError):
    default_code = "Unauthorized"
    default_message = "Token inválido ou expirado"
    default_http_status = 401


class SalesRepNotFoundError(SyncError):
    default_code = "SalesRepNotFound"
    default_message = "Vendedor não encontrado ou inativo"
    default_http_status = 404


class MalformedRequestError(SyncError):
    default_code = "MalformedRequest"
    default_message = "Nenhum pedido informado"
    default_http_status = 400
